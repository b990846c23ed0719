"""CBOR codec."""

from typing import Any

import cbor2

from ..exceptions import CodecError
from .base import Codec


class CborCodec(Codec):
    """``application/cbor`` codec backed by :mod:`cbor2`.

    Values are lowered in pydantic's python mode so bytes and datetimes
    keep their native CBOR representation.
    """

    media_type = "application/cbor"
    dump_mode = "python"

    def encode(self, value: Any) -> bytes:
        try:
            return cbor2.dumps(value)
        except (cbor2.CBOREncodeError, TypeError, ValueError) as e:
            raise CodecError(
                "Failed to encode value as CBOR",
                media_type=self.media_type,
                original_error=e,
            ) from e

    def decode(self, data: bytes) -> Any:
        if not data:
            raise CodecError("Empty CBOR body", media_type=self.media_type)
        try:
            return cbor2.loads(data)
        except (cbor2.CBORDecodeError, ValueError) as e:
            raise CodecError(
                "Failed to decode CBOR body",
                media_type=self.media_type,
                original_error=e,
            ) from e
