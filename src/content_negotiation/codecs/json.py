"""JSON codec."""

import json
from typing import Any

from ..exceptions import CodecError
from .base import Codec


class JsonCodec(Codec):
    """``application/json`` codec backed by the standard library.

    Output is compact UTF-8. NaN and infinities are rejected instead of
    producing invalid JSON.
    """

    media_type = "application/json"
    dump_mode = "json"

    def encode(self, value: Any) -> bytes:
        try:
            return json.dumps(
                value,
                ensure_ascii=False,
                allow_nan=False,
                separators=(",", ":"),
            ).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise CodecError(
                "Failed to encode value as JSON",
                media_type=self.media_type,
                original_error=e,
            ) from e

    def decode(self, data: bytes) -> Any:
        try:
            return json.loads(data)
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors
            raise CodecError(
                "Failed to decode JSON body",
                media_type=self.media_type,
                original_error=e,
            ) from e
