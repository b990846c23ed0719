"""Codecs public API (re-exports)."""

from typing import Dict, Type

from .base import Codec
from .cbor import CborCodec
from .json import JsonCodec

BUILTIN_CODECS: Dict[str, Type[Codec]] = {
    JsonCodec.media_type: JsonCodec,
    CborCodec.media_type: CborCodec,
}
"""Codec classes known to the settings loader, keyed by media type."""

__all__ = [
    "BUILTIN_CODECS",
    "Codec",
    "CborCodec",
    "JsonCodec",
]
