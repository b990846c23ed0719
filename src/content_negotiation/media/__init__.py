"""Media utilities public API (re-exports)."""

from .accept import AcceptCandidate, parse_accept
from .negotiator import negotiate, select_format
from .types import (
    WILDCARD,
    MediaType,
    MediaTypeRegistry,
    NegotiatedFormat,
    get_default_registry,
    normalize_token,
    reset_default_registry,
)

__all__ = [
    "WILDCARD",
    "AcceptCandidate",
    "MediaType",
    "MediaTypeRegistry",
    "NegotiatedFormat",
    "get_default_registry",
    "negotiate",
    "normalize_token",
    "parse_accept",
    "reset_default_registry",
    "select_format",
]
