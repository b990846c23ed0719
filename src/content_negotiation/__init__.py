"""Content negotiation for Starlette/ASGI applications.

This package selects a wire format from the ``Accept`` header, decodes
request bodies according to ``Content-Type`` and defers response
serialization until after the handler has returned, so handlers can
return typed values without knowing which format the caller asked for.

:var __version__: Current package version
:type __version__: str
"""

from .codecs import CborCodec, Codec, JsonCodec
from .config import NegotiationSettings
from .erasure import ErasedPayload
from .exceptions import (
    BodyTransportFailure,
    BodyUnavailable,
    CodecError,
    ConfigurationError,
    ContentNegotiationError,
    DecodeError,
    EncodeError,
    EncodeFailure,
    MalformedBody,
    NegotiationFailed,
    UnsupportedDeclaredType,
)
from .inbound import decode_request, install_exception_handlers, negotiated_body
from .integration import install_negotiation
from .media import (
    AcceptCandidate,
    MediaType,
    MediaTypeRegistry,
    NegotiatedFormat,
    get_default_registry,
    parse_accept,
    select_format,
)
from .middleware import ContentNegotiationMiddleware, ExchangeState, NegotiationExchange
from .responses import Negotiate

__version__ = "0.1.1"

__all__ = [
    "AcceptCandidate",
    "BodyTransportFailure",
    "BodyUnavailable",
    "CborCodec",
    "Codec",
    "CodecError",
    "ConfigurationError",
    "ContentNegotiationError",
    "ContentNegotiationMiddleware",
    "DecodeError",
    "EncodeError",
    "EncodeFailure",
    "ErasedPayload",
    "ExchangeState",
    "JsonCodec",
    "MalformedBody",
    "MediaType",
    "MediaTypeRegistry",
    "Negotiate",
    "NegotiatedFormat",
    "NegotiationExchange",
    "NegotiationFailed",
    "NegotiationSettings",
    "UnsupportedDeclaredType",
    "decode_request",
    "get_default_registry",
    "install_exception_handlers",
    "install_negotiation",
    "negotiated_body",
    "parse_accept",
    "select_format",
]
