"""Structured exception classes for content negotiation."""

import json
from typing import Any, Dict, Optional


class ContentNegotiationError(Exception):
    """Base exception for all content negotiation errors.

    :param message: Human-readable error message
    :param code: Optional error code for programmatic handling
    :param details: Optional dictionary containing additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the exception with message, code, and details."""
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format.

        :return: Dictionary containing error code, message, and details
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        """Convert exception to JSON string.

        :return: JSON-encoded string representation of the exception
        """
        return json.dumps(self.to_dict())


class ConfigurationError(ContentNegotiationError):
    """Raised when the media type registry cannot be built.

    This is a startup failure: an empty format set, an unknown format
    name or a default outside the registered set.

    :param message: Description of the configuration error
    :param setting: Optional name of the problematic setting
    """

    def __init__(self, message: str, setting: Optional[str] = None):
        """Initialize configuration error with message and optional setting."""
        details = {}
        if setting:
            details["setting"] = setting
        super().__init__(message=message, code="CONFIGURATION_ERROR", details=details)


class CodecError(ContentNegotiationError):
    """Raised by a codec when it cannot encode or decode a value.

    :param message: Description of the codec failure
    :param media_type: Media type of the failing codec
    :param original_error: Optional exception raised by the underlying library
    """

    def __init__(
        self,
        message: str,
        media_type: str,
        original_error: Optional[Exception] = None,
    ):
        """Initialize codec error with the failing media type."""
        details: Dict[str, Any] = {"media_type": media_type}
        if original_error:
            details["original_error"] = str(original_error)
            details["error_type"] = type(original_error).__name__
        super().__init__(message=message, code="CODEC_ERROR", details=details)
        self.media_type = media_type
        self.original_error = original_error


class NegotiationFailed(ContentNegotiationError):
    """Raised when no registered media type satisfies the Accept header.

    :param accept: The raw Accept header that could not be satisfied
    """

    def __init__(self, accept: Optional[str] = None):
        """Initialize negotiation failure with the offending header."""
        details = {}
        if accept is not None:
            details["accept"] = accept
        super().__init__(
            message="No acceptable output format",
            code="NEGOTIATION_FAILED",
            details=details,
        )
        self.accept = accept


class UnsupportedDeclaredType(ContentNegotiationError):
    """Raised when the declared Content-Type is not registered.

    Raised before the request body is read.

    :param content_type: The declared Content-Type token
    """

    def __init__(self, content_type: str):
        """Initialize with the unsupported Content-Type."""
        super().__init__(
            message=f"Unsupported content type: {content_type}",
            code="UNSUPPORTED_DECLARED_TYPE",
            details={"content_type": content_type},
        )
        self.content_type = content_type


class MalformedBody(ContentNegotiationError):
    """Raised when a body does not match the declared format or schema.

    :param media_type: Media type the body was decoded as
    :param body_length: Length of the raw body in bytes
    :param original_error: Codec or validation error that caused the failure
    """

    def __init__(
        self,
        media_type: str,
        body_length: int,
        original_error: Optional[Exception] = None,
    ):
        """Initialize malformed body error with decode context."""
        details: Dict[str, Any] = {
            "media_type": media_type,
            "body_length": body_length,
        }
        if original_error:
            details["original_error"] = str(original_error)
            details["error_type"] = type(original_error).__name__
        super().__init__(
            message=f"Malformed {media_type} request body",
            code="MALFORMED_BODY",
            details=details,
        )
        self.media_type = media_type
        self.body_length = body_length
        self.original_error = original_error


class BodyTransportFailure(ContentNegotiationError):
    """Raised when the request body could not be read from the transport.

    :param original_error: Exception raised by the transport layer
    """

    def __init__(self, original_error: Optional[Exception] = None):
        """Initialize transport failure with the original error."""
        details = {}
        if original_error:
            details["original_error"] = str(original_error)
            details["error_type"] = type(original_error).__name__
        super().__init__(
            message="Failed to read request body",
            code="BODY_TRANSPORT_FAILURE",
            details=details,
        )
        self.original_error = original_error


class EncodeFailure(ContentNegotiationError):
    """Raised when a response value cannot be serialized.

    The details are meant for logs only; callers receive a generic
    internal error.

    :param media_type: Media type the value was encoded as
    :param original_error: Codec or serialization error that caused the failure
    """

    def __init__(self, media_type: str, original_error: Optional[Exception] = None):
        """Initialize encode failure with the target media type."""
        details: Dict[str, Any] = {"media_type": media_type}
        if original_error:
            details["original_error"] = str(original_error)
            details["error_type"] = type(original_error).__name__
        super().__init__(
            message=f"Failed to encode response as {media_type}",
            code="ENCODE_FAILURE",
            details=details,
        )
        self.media_type = media_type
        self.original_error = original_error


# Names used by the decode/encode failure records.
BodyUnavailable = BodyTransportFailure
DecodeError = MalformedBody
EncodeError = EncodeFailure
