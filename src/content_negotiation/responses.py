"""Fixed responses and the negotiated placeholder response."""

from typing import Any, Mapping, Optional

from starlette.background import BackgroundTask
from starlette.responses import PlainTextResponse, Response
from starlette.types import Receive, Scope, Send

from .erasure import ErasedPayload
from .exceptions import (
    BodyTransportFailure,
    MalformedBody,
    NegotiationFailed,
    UnsupportedDeclaredType,
)

ERASED_PAYLOAD_KEY = "content_negotiation.erased_payload"
"""Key of the ``http.response.start`` message carrying an ErasedPayload."""

PAYLOAD_STATE_KEY = "negotiation_payload"
"""Key of ``scope["state"]`` holding the ErasedPayload of the response.

Middleware that rebuilds the start message drops unknown keys, so the
payload is also left on the request state shared by the whole exchange.
"""

NOT_ACCEPTABLE_BODY = "Invalid content type on request"
MALFORMED_BODY = "Malformed request body"
BODY_UNAVAILABLE_BODY = "Failed to read request body"
MISCONFIGURED_BODY = "Misconfigured service layer"
SERVER_ERROR_BODY = "Failed to serialize response"

PLACEHOLDER_STATUS = 415


def not_acceptable_response() -> Response:
    """406 for unsatisfiable Accept headers and unsupported Content-Type."""
    return Response(NOT_ACCEPTABLE_BODY, status_code=406)


def malformed_body_response() -> Response:
    """400 for bodies that do not decode with the declared format."""
    return PlainTextResponse(MALFORMED_BODY, status_code=400)


def body_unavailable_response() -> Response:
    """400 for bodies that could not be read from the transport."""
    return PlainTextResponse(BODY_UNAVAILABLE_BODY, status_code=400)


def server_error_response() -> Response:
    """500 for response values that could not be encoded."""
    return PlainTextResponse(SERVER_ERROR_BODY, status_code=500)


class Negotiate(Response):
    """Response whose body is encoded in the negotiated format.

    The value is erased into an :class:`ErasedPayload` and attached to
    the ASGI start message and the request state. The
    :class:`~content_negotiation.middleware.ContentNegotiationMiddleware`
    picks it up and replaces the placeholder body; without the
    middleware the caller sees a 415 "Misconfigured service layer".

    :param content: Typed response value
    :param status_code: Status to keep after encoding; the default 415
                        placeholder becomes 200
    :param headers: Extra response headers
    :param background: Background task to run after the response is sent
    :param tp: Explicit type used to serialize ``content``
    """

    media_type = "text/plain"

    def __init__(
        self,
        content: Any,
        status_code: int = PLACEHOLDER_STATUS,
        headers: Optional[Mapping[str, str]] = None,
        background: Optional[BackgroundTask] = None,
        tp: Optional[Any] = None,
    ) -> None:
        self.payload = ErasedPayload.erase(content, tp)
        super().__init__(
            content=MISCONFIGURED_BODY,
            status_code=status_code,
            headers=headers,
            background=background,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        state = scope.get("state")
        if state is not None:
            state[PAYLOAD_STATE_KEY] = self.payload
        await send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self.raw_headers,
                ERASED_PAYLOAD_KEY: self.payload,
            }
        )
        await send({"type": "http.response.body", "body": self.body})
        if self.background is not None:
            await self.background()


def error_response(exc: Exception) -> Response:
    """Map a content negotiation error onto its fixed response.

    Diagnostics never leak into the body; the caller only sees the
    fixed text for the error class.

    :param exc: Error raised while negotiating or decoding
    :type exc: Exception
    :return: Fixed response for the error
    :rtype: Response
    """
    if isinstance(exc, (NegotiationFailed, UnsupportedDeclaredType)):
        return not_acceptable_response()
    if isinstance(exc, MalformedBody):
        return malformed_body_response()
    if isinstance(exc, BodyTransportFailure):
        return body_unavailable_response()
    return server_error_response()
