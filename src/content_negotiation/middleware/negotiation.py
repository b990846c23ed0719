"""ASGI middleware that negotiates the response format.

Every HTTP exchange goes through three phases:

1. Before the handler runs, the ``Accept`` header is parsed and matched
   against the registry. If nothing matches, the client receives a 406
   and the handler is never called.
2. The handler runs. It may return a
   :class:`~content_negotiation.responses.Negotiate` response, whose
   start message carries an erased payload instead of a real body.
3. When the response starts, the middleware looks for the erased
   payload. Ordinary responses pass through untouched; negotiated ones
   are serialized with the codec chosen in phase 1.

Each exchange is tracked by a :class:`NegotiationExchange` so the
phases are explicit and can be inspected by handlers and tests.
"""

import logging
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

from starlette.datastructures import Headers
from starlette.requests import HTTPConnection
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..erasure import ErasedPayload
from ..exceptions import EncodeFailure
from ..inbound import EXCHANGE_STATE_KEY, REGISTRY_STATE_KEY
from ..media import MediaTypeRegistry, NegotiatedFormat, get_default_registry, negotiate
from ..responses import (
    ERASED_PAYLOAD_KEY,
    PAYLOAD_STATE_KEY,
    PLACEHOLDER_STATUS,
    not_acceptable_response,
    server_error_response,
)
from ..utils.security import sanitize_header_value

logger = logging.getLogger(__name__)

FORMAT_STATE_KEY = "negotiated_format"

_STALE_HEADERS = {b"content-type", b"content-length"}


class ExchangeState(str, Enum):
    """Lifecycle of one request/response exchange."""

    AWAITING_NEGOTIATION = "awaiting_negotiation"
    FORMAT_SELECTED = "format_selected"
    HANDLER_RUNNING = "handler_running"
    PASS_THROUGH = "pass_through"
    REENCODING = "reencoding"
    SUCCESS = "success"
    NEGOTIATION_FAILED = "negotiation_failed"
    ENCODE_FAILED = "encode_failed"
    DECODE_FAILED = "decode_failed"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset(
    {
        ExchangeState.SUCCESS,
        ExchangeState.NEGOTIATION_FAILED,
        ExchangeState.ENCODE_FAILED,
        ExchangeState.DECODE_FAILED,
    }
)

_TRANSITIONS: Dict[ExchangeState, FrozenSet[ExchangeState]] = {
    ExchangeState.AWAITING_NEGOTIATION: frozenset(
        {ExchangeState.FORMAT_SELECTED, ExchangeState.NEGOTIATION_FAILED}
    ),
    ExchangeState.FORMAT_SELECTED: frozenset({ExchangeState.HANDLER_RUNNING}),
    ExchangeState.HANDLER_RUNNING: frozenset(
        {
            ExchangeState.PASS_THROUGH,
            ExchangeState.REENCODING,
            ExchangeState.DECODE_FAILED,
        }
    ),
    ExchangeState.PASS_THROUGH: frozenset({ExchangeState.SUCCESS}),
    ExchangeState.REENCODING: frozenset(
        {ExchangeState.SUCCESS, ExchangeState.ENCODE_FAILED}
    ),
}


class NegotiationExchange:
    """State machine for a single exchange.

    :param registry: Registry used for selection and encoding
    :type registry: MediaTypeRegistry
    :param accept: Raw Accept header, None when absent
    :type accept: Optional[str]
    """

    def __init__(self, registry: MediaTypeRegistry, accept: Optional[str]):
        self.registry = registry
        self.accept = accept
        self.negotiated_format: Optional[NegotiatedFormat] = None
        self.state = ExchangeState.AWAITING_NEGOTIATION
        self.history: List[ExchangeState] = [self.state]

    def _transition(self, new_state: ExchangeState) -> None:
        allowed = _TRANSITIONS.get(self.state, frozenset())
        if new_state not in allowed:
            raise RuntimeError(
                f"Invalid exchange transition {self.state.value} -> {new_state.value}"
            )
        self.state = new_state
        self.history.append(new_state)

    def negotiate(self) -> Optional[NegotiatedFormat]:
        """Phase 1: select the output format before the handler runs.

        :return: The selected format, or None if the exchange must end
                 with a negotiation failure
        :rtype: Optional[NegotiatedFormat]
        """
        negotiated = negotiate(self.accept, self.registry)
        if negotiated is None:
            self._transition(ExchangeState.NEGOTIATION_FAILED)
            logger.warning(
                "Unsupported accept header: %s", sanitize_header_value(self.accept)
            )
            return None
        self.negotiated_format = negotiated
        self._transition(ExchangeState.FORMAT_SELECTED)
        return negotiated

    def handler_started(self) -> None:
        """Mark the downstream handler as running."""
        self._transition(ExchangeState.HANDLER_RUNNING)

    def decode_failed(self) -> None:
        """Mark the exchange as ended by an inbound decode failure."""
        if self.state == ExchangeState.HANDLER_RUNNING:
            self._transition(ExchangeState.DECODE_FAILED)

    def finalize(
        self, message: Message, payload: Optional[ErasedPayload] = None
    ) -> Tuple[Message, Optional[bytes]]:
        """Phase 3: turn the handler's start message into the final one.

        :param message: The ``http.response.start`` message sent downstream
        :type message: Message
        :param payload: Payload left on the request state by the response,
                        falls back to the one carried on the message
        :type payload: Optional[ErasedPayload]
        :return: The start message to send and, when the body was
                 replaced, the new body. A None body means the original
                 body messages must pass through.
        :rtype: Tuple[Message, Optional[bytes]]
        """
        if payload is None:
            payload = message.get(ERASED_PAYLOAD_KEY)
        if self.state == ExchangeState.DECODE_FAILED:
            if payload is not None:
                logger.warning(
                    "Negotiated response returned after a failed request decode, "
                    "sending it unencoded"
                )
            return _strip_payload(message), None
        if payload is None:
            self._transition(ExchangeState.PASS_THROUGH)
            self._transition(ExchangeState.SUCCESS)
            return _strip_payload(message), None

        self._transition(ExchangeState.REENCODING)
        return self._reencode(message, payload)

    def _reencode(
        self, message: Message, payload: ErasedPayload
    ) -> Tuple[Message, bytes]:
        negotiated = self.negotiated_format
        try:
            body = payload.serialize(negotiated.codec)
        except EncodeFailure as e:
            self._transition(ExchangeState.ENCODE_FAILED)
            logger.error("Failed to serialize response: %s", e.to_json())
            return _start_message(server_error_response())

        status = message["status"]
        if status == PLACEHOLDER_STATUS:
            status = 200

        headers = [
            (name, value)
            for name, value in message.get("headers", [])
            if name.lower() not in _STALE_HEADERS
        ]
        headers.append((b"content-type", negotiated.content_type.encode("latin-1")))
        headers.append((b"content-length", str(len(body)).encode("latin-1")))

        self._transition(ExchangeState.SUCCESS)
        start = {"type": "http.response.start", "status": status, "headers": headers}
        return start, body


def _strip_payload(message: Message) -> Message:
    if ERASED_PAYLOAD_KEY not in message:
        return message
    return {k: v for k, v in message.items() if k != ERASED_PAYLOAD_KEY}


def _start_message(response: Response) -> Tuple[Message, bytes]:
    start = {
        "type": "http.response.start",
        "status": response.status_code,
        "headers": response.raw_headers,
    }
    return start, response.body


def get_exchange(connection: HTTPConnection) -> Optional[NegotiationExchange]:
    """Return the exchange the middleware attached to a request, if any."""
    return getattr(connection.state, EXCHANGE_STATE_KEY, None)


class ContentNegotiationMiddleware:
    """Pure ASGI middleware running the three negotiation phases.

    :param app: Downstream ASGI application
    :type app: ASGIApp
    :param registry: Registry to use, defaults to the process-wide one
    :type registry: Optional[MediaTypeRegistry]
    """

    def __init__(self, app: ASGIApp, registry: Optional[MediaTypeRegistry] = None):
        self.app = app
        self.registry = registry if registry is not None else get_default_registry()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        # repeated Accept lines combine into one list
        accept_lines = Headers(scope=scope).getlist("accept")
        accept = ",".join(accept_lines) if accept_lines else None
        exchange = NegotiationExchange(self.registry, accept)

        negotiated = exchange.negotiate()
        if negotiated is None:
            response = not_acceptable_response()
            await response(scope, receive, send)
            return

        state = scope.setdefault("state", {})
        state[REGISTRY_STATE_KEY] = self.registry
        state[FORMAT_STATE_KEY] = negotiated
        state[EXCHANGE_STATE_KEY] = exchange

        replaced = False

        async def send_wrapper(message: Message) -> None:
            nonlocal replaced
            if message["type"] == "http.response.start":
                start, body = exchange.finalize(
                    message, state.pop(PAYLOAD_STATE_KEY, None)
                )
                await send(start)
                if body is not None:
                    replaced = True
                    await send({"type": "http.response.body", "body": body})
                return
            if replaced and message["type"] == "http.response.body":
                # placeholder body of a negotiated response
                return
            await send(message)

        exchange.handler_started()
        await self.app(scope, receive, send_wrapper)
