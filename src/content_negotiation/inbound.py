"""Inbound request body decoding.

The declared ``Content-Type`` picks the codec by exact match; an absent
header means the registry default. Decoded builtins are validated into
the handler's declared type with pydantic.
"""

import functools
import inspect
import logging
from typing import Any, Callable, Optional

from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.requests import ClientDisconnect, Request
from starlette.responses import Response

from .erasure import adapter_for
from .exceptions import (
    BodyTransportFailure,
    CodecError,
    ContentNegotiationError,
    EncodeFailure,
    MalformedBody,
    UnsupportedDeclaredType,
)
from .media import MediaType, MediaTypeRegistry, get_default_registry
from .responses import error_response
from .utils.security import sanitize_header_value

logger = logging.getLogger(__name__)

REGISTRY_STATE_KEY = "media_registry"
EXCHANGE_STATE_KEY = "negotiation_exchange"


def _mark_decode_failed(request: Request) -> None:
    exchange = getattr(request.state, EXCHANGE_STATE_KEY, None)
    if exchange is not None:
        exchange.decode_failed()


def registry_for(
    request: Request, registry: Optional[MediaTypeRegistry] = None
) -> MediaTypeRegistry:
    """Find the registry governing a request.

    An explicit registry wins, then the one stored on the request state
    by the middleware, then the process-wide default.
    """
    if registry is not None:
        return registry
    from_state = getattr(request.state, REGISTRY_STATE_KEY, None)
    if from_state is not None:
        return from_state
    return get_default_registry()


def resolve_declared_type(
    content_type: Optional[str], registry: MediaTypeRegistry
) -> MediaType:
    """Resolve a declared Content-Type against the registry.

    :param content_type: Header value, None when absent
    :type content_type: Optional[str]
    :param registry: Registry to resolve against
    :type registry: MediaTypeRegistry
    :return: The registered media type
    :rtype: MediaType
    :raises UnsupportedDeclaredType: If the token is not registered
    """
    if content_type is None:
        return registry.default
    media_type = registry.lookup(content_type)
    if media_type is None:
        raise UnsupportedDeclaredType(content_type)
    return media_type


async def decode_request(
    request: Request, model: Any, registry: Optional[MediaTypeRegistry] = None
) -> Any:
    """Decode a request body into an instance of ``model``.

    The Content-Type is checked before the body is read, so an
    unsupported declaration never consumes the body stream.

    :param request: Incoming request
    :type request: Request
    :param model: Target type, anything accepted by ``pydantic.TypeAdapter``
    :type model: Any
    :param registry: Optional registry override
    :type registry: Optional[MediaTypeRegistry]
    :return: The validated value
    :rtype: Any
    :raises UnsupportedDeclaredType: If the Content-Type is not registered
    :raises BodyTransportFailure: If the body cannot be read
    :raises MalformedBody: If the body does not decode or validate
    """
    registry = registry_for(request, registry)
    declared = request.headers.get("content-type")
    try:
        media_type = resolve_declared_type(declared, registry)
    except UnsupportedDeclaredType:
        _mark_decode_failed(request)
        logger.warning(
            "Unsupported content type on request: %s",
            sanitize_header_value(declared),
        )
        raise

    try:
        body = await request.body()
    except ClientDisconnect as e:
        logger.warning("Failed to read request body: %s", e)
        _mark_decode_failed(request)
        raise BodyTransportFailure(e) from e

    codec = registry.codec_for(media_type)
    try:
        raw = codec.decode(body)
        return adapter_for(model).validate_python(raw)
    except (CodecError, ValidationError) as e:
        logger.warning(
            "Failed to decode request body as %s (%d bytes): %s",
            media_type,
            len(body),
            e,
        )
        _mark_decode_failed(request)
        raise MalformedBody(media_type.token, len(body), e) from e


def negotiated_body(
    model: Any, registry: Optional[MediaTypeRegistry] = None
) -> Callable:
    """Decorate a Starlette endpoint to receive a decoded body.

    The endpoint is called as ``endpoint(request, body)``; plain functions
    run in the threadpool like ordinary Starlette endpoints. Decode errors
    are answered with the fixed responses and the endpoint never runs.

    Example:
        >>> @negotiated_body(Message)
        ... async def create(request, message):
        ...     return Negotiate(message, status_code=201)
    """

    def decorator(endpoint: Callable) -> Callable:
        @functools.wraps(endpoint)
        async def wrapper(request: Request) -> Response:
            try:
                body = await decode_request(request, model, registry)
            except ContentNegotiationError as exc:
                return error_response(exc)
            if inspect.iscoroutinefunction(endpoint):
                return await endpoint(request, body)
            return await run_in_threadpool(endpoint, request, body)

        return wrapper

    return decorator


async def negotiation_exception_handler(
    request: Request, exc: Exception
) -> Response:
    """Starlette exception handler for :class:`ContentNegotiationError`."""
    if isinstance(exc, EncodeFailure):
        logger.error("Failed to serialize response: %s", exc.to_json())
    return error_response(exc)


def install_exception_handlers(app: Any) -> None:
    """Register the error handler on a Starlette application.

    Lets endpoints call :func:`decode_request` directly and simply let
    the errors propagate.
    """
    app.add_exception_handler(ContentNegotiationError, negotiation_exception_handler)
