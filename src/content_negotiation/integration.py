"""One-call wiring for Starlette applications."""

import logging
from typing import Optional

from starlette.applications import Starlette

from .config import get_settings
from .inbound import install_exception_handlers
from .media import MediaTypeRegistry, get_default_registry
from .middleware import ContentNegotiationMiddleware
from .utils.security import setup_logging

logger = logging.getLogger(__name__)


def install_negotiation(
    app: Starlette,
    registry: Optional[MediaTypeRegistry] = None,
    configure_logging: bool = False,
) -> MediaTypeRegistry:
    """Add the negotiation middleware and error handlers to an app.

    Must be called before the application starts serving.

    :param app: Starlette application
    :type app: Starlette
    :param registry: Registry to use, defaults to the process-wide one
    :type registry: Optional[MediaTypeRegistry]
    :param configure_logging: Also set up sanitized root logging at the
                              configured log level
    :type configure_logging: bool
    :return: The registry in use
    :rtype: MediaTypeRegistry
    :raises ConfigurationError: If the default registry cannot be built
    """
    if configure_logging:
        setup_logging(get_settings().log_level)
    if registry is None:
        registry = get_default_registry()
    app.add_middleware(ContentNegotiationMiddleware, registry=registry)
    install_exception_handlers(app)
    logger.debug("Content negotiation installed with %r", registry)
    return registry
