"""Middleware module for content negotiation.

The module provides:
- The ASGI middleware running the negotiation around each request
- The per-exchange state machine it drives
"""

from .negotiation import (
    EXCHANGE_STATE_KEY,
    FORMAT_STATE_KEY,
    ContentNegotiationMiddleware,
    ExchangeState,
    NegotiationExchange,
    get_exchange,
)

__all__ = [
    "EXCHANGE_STATE_KEY",
    "FORMAT_STATE_KEY",
    "ContentNegotiationMiddleware",
    "ExchangeState",
    "NegotiationExchange",
    "get_exchange",
]
