"""Configuration for content negotiation."""

from .settings import NegotiationSettings, get_settings

__all__ = ["NegotiationSettings", "get_settings"]
