"""Shared helpers for content negotiation."""

from .security import sanitize_header_value, sanitize_string, setup_logging

__all__ = ["sanitize_header_value", "sanitize_string", "setup_logging"]
