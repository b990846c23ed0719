"""Log sanitization for untrusted header values.

Accept and Content-Type headers come straight from clients and end up
in log messages. This module redacts credential-looking content and
clamps length before they are written, and provides a formatter that
applies the same treatment to every record.
"""

import logging
import re
import sys
from typing import Optional

# Patterns for sensitive data detection
SENSITIVE_PATTERNS = {
    "jwt_token": re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"),
    "bearer_token": re.compile(r"Bearer\s+[A-Za-z0-9_-]+", re.IGNORECASE),
    "api_key": re.compile(r"[A-Za-z0-9]{32,}"),
    "basic_auth": re.compile(r"Basic\s+[A-Za-z0-9+/=]+", re.IGNORECASE),
}

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

MAX_HEADER_LOG_LENGTH = 256


def sanitize_string(value: str, partial: bool = False) -> str:
    """Sanitize a string containing potential sensitive data.

    :param value: String to sanitize
    :type value: str
    :param partial: If True, show length instead of full redaction
    :type partial: bool
    :return: Sanitized string with sensitive data redacted
    :rtype: str
    """
    if not value:
        return value
    for pattern_name, pattern in SENSITIVE_PATTERNS.items():
        if pattern.search(value):
            if partial and len(value) > 10:
                return f"<{pattern_name}:length={len(value)}>"
            else:
                return f"<{pattern_name}:REDACTED>"
    return value


def sanitize_header_value(value: Optional[str]) -> str:
    """Make a client-supplied header value safe to log.

    Strips control characters (log injection), clamps the length and
    redacts anything that looks like a credential.

    :param value: Raw header value or None
    :type value: Optional[str]
    :return: Printable, bounded representation
    :rtype: str
    """
    if value is None:
        return "<absent>"
    value = _CONTROL_CHARS.sub("?", value)
    if len(value) > MAX_HEADER_LOG_LENGTH:
        value = value[:MAX_HEADER_LOG_LENGTH] + f"...<length={len(value)}>"
    return sanitize_string(value, partial=True)


class SanitizingFormatter(logging.Formatter):
    """Formatter that sanitizes every record before formatting."""

    def format(self, record: logging.LogRecord) -> str:
        if record.args:
            try:
                record.msg = sanitize_string(record.getMessage())
                record.args = None
            except (TypeError, ValueError):
                record.msg = sanitize_string(str(record.msg))
        else:
            record.msg = sanitize_string(str(record.msg))
        return super().format(record)


_LOGGING_CONFIGURED = False


def setup_logging(level: str = "INFO") -> None:
    """Set up root logging with automatic sanitization.

    Subsequent calls are no-ops.

    :param level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    :type level: str
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        logging.getLogger(__name__).debug(
            "Logging already configured, skipping duplicate setup"
        )
        return

    formatter = SanitizingFormatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=[handler],
        force=True,
    )
    _LOGGING_CONFIGURED = True
