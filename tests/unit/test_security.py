import logging

import pytest

from content_negotiation.utils.security import (
    MAX_HEADER_LOG_LENGTH,
    SanitizingFormatter,
    sanitize_header_value,
    sanitize_string,
)


@pytest.mark.unit
def test_plain_values_untouched():
    assert sanitize_header_value("application/json;q=0.9") == "application/json;q=0.9"
    assert sanitize_string("") == ""


@pytest.mark.unit
def test_absent_value():
    assert sanitize_header_value(None) == "<absent>"


@pytest.mark.unit
def test_control_characters_replaced():
    assert sanitize_header_value("a/b\r\nX-Injected: 1") == "a/b??X-Injected: 1"


@pytest.mark.unit
def test_long_values_clamped():
    value = "a/b;" * 200
    sanitized = sanitize_header_value(value)
    assert len(sanitized) < len(value)
    assert sanitized.startswith(value[:MAX_HEADER_LOG_LENGTH])


@pytest.mark.unit
def test_tokens_redacted():
    assert sanitize_header_value("Bearer abcdef123456") == "<bearer_token:length=19>"


@pytest.mark.unit
def test_formatter_sanitizes_args():
    formatter = SanitizingFormatter("%(message)s")
    record = logging.LogRecord(
        "test", logging.INFO, __file__, 1, "Accept: %s", ("Bearer secret",), None
    )
    assert formatter.format(record) == "<bearer_token:REDACTED>"


@pytest.mark.unit
def test_setup_logging_runs_once(monkeypatch):
    from content_negotiation.utils import security

    calls = []
    monkeypatch.setattr(security, "_LOGGING_CONFIGURED", False)
    monkeypatch.setattr(
        security.logging, "basicConfig", lambda **kwargs: calls.append(kwargs)
    )

    security.setup_logging("debug")
    security.setup_logging("debug")

    assert len(calls) == 1
    assert calls[0]["level"] == logging.DEBUG
    assert isinstance(calls[0]["handlers"][0].formatter, SanitizingFormatter)
