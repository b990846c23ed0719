"""Unit tests for the media type registry.

This module tests registry construction, membership and resolution,
including building it from settings.
"""

import pytest

from content_negotiation.codecs import CborCodec, JsonCodec
from content_negotiation.config import NegotiationSettings
from content_negotiation.exceptions import ConfigurationError
from content_negotiation.media import (
    MediaType,
    MediaTypeRegistry,
    get_default_registry,
    reset_default_registry,
)


@pytest.mark.unit
def test_membership(json_registry):
    assert "application/json" in json_registry
    assert " APPLICATION/CBOR " in json_registry
    assert MediaType("application/cbor") in json_registry
    assert "text/csv" not in json_registry
    assert None not in json_registry
    assert len(json_registry) == 2


@pytest.mark.unit
def test_lookup_is_exact(json_registry):
    assert json_registry.lookup("application/json") == MediaType("application/json")
    assert json_registry.lookup("*/*") is None
    assert json_registry.lookup("application/json; charset=utf-8") is None
    assert json_registry.lookup(None) is None


@pytest.mark.unit
def test_resolve_handles_wildcard(cbor_registry):
    assert cbor_registry.resolve("*/*") == MediaType("application/cbor")
    assert cbor_registry.resolve("application/json") == MediaType("application/json")
    assert cbor_registry.resolve("application/*") is None


@pytest.mark.unit
def test_codec_for(json_registry):
    assert isinstance(json_registry.codec_for(MediaType("application/json")), JsonCodec)
    assert isinstance(json_registry.codec_for(MediaType("application/cbor")), CborCodec)
    with pytest.raises(KeyError):
        json_registry.codec_for(MediaType("text/csv"))


@pytest.mark.unit
def test_media_types_keep_registration_order():
    registry = MediaTypeRegistry([CborCodec(), JsonCodec()], default="application/json")
    assert [str(m) for m in registry.media_types] == [
        "application/cbor",
        "application/json",
    ]


@pytest.mark.unit
def test_empty_registry_fails():
    with pytest.raises(ConfigurationError) as exc_info:
        MediaTypeRegistry([], default="application/json")
    assert exc_info.value.details["setting"] == "formats"


@pytest.mark.unit
def test_default_must_be_registered():
    with pytest.raises(ConfigurationError) as exc_info:
        MediaTypeRegistry([JsonCodec()], default="application/cbor")
    assert exc_info.value.details["setting"] == "default_media_type"


@pytest.mark.unit
def test_from_settings():
    settings = NegotiationSettings(
        formats=["application/cbor"], default_media_type="application/cbor"
    )
    registry = MediaTypeRegistry.from_settings(settings)
    assert registry.media_types == (MediaType("application/cbor"),)
    assert registry.default == MediaType("application/cbor")


@pytest.mark.unit
def test_from_settings_rejects_unknown_format():
    settings = NegotiationSettings(formats=["application/json", "text/yaml"])
    with pytest.raises(ConfigurationError):
        MediaTypeRegistry.from_settings(settings)


@pytest.mark.unit
def test_default_registry_reads_environment(monkeypatch):
    monkeypatch.setenv("CONTENT_NEGOTIATION_DEFAULT_MEDIA_TYPE", "application/cbor")
    reset_default_registry()
    registry = get_default_registry()
    assert registry.default == MediaType("application/cbor")
    assert get_default_registry() is registry
