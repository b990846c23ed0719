import json

import pytest

from content_negotiation.exceptions import (
    BodyUnavailable,
    BodyTransportFailure,
    CodecError,
    ContentNegotiationError,
    DecodeError,
    EncodeError,
    EncodeFailure,
    MalformedBody,
    NegotiationFailed,
    UnsupportedDeclaredType,
)


@pytest.mark.unit
def test_malformed_body_record():
    cause = CodecError("bad", media_type="application/json")
    exc = MalformedBody("application/json", 12, cause)
    assert exc.to_dict() == {
        "error": "MALFORMED_BODY",
        "message": "Malformed application/json request body",
        "details": {
            "media_type": "application/json",
            "body_length": 12,
            "original_error": "bad",
            "error_type": "CodecError",
        },
    }


@pytest.mark.unit
def test_to_json():
    exc = UnsupportedDeclaredType("text/csv")
    assert json.loads(exc.to_json())["details"] == {"content_type": "text/csv"}


@pytest.mark.unit
def test_taxonomy():
    for exc in (
        NegotiationFailed("x/y"),
        UnsupportedDeclaredType("x/y"),
        MalformedBody("application/json", 0),
        BodyTransportFailure(),
        EncodeFailure("application/json"),
    ):
        assert isinstance(exc, ContentNegotiationError)
    assert not isinstance(UnsupportedDeclaredType("x/y"), MalformedBody)


@pytest.mark.unit
def test_record_aliases():
    assert DecodeError is MalformedBody
    assert EncodeError is EncodeFailure
    assert BodyUnavailable is BodyTransportFailure
