"""Unit tests for inbound body decoding against raw ASGI receive channels."""

import threading

import pytest
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from conftest import Example
from content_negotiation.exceptions import (
    BodyTransportFailure,
    MalformedBody,
    UnsupportedDeclaredType,
)
from content_negotiation.inbound import decode_request, negotiated_body


def make_request(receive, content_type=None):
    headers = []
    if content_type is not None:
        headers.append((b"content-type", content_type.encode("latin-1")))
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/",
        "query_string": b"",
        "headers": headers,
    }
    return Request(scope, receive)


class RecordingReceive:
    """ASGI receive channel that counts how often it is awaited."""

    def __init__(self, *messages):
        self.messages = list(messages)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        return self.messages.pop(0)


def body_message(body):
    return {"type": "http.request", "body": body, "more_body": False}


@pytest.mark.unit
class TestDecodeRequest:
    """decode_request resolves the declared type before touching the body."""

    @pytest.mark.asyncio
    async def test_unregistered_type_leaves_body_unread(self, json_registry):
        receive = RecordingReceive(body_message(b"really-cool-format"))
        request = make_request(receive, "non-supported")
        with pytest.raises(UnsupportedDeclaredType):
            await decode_request(request, Example, json_registry)
        assert receive.calls == 0

    @pytest.mark.asyncio
    async def test_registered_type_reads_body(self, json_registry):
        receive = RecordingReceive(body_message(b'{"message":"test"}'))
        request = make_request(receive, "application/json")
        body = await decode_request(request, Example, json_registry)
        assert body == Example(message="test")
        assert receive.calls == 1

    @pytest.mark.asyncio
    async def test_disconnect_is_transport_failure(self, json_registry):
        receive = RecordingReceive({"type": "http.disconnect"})
        request = make_request(receive, "application/json")
        with pytest.raises(BodyTransportFailure) as exc_info:
            await decode_request(request, Example, json_registry)
        assert exc_info.value.code == "BODY_TRANSPORT_FAILURE"

    @pytest.mark.asyncio
    async def test_malformed_body(self, json_registry):
        receive = RecordingReceive(body_message(b"{not json"))
        request = make_request(receive, "application/json")
        with pytest.raises(MalformedBody):
            await decode_request(request, Example, json_registry)


@pytest.mark.unit
class TestNegotiatedBody:
    """The endpoint decorator answers failures with fixed responses."""

    @pytest.mark.asyncio
    async def test_disconnect_gets_fixed_400(self, json_registry):
        calls = []

        @negotiated_body(Example, json_registry)
        async def endpoint(request, body):
            calls.append(body)
            return PlainTextResponse("unreachable")

        receive = RecordingReceive({"type": "http.disconnect"})
        response = await endpoint(make_request(receive, "application/json"))
        assert response.status_code == 400
        assert response.body == b"Failed to read request body"
        assert calls == []

    @pytest.mark.asyncio
    async def test_unregistered_type_gets_406_without_reading(self, json_registry):
        @negotiated_body(Example, json_registry)
        async def endpoint(request, body):
            return PlainTextResponse("unreachable")

        receive = RecordingReceive(body_message(b"a,b"))
        response = await endpoint(make_request(receive, "text/csv"))
        assert response.status_code == 406
        assert receive.calls == 0

    @pytest.mark.asyncio
    async def test_sync_endpoint_runs_in_threadpool(self, json_registry):
        threads = []

        @negotiated_body(Example, json_registry)
        def endpoint(request, body):
            threads.append(threading.get_ident())
            return PlainTextResponse(body.message)

        receive = RecordingReceive(body_message(b'{"message":"sync"}'))
        response = await endpoint(make_request(receive, "application/json"))
        assert response.body == b"sync"
        assert threads and threads[0] != threading.get_ident()
