import sys
from pathlib import Path

import httpx
import pytest
from pydantic import BaseModel

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from content_negotiation.codecs import CborCodec, JsonCodec  # noqa: E402
from content_negotiation.media import MediaTypeRegistry, reset_default_registry  # noqa: E402


def pytest_configure(config):
    # Register the asyncio marker so pytest doesn't warn when it's used.
    config.addinivalue_line(
        "markers", "asyncio: mark test to run in an asyncio event loop"
    )
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


class Example(BaseModel):
    message: str


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Pin negotiation settings for tests.

    Clears any CONTENT_NEGOTIATION_* variables from the outer environment
    and drops the cached process-wide registry around each test.
    """
    monkeypatch.delenv("CONTENT_NEGOTIATION_FORMATS", raising=False)
    monkeypatch.setenv("CONTENT_NEGOTIATION_DEFAULT_MEDIA_TYPE", "application/json")
    monkeypatch.setenv("CONTENT_NEGOTIATION_LOG_LEVEL", "INFO")
    reset_default_registry()
    yield
    reset_default_registry()


@pytest.fixture
def json_registry():
    """JSON and CBOR registered, JSON as default."""
    return MediaTypeRegistry([JsonCodec(), CborCodec()], default="application/json")


@pytest.fixture
def cbor_registry():
    """JSON and CBOR registered, CBOR as default."""
    return MediaTypeRegistry([JsonCodec(), CborCodec()], default="application/cbor")


@pytest.fixture
def example():
    return Example(message="Hello, test!")


def make_client(app) -> httpx.AsyncClient:
    """Client talking to an ASGI app in-process.

    httpx sends "Accept: */*" by default; it is removed so tests control
    whether the header is present.
    """
    client = httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://testserver"
    )
    client.headers.pop("accept", None)
    return client
