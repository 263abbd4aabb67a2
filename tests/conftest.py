"""
StreamWaves Test Configuration

Shared fixtures and configuration for all tests.
"""

import os
from typing import Any, Callable, Generator, Optional, Union

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from streamwaves.config import LoggingConfig, StreamWavesConfig
from streamwaves.main import create_app
from streamwaves.streaming.dns_resolver import DNSResolver


# ============ Origin Doubles ============


class FakeOrigin:
    """
    Stand-in for IPTV providers and CDNs.

    Routes map a URL path to response kwargs (a fresh httpx.Response is
    built per request) or to a handler callable. Every request that
    reaches the origin is recorded.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, Union[dict[str, Any], Callable[[httpx.Request], httpx.Response]]] = {}

    def route(self, path: str, handler: Optional[Callable] = None, **response_kwargs: Any) -> None:
        self.routes[path] = handler if handler is not None else response_kwargs

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, text="Not Found")
        if callable(route):
            return route(request)
        return httpx.Response(**{"status_code": 200, **route})

    @property
    def call_count(self) -> int:
        return len(self.requests)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class StubResolver(DNSResolver):
    """DNS resolver answering from a fixed table."""

    def __init__(self, answers: Optional[dict[str, str]] = None):
        super().__init__()
        self.answers = answers or {}
        self.calls: list[tuple[str, Optional[str]]] = []

    async def resolve(self, hostname: str, override: Optional[str] = None) -> str:
        self.calls.append((hostname, override))
        if not override:
            return hostname
        return self.answers.get(hostname, hostname)


@pytest.fixture
def origin() -> FakeOrigin:
    """Fresh fake origin for each test."""
    return FakeOrigin()


@pytest.fixture
def stub_resolver() -> StubResolver:
    """Resolver that maps iptv.example.com to a fixed address."""
    return StubResolver({"iptv.example.com": "203.0.113.10"})


# ============ Configuration Fixtures ============


@pytest.fixture
def test_config() -> StreamWavesConfig:
    """Configuration that never writes log files."""
    return StreamWavesConfig(logging=LoggingConfig(log_to_file=False))


@pytest.fixture
def temp_config_file(tmp_path) -> str:
    """Create a temporary config file."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        """
server:
  host: "127.0.0.1"
  port: 8080
  environment: "production"

cache:
  ttl_seconds: 120

logging:
  level: "DEBUG"
  log_to_file: false
"""
    )
    return str(config_file)


# ============ FastAPI Test Client Fixtures ============


@pytest.fixture
def app(test_config: StreamWavesConfig, origin: FakeOrigin, stub_resolver: StubResolver) -> FastAPI:
    """Create a test FastAPI application wired to the fake origin."""
    return create_app(
        config=test_config,
        transport=origin.transport(),
        dns_resolver=stub_resolver,
    )


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Create a synchronous test client (runs the app lifespan)."""
    with TestClient(app) as client:
        yield client


# ============ Environment Fixtures ============


@pytest.fixture(autouse=True)
def clean_environment():
    """Clean environment variables for each test."""
    original_env = os.environ.copy()

    for key in list(os.environ.keys()):
        if key.startswith("STREAMWAVES_") or key in ("PORT", "NODE_ENV"):
            del os.environ[key]

    yield

    os.environ.clear()
    os.environ.update(original_env)


# ============ Markers ============


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "e2e: End-to-end tests")
