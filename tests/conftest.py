"""Shared fixtures for credential-proxy tests."""

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import load_config
from services.targets import build_registry

OPENAI_KEY = "sk-openai-test-0123456789"
GEMINI_KEY = "gemini+test/key=0123456789"
ANTHROPIC_KEY = "sk-ant-test-0123456789"

TEST_ENV = {
    "OPENAI_API_KEY": OPENAI_KEY,
    "GOOGLE_GEMINI_API_KEY": GEMINI_KEY,
    "ANTHROPIC_API_KEY": ANTHROPIC_KEY,
    "ENVIRONMENT": "test",
}


class RecordingLogger:
    """RequestLogger that keeps every event in memory."""

    def __init__(self):
        self.requests: list[tuple[str, str, str, str]] = []
        self.proxied: list[tuple[str, str, str]] = []
        self.errors: list[tuple[str, int | None, str]] = []

    def log_request(self, method, path, client_ip, user_agent):
        self.requests.append((method, path, client_ip, user_agent))

    def log_proxy(self, service, method, url):
        self.proxied.append((service, method, url))

    def log_error(self, route, status, message):
        self.errors.append((route, status, message))

    def dump(self) -> str:
        return repr((self.requests, self.proxied, self.errors))


class FakeUpstream:
    """Mock transport handler recording every outbound request."""

    def __init__(self):
        self.calls: list[httpx.Request] = []
        self._handler = lambda request: httpx.Response(200, json={"ok": True})

    def respond_with(self, handler) -> None:
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        return self._handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def env():
    return dict(TEST_ENV)


@pytest.fixture
def config(env):
    return load_config(env)


@pytest.fixture
def registry(config):
    return build_registry(config)


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def make_client(registry, logger, upstream):
    """Build a TestClient for a given config (lifespan runs inside ``with``)."""

    def _make(config):
        app = create_app(config, logger, registry, transport=upstream.transport)
        return TestClient(app, raise_server_exceptions=False)

    return _make


@pytest.fixture
def client(make_client, config):
    with make_client(config) as test_client:
        yield test_client
