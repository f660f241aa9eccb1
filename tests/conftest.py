"""Pytest configuration and fixtures."""

import json
import os
import time

import httpx
import pytest

from bosonnlp import BosonNLP
from bosonnlp.core.config import get_settings

TEST_API_URL = "https://api.bosonnlp.test"
TEST_TOKEN = "test-token"


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Tests against the live BosonNLP API")


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests (needs BOSONNLP_API_TOKEN)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless explicitly requested."""
    skip_integration = pytest.mark.skip(reason="Need --run-integration option to run")

    for item in items:
        if "integration" in item.keywords and not config.getoption("--run-integration"):
            item.add_marker(skip_integration)


class FakeBosonAPI:
    """Stand-in for the BosonNLP HTTP API, usable as an ``httpx.MockTransport`` handler.

    Routes map ``(method, path)`` to a queue of canned responses; the last
    response of a queue is repeated once the others are used up.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, json_body=None, status_code=200, content=None, handler=None):
        if handler is None:
            def handler(request, json_body=json_body, status_code=status_code, content=content):
                if content is not None:
                    return httpx.Response(status_code, content=content)
                return httpx.Response(status_code, json=json_body)
        self.routes.setdefault((method, path), []).append(handler)
        return self

    def __call__(self, request):
        self.requests.append(request)
        handlers = self.routes.get((request.method, request.url.path))
        if not handlers:
            return httpx.Response(404, json={"status": 404, "message": f"no route for {request.url.path}"})
        handler = handlers.pop(0) if len(handlers) > 1 else handlers[0]
        return handler(request)

    @property
    def last_request(self):
        return self.requests[-1]

    def body(self, request=None):
        request = request or self.last_request
        return json.loads(request.content.decode("utf-8"))


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch):
    """Drop BOSONNLP_* variables and cached settings around each test."""
    for key in list(os.environ):
        if key.upper().startswith("BOSONNLP_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def api():
    return FakeBosonAPI()


@pytest.fixture
def nlp(api):
    http_client = httpx.Client(transport=httpx.MockTransport(api))
    client = BosonNLP(token=TEST_TOKEN, bosonnlp_url=TEST_API_URL, http_client=http_client)
    yield client
    http_client.close()


@pytest.fixture
def fake_clock(monkeypatch):
    """Makes ``time.sleep`` advance ``time.monotonic`` instead of blocking."""

    class FakeClock:
        def __init__(self):
            self.now = 1000.0
            self.sleeps = []

        def monotonic(self):
            return self.now

        def sleep(self, seconds):
            self.sleeps.append(seconds)
            self.now += seconds

    clock = FakeClock()
    monkeypatch.setattr(time, "monotonic", clock.monotonic)
    monkeypatch.setattr(time, "sleep", clock.sleep)
    return clock
