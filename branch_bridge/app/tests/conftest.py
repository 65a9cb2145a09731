"""
Shared fixtures for the bridge tests.

The upstream Branch API is replaced by an httpx.MockTransport that records
every request it receives, so tests can assert both on what the client got
back and on what was sent upstream.
"""

from typing import Callable, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from branch_bridge.app.config import Settings
from branch_bridge.app.main import create_app


ALLOWED_KEY = "key_live_allowed"
OTHER_ALLOWED_KEY = "key_live_other"


class StubUpstream:
    """Deterministic stand-in for the Branch API."""

    def __init__(self):
        self.calls: List[httpx.Request] = []
        self.status_code = 200
        self.content = b'{"url":"https://example.app.link/abc"}'
        self.headers = {"content-type": "application/json"}
        self.error: Optional[Exception] = None
        self.responder: Optional[Callable[[httpx.Request], httpx.Response]] = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        if self.responder is not None:
            return self.responder(request)
        return httpx.Response(
            self.status_code,
            headers=self.headers,
            content=self.content,
        )

    @property
    def last_call(self) -> httpx.Request:
        assert self.calls, "upstream was never called"
        return self.calls[-1]


@pytest.fixture
def settings():
    """Settings with two allowed keys, isolated from the process environment"""
    return Settings(
        ALLOWED_BRANCH_KEYS=f" {ALLOWED_KEY} , {OTHER_ALLOWED_KEY},,",
        _env_file=None,
    )


@pytest.fixture
def upstream():
    return StubUpstream()


@pytest.fixture
def app(settings, upstream):
    return create_app(settings, transport=httpx.MockTransport(upstream))


@pytest.fixture
def client(app):
    """Test client with the lifespan running, so the upstream client exists"""
    with TestClient(app) as test_client:
        yield test_client
