"""
Image Relay test configuration

Fixtures shared by the test modules:
- relay_config / base_dir: a config plus a directory holding the fallback image
- upstream: a fake Weibo upload API built on httpx.MockTransport
- make_client: a TestClient wired to the fake upstream
"""

import sys
import json
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

# Add the backend directory to the Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from image_relay.app import create_app
from image_relay.config import RelayConfig
from image_relay.uploader import WeiboUploader

TEST_COOKIE = "SUB=test-session-cookie"
TEST_REFERER = "https://weibo.com/"
FALLBACK_BYTES = b"\x89PNG\r\n\x1a\nfallback"


# ============================================
# Fake upstream
# ============================================

class FakeUpstream:
    """
    Records outbound requests and answers with a canned response.

    Usage:
    ```python
    upstream.respond_json({"pic": {"pid": "abc123"}})
    upstream.fail_with(httpx.ConnectError("refused"))
    ```
    """

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.content = json.dumps({"pic": {"pid": "abc123"}}).encode()
        self.error = None

    def respond_json(self, payload, status_code=200):
        self.respond_raw(json.dumps(payload).encode(), status_code)

    def respond_raw(self, content: bytes, status_code=200):
        self.content = content
        self.status_code = status_code
        self.error = None

    def fail_with(self, error: Exception):
        self.error = error

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, content=self.content)

    def uploader(self, cookie: str = TEST_COOKIE) -> WeiboUploader:
        client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return WeiboUploader(cookie, client=client)


@pytest.fixture
def upstream():
    return FakeUpstream()


# ============================================
# Config fixtures
# ============================================

@pytest.fixture
def base_dir(tmp_path):
    """Directory holding static/fallback.png."""
    static = tmp_path / "static"
    static.mkdir()
    (static / "fallback.png").write_bytes(FALLBACK_BYTES)
    return tmp_path


@pytest.fixture
def relay_config():
    return RelayConfig(
        cookie=TEST_COOKIE,
        image_path="static/fallback.png",
        referer=TEST_REFERER,
        port=8080,
    )


@pytest.fixture
def make_client(relay_config, base_dir, upstream):
    """
    Factory for a TestClient against the relay app.

    Takes an optional config override, e.g. to point image_path elsewhere,
    and the cookie the uploader forwards.
    """
    clients = []

    def _make(config=None, cookie=TEST_COOKIE):
        app = create_app(config or relay_config, base_dir, uploader=upstream.uploader(cookie))
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()
