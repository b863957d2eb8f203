"""Shared fixtures: configuration, a fake upstream and a recording sink."""

from collections.abc import Callable

import httpx
import pytest

from api.responses import BufferedResponseSink
from core.config import Config, ProxySettings, UpstreamSettings
from core.request_types import OutboundRequest

UPSTREAM_URL = "https://upstream.test"
API_KEY = "sk-test-1234567890"


class RecordingLogger:
    """RequestLogger that keeps every call for assertions."""

    def __init__(self) -> None:
        self.forwarded: list[OutboundRequest] = []
        self.responses: list[tuple[str, str, int]] = []
        self.errors: list[tuple[str, int, str]] = []

    def log_forward(self, request: OutboundRequest, *, path: str) -> None:
        self.forwarded.append(request)

    def log_response(self, method: str, path: str, status: int, elapsed: float) -> None:
        self.responses.append((method, path, status))

    def log_error(self, route: str, status: int, message: str) -> None:
        self.errors.append((route, status, message))


class CountingSink(BufferedResponseSink):
    """Sink that counts how many times it was ended."""

    def __init__(self) -> None:
        super().__init__()
        self.end_calls = 0

    def write_and_end(self, body: bytes = b"") -> None:
        self.end_calls += 1
        super().write_and_end(body)

    @property
    def body(self) -> bytes:
        return self._body

    def header(self, name: str) -> list[str] | None:
        return self._headers.get(name.lower())


class FakeUpstream:
    """httpx transport handler that records requests and replies via a callback."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response] | None = None):
        self.requests: list[httpx.Request] = []
        self.handler = handler or (lambda request: httpx.Response(200, json={"ok": True}))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture(autouse=True)
def isolated_logs(tmp_path, monkeypatch):
    """Keep request logs out of the working directory."""
    monkeypatch.setattr("ui.log_utils.LOG_ROOT", tmp_path / "logs")
    return tmp_path / "logs"


@pytest.fixture
def upstream_settings() -> UpstreamSettings:
    return UpstreamSettings(base_url=UPSTREAM_URL, api_key=API_KEY)


@pytest.fixture
def config(upstream_settings) -> Config:
    return Config(
        proxy=ProxySettings(mount_path="/api/proxy"),
        upstream=upstream_settings,
    )


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def sink() -> CountingSink:
    return CountingSink()


@pytest.fixture
def fake_upstream() -> FakeUpstream:
    return FakeUpstream()
