"""Shared protocol definitions."""

from collections.abc import Awaitable, Callable
from typing import Protocol

from core.exceptions import ProxyError
from core.request_types import OutboundRequest

Continuation = Callable[[ProxyError], Awaitable[None] | None]


class ResponseSink(Protocol):
    """Minimal response interface a host framework adapts its reply to."""

    @property
    def ended(self) -> bool: ...
    def set_status(self, status_code: int) -> None: ...
    def set_header(self, name: str, value: str | list[str]) -> None: ...
    def write_and_end(self, body: bytes = b"") -> None: ...


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard)."""

    def log_forward(self, request: OutboundRequest, *, path: str) -> None: ...
    def log_response(self, method: str, path: str, status: int, elapsed: float) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...


class NullRequestLogger:
    """Request logger that discards everything."""

    def log_forward(self, request: OutboundRequest, *, path: str) -> None:
        pass

    def log_response(self, method: str, path: str, status: int, elapsed: float) -> None:
        pass

    def log_error(self, route: str, status: int, message: str) -> None:
        pass
