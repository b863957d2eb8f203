"""Shared request data types."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from core.exceptions import ProxyError


class _NoBody:
    """Marker for a request that carries no body at all."""

    def __repr__(self) -> str:
        return "NO_BODY"


# JSON null parses to None, so absence needs its own marker
NO_BODY: Any = _NoBody()


@dataclass(frozen=True)
class InboundRequest:
    """Read-only view of a request as parsed by the host.

    ``body`` is NO_BODY when nothing was sent, raw ``bytes`` for payloads the
    host did not parse, and any other value for a parsed JSON document.
    """

    method: str
    path: str
    query: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = NO_BODY


@dataclass(frozen=True)
class OutboundRequest:
    """Prepared data for an upstream request."""

    method: str
    url: str
    headers: dict[str, str]
    content: bytes | None = None


@dataclass(frozen=True)
class UpstreamResponse:
    """Response obtained from the upstream service."""

    status_code: int
    headers: list[tuple[str, str]]
    content: bytes = b""

    def header(self, name: str) -> str | None:
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None


@dataclass(frozen=True)
class Proxied:
    """The upstream produced a response to relay to the caller."""

    response: UpstreamResponse


@dataclass(frozen=True)
class Failed:
    """Forwarding failed; the error is handed to the continuation."""

    error: ProxyError


ForwardResult = Proxied | Failed
