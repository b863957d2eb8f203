"""Inbound to outbound request transformation."""

import json
from typing import Any
from urllib.parse import urlsplit

from core.config import UpstreamSettings
from core.exceptions import ClientInputError, ConfigurationError
from core.headers import HeaderBuilder
from core.request_types import NO_BODY, InboundRequest, OutboundRequest

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


def validate_base_url(base_url: str) -> str:
    """Return the base URL without a trailing slash, or raise ConfigurationError."""
    parts = urlsplit(base_url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigurationError(f"Upstream base URL must be an absolute http(s) URL: {base_url!r}")
    return base_url.rstrip("/")


def join_url(base_url: str, path: str, query: str = "") -> str:
    """Append path and query to the base URL without touching path segments."""
    url = base_url.rstrip("/")
    if path:
        url += path if path.startswith("/") else f"/{path}"
    if query:
        url += f"?{query}"
    return url


def serialize_body(body: Any) -> bytes:
    """Serialize a body value for transmission.

    Raw bytes pass through untouched; every parsed value, strings and None
    included, is encoded back to JSON.
    """
    if isinstance(body, bytes):
        return body
    try:
        return json.dumps(body, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode(
            "utf-8"
        )
    except (TypeError, ValueError) as e:
        raise ClientInputError(f"Request body is not JSON serializable: {e}") from e


class RequestTransformer:
    """Turn an inbound request view into the request sent upstream."""

    def __init__(self, header_builder: HeaderBuilder | None = None) -> None:
        self._headers = header_builder or HeaderBuilder()

    def build_outbound(
        self,
        request: InboundRequest,
        settings: UpstreamSettings,
    ) -> OutboundRequest:
        method = request.method.upper()
        if request.body is NO_BODY:
            if method in BODY_METHODS:
                raise ClientInputError(f"{method} request is missing a parsed body")
            content = None
        else:
            content = serialize_body(request.body)

        headers = self._headers.build_upstream_headers(
            request.headers,
            settings.credential_header,
            settings.credential_value,
        )
        return OutboundRequest(
            method=method,
            url=join_url(settings.base_url, request.path, request.query),
            headers=headers,
            content=content,
        )
