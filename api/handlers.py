"""FastAPI route handlers."""

import json
from json import JSONDecodeError
from typing import Any

from fastapi import Request, Response

from api.responses import BufferedResponseSink
from core.config import Config
from core.exceptions import (
    ClientInputError,
    InvalidJSON,
    ProxyError,
    RequestTooLarge,
    UpstreamApplicationError,
    UpstreamConnectionError,
    UpstreamTimeoutError,
)
from core.protocols import ResponseSink
from core.request_types import NO_BODY, InboundRequest
from services.forwarding import ForwardingMiddleware, write_generic_error
from ui.log_utils import write_incoming_log


def error_reply(sink: ResponseSink, error: ProxyError) -> None:
    """Write a JSON error reply for a failed forward without leaking internals."""
    if isinstance(error, RequestTooLarge):
        status, message = 413, "Request body too large"
    elif isinstance(error, InvalidJSON):
        status, message = 400, "Invalid JSON"
    elif isinstance(error, ClientInputError):
        status, message = 400, "Invalid request"
    elif isinstance(error, UpstreamTimeoutError):
        status, message = 504, "Upstream timeout"
    elif isinstance(error, UpstreamConnectionError):
        status, message = 502, "Upstream connection error"
    elif isinstance(error, UpstreamApplicationError):
        upstream_status = error.status_code or 0
        status = upstream_status if 400 <= upstream_status < 600 else 502
        message = "Upstream API error"
    else:
        write_generic_error(sink)
        return

    sink.set_status(status)
    sink.set_header("content-type", "application/json")
    sink.write_and_end(json.dumps({"error": message}).encode("utf-8"))


def relative_path(request: Request, mount_path: str) -> str:
    """Return the raw request path with the mount prefix removed."""
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else request.url.path
    prefix = mount_path.rstrip("/")
    if prefix and path.startswith(prefix):
        path = path[len(prefix):]
    return path


async def parse_body(request: Request, max_body_size: int) -> Any:
    """Parse the request body the way the widget sends it.

    JSON content types are decoded, other payloads stay raw bytes and an
    empty body is NO_BODY.
    """
    raw_body = await request.body()
    if len(raw_body) > max_body_size:
        raise RequestTooLarge(f"Request body exceeds {max_body_size} bytes")
    if not raw_body:
        return NO_BODY

    content_type = request.headers.get("content-type", "").lower()
    if "json" not in content_type:
        return raw_body
    try:
        return json.loads(raw_body)
    except (JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidJSON(f"Invalid JSON: {e}") from e


async def handle_proxy(request: Request, config: Config) -> Response:
    """Adapt a FastAPI request to the forwarding middleware and back."""
    middleware: ForwardingMiddleware = request.app.state.forwarding
    sink = BufferedResponseSink()
    path = relative_path(request, config.proxy.mount_path)
    headers = dict(request.headers)

    try:
        body = await parse_body(request, config.limits.max_body_size)
    except ClientInputError as e:
        write_incoming_log(request.method, path, headers, None)
        error_reply(sink, e)
        return sink.to_response()

    write_incoming_log(request.method, path, headers, None if body is NO_BODY else body)
    inbound = InboundRequest(
        method=request.method,
        path=path,
        query=request.url.query,
        headers=headers,
        body=body,
    )

    async def continuation(error: ProxyError) -> None:
        error_reply(sink, error)

    await middleware(inbound, sink, continuation)
    if not sink.ended:
        write_generic_error(sink)
    return sink.to_response()


async def handle_health(request: Request) -> dict[str, str]:
    """Report liveness."""
    return {"status": "ok"}
