"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_health, handle_proxy
from core.config import Config
from core.protocols import RequestLogger
from services.forwarding import ForwardingMiddleware
from services.upstream import UpstreamClient

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(
            max_connections=config.limits.max_connections,
            max_keepalive_connections=config.limits.max_keepalive_connections,
        )
        upstream_client = httpx.AsyncClient(
            timeout=config.upstream.timeout,
            limits=limits,
            transport=transport,
        )
        try:
            app.state.forwarding = ForwardingMiddleware(
                config.upstream,
                UpstreamClient(upstream_client),
                logger=logger,
            )
            yield
        finally:
            await upstream_client.aclose()

    app = FastAPI(title="Widget API Proxy", version="0.1.0", lifespan=lifespan)
    mount_path = config.proxy.mount_path.rstrip("/")

    @app.get("/health")
    async def health(request: Request):
        return await handle_health(request)

    @app.api_route(mount_path or "/", methods=PROXY_METHODS)
    @app.api_route(f"{mount_path}/{{path:path}}", methods=PROXY_METHODS)
    async def proxy(request: Request):
        return await handle_proxy(request, config)

    return app
