"""HTTP transport for upstream requests."""

import httpx

from core.exceptions import ClientInputError, UpstreamConnectionError, UpstreamTimeoutError
from core.request_types import OutboundRequest, UpstreamResponse


class UpstreamClient:
    """Send prepared requests to the upstream over a shared connection pool."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def send(
        self,
        outbound: OutboundRequest,
        timeout: float | None = None,
    ) -> UpstreamResponse:
        """Issue one request and read the full response.

        Raises:
            ClientInputError: The inbound path or headers cannot form a valid request.
            UpstreamTimeoutError: The exchange exceeded the timeout.
            UpstreamConnectionError: No usable response was obtained.
        """
        try:
            req = self._client.build_request(
                outbound.method,
                outbound.url,
                headers=outbound.headers,
                content=outbound.content,
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except (httpx.InvalidURL, UnicodeEncodeError) as e:
            raise ClientInputError(f"Request cannot be sent upstream: {e}") from e

        try:
            response = await self._client.send(req, follow_redirects=False)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError("Upstream timeout") from e
        except httpx.HTTPError as e:
            raise UpstreamConnectionError(f"Upstream connection error: {e}") from e

        return UpstreamResponse(
            status_code=response.status_code,
            headers=list(response.headers.multi_items()),
            content=response.content,
        )
