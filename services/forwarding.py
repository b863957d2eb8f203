"""Authenticating forwarding middleware."""

import inspect
import time

from core.classify import ResponseClassifier
from core.config import UpstreamSettings
from core.exceptions import ConfigurationError, ProxyError, UpstreamError
from core.headers import HeaderBuilder
from core.protocols import Continuation, NullRequestLogger, RequestLogger, ResponseSink
from core.request_types import Failed, ForwardResult, InboundRequest, Proxied
from core.transform import RequestTransformer, validate_base_url
from services.upstream import UpstreamClient

GENERIC_ERROR_BODY = b'{"error": "Internal Server Error"}'

ROUTE_NAME = "upstream"


def write_generic_error(sink: ResponseSink) -> None:
    """End the reply with a bare 500 that reveals nothing about the failure."""
    sink.set_status(500)
    sink.set_header("content-type", "application/json")
    sink.write_and_end(GENERIC_ERROR_BODY)


class ForwardingMiddleware:
    """Forward widget requests to the upstream with the server-held credential.

    Each call is independent; the only state held is the frozen settings
    and the shared upstream client.
    """

    def __init__(
        self,
        settings: UpstreamSettings,
        client: UpstreamClient,
        logger: RequestLogger | None = None,
        transformer: RequestTransformer | None = None,
        classifier: ResponseClassifier | None = None,
        header_builder: HeaderBuilder | None = None,
    ) -> None:
        if not settings.api_key or not settings.api_key.strip():
            raise ConfigurationError("Upstream API key is not configured")
        if not settings.credential_header.strip():
            raise ConfigurationError("Credential header name is empty")
        validate_base_url(settings.base_url)

        self._settings = settings
        self._client = client
        self._logger = logger or NullRequestLogger()
        self._headers = header_builder or HeaderBuilder()
        self._transformer = transformer or RequestTransformer(self._headers)
        self._classifier = classifier or ResponseClassifier(settings.error_field)

    async def forward(self, request: InboundRequest) -> ForwardResult:
        """Make one forwarding attempt and report its outcome."""
        try:
            outbound = self._transformer.build_outbound(request, self._settings)
        except ProxyError as e:
            return Failed(e)

        self._logger.log_forward(outbound, path=request.path)
        try:
            response = await self._client.send(outbound, timeout=self._settings.timeout)
        except ProxyError as e:
            return Failed(e)

        api_error = self._classifier.classify(response)
        if api_error is not None:
            return Failed(api_error)
        return Proxied(response)

    async def __call__(
        self,
        request: InboundRequest,
        sink: ResponseSink,
        continuation: Continuation | None = None,
    ) -> None:
        try:
            await self._dispatch(request, sink, continuation)
        except Exception as e:
            # Nothing escapes: the reply is ended and the failure recorded once
            if not sink.ended:
                write_generic_error(sink)
            try:
                self._logger.log_error(ROUTE_NAME, 500, f"Forwarding failed: {e!r}")
            except OSError:
                pass

    async def _dispatch(
        self,
        request: InboundRequest,
        sink: ResponseSink,
        continuation: Continuation | None,
    ) -> None:
        started = time.monotonic()
        result = await self.forward(request)

        if isinstance(result, Proxied):
            self._relay(result, sink)
            self._logger.log_response(
                request.method, request.path, result.response.status_code, time.monotonic() - started
            )
            return

        if callable(continuation):
            outcome = continuation(result.error)
            if inspect.isawaitable(outcome):
                await outcome
        else:
            write_generic_error(sink)
        self._logger.log_error(ROUTE_NAME, _status_for(result.error), str(result.error))

    def _relay(self, result: Proxied, sink: ResponseSink) -> None:
        response = result.response
        sink.set_status(response.status_code)
        for name, values in self._headers.build_reply_headers(response.headers).items():
            sink.set_header(name, values if len(values) > 1 else values[0])
        sink.write_and_end(response.content)


def _status_for(error: ProxyError) -> int:
    if isinstance(error, UpstreamError) and error.status_code is not None:
        return error.status_code
    return 500
