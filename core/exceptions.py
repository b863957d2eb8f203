"""Custom exception hierarchy for the widget API proxy."""

from typing import Any


class ProxyError(Exception):
    """Base exception for all proxy errors."""


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid."""


class ClientInputError(ProxyError):
    """Raised when the inbound request is structurally invalid."""


class RequestTooLarge(ClientInputError):
    """Request body exceeds size limit."""


class InvalidJSON(ClientInputError):
    """Request body is not valid JSON."""


class ResponseAlreadyEnded(ProxyError):
    """Raised when a response sink is ended a second time."""


class UpstreamError(ProxyError):
    """Raised when the upstream exchange does not produce a proxyable response.

    Attributes:
        message: Error message
        status_code: HTTP status code from upstream (optional)
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamApplicationError(UpstreamError):
    """Raised when the upstream response carries the distinguished API error signal.

    Attributes:
        detail: Value of the reserved error field in the upstream body
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        detail: Any = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.detail = detail


class UpstreamTimeoutError(UpstreamError):
    """Raised when the upstream request times out."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=None)


class UpstreamConnectionError(UpstreamError):
    """Raised when no response could be obtained from the upstream."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=None)
