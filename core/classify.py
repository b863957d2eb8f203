"""Upstream response classification - proxied outcome vs API error."""

import json
from typing import Any

from core.exceptions import UpstreamApplicationError
from core.request_types import UpstreamResponse


class ResponseClassifier:
    """Detect the distinguished API error signal in upstream responses.

    The signal is a JSON object body whose reserved top-level field is present
    and truthy. Status codes are not consulted; an upstream 4xx/5xx without
    the field is an ordinary proxied response.
    """

    def __init__(self, error_field: str = "api_error"):
        self.error_field = error_field

    def classify(self, response: UpstreamResponse) -> UpstreamApplicationError | None:
        """Return the API error signalled by the response, if any."""
        payload = self._json_payload(response)
        if not isinstance(payload, dict):
            return None
        detail = payload.get(self.error_field)
        if not detail:
            return None
        return UpstreamApplicationError(
            "Upstream reported an API error",
            status_code=response.status_code,
            detail=detail,
        )

    def _json_payload(self, response: UpstreamResponse) -> Any:
        content_type = (response.header("content-type") or "").lower()
        if "json" not in content_type or not response.content:
            return None
        try:
            return json.loads(response.content)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
