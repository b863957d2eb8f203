"""Response sink backed by a Starlette response."""

from fastapi import Response

from core.exceptions import ResponseAlreadyEnded


class BufferedResponseSink:
    """Collect status, headers and body, then render a single Response."""

    def __init__(self) -> None:
        self.status_code = 200
        self._headers: dict[str, list[str]] = {}
        self._body = b""
        self._ended = False

    @property
    def ended(self) -> bool:
        return self._ended

    def set_status(self, status_code: int) -> None:
        self._check_open()
        self.status_code = status_code

    def set_header(self, name: str, value: str | list[str]) -> None:
        self._check_open()
        values = [value] if isinstance(value, str) else list(value)
        self._headers[name.lower()] = values

    def write_and_end(self, body: bytes = b"") -> None:
        self._check_open()
        self._body = body
        self._ended = True

    def to_response(self) -> Response:
        """Render the ended sink as a Starlette response."""
        if not self._ended:
            raise RuntimeError("Response sink was never ended")
        response = Response(content=self._body, status_code=self.status_code)
        for name, values in self._headers.items():
            if name == "content-length":
                continue
            for value in values:
                response.headers.append(name, value)
        return response

    def _check_open(self) -> None:
        if self._ended:
            raise ResponseAlreadyEnded("Response has already been sent")
