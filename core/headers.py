"""Header policy for upstream requests and relayed responses."""

from collections.abc import Iterable, Mapping

# Connection-level headers that never travel past a single hop
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "trailers",
        "transfer-encoding",
        "upgrade",
    }
)

# The relayed body is already decoded, so these no longer describe it
BODY_FRAMING_HEADERS = frozenset({"content-encoding", "content-length"})


class HeaderBuilder:
    """Build upstream request headers and filter relayed response headers."""

    def build_upstream_headers(
        self,
        headers: Mapping[str, str],
        credential_header: str,
        credential_value: str,
    ) -> dict[str, str]:
        """Keep only Content-Type and attach the credential."""
        upstream: dict[str, str] = {}
        for key, value in headers.items():
            if key.lower() == "content-type":
                upstream["Content-Type"] = str(value)
                break
        upstream[credential_header] = credential_value
        return upstream

    def build_reply_headers(self, headers: Iterable[tuple[str, str]]) -> dict[str, list[str]]:
        """Group upstream response headers by name, minus hop-by-hop ones."""
        reply: dict[str, list[str]] = {}
        for key, value in headers:
            key_lower = key.lower()
            if key_lower in HOP_BY_HOP_HEADERS or key_lower in BODY_FRAMING_HEADERS:
                continue
            reply.setdefault(key_lower, []).append(value)
        return reply
