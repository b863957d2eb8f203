"""Shared logging utilities."""

import json
import shutil
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from credentials import mask

LOG_ROOT = Path.cwd() / "logs"
CLI_LOG_FILE_NAME = "proxy.log"

SENSITIVE_HEADER_MARKERS = ("key", "authorization", "cookie", "token", "secret")


def write_incoming_log(
    method: str,
    path: str,
    headers: dict[str, str],
    body: Any,
    *,
    log_root: Path | None = None,
) -> Path:
    """Write a single incoming request log entry."""
    payload = {
        "timestamp": _utc_now(),
        "method": method,
        "path": path,
        "headers": _redact_headers(headers),
        "body": _loggable_body(body),
    }
    return _write_json(_root(log_root) / "incoming", payload)


def write_upstream_log(
    method: str,
    url: str,
    headers: dict[str, str],
    content: bytes | None,
    *,
    path: str,
    log_root: Path | None = None,
) -> Path:
    """Write a single outbound upstream request log entry."""
    payload = {
        "timestamp": _utc_now(),
        "method": method,
        "url": url,
        "path": path,
        "headers": _redact_headers(headers),
        "body_bytes": len(content) if content is not None else None,
    }
    return _write_json(_root(log_root) / "upstream", payload)


def write_cli_log(
    level: str,
    message: str,
    *,
    log_root: Path | None = None,
    **extra: Any,
) -> None:
    """Append a line to the rolling CLI log file."""
    log_file = _root(log_root) / CLI_LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
    extra_str = " ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""
    line = f"[{timestamp}] {level}: {message}"
    if extra_str:
        line += f" {extra_str}"
    line += "\n"
    with log_file.open("a") as f:
        f.write(line)


def clear_logs(*, log_root: Path | None = None) -> None:
    """Remove request logs from a previous run."""
    root = _root(log_root)
    for folder in ("incoming", "upstream"):
        shutil.rmtree(root / folder, ignore_errors=True)


def _root(log_root: Path | None) -> Path:
    return log_root if log_root is not None else LOG_ROOT


def _write_json(folder: Path, payload: dict[str, Any]) -> Path:
    """Write payload to a unique JSON file in the given folder."""
    folder.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S.%fZ")
    file_path = folder / f"{timestamp}_{uuid4().hex}.json"
    file_path.write_text(json.dumps(payload, indent=2, default=str))
    return file_path


def _loggable_body(body: Any) -> Any:
    if isinstance(body, bytes):
        return f"<{len(body)} bytes>"
    return body


def _redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers."""
    redacted = {}
    for key, value in headers.items():
        if any(marker in key.lower() for marker in SENSITIVE_HEADER_MARKERS):
            redacted[key] = mask(value)
        else:
            redacted[key] = value
    return redacted


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()
