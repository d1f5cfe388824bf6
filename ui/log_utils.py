"""Shared logging utilities."""

import json
import shutil
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from core.redact import Redactor, mask

LOG_ROOT = Path.cwd() / "logs"
CLI_LOG_FILE = LOG_ROOT / "proxy.log"


def write_incoming_log(
    service: str,
    method: str,
    path: str,
    headers: dict[str, str],
    body: Any,
    redactor: Redactor,
    *,
    log_root: Path = LOG_ROOT,
) -> Path:
    """Write a single incoming proxy request log entry."""
    payload = {
        "timestamp": _utc_now(),
        "service": service,
        "method": method,
        "path": path,
        "headers": _redact_headers(headers),
        "body": redactor.redact_value(body),
    }
    return _write_json(log_root / "incoming" / _safe_segment(service), payload)


def write_cli_log(
    level: str,
    message: str,
    *,
    log_file: Path | None = None,
    **extra: Any,
) -> None:
    """Append a line to the rolling CLI log file."""
    log_file = log_file or CLI_LOG_FILE
    log_file.parent.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
    extra_str = " ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""
    line = f"[{timestamp}] {level}: {message}"
    if extra_str:
        line += f" {extra_str}"
    line += "\n"
    with log_file.open("a") as f:
        f.write(line)


def clear_logs(log_root: Path = LOG_ROOT) -> None:
    """Remove logs from previous runs."""
    if log_root.exists():
        shutil.rmtree(log_root, ignore_errors=True)


def _write_json(folder: Path, payload: dict[str, Any]) -> Path:
    """Write payload to a unique JSON file in the given folder."""
    folder.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S.%fZ")
    file_path = folder / f"{timestamp}_{uuid4().hex}.json"
    file_path.write_text(json.dumps(payload, indent=2, default=str))
    return file_path


def _safe_segment(name: str) -> str:
    cleaned = "".join(c for c in name if c.isalnum() or c in "-_")
    return cleaned or "unknown"


def _redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers."""
    redacted = {}
    for key, value in headers.items():
        if "key" in key.lower() or "authorization" in key.lower() or "cookie" in key.lower():
            redacted[key] = mask(value)
        else:
            redacted[key] = value
    return redacted


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()
