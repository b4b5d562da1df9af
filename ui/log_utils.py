"""Shared logging utilities."""

import json
import shutil
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from core.request_types import ForwardOutcome, ForwardRequest

LOG_ROOT = Path.cwd() / "logs"
CLI_LOG_FILE = LOG_ROOT / "proxy.log"

_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="log-writer")


def write_forward_log(
    request: ForwardRequest,
    headers: dict[str, str],
    *,
    log_root: Path = LOG_ROOT,
) -> Future[Path]:
    """Queue a log entry for an inbound request. The body itself is not stored."""
    payload = {
        "timestamp": _utc_now(),
        "route": request.route.path,
        "size": request.size,
        "sha256": request.digest,
        "headers": _redact_headers(headers),
    }
    return _executor.submit(_write_json, log_root / "forwarded" / request.route.value, payload)


def write_outcome_log(
    request: ForwardRequest,
    stable: ForwardOutcome,
    dev: ForwardOutcome,
    *,
    status: int,
    elapsed: float,
    log_root: Path = LOG_ROOT,
) -> Future[Path]:
    """Queue a log entry with both backend outcomes and the reply status."""
    payload = {
        "timestamp": _utc_now(),
        "route": request.route.path,
        "sha256": request.digest,
        "status": status,
        "elapsed_ms": round(elapsed * 1000, 2),
        "stable": _outcome_dict(stable),
        "dev": _outcome_dict(dev),
    }
    return _executor.submit(_write_json, log_root / "outcomes" / request.route.value, payload)


def write_cli_log(
    level: str,
    message: str,
    *,
    log_file: Path | None = None,
    **extra: Any,
) -> Future[None]:
    """Queue a line for the rolling CLI log file."""
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
    extra_str = " ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""
    line = f"[{timestamp}] {level}: {message}"
    if extra_str:
        line += f" {extra_str}"
    line += "\n"
    return _executor.submit(_append_line, log_file or CLI_LOG_FILE, line)


def clear_logs(log_root: Path = LOG_ROOT) -> None:
    """Remove logs left over from a previous run."""
    if log_root.exists():
        shutil.rmtree(log_root)


def shutdown_log_executor() -> None:
    """Flush pending log writes."""
    _executor.shutdown(wait=True)


def _outcome_dict(outcome: ForwardOutcome) -> dict[str, Any]:
    return {
        "status": outcome.status_code,
        "error": outcome.error,
        "elapsed_ms": round(outcome.elapsed * 1000, 2),
    }


def _append_line(log_file: Path, line: str) -> None:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    with log_file.open("a") as f:
        f.write(line)


def _write_json(folder: Path, payload: dict[str, Any]) -> Path:
    """Write payload to a unique JSON file in the given folder."""
    folder.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S.%fZ")
    file_path = folder / f"{timestamp}_{uuid4().hex}.json"
    file_path.write_text(json.dumps(payload, indent=2, default=str))
    return file_path


def _redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers."""
    redacted = {}
    for key, value in headers.items():
        if "key" in key.lower() or "authorization" in key.lower() or key.lower() == "cookie":
            redacted[key] = _mask(value)
        else:
            redacted[key] = value
    return redacted


def _mask(value: str) -> str:
    if len(value) <= 10:
        return "***"
    return value[:6] + "..." + value[-4:]


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()
