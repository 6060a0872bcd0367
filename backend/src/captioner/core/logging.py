"""Centralized logging for Captioner Service."""

import json
import logging
import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from captioner.core.tracing import get_trace_id

# Credentials that can end up in messages: bearer headers and ?key= query params.
_SECRET_PATTERNS = (
    re.compile(r"(Bearer\s+)[A-Za-z0-9._\-]+"),
    re.compile(r"([?&]key=)[^&\s\"']+"),
)

_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "trace_id", "taskName"}


def redact(text: str) -> str:
    """Mask API credentials in text."""
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(r"\1***", text)
    return text


class TraceIdFilter(logging.Filter):
    """Inject trace_id into log records for request correlation."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = get_trace_id() or "-"
        return True


class RedactingFilter(logging.Filter):
    """Render the message once and mask credentials in it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = redact(record.getMessage())
        record.args = None
        return True


class JsonFormatter(logging.Formatter):
    """Format logs as JSON for log aggregators (e.g. ELK, Datadog)."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "trace_id": getattr(record, "trace_id", "-"),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        # extra={...} fields
        for k, v in record.__dict__.items():
            if k in _RECORD_ATTRS or v is None:
                continue
            try:
                json.dumps(v)
                payload[k] = v
            except (TypeError, ValueError):
                payload[k] = str(v)
        return json.dumps(payload, ensure_ascii=False)


def _build_formatter(format_type: str) -> logging.Formatter:
    if format_type == "json":
        return JsonFormatter()
    return logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(trace_id)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging(
    *,
    level: str = "INFO",
    format_type: str = "text",
    log_file: str | None = None,
) -> None:
    """
    Configure application logging. Call once at startup.

    Args:
        level: DEBUG, INFO, WARNING, ERROR, CRITICAL
        format_type: "text" (human-readable) or "json"
        log_file: Optional path to write logs to file
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates (e.g. in --reload)
    for h in root.handlers[:]:
        root.removeHandler(h)

    formatter = _build_formatter(format_type)
    filters = (TraceIdFilter(), RedactingFilter())

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
        except OSError as e:
            root.warning("Could not create log file %s: %s", log_file, e)

    for handler in handlers:
        handler.setFormatter(formatter)
        for f in filters:
            handler.addFilter(f)
        root.addHandler(handler)

    # Reduce noise from third-party libs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("python_multipart").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)  # We log requests ourselves


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given module name. Prefer captioner.* namespace."""
    return logging.getLogger(name)
