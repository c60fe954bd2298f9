"""Structured logging configuration (JSON or text format).

Cycle diagnostics travel as ``extra=`` fields on the log record: the host
list, the cycle outcome, and the reload command's exit code and stderr. Both
formatters render them, so a failed nginx reload is explainable from a single
log line in either format.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from .config import LoggingConfig

STRUCTURED_FIELDS = (
    "outcome", "elapsed_seconds", "hosts", "host_count",
    "added", "removed", "destination", "exit_code", "stderr",
)

# nginx -t / systemctl output can run to pages
MAX_STDERR_CHARS = 2000


def structured_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Collect the known extra fields present on a record, in a fixed order."""
    fields: dict[str, Any] = {}
    for key in STRUCTURED_FIELDS:
        val = getattr(record, key, None)
        if val is None or val == "":
            continue
        if key == "stderr" and isinstance(val, str) and len(val) > MAX_STDERR_CHARS:
            val = val[:MAX_STDERR_CHARS] + "...[truncated]"
        fields[key] = val
    return fields


class JSONFormatter(logging.Formatter):
    """One JSON object per line; structured fields become top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(structured_fields(record))

        if record.exc_info and record.exc_info[1]:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable format; structured fields are appended as key=value."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = structured_fields(record)
        if not fields:
            return line
        suffix = " ".join(f"{key}={json.dumps(val, default=str)}" for key, val in fields.items())
        # Keep the traceback, if any, after the fields
        head, sep, tail = line.partition("\n")
        return f"{head} {suffix}{sep}{tail}"


def configure_logging(config: LoggingConfig) -> None:
    """Send everything to stderr in the configured format.

    The Kubernetes client logs each request through urllib3; those loggers
    are held at WARNING so polling every few seconds stays readable.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if config.format == "json" else TextFormatter())
    root.addHandler(handler)

    for noisy in ("kubernetes", "kubernetes.client.rest", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
