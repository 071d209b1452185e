"""Root logging setup for the searchjobs CLI and embedding processes.

One handler, one formatter. JSON output is the default so logs can be
shipped as-is; the plain formatter is for interactive use. The CLI writes
logs to stderr so command output on stdout stays machine-readable.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, TextIO

from . import fields
from .context import bind_context, get_context

# Per-request INFO lines from the HTTP stack would drown out SDK logs.
NOISY_LOGGERS = ("httpx", "httpcore")


class ContextFilter(logging.Filter):
    """Copy the task-local fields onto each record as ``record.context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = get_context()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line: core fields first, then bound context."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            fields.TIMESTAMP: datetime.fromtimestamp(record.created, UTC).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: record.getMessage(),
        }
        payload.update(getattr(record, "context", {}))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


class PlainFormatter(logging.Formatter):
    """``<time> <level> <logger> <message> key=value ...`` lines."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = getattr(record, "context", {})
        if not context:
            return line
        pairs = " ".join(f"{key}={context[key]}" for key in sorted(context))
        return f"{line} {pairs}"


def configure_logging(
    *,
    level: str = "INFO",
    json_output: bool = True,
    service: str | None = None,
    environment: str | None = None,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Install a single root handler writing to ``stream`` (stdout by default).

    Calling again replaces the previous handler. ``service`` and
    ``environment`` are bound into the logging context of the caller.
    """
    resolved = level.upper()
    handler = logging.StreamHandler(sys.stdout if stream is None else stream)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter() if json_output else PlainFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(resolved)

    quiet = logging.DEBUG if resolved == "DEBUG" else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet)

    bind_context(
        **{fields.SERVICE: service or None, fields.ENVIRONMENT: environment or None}
    )
    return handler


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a standard library logger."""
    return logging.getLogger(name)
