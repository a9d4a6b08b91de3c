"""Log setup for doc-finder: plain text for terminals, orjson lines for collectors."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import Path
import sys
from typing import IO, Any

import orjson

from doc_finder.observability.context import current_correlation


TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Anything on a LogRecord beyond these arrived through ``extra=``.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def _bounded(value: Any, limit: int) -> Any:
    if isinstance(value, str) and len(value) > limit:
        return f"{value[:limit]}..."
    return value


def _fallback(value: Any) -> Any:
    """orjson ``default`` hook for values it cannot encode natively."""
    if isinstance(value, (set, frozenset)):
        try:
            return sorted(value)
        except TypeError:
            return list(value)
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (Path, BaseException)):
        return str(value)
    return repr(value)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, correlated with the current span.

    Document text can end up in ``extra`` fields, so messages and string
    extras are clipped to keep lines bounded.
    """

    MAX_MESSAGE_LEN = 2000
    MAX_EXTRA_LEN = 500

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "component": record.name.rpartition(".")[2],
            "message": _bounded(record.getMessage(), self.MAX_MESSAGE_LEN),
        }
        entry.update(current_correlation().as_log_fields())
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(
            (key, _bounded(value, self.MAX_EXTRA_LEN))
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        )
        return orjson.dumps(entry, default=_fallback).decode("utf-8")


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(
    level: str | int = "INFO",
    json_output: bool = False,
    *,
    stream: IO[str] | None = None,
    logger_levels: dict[str, str] | None = None,
) -> logging.Handler:
    """Replace the root handlers with a single stream handler.

    Args:
        level: Root level name (case-insensitive) or number.
        json_output: Use ``JsonFormatter`` instead of the text format.
        stream: Destination, stderr by default so stdout stays free for results.
        logger_levels: Per-logger overrides, e.g. ``{"doc_finder.search": "debug"}``.

    Returns:
        The installed handler.
    """
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)
    root.setLevel(_resolve_level(level))

    logging.getLogger("opentelemetry").setLevel(logging.WARNING)
    for name, override in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(_resolve_level(override))
    return handler
