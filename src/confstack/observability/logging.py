"""
confstack — structured logging setup.

File: src/confstack/observability/logging.py
Last updated: 2026-02-12

Purpose
- Route ``structlog`` events through stdlib logging and render them as JSON lines
  (or compact text) with secret-looking fields redacted.

What should be included in this file
- ``setup_logging`` configuring both structlog and the ``confstack`` stdlib logger.
- A JSON-lines formatter and a human-readable text formatter.
- A structlog processor applying key-based redaction.

Functional requirements
- Event kwargs land under ``fields`` in JSON output, never at top level.
- Values stored under sensitive keys are replaced before any handler sees them.

Non-functional requirements
- Calling ``setup_logging`` again replaces handlers instead of stacking them.
- Logs go to stderr by default so command output on stdout stays parseable.
"""

from __future__ import annotations

import json
import logging
import math
import sys
from collections.abc import Mapping, MutableMapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Final, Literal, TextIO

import structlog

from confstack.constants import REDACTED_VALUE
from confstack.security.redaction import redact_structure

LogFormat = Literal["json", "text"]

DEFAULT_LOGGER_NAME: Final[str] = "confstack"
LOG_FORMATS: Final[tuple[str, ...]] = ("json", "text")

_STANDARD_LOG_RECORD_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "thread",
        "threadName",
        "taskName",
    }
)


def setup_logging(
    level: int | str = "WARNING",
    *,
    log_format: LogFormat | str = "json",
    stream: TextIO | None = None,
    logger_name: str = DEFAULT_LOGGER_NAME,
) -> logging.Logger:
    """Configure structlog and the package logger; return the stdlib logger.

    Parameters
    ----------
    level:
        Logging level name or number (``"debug"``, ``"INFO"``, ``20`` ...).
    log_format:
        ``"json"`` for one JSON object per line or ``"text"`` for terse lines.
    stream:
        Destination stream; defaults to ``sys.stderr``.
    logger_name:
        Stdlib logger that owns the handler.
    """

    parsed_level = _parse_log_level(level)
    if log_format not in LOG_FORMATS:
        raise ValueError(
            f"unsupported log format {log_format!r}; expected one of: {', '.join(LOG_FORMATS)}"
        )

    formatter: logging.Formatter = (
        _JsonLineFormatter() if log_format == "json" else _TextLineFormatter()
    )
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(parsed_level)
    handler.setFormatter(formatter)

    logger = logging.getLogger(logger_name)
    logger.setLevel(parsed_level)
    logger.propagate = False
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    logger.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            redact_event_fields,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    return logger


def reset_logging(logger_name: str = DEFAULT_LOGGER_NAME) -> None:
    """Detach handlers and restore structlog defaults."""

    logger = logging.getLogger(logger_name)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    structlog.reset_defaults()


def redact_event_fields(
    _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor: redact every non-``event`` field by key name."""

    event = event_dict.pop("event", None)
    redacted = redact_structure(dict(event_dict))
    event_dict.clear()
    if event is not None:
        event_dict["event"] = event
    event_dict.update(redacted)
    return event_dict


class _JsonLineFormatter(logging.Formatter):
    """Formatter that emits canonical JSON objects per log line."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "timestamp": _iso8601z_from_epoch(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extras = _extract_extra_fields(record)
        if extras:
            event["fields"] = redact_structure(extras)
        if record.exc_info is not None:
            event["exception"] = self.formatException(record.exc_info)
        return json.dumps(event, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class _TextLineFormatter(logging.Formatter):
    """``LEVEL logger message key=value ...`` lines for interactive use."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [record.levelname, record.name, record.getMessage()]
        extras = redact_structure(_extract_extra_fields(record))
        for key in sorted(extras):
            parts.append(f"{key}={json.dumps(extras[key], ensure_ascii=False)}")
        line = " ".join(parts)
        if record.exc_info is not None:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, int):
        return value

    if not isinstance(value, str):
        raise ValueError(f"level must be int or str, got {type(value).__name__}")

    normalized = value.strip().upper()
    if normalized == "WARN":
        normalized = "WARNING"
    parsed = logging.getLevelName(normalized)
    if isinstance(parsed, int):
        return parsed

    raise ValueError(f"unsupported logging level {value!r}")


def _iso8601z_from_epoch(epoch_seconds: float) -> str:
    timestamp = datetime.fromtimestamp(epoch_seconds, tz=UTC)
    return timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _extract_extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_LOG_RECORD_FIELDS or key.startswith("_"):
            continue
        fields[key] = _normalize_json_value(value)
    return fields


def _normalize_json_value(value: object) -> Any:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else REDACTED_VALUE
    if isinstance(value, datetime):
        normalized = value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)
        return normalized.isoformat(timespec="microseconds").replace("+00:00", "Z")
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, Mapping):
        return {str(key): _normalize_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_normalize_json_value(item) for item in value]
    return repr(value)


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "LOG_FORMATS",
    "LogFormat",
    "redact_event_fields",
    "reset_logging",
    "setup_logging",
]
