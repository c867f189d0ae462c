"""Public observability primitives: structured logging setup and redaction processor."""

from confstack.observability.logging import (
    DEFAULT_LOGGER_NAME,
    LOG_FORMATS,
    redact_event_fields,
    reset_logging,
    setup_logging,
)

__all__ = [
    "DEFAULT_LOGGER_NAME",
    "LOG_FORMATS",
    "redact_event_fields",
    "reset_logging",
    "setup_logging",
]
