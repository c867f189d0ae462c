"""
confstack — configuration error taxonomy.

File: src/confstack/config/errors.py
Last updated: 2026-02-12

Purpose
- Define the exception hierarchy raised by the loader, manager, and secret lookups.

What should be included in this file
- A single ``ConfigError`` base so callers can catch every engine failure at once.
- Coercion failures carrying the offending variable name.
- Aggregate failures carrying every collected diagnostic.

Functional requirements
- Parsing and validation problems are accumulated by the loader and only raised
  when the caller asks for it; these types are what gets raised in that case.

Non-functional requirements
- Messages are deterministic so the CLI can print them verbatim.
"""

from __future__ import annotations

from collections.abc import Sequence


class ConfigError(Exception):
    """Base exception for all configuration engine failures."""


class UnknownEnvironmentError(ConfigError, LookupError):
    """Raised when no profile is registered for the requested environment."""

    def __init__(self, environment: str, known: Sequence[str] = ()) -> None:
        self.environment = environment
        self.known = tuple(known)
        detail = f"; registered: {', '.join(self.known)}" if self.known else ""
        super().__init__(f"unknown environment {environment!r}{detail}")


class MissingRequiredEnvVarsError(ConfigError):
    """Raised when required environment variables are absent or blank."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(f"Missing required environment variables: {', '.join(self.missing)}")


class EnvVarCoercionError(ConfigError, ValueError):
    """Raised when a raw environment string cannot be turned into its declared type."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        self.detail = message
        super().__init__(f"{name}: {message}")


class MissingRequiredVarError(EnvVarCoercionError):
    """A required variable is absent or blank."""

    def __init__(self, name: str) -> None:
        super().__init__(name, "is required")


class InvalidBooleanError(EnvVarCoercionError):
    """A boolean variable is not ``true`` or ``false``."""

    def __init__(self, name: str, raw: str) -> None:
        super().__init__(name, f"must be 'true' or 'false', got {raw!r}")


class InvalidNumberError(EnvVarCoercionError):
    """A numeric variable does not parse as a finite number."""

    def __init__(self, name: str, raw: str) -> None:
        super().__init__(name, f"must be a number, got {raw!r}")


class InvalidJsonError(EnvVarCoercionError):
    """A JSON variable is not valid JSON."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(name, f"must be valid JSON ({reason})")


class EnvVarValidationError(EnvVarCoercionError):
    """A custom validation hook rejected the parsed value."""


class ValidationFailedError(ConfigError):
    """Raised when the candidate tree does not satisfy the schema."""

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = tuple(errors)
        rendered = "\n".join(f"- {item}" for item in self.errors) or "- unknown validation failure"
        super().__init__(f"Configuration validation failed:\n{rendered}")


class MiddlewareFailedError(ConfigError):
    """Raised when a middleware transform fails; the original error is the cause."""

    def __init__(self, middleware: object, cause: BaseException) -> None:
        self.middleware = middleware
        name = getattr(middleware, "__qualname__", None) or type(middleware).__name__
        super().__init__(f"middleware {name} failed: {type(cause).__name__}: {cause}")


class NotInitializedError(ConfigError, RuntimeError):
    """Raised when configuration is read before the manager is ready."""

    def __init__(self, state: str = "uninitialized") -> None:
        self.state = state
        super().__init__(f"configuration is not available (manager state: {state})")


class SectionValidationFailedError(ConfigError):
    """Raised when a section fails its sub-schema on explicit request."""

    def __init__(self, section: str, errors: Sequence[str]) -> None:
        self.section = section
        self.errors = tuple(errors)
        super().__init__(f"section {section!r} is invalid: {'; '.join(self.errors)}")


class SecretNotFoundError(ConfigError, LookupError):
    """Raised when no provider can supply the requested secret."""

    def __init__(self, name: str, failures: Sequence[str] = ()) -> None:
        self.secret_name = name
        self.failures = tuple(failures)
        detail = f" ({'; '.join(self.failures)})" if self.failures else ""
        super().__init__(f"secret {name!r} not found in any provider{detail}")


__all__ = [
    "ConfigError",
    "EnvVarCoercionError",
    "EnvVarValidationError",
    "InvalidBooleanError",
    "InvalidJsonError",
    "InvalidNumberError",
    "MiddlewareFailedError",
    "MissingRequiredEnvVarsError",
    "MissingRequiredVarError",
    "NotInitializedError",
    "SecretNotFoundError",
    "SectionValidationFailedError",
    "UnknownEnvironmentError",
    "ValidationFailedError",
]
