"""
confstack — shared constants.

File: src/confstack/constants.py
Last updated: 2026-02-12

Purpose
- Hold environment names, redaction markers, and export subsets used across
  packages without import cycles.
"""

from __future__ import annotations

from typing import Final

# Built-in environment names, in promotion order.
ENVIRONMENTS: Final[tuple[str, ...]] = ("development", "test", "staging", "production")
DEFAULT_ENVIRONMENT: Final[str] = "development"

# Process variable consulted when no environment is given explicitly.
ENVIRONMENT_VARIABLE: Final[str] = "NODE_ENV"

# Replacement marker for secrets in exported, logged, or printed trees.
REDACTED_VALUE: Final[str] = "***REDACTED***"

# Variables emitted by ``export env``.
ENV_EXPORT_VARIABLES: Final[tuple[tuple[str, str], ...]] = (
    ("NODE_ENV", "env.NODE_ENV"),
    ("DEBUG", "env.DEBUG"),
    ("LOG_LEVEL", "env.LOG_LEVEL"),
    ("PORT", "env.PORT"),
    ("HOST", "env.HOST"),
    ("DATABASE_URL", "database.url"),
    ("JWT_SECRET", "auth.jwt.secret"),
)

# Default upper bound for retained dispatch failures.
DISPATCH_ERROR_HISTORY: Final[int] = 1024

__all__ = [
    "DEFAULT_ENVIRONMENT",
    "DISPATCH_ERROR_HISTORY",
    "ENVIRONMENTS",
    "ENVIRONMENT_VARIABLE",
    "ENV_EXPORT_VARIABLES",
    "REDACTED_VALUE",
]
