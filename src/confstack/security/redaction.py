"""
confstack — secret redaction utilities

File: src/confstack/security/redaction.py
Last updated: 2026-02-12

Purpose
- Replace secret values before a configuration tree is exported, printed, or logged.

What should be included in this file
- The static list of sensitive configuration paths.
- Path-based tree redaction for configuration output.
- Key-based structure redaction for log payloads.

Functional requirements
- Must ensure no secrets leak into exports or logs by default.
- Fields that are not sensitive stay byte-for-byte identical.

Non-functional requirements
- Never mutates the input.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Iterable, Mapping
from typing import Any, Final

from confstack.constants import REDACTED_VALUE

SENSITIVE_FIELD_PATHS: Final[tuple[str, ...]] = (
    "database.url",
    "database.password",
    "auth.jwt.secret",
    "auth.session.secret",
    "email.smtp.auth.pass",
    "email.sendgrid.apiKey",
    "email.mailgun.apiKey",
    "storage.awsS3.accessKeyId",
    "storage.awsS3.secretAccessKey",
    "billing.stripe.secretKey",
    "billing.stripe.webhookSecret",
    "cache.redis.password",
    "integrations.development.sentry.dsn",
)

DEFAULT_SENSITIVE_KEY_DENYLIST: Final[frozenset[str]] = frozenset(
    {
        "access_key_id",
        "api_key",
        "apikey",
        "authorization",
        "client_secret",
        "credentials",
        "dsn",
        "pass",
        "password",
        "private_key",
        "secret",
        "secret_access_key",
        "secret_key",
        "token",
        "webhook_secret",
    }
)

_DEFAULT_SENSITIVE_KEY_SUFFIXES: Final[tuple[str, ...]] = (
    "_api_key",
    "_password",
    "_secret",
    "_token",
)

_CAMEL_CASE_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def redact_paths(
    tree: Mapping[str, Any],
    paths: Iterable[str] = SENSITIVE_FIELD_PATHS,
    *,
    replacement: str = REDACTED_VALUE,
) -> dict[str, Any]:
    """Return a deep copy of ``tree`` with every listed path replaced.

    A path is replaced only when it exists in full and its value is not ``None``.
    """

    redacted = copy.deepcopy(dict(tree))
    for dotted_path in paths:
        parts = tuple(part for part in dotted_path.split(".") if part)
        if not parts:
            continue
        cursor: Any = redacted
        for part in parts[:-1]:
            cursor = cursor.get(part) if isinstance(cursor, dict) else None
            if cursor is None:
                break
        if not isinstance(cursor, dict):
            continue
        leaf = parts[-1]
        if leaf in cursor and cursor[leaf] is not None:
            cursor[leaf] = replacement
    return redacted


def is_sensitive_key(key: str) -> bool:
    """Heuristic: does ``key`` name a secret (``apiKey``, ``db_password`` ...)?"""

    normalized = _normalize_key(key)
    if not normalized:
        return False
    if normalized in DEFAULT_SENSITIVE_KEY_DENYLIST:
        return True
    return normalized.endswith(_DEFAULT_SENSITIVE_KEY_SUFFIXES)


def redact_structure(value: Any, *, replacement: str = REDACTED_VALUE) -> Any:
    """Recursively replace scalar values stored under sensitive-looking keys."""

    if isinstance(value, Mapping):
        out: dict[str, Any] = {}
        for key, item in value.items():
            text_key = str(key)
            if (
                is_sensitive_key(text_key)
                and item is not None
                and not isinstance(item, (Mapping, list, tuple))
            ):
                out[text_key] = replacement
            else:
                out[text_key] = redact_structure(item, replacement=replacement)
        return out
    if isinstance(value, (list, tuple)):
        return [redact_structure(item, replacement=replacement) for item in value]
    return value


def _normalize_key(key: str) -> str:
    with_boundaries = _CAMEL_CASE_BOUNDARY.sub(r"\1_\2", key.strip())
    return _NON_ALNUM.sub("_", with_boundaries.lower()).strip("_")


__all__ = [
    "DEFAULT_SENSITIVE_KEY_DENYLIST",
    "REDACTED_VALUE",
    "SENSITIVE_FIELD_PATHS",
    "is_sensitive_key",
    "redact_paths",
    "redact_structure",
]
