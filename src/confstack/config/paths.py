"""
confstack — dotted-path access and environment variable mapping.

File: src/confstack/config/paths.py
Last updated: 2026-02-12

Purpose
- Translate flat environment variables into a nested configuration overlay.

What should be included in this file
- The static variable -> dotted path table.
- ``set_path`` / ``get_path`` helpers for nested trees.

Functional requirements
- Intermediate segments that exist but are not mappings are replaced by a fresh mapping.
- Variables without a table entry are ignored.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final

from confstack.config.values import MISSING, ConfigTree

ENV_PATH_MAPPINGS: Final[Mapping[str, str]] = {
    # application
    "APP_NAME": "app.name",
    "APP_VERSION": "app.version",
    "APP_DESCRIPTION": "app.description",
    "APP_URL": "app.url",
    "API_URL": "app.apiUrl",
    "SUPPORT_EMAIL": "app.supportEmail",
    "ADMIN_EMAIL": "app.adminEmail",
    "COMPANY_NAME": "app.companyName",
    # runtime
    "NODE_ENV": "env.NODE_ENV",
    "DEBUG": "env.DEBUG",
    "LOG_LEVEL": "env.LOG_LEVEL",
    "PORT": "env.PORT",
    "HOST": "env.HOST",
    "TIMEZONE": "env.TIMEZONE",
    # database
    "DATABASE_URL": "database.url",
    "DB_POOL_MIN": "database.pool.min",
    "DB_POOL_MAX": "database.pool.max",
    # auth
    "JWT_SECRET": "auth.jwt.secret",
    "JWT_EXPIRES_IN": "auth.jwt.expiresIn",
    "SESSION_SECRET": "auth.session.secret",
    "SESSION_MAX_AGE": "auth.session.maxAge",
    # email
    "EMAIL_PROVIDER": "email.provider",
    "FROM_EMAIL": "email.sender.email",
    "FROM_NAME": "email.sender.name",
    "SMTP_HOST": "email.smtp.host",
    "SMTP_PORT": "email.smtp.port",
    "SENDGRID_API_KEY": "email.sendgrid.apiKey",
    # storage
    "STORAGE_PROVIDER": "storage.provider",
    "AWS_ACCESS_KEY_ID": "storage.awsS3.accessKeyId",
    "AWS_SECRET_ACCESS_KEY": "storage.awsS3.secretAccessKey",
    "AWS_REGION": "storage.awsS3.region",
    "S3_BUCKET": "storage.awsS3.bucket",
    # billing
    "STRIPE_PUBLISHABLE_KEY": "billing.stripe.publishableKey",
    "STRIPE_SECRET_KEY": "billing.stripe.secretKey",
    "STRIPE_WEBHOOK_SECRET": "billing.stripe.webhookSecret",
    # cache
    "REDIS_URL": "cache.redis.url",
    "REDIS_HOST": "cache.redis.host",
    "REDIS_PORT": "cache.redis.port",
    "REDIS_PASSWORD": "cache.redis.password",
    "REDIS_DB": "cache.redis.db",
    # security
    "ALLOWED_ORIGINS": "security.cors.origin",
    "RATE_LIMIT_MAX": "security.rateLimit.maxRequests",
}


def split_path(dotted_path: str) -> tuple[str, ...]:
    parts = tuple(part for part in dotted_path.split(".") if part)
    if not parts:
        raise ValueError(f"invalid config path {dotted_path!r}")
    return parts


def set_path(tree: ConfigTree, dotted_path: str, value: Any) -> None:
    """Write ``value`` at ``dotted_path``, creating or replacing intermediate mappings."""

    path = split_path(dotted_path)
    cursor = tree
    for part in path[:-1]:
        next_node = cursor.get(part)
        if not isinstance(next_node, dict):
            next_node = {}
            cursor[part] = next_node
        cursor = next_node
    cursor[path[-1]] = value


def get_path(tree: Mapping[str, Any], dotted_path: str, default: Any = None) -> Any:
    """Read ``dotted_path``; any absent or non-mapping segment yields ``default``."""

    cursor: Any = tree
    for part in split_path(dotted_path):
        if not isinstance(cursor, Mapping) or part not in cursor:
            return default
        cursor = cursor[part]
    return cursor


def has_path(tree: Mapping[str, Any], dotted_path: str) -> bool:
    return get_path(tree, dotted_path, MISSING) is not MISSING


def map_env_vars(
    values: Mapping[str, Any],
    mappings: Mapping[str, str] = ENV_PATH_MAPPINGS,
) -> ConfigTree:
    """Project typed variable values onto a nested overlay tree."""

    overlay: ConfigTree = {}
    for name, value in values.items():
        target = mappings.get(name)
        if target is None or value is MISSING:
            continue
        set_path(overlay, target, value)
    return overlay


__all__ = [
    "ENV_PATH_MAPPINGS",
    "get_path",
    "has_path",
    "map_env_vars",
    "set_path",
    "split_path",
]
