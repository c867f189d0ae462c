"""
confstack — environment variable catalog.

File: src/confstack/config/definitions.py
Last updated: 2026-02-12

Purpose
- Declare every recognised environment variable with its type, default, and
  description.

Functional requirements
- Requiredness is resolved per environment (secrets only in production,
  the database everywhere except ``test``).
- Feeds coercion in the loader, ``init`` templates, and ``env`` listings.
"""

from __future__ import annotations

from typing import Any

from confstack.config.coercion import EnvVarDefinition


def _valid_port(value: Any) -> bool | str:
    if isinstance(value, int) and 1 <= value <= 65535:
        return True
    return "must be an integer between 1 and 65535"


def env_var_definitions(environment: str) -> tuple[EnvVarDefinition, ...]:
    """Return the variable catalog with requiredness resolved for ``environment``."""

    production = environment == "production"
    return (
        # application
        EnvVarDefinition("APP_NAME", description="Application name"),
        EnvVarDefinition("APP_VERSION", description="Application version"),
        EnvVarDefinition("APP_URL", required=production, description="Application URL"),
        EnvVarDefinition("API_URL", description="API base URL"),
        EnvVarDefinition("SUPPORT_EMAIL", description="Support email address"),
        EnvVarDefinition("ADMIN_EMAIL", description="Admin email address"),
        # runtime
        EnvVarDefinition("NODE_ENV", required=True, description="Active environment name"),
        EnvVarDefinition("DEBUG", "boolean", default=False, description="Enable debug mode"),
        EnvVarDefinition("LOG_LEVEL", default="info", description="Logging level"),
        EnvVarDefinition(
            "PORT", "number", default=3000, description="Server port", validate=_valid_port
        ),
        EnvVarDefinition("HOST", default="localhost", description="Server host"),
        # database
        EnvVarDefinition(
            "DATABASE_URL",
            required=environment != "test",
            description="Database connection URL",
        ),
        EnvVarDefinition("DB_POOL_MIN", "number", description="Connection pool minimum size"),
        EnvVarDefinition("DB_POOL_MAX", "number", description="Connection pool maximum size"),
        # auth
        EnvVarDefinition("JWT_SECRET", required=production, description="JWT signing secret"),
        EnvVarDefinition("JWT_EXPIRES_IN", default="24h", description="JWT expiration time"),
        EnvVarDefinition("SESSION_SECRET", required=production, description="Session secret"),
        # email
        EnvVarDefinition("EMAIL_PROVIDER", description="Email service provider"),
        EnvVarDefinition("FROM_EMAIL", description="Default sender email"),
        EnvVarDefinition("FROM_NAME", description="Default sender name"),
        EnvVarDefinition("SENDGRID_API_KEY", description="SendGrid API key"),
        # storage
        EnvVarDefinition("STORAGE_PROVIDER", description="Storage provider"),
        EnvVarDefinition("AWS_ACCESS_KEY_ID", description="AWS access key ID"),
        EnvVarDefinition("AWS_SECRET_ACCESS_KEY", description="AWS secret access key"),
        EnvVarDefinition("AWS_REGION", description="AWS region"),
        EnvVarDefinition("S3_BUCKET", description="S3 bucket name"),
        # billing
        EnvVarDefinition("STRIPE_PUBLISHABLE_KEY", description="Stripe publishable key"),
        EnvVarDefinition("STRIPE_SECRET_KEY", description="Stripe secret key"),
        EnvVarDefinition("STRIPE_WEBHOOK_SECRET", description="Stripe webhook secret"),
        # cache
        EnvVarDefinition("REDIS_URL", description="Redis connection URL"),
        EnvVarDefinition("REDIS_HOST", description="Redis host"),
        EnvVarDefinition("REDIS_PORT", "number", description="Redis port"),
        EnvVarDefinition("REDIS_PASSWORD", description="Redis password"),
        EnvVarDefinition("REDIS_DB", "number", description="Redis database index"),
        # security
        EnvVarDefinition("ALLOWED_ORIGINS", "array", description="Allowed CORS origins"),
        EnvVarDefinition("RATE_LIMIT_MAX", "number", description="Rate limit maximum requests"),
        # third-party
        EnvVarDefinition("SENTRY_DSN", description="Sentry DSN for error tracking"),
        EnvVarDefinition("GA_MEASUREMENT_ID", description="Google Analytics measurement ID"),
    )


def definitions_by_name(environment: str) -> dict[str, EnvVarDefinition]:
    return {item.name: item for item in env_var_definitions(environment)}


__all__ = ["definitions_by_name", "env_var_definitions"]
