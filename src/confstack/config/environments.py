"""
confstack — built-in environment profiles.

File: src/confstack/config/environments.py
Last updated: 2026-02-12

Purpose
- Ship development, test, staging, and production profiles as plain data.

What should be included in this file
- A shared base tree carrying no credentials, plus one overlay per environment.
- Development and test bring their own throwaway secrets and database URLs.
- Per-environment variable defaults and required variable lists.

Functional requirements
- Development and test defaults validate without any environment variables.
- Staging and production refuse to load without their secrets.
"""

from __future__ import annotations

from typing import Any, Final

from confstack.config.merge import merge_config
from confstack.config.profiles import ConfigProfile, ProfileRegistry

_BASE_DEFAULTS: Final[dict[str, Any]] = {
    "app": {
        "name": "confstack-app",
        "version": "1.0.0",
        "url": "http://localhost:3000",
        "apiUrl": "http://localhost:3000/api",
    },
    "env": {
        "NODE_ENV": "development",
        "DEBUG": False,
        "LOG_LEVEL": "info",
        "PORT": 3000,
        "HOST": "localhost",
        "TIMEZONE": "UTC",
    },
    "features": {},
    "security": {
        "cors": {"origin": ["http://localhost:3000", "http://localhost:3001"]},
    },
    "database": {"pool": {"min": 2, "max": 10}},
    "auth": {
        "jwt": {"expiresIn": "24h"},
        "session": {"secure": False},
    },
    "email": {"provider": "console", "sender": {"name": "confstack"}},
    "storage": {"provider": "local"},
    "billing": {"provider": "stripe", "testMode": True},
    "integrations": {},
    "monitoring": {"enabled": False, "environment": "development"},
}

DEVELOPMENT_PROFILE: Final[ConfigProfile] = ConfigProfile(
    environment="development",
    defaults=merge_config(
        _BASE_DEFAULTS,
        {
            "env": {"DEBUG": True, "LOG_LEVEL": "debug"},
            "features": {"debugMode": True, "performanceTracking": False},
            "database": {
                "url": "postgresql://localhost:5432/app_development",
                "logging": True,
            },
            "auth": {
                "jwt": {"secret": "development-jwt-secret-change-me-0123456789"},
                "session": {"secret": "development-session-secret-change-me-0123"},
            },
            "email": {"sender": {"email": "noreply@localhost.localdomain"}},
        },
    ),
    env_var_defaults={
        "NODE_ENV": "development",
        "LOG_LEVEL": "debug",
        "DEBUG": "true",
    },
)

TEST_PROFILE: Final[ConfigProfile] = ConfigProfile(
    environment="test",
    defaults=merge_config(
        _BASE_DEFAULTS,
        {
            "env": {"NODE_ENV": "test", "LOG_LEVEL": "error", "PORT": 3001},
            "features": {
                "billing": False,
                "emailNotifications": False,
                "apiRateLimiting": False,
                "performanceTracking": False,
                "errorReporting": False,
                "metricsCollection": False,
            },
            "security": {"rateLimit": {"enabled": False}},
            "cache": {"enabled": False},
            "database": {"url": "postgresql://localhost:5432/app_test", "pool": {"min": 1, "max": 5}},
            "auth": {
                "jwt": {"secret": "test-jwt-secret-for-automated-suites-only"},
                "session": {"secret": "test-session-secret-for-automated-suites"},
            },
            "email": {"provider": "console", "sender": {"email": "noreply@test.localdomain"}},
            "monitoring": {"environment": "test"},
        },
    ),
    env_var_defaults={
        "NODE_ENV": "test",
        "PORT": "3001",
        "LOG_LEVEL": "error",
        "DEBUG": "false",
        "JWT_SECRET": "test-jwt-secret-for-automated-suites-only",
        "SESSION_SECRET": "test-session-secret-for-automated-suites",
    },
)

STAGING_PROFILE: Final[ConfigProfile] = ConfigProfile(
    environment="staging",
    defaults=merge_config(
        _BASE_DEFAULTS,
        {
            "app": {
                "url": "https://staging.example.com",
                "apiUrl": "https://staging-api.example.com",
            },
            "env": {"NODE_ENV": "staging", "HOST": "0.0.0.0"},
            "features": {"advancedAnalytics": True},
            "security": {
                "cors": {"origin": ["https://staging.example.com"]},
                "rateLimit": {"maxRequests": 200},
                "https": {"enforced": True},
            },
            "database": {"ssl": {"enabled": True}, "pool": {"min": 2, "max": 10}},
            "auth": {"session": {"secure": True}},
            "email": {"provider": "smtp", "sender": {"email": "noreply@staging.example.com"}},
            "storage": {"provider": "aws-s3"},
            "monitoring": {"enabled": True, "environment": "staging"},
        },
    ),
    env_var_defaults={
        "NODE_ENV": "staging",
        "EMAIL_PROVIDER": "smtp",
        "STORAGE_PROVIDER": "aws-s3",
        "S3_BUCKET": "app-staging-uploads",
        "REDIS_DB": "1",
        "RATE_LIMIT_MAX": "200",
    },
    required_env_vars=(
        "DATABASE_URL",
        "JWT_SECRET",
        "SESSION_SECRET",
        "STRIPE_SECRET_KEY",
        "STRIPE_WEBHOOK_SECRET",
        "APP_URL",
    ),
)

PRODUCTION_PROFILE: Final[ConfigProfile] = ConfigProfile(
    environment="production",
    defaults=merge_config(
        _BASE_DEFAULTS,
        {
            "app": {"url": "https://app.example.com", "apiUrl": "https://api.example.com"},
            "env": {"NODE_ENV": "production", "HOST": "0.0.0.0"},
            "features": {"advancedAnalytics": True},
            "security": {
                "cors": {"origin": ["https://app.example.com"]},
                "https": {
                    "enforced": True,
                    "hsts": {"enabled": True, "preload": True},
                },
            },
            "cache": {
                "memory": {"enabled": False},
                "redis": {"enabled": True, "keyPrefix": "confstack:prod:cache:"},
                "strategies": {"api": "redis", "database": "redis", "sessions": "redis"},
            },
            "api": {"documentation": {"enabled": False}, "pagination": {"strategy": "cursor"}},
            "database": {
                "ssl": {"enabled": True, "rejectUnauthorized": True},
                "pool": {"min": 5, "max": 20},
            },
            "auth": {"session": {"provider": "redis", "secure": True, "sameSite": "strict"}},
            "email": {"provider": "sendgrid"},
            "storage": {"provider": "aws-s3"},
            "billing": {"testMode": False},
            "monitoring": {
                "enabled": True,
                "environment": "production",
                "logging": {"level": "warn"},
            },
        },
    ),
    env_var_defaults={
        "NODE_ENV": "production",
        "APP_URL": "https://app.example.com",
        "API_URL": "https://api.example.com",
        "DATABASE_URL": "",
        "DB_POOL_MIN": "5",
        "DB_POOL_MAX": "20",
        "JWT_SECRET": "",
        "JWT_EXPIRES_IN": "24h",
        "SESSION_SECRET": "",
        "SESSION_MAX_AGE": "86400",
        "EMAIL_PROVIDER": "sendgrid",
        "FROM_EMAIL": "",
        "FROM_NAME": "confstack",
        "STORAGE_PROVIDER": "aws-s3",
        "AWS_REGION": "us-east-1",
        "STRIPE_SECRET_KEY": "",
        "STRIPE_WEBHOOK_SECRET": "",
        "REDIS_URL": "",
        "ALLOWED_ORIGINS": "https://app.example.com",
        "RATE_LIMIT_MAX": "100",
        "LOG_LEVEL": "info",
    },
    required_env_vars=(
        "DATABASE_URL",
        "JWT_SECRET",
        "SESSION_SECRET",
        "FROM_EMAIL",
        "STRIPE_SECRET_KEY",
        "STRIPE_WEBHOOK_SECRET",
        "APP_URL",
        "API_URL",
    ),
)

BUILTIN_PROFILES: Final[tuple[ConfigProfile, ...]] = (
    DEVELOPMENT_PROFILE,
    TEST_PROFILE,
    STAGING_PROFILE,
    PRODUCTION_PROFILE,
)


def default_registry() -> ProfileRegistry:
    """Return a fresh registry holding the built-in profiles."""

    return ProfileRegistry(BUILTIN_PROFILES)


__all__ = [
    "BUILTIN_PROFILES",
    "DEVELOPMENT_PROFILE",
    "PRODUCTION_PROFILE",
    "STAGING_PROFILE",
    "TEST_PROFILE",
    "default_registry",
]
