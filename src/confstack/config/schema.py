"""
confstack — configuration schema and validation.

File: src/confstack/config/schema.py
Last updated: 2026-02-12

Purpose
- Describe the application configuration shape as plain data and check trees against it.

What should be included in this file
- ``Field`` / ``Section`` declarations and the built-in application schema.
- The ``SchemaValidator`` protocol any validator must satisfy.
- A small interpreter that fills defaults, strips unknown keys, and reports every issue.

Functional requirements
- Validation reports every failure as ``"<dot.path>: <message>"``; nothing is dropped.
- Sections can be validated independently through ``section_validator``.

Non-functional requirements
- Keep rules deterministic and easy to audit.
- Never mutate the candidate tree.
"""

from __future__ import annotations

import copy
import math
import re
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass, field
from typing import Any, Final, Literal, Protocol, runtime_checkable
from urllib.parse import urlparse

from confstack.config.values import MISSING, ConfigTree

FieldKind = Literal["string", "integer", "number", "boolean", "list", "mapping", "any"]
Presence = Literal["default", "optional", "required"]

_EMAIL_PATTERN: Final[re.Pattern[str]] = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
_INVALID: Final[object] = object()


@dataclass(frozen=True, slots=True)
class Field:
    """Declared constraints for one leaf value."""

    kind: FieldKind | tuple[FieldKind, ...]
    required: bool = False
    default: Any = MISSING
    choices: tuple[str, ...] = ()
    minimum: float | None = None
    maximum: float | None = None
    min_length: int | None = None
    fmt: Literal["url", "email"] | None = None
    items: FieldKind | None = None
    description: str = ""


@dataclass(frozen=True, slots=True)
class Section:
    """A nested mapping of fields.

    ``presence`` decides what happens when the section is absent: ``default``
    builds it from field defaults, ``optional`` leaves it out, and ``required``
    reports an issue.
    """

    fields: Mapping[str, Field | Section]
    presence: Presence = "default"
    description: str = ""


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str

    def render(self) -> str:
        return f"{self.path or '<root>'}: {self.message}"


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    """Result of validating a candidate tree."""

    valid: bool
    data: ConfigTree | None
    errors: tuple[str, ...] = field(default=())

    @classmethod
    def from_issues(
        cls, data: ConfigTree | None, issues: tuple[ConfigValidationIssue, ...]
    ) -> ValidationOutcome:
        if issues:
            return cls(valid=False, data=None, errors=tuple(item.render() for item in issues))
        return cls(valid=True, data=data, errors=())


@runtime_checkable
class SchemaValidator(Protocol):
    """Anything that can check a tree and hand out per-section validators.

    ``validate`` may return the outcome directly or an awaitable resolving to it.
    """

    def validate(
        self, candidate: Mapping[str, Any]
    ) -> ValidationOutcome | Awaitable[ValidationOutcome]: ...

    def section_validator(self, name: str) -> SchemaValidator | None: ...


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


class BuiltinSchemaValidator:
    """Interpret a ``Section`` declaration against candidate trees."""

    __slots__ = ("_schema", "_prefix")

    def __init__(self, schema: Section | None = None, *, prefix: str = "") -> None:
        self._schema = APPLICATION_SCHEMA if schema is None else schema
        self._prefix = prefix

    @property
    def schema(self) -> Section:
        return self._schema

    def validate(self, candidate: Mapping[str, Any]) -> ValidationOutcome:
        issues = _IssueCollector()
        normalized = _validate_section(self._schema, candidate, self._prefix, issues)
        return ValidationOutcome.from_issues(normalized, issues.items())

    def section_validator(self, name: str) -> BuiltinSchemaValidator | None:
        spec = self._schema.fields.get(name)
        if not isinstance(spec, Section):
            return None
        return BuiltinSchemaValidator(spec, prefix=_join(self._prefix, name))


def _validate_section(
    section: Section,
    value: object,
    path: str,
    issues: _IssueCollector,
) -> ConfigTree | None:
    payload = _as_object(value, path, issues)
    if payload is None:
        return None

    out: ConfigTree = {}
    for key, spec in section.fields.items():
        key_path = _join(path, key)
        raw = payload.get(key, MISSING)
        if raw is None:
            raw = MISSING

        if isinstance(spec, Section):
            if raw is MISSING:
                if spec.presence == "required":
                    issues.add(key_path, "missing required section")
                elif spec.presence == "default":
                    out[key] = _validate_section(spec, {}, key_path, issues)
                continue
            nested = _validate_section(spec, raw, key_path, issues)
            if nested is not None:
                out[key] = nested
            continue

        if raw is MISSING:
            if spec.default is not MISSING:
                out[key] = copy.deepcopy(spec.default)
            elif spec.required:
                issues.add(key_path, "missing required field")
            continue

        parsed = _validate_field(spec, raw, key_path, issues)
        if parsed is not _INVALID:
            out[key] = parsed
    return out


def _validate_field(spec: Field, value: object, path: str, issues: _IssueCollector) -> Any:
    kinds = spec.kind if isinstance(spec.kind, tuple) else (spec.kind,)
    kind = next((item for item in kinds if _matches_kind(item, value)), None)
    if kind is None:
        expected = " or ".join(kinds)
        issues.add(path, f"expected {expected}, got {type(value).__name__}")
        return _INVALID

    if kind == "string":
        return _check_string(spec, value, path, issues)
    if kind in ("integer", "number"):
        return _check_number(spec, value, path, issues)
    if kind == "list":
        return _check_list(spec, value, path, issues)
    if kind == "mapping":
        return copy.deepcopy(dict(value))  # type: ignore[call-overload]
    return copy.deepcopy(value)


def _matches_kind(kind: FieldKind, value: object) -> bool:
    if kind == "string":
        return isinstance(value, str)
    if kind == "integer":
        return isinstance(value, int) and not isinstance(value, bool)
    if kind == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if kind == "boolean":
        return isinstance(value, bool)
    if kind == "list":
        return isinstance(value, list)
    if kind == "mapping":
        return isinstance(value, Mapping)
    return True


def _check_string(spec: Field, value: str, path: str, issues: _IssueCollector) -> Any:
    if spec.min_length is not None and len(value) < spec.min_length:
        if spec.min_length == 1:
            issues.add(path, "must not be empty")
        else:
            issues.add(path, f"must be at least {spec.min_length} characters")
        return _INVALID
    if spec.choices and value not in spec.choices:
        expected = ", ".join(spec.choices)
        issues.add(path, f"invalid value {value!r}; expected one of: {expected}")
        return _INVALID
    if spec.fmt == "url" and not _looks_like_url(value):
        issues.add(path, "must be a valid URL")
        return _INVALID
    if spec.fmt == "email" and not _EMAIL_PATTERN.fullmatch(value):
        issues.add(path, "must be a valid email address")
        return _INVALID
    return value


def _check_number(spec: Field, value: int | float, path: str, issues: _IssueCollector) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        issues.add(path, "must be finite")
        return _INVALID
    if spec.minimum is not None and value < spec.minimum:
        issues.add(path, f"must be >= {_render_bound(spec.minimum)}")
        return _INVALID
    if spec.maximum is not None and value > spec.maximum:
        issues.add(path, f"must be <= {_render_bound(spec.maximum)}")
        return _INVALID
    return value


def _check_list(spec: Field, value: list[Any], path: str, issues: _IssueCollector) -> Any:
    if spec.items is None:
        return copy.deepcopy(value)
    ok = True
    for index, item in enumerate(value):
        if not _matches_kind(spec.items, item):
            issues.add(f"{path}.{index}", f"expected {spec.items}, got {type(item).__name__}")
            ok = False
    return copy.deepcopy(value) if ok else _INVALID


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _looks_like_url(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme) and bool(parsed.netloc or parsed.path)


def _render_bound(bound: float) -> str:
    return str(int(bound)) if float(bound).is_integer() else str(bound)


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


# ---------------------------------------------------------------------------
# Application schema
# ---------------------------------------------------------------------------

_LOG_LEVELS: Final[tuple[str, ...]] = ("error", "warn", "info", "debug", "trace")
_CACHE_STRATEGIES: Final[tuple[str, ...]] = ("memory", "redis", "hybrid")


def _string(default: Any = MISSING, **kwargs: Any) -> Field:
    return Field("string", default=default, **kwargs)


def _integer(default: Any = MISSING, **kwargs: Any) -> Field:
    return Field("integer", default=default, **kwargs)


def _flag(default: bool) -> Field:
    return Field("boolean", default=default)


def _strings(default: Any = MISSING) -> Field:
    return Field("list", default=default, items="string")


_APP = Section(
    {
        "name": _string("confstack-app"),
        "version": _string("1.0.0"),
        "description": _string("Application configured by confstack"),
        "url": _string("http://localhost:3000", fmt="url"),
        "apiUrl": _string("http://localhost:3000/api", fmt="url"),
        "supportEmail": _string("support@example.com", fmt="email"),
        "adminEmail": _string("admin@example.com", fmt="email"),
        "companyName": _string("Example Inc."),
    },
    description="Application metadata",
)

_ENV = Section(
    {
        "NODE_ENV": _string(
            "development", choices=("development", "staging", "production", "test")
        ),
        "DEBUG": _flag(False),
        "LOG_LEVEL": _string("info", choices=_LOG_LEVELS),
        "PORT": _integer(3000, minimum=1, maximum=65535),
        "HOST": _string("localhost"),
        "TIMEZONE": _string("UTC"),
    },
    description="Runtime environment",
)

_FEATURES = Section(
    {
        "authentication": _flag(True),
        "billing": _flag(True),
        "subscriptions": _flag(True),
        "fileUploads": _flag(True),
        "emailNotifications": _flag(True),
        "multiTenant": _flag(False),
        "apiRateLimiting": _flag(True),
        "advancedAnalytics": _flag(False),
        "realTimeFeatures": _flag(False),
        "webhookSupport": _flag(True),
        "aiIntegration": _flag(False),
        "advancedReporting": _flag(False),
        "customDomains": _flag(False),
        "whiteLabeling": _flag(False),
        "debugMode": _flag(False),
        "performanceTracking": _flag(True),
        "errorReporting": _flag(True),
        "metricsCollection": _flag(True),
    },
    description="Feature flags",
)

_SECURITY = Section(
    {
        "cors": Section(
            {
                "enabled": _flag(True),
                "origin": Field(
                    ("string", "list", "boolean"), default=["http://localhost:3000"]
                ),
                "credentials": _flag(True),
                "methods": _strings(["GET", "POST", "PUT", "DELETE", "OPTIONS"]),
                "allowedHeaders": _strings(["Content-Type", "Authorization"]),
            }
        ),
        "rateLimit": Section(
            {
                "enabled": _flag(True),
                "windowMs": _integer(900_000, minimum=1000),
                "maxRequests": _integer(100, minimum=1),
                "skipSuccessfulRequests": _flag(False),
                "skipFailedRequests": _flag(False),
            }
        ),
        "csp": Section(
            {
                "enabled": _flag(True),
                "directives": Field("mapping", default={"defaultSrc": ["'self'"]}),
            }
        ),
        "https": Section(
            {
                "enforced": _flag(False),
                "hsts": Section(
                    {
                        "enabled": _flag(False),
                        "maxAge": _integer(31_536_000, minimum=0),
                        "includeSubDomains": _flag(True),
                        "preload": _flag(False),
                    }
                ),
            }
        ),
        "api": Section(
            {
                "keyRotation": _flag(False),
                "requestSigning": _flag(False),
                "ipWhitelist": _strings([]),
                "maxPayloadSize": _string("10mb"),
            }
        ),
    },
    description="HTTP security policy",
)

_CACHE = Section(
    {
        "enabled": _flag(True),
        "defaultTtl": _integer(3600, minimum=0),
        "memory": Section(
            {
                "enabled": _flag(True),
                "maxSize": _integer(1000, minimum=1),
                "ttl": _integer(3600, minimum=0),
            }
        ),
        "redis": Section(
            {
                "enabled": _flag(False),
                "url": _string(),
                "host": _string("localhost"),
                "port": _integer(6379, minimum=1, maximum=65535),
                "password": _string(),
                "db": _integer(0, minimum=0),
                "keyPrefix": _string("confstack:cache:"),
                "ttl": _integer(3600, minimum=0),
            }
        ),
        "strategies": Section(
            {
                "api": _string("memory", choices=_CACHE_STRATEGIES),
                "database": _string("memory", choices=_CACHE_STRATEGIES),
                "sessions": _string("memory", choices=("memory", "redis")),
                "static": _string("memory", choices=("memory", "redis", "cdn")),
            }
        ),
    },
    description="Caching",
)

_API = Section(
    {
        "versioning": Section(
            {
                "enabled": _flag(True),
                "strategy": _string("url", choices=("url", "header", "query")),
                "defaultVersion": _string("v1"),
                "supportedVersions": _strings(["v1"]),
                "deprecationNotice": _flag(True),
            }
        ),
        "documentation": Section(
            {
                "enabled": _flag(True),
                "path": _string("/api/docs"),
                "ui": _string("swagger", choices=("swagger", "redoc", "rapidoc")),
            }
        ),
        "pagination": Section(
            {
                "enabled": _flag(True),
                "defaultLimit": _integer(25, minimum=1),
                "maxLimit": _integer(100, minimum=1),
                "strategy": _string("offset", choices=("offset", "cursor")),
            }
        ),
        "response": Section(
            {
                "envelope": _flag(True),
                "timestamping": _flag(True),
                "requestId": _flag(True),
                "camelCase": _flag(True),
            }
        ),
    },
    description="HTTP API behaviour",
)

_DATABASE = Section(
    {
        "url": _string(required=True, min_length=1),
        "password": _string(),
        "pool": Section(
            {
                "min": _integer(2, minimum=0),
                "max": _integer(10, minimum=1),
            }
        ),
        "ssl": Section(
            {
                "enabled": _flag(False),
                "rejectUnauthorized": _flag(True),
            }
        ),
        "queryTimeout": _integer(30_000, minimum=0),
        "logging": _flag(False),
    },
    presence="required",
    description="Primary database",
)

_AUTH = Section(
    {
        "jwt": Section(
            {
                "secret": _string(required=True, min_length=32),
                "expiresIn": _string("24h"),
                "issuer": _string("confstack"),
                "audience": _string(),
                "refreshTokenExpiresIn": _string("7d"),
            },
            presence="required",
        ),
        "session": Section(
            {
                "provider": _string("memory", choices=("memory", "redis", "database")),
                "secret": _string(required=True, min_length=32),
                "maxAge": _integer(86_400, minimum=300),
                "secure": _flag(True),
                "httpOnly": _flag(True),
                "sameSite": _string("lax", choices=("strict", "lax", "none")),
            },
            presence="required",
        ),
        "password": Section(
            {
                "minLength": _integer(8, minimum=8),
                "maxAttempts": _integer(5, minimum=1),
                "lockoutDuration": _integer(300, minimum=60),
            }
        ),
    },
    presence="required",
    description="Authentication",
)

_EMAIL = Section(
    {
        "provider": _string(
            "smtp",
            choices=("smtp", "sendgrid", "mailgun", "postmark", "aws-ses", "resend", "console"),
        ),
        "smtp": Section(
            {
                "host": _string(required=True, min_length=1),
                "port": _integer(587, minimum=1, maximum=65535),
                "secure": _flag(False),
                "auth": Section(
                    {
                        "user": _string(required=True, min_length=1),
                        "pass": _string(required=True, min_length=1),
                    },
                    presence="optional",
                ),
            },
            presence="optional",
        ),
        "sendgrid": Section(
            {
                "apiKey": _string(required=True, min_length=1),
                "sandboxMode": _flag(False),
            },
            presence="optional",
        ),
        "mailgun": Section(
            {
                "apiKey": _string(required=True, min_length=1),
                "domain": _string(required=True, min_length=1),
            },
            presence="optional",
        ),
        "sender": Section(
            {
                "name": _string("confstack"),
                "email": _string(required=True, fmt="email"),
                "replyTo": _string(fmt="email"),
            },
            presence="required",
        ),
    },
    presence="required",
    description="Outbound email",
)

_STORAGE = Section(
    {
        "provider": _string(
            "local", choices=("local", "aws-s3", "google-cloud", "azure-blob", "cloudflare-r2")
        ),
        "local": Section(
            {
                "uploadPath": _string("./uploads"),
                "publicPath": _string("/uploads"),
            }
        ),
        "awsS3": Section(
            {
                "accessKeyId": _string(min_length=1),
                "secretAccessKey": _string(min_length=1),
                "region": _string("us-east-1"),
                "bucket": _string(min_length=1),
                "endpoint": _string(fmt="url"),
            },
            presence="optional",
        ),
        "maxFileSize": _integer(10 * 1024 * 1024, minimum=1),
    },
    presence="required",
    description="File storage",
)

_BILLING = Section(
    {
        "provider": _string("stripe", choices=("stripe", "paypal", "square", "none")),
        "testMode": _flag(True),
        "currency": _string("usd"),
        "stripe": Section(
            {
                "publishableKey": _string(min_length=1),
                "secretKey": _string(required=True, min_length=1),
                "webhookSecret": _string(required=True, min_length=1),
                "apiVersion": _string("2023-10-16"),
            },
            presence="optional",
        ),
    },
    presence="required",
    description="Billing and payments",
)

_INTEGRATIONS = Section(
    {
        "analytics": Field("mapping", default={}),
        "development": Field("mapping", default={}),
        "communication": Field("mapping", default={}),
    },
    description="Third-party integrations",
)

_MONITORING = Section(
    {
        "enabled": _flag(False),
        "environment": _string("development"),
        "logging": Section(
            {
                "level": _string("info", choices=_LOG_LEVELS),
                "format": _string("json", choices=("json", "text")),
            }
        ),
        "healthChecks": Section(
            {
                "enabled": _flag(True),
                "path": _string("/health"),
                "interval": _integer(30_000, minimum=1000),
            }
        ),
    },
    description="Monitoring and health checks",
)

APPLICATION_SCHEMA: Final[Section] = Section(
    {
        "app": _APP,
        "env": _ENV,
        "features": _FEATURES,
        "security": _SECURITY,
        "cache": _CACHE,
        "api": _API,
        "database": _DATABASE,
        "auth": _AUTH,
        "email": _EMAIL,
        "storage": _STORAGE,
        "billing": _BILLING,
        "integrations": _INTEGRATIONS,
        "monitoring": _MONITORING,
    },
    presence="required",
    description="Complete application configuration",
)


__all__ = [
    "APPLICATION_SCHEMA",
    "BuiltinSchemaValidator",
    "ConfigValidationIssue",
    "Field",
    "FieldKind",
    "SchemaValidator",
    "Section",
    "ValidationOutcome",
]
