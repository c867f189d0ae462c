"""Security helpers: secret redaction for output and logs, and secret strength audits."""

from __future__ import annotations

from confstack.security.redaction import (
    REDACTED_VALUE,
    SENSITIVE_FIELD_PATHS,
    is_sensitive_key,
    redact_paths,
    redact_structure,
)
from confstack.security.secrets_audit import (
    SecretAuditReport,
    SecretStrength,
    audit_secrets,
    score_secret,
)

__all__ = [
    "REDACTED_VALUE",
    "SENSITIVE_FIELD_PATHS",
    "SecretAuditReport",
    "SecretStrength",
    "audit_secrets",
    "is_sensitive_key",
    "redact_paths",
    "redact_structure",
    "score_secret",
]
