"""
confstack — secret strength scoring and environment secret audit

File: src/confstack/security/secrets_audit.py
Last updated: 2026-02-12

Purpose
- Score individual secrets and flag weak or placeholder credentials before a
  deployment is declared valid.

What should be included in this file
- ``score_secret``: length, character-variety, and common-pattern scoring.
- ``audit_secrets``: per-variable findings for every secret-looking variable.

Functional requirements
- A variable is secret-looking when its name contains SECRET, KEY, PASSWORD, or
  TOKEN (case-insensitive).
- Blank values count as absent; ``JWT_SECRET`` and ``SESSION_SECRET`` must be
  present.
- In production, values that look like development or test values are findings.

Non-functional requirements
- Findings and log events name variables only; values never leave this module.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final, Literal

import structlog

Strength = Literal["weak", "medium", "strong"]

MIN_SECRET_LENGTH: Final[int] = 8
MIN_CHARACTER_TYPES: Final[int] = 3
ACCEPTABLE_SCORE: Final[int] = 60
STRONG_SCORE: Final[int] = 80

SECRET_NAME_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"SECRET|KEY|PASSWORD|TOKEN", re.IGNORECASE
)
REQUIRED_SECRETS: Final[tuple[str, ...]] = ("JWT_SECRET", "SESSION_SECRET")
WEAK_VALUES: Final[tuple[str, ...]] = (
    "password",
    "secret",
    "admin",
    "123456",
    "test",
    "dev",
    "localhost",
    "changeme",
    "default",
    "example",
    "demo",
    "temp",
)
DEVELOPMENT_MARKERS: Final[tuple[str, ...]] = ("dev", "test", "localhost")

_SYMBOLS: Final[frozenset[str]] = frozenset("!@#$%^&*()_+-=[]{}|;:,.<>?")
_COMMON_PATTERNS: Final[tuple[tuple[re.Pattern[str], str], ...]] = (
    (re.compile(r"(.)\1{2,}"), "Avoid runs of the same character"),
    (
        re.compile(r"123456|654321|qwerty|password|admin|secret", re.IGNORECASE),
        "Avoid keyboard sequences and dictionary words",
    ),
    (re.compile(r"^(.+)\1+$"), "Avoid repeating one short chunk"),
)


@dataclass(frozen=True, slots=True)
class SecretStrength:
    score: int
    strength: Strength
    errors: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors and self.score >= ACCEPTABLE_SCORE


@dataclass(frozen=True, slots=True)
class SecretAuditReport:
    """Outcome of ``audit_secrets``; ``checked`` lists the audited variable names."""

    environment: str
    findings: tuple[str, ...] = ()
    checked: tuple[str, ...] = ()

    @property
    def secure(self) -> bool:
        return not self.findings

    def to_dict(self) -> dict[str, Any]:
        return {
            "environment": self.environment,
            "secure": self.secure,
            "findings": list(self.findings),
            "checked": list(self.checked),
        }


def score_secret(secret: str) -> SecretStrength:
    """Score ``secret`` from 0 to 100.

    Length contributes up to 50 points, each character type present (lowercase,
    uppercase, digit, symbol) adds 10, and secrets longer than 16 characters get
    a 10 point bonus. Each common pattern found costs 20 points.
    """

    errors: list[str] = []
    suggestions: list[str] = []

    if len(secret) < MIN_SECRET_LENGTH:
        errors.append(f"must be at least {MIN_SECRET_LENGTH} characters long")
        suggestions.append("Use a longer secret (32+ characters recommended)")

    variety = sum(
        (
            any(char.islower() for char in secret),
            any(char.isupper() for char in secret),
            any(char.isdigit() for char in secret),
            any(char in _SYMBOLS for char in secret),
        )
    )
    if variety < MIN_CHARACTER_TYPES:
        errors.append(
            f"must mix at least {MIN_CHARACTER_TYPES} character types "
            "(lowercase, uppercase, digits, symbols)"
        )
        suggestions.append("Mix lowercase, uppercase, digits, and symbols")

    score = min(len(secret) * 2, 50) + variety * 10
    if len(secret) > 16:
        score += 10

    for pattern, suggestion in _COMMON_PATTERNS:
        if pattern.search(secret):
            errors.append("contains a common pattern")
            suggestions.append(suggestion)
            score -= 20

    score = max(0, min(100, score))
    strength: Strength
    if score >= STRONG_SCORE:
        strength = "strong"
    elif score >= ACCEPTABLE_SCORE:
        strength = "medium"
    else:
        strength = "weak"
    return SecretStrength(
        score=score,
        strength=strength,
        errors=tuple(errors),
        suggestions=tuple(suggestions),
    )


def audit_secrets(
    values: Mapping[str, str | None],
    *,
    environment: str,
    logger: Any | None = None,
) -> SecretAuditReport:
    """Audit every secret-looking variable in ``values`` for ``environment``."""

    log = logger if logger is not None else structlog.get_logger(__name__)
    findings: list[str] = []
    checked: list[str] = []
    production = environment == "production"

    for name in sorted(values):
        raw = values[name]
        if not SECRET_NAME_PATTERN.search(name) or raw is None or not raw.strip():
            continue
        checked.append(name)
        lowered = raw.lower()
        if any(weak in lowered for weak in WEAK_VALUES):
            findings.append(f"{name} contains weak/common values")
        strength = score_secret(raw)
        if strength.strength == "weak":
            findings.append(f"{name} is not strong enough (score: {strength.score})")
        if production and any(marker in lowered for marker in DEVELOPMENT_MARKERS):
            findings.append(f"{name} appears to contain development values in production")

    for name in REQUIRED_SECRETS:
        raw = values.get(name)
        if raw is None or not raw.strip():
            findings.append(f"Missing required secret: {name}")

    log.info(
        "secrets_audit_completed",
        environment=environment,
        checked_count=len(checked),
        finding_count=len(findings),
    )
    return SecretAuditReport(
        environment=environment, findings=tuple(findings), checked=tuple(checked)
    )


__all__ = [
    "ACCEPTABLE_SCORE",
    "REQUIRED_SECRETS",
    "SECRET_NAME_PATTERN",
    "SecretAuditReport",
    "SecretStrength",
    "audit_secrets",
    "score_secret",
]
