"""
confstack — unit tests for secret strength scoring and the secret audit

File: tests/unit/security/test_secrets_audit.py
Last updated: 2026-02-12

What this test file should cover
- Score bands for short, repetitive, dictionary, and mixed secrets.
- Audit findings for weak, placeholder, and development-looking values.
- Required secrets and blank-as-absent handling.
- Log events carry counts, never values.
"""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from confstack.security.secrets_audit import audit_secrets, score_secret

STRONG_SECRET = "Jw7#kLq9!Zr2@Vx5$Mn8%Bt4^Hc6&Pf3"


def test_long_mixed_secret_is_strong() -> None:
    result = score_secret(STRONG_SECRET)

    assert result.score == 100
    assert result.strength == "strong"
    assert result.valid
    assert result.errors == ()


def test_sixteen_character_three_type_secret_is_medium() -> None:
    result = score_secret("Abcdefghijk12345")

    assert result.score == 62
    assert result.strength == "medium"
    assert result.valid


@pytest.mark.parametrize(
    ("secret", "expected_score"),
    [
        ("password", 6),
        ("aaaaaaaa", 0),
        ("Ab1!", 48),
    ],
)
def test_weak_secrets_fail(secret: str, expected_score: int) -> None:
    result = score_secret(secret)

    assert result.score == expected_score
    assert result.strength == "weak"
    assert not result.valid
    assert result.suggestions


def test_repeated_chunk_is_a_common_pattern() -> None:
    result = score_secret("Ab1!Ab1!Ab1!Ab1!")

    assert "contains a common pattern" in result.errors
    assert not result.valid


def test_production_audit_flags_weak_and_development_values() -> None:
    report = audit_secrets(
        {
            "DATABASE_URL": "postgresql://localhost:5432/app",
            "JWT_SECRET": STRONG_SECRET,
            "REDIS_PASSWORD": "",
            "SESSION_SECRET": "Dev#Session9Value!Zq",
            "STRIPE_SECRET_KEY": "short",
        },
        environment="production",
    )

    assert not report.secure
    assert report.checked == ("JWT_SECRET", "SESSION_SECRET", "STRIPE_SECRET_KEY")
    assert report.findings == (
        "SESSION_SECRET contains weak/common values",
        "SESSION_SECRET appears to contain development values in production",
        "STRIPE_SECRET_KEY is not strong enough (score: 20)",
    )


def test_development_markers_only_matter_in_production() -> None:
    values = {"JWT_SECRET": "Dev#Session9Value!Zq", "SESSION_SECRET": STRONG_SECRET}

    report = audit_secrets(values, environment="staging")

    assert report.findings == ("JWT_SECRET contains weak/common values",)


@pytest.mark.parametrize("values", [{}, {"JWT_SECRET": "  ", "SESSION_SECRET": None}])
def test_absent_or_blank_required_secrets_are_findings(values: dict[str, str | None]) -> None:
    report = audit_secrets(values, environment="production")

    assert report.findings == (
        "Missing required secret: JWT_SECRET",
        "Missing required secret: SESSION_SECRET",
    )
    assert report.checked == ()


def test_strong_secrets_pass_and_log_counts_only() -> None:
    values = {
        "JWT_SECRET": STRONG_SECRET,
        "SESSION_SECRET": "Sx4!Gd8@Kp2#Wm6$Rt9%Yh3^Nb7&Qz5*",
    }

    with capture_logs() as logs:
        report = audit_secrets(values, environment="production")

    assert report.secure
    assert report.to_dict()["findings"] == []
    assert logs == [
        {
            "event": "secrets_audit_completed",
            "log_level": "info",
            "environment": "production",
            "checked_count": 2,
            "finding_count": 0,
        }
    ]
    assert STRONG_SECRET not in repr(logs)
