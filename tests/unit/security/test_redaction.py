"""
confstack — unit tests for secret redaction

File: tests/unit/security/test_redaction.py
Last updated: 2026-02-12

Purpose
- Validate that exports and log payloads never carry secret values.

What this test file should cover
- Path-based redaction of the built-in sensitive field list.
- Key-based redaction for arbitrary nested payloads.
- Non-sensitive fields remain identical and inputs are never mutated.
"""

from __future__ import annotations

import copy
import json
from typing import Any

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from confstack.constants import REDACTED_VALUE
from confstack.security.redaction import (
    SENSITIVE_FIELD_PATHS,
    is_sensitive_key,
    redact_paths,
    redact_structure,
)

_SECRET = st.text(
    alphabet=st.characters(min_codepoint=0x41, max_codepoint=0x7A), min_size=12, max_size=24
)


def _tree(database_url: str, jwt_secret: str) -> dict[str, Any]:
    return {
        "database": {"url": database_url, "pool": {"min": 2, "max": 10}},
        "auth": {"jwt": {"secret": jwt_secret, "expiresIn": "24h"}},
        "env": {"PORT": 3000},
        "features": {"billing": True},
    }


def test_redact_paths_replaces_only_listed_existing_fields() -> None:
    tree = _tree("postgresql://user:pw@db/app", "j" * 40)
    tree["billing"] = {"stripe": {"secretKey": None, "publishableKey": "pk_test"}}

    redacted = redact_paths(tree)

    assert redacted["database"]["url"] == REDACTED_VALUE
    assert redacted["auth"]["jwt"]["secret"] == REDACTED_VALUE
    assert redacted["auth"]["jwt"]["expiresIn"] == "24h"
    assert redacted["billing"]["stripe"] == {"secretKey": None, "publishableKey": "pk_test"}
    assert "email" not in redacted
    assert redacted["env"] == tree["env"]


def test_redact_paths_does_not_mutate_input() -> None:
    tree = _tree("postgresql://db/app", "j" * 40)
    before = copy.deepcopy(tree)

    redacted = redact_paths(tree)
    redacted["database"]["pool"]["max"] = 1

    assert tree == before


def test_redact_paths_accepts_custom_paths_and_replacement() -> None:
    redacted = redact_paths(
        {"a": {"b": "x"}, "c": "y"}, ["a.b", "a.missing.deeper", "c.d"], replacement="<hidden>"
    )

    assert redacted == {"a": {"b": "<hidden>"}, "c": "y"}


def test_sensitive_paths_cover_core_secrets() -> None:
    for path in ("database.url", "auth.jwt.secret", "auth.session.secret"):
        assert path in SENSITIVE_FIELD_PATHS


@pytest.mark.parametrize(
    "key",
    ["password", "apiKey", "secretAccessKey", "db_password", "JWT_SECRET", "Authorization"],
)
def test_sensitive_keys_are_detected(key: str) -> None:
    assert is_sensitive_key(key)


@pytest.mark.parametrize("key", ["environment", "secret_name", "port", "tokenizer", ""])
def test_ordinary_keys_are_not_sensitive(key: str) -> None:
    assert not is_sensitive_key(key)


def test_redact_structure_walks_nested_payloads() -> None:
    payload = {
        "event": "config_loaded",
        "smtp": {"user": "mailer", "pass": "p4ss"},
        "providers": [{"apiKey": "abc"}, {"name": "x"}],
        "token": None,
    }

    assert redact_structure(payload) == {
        "event": "config_loaded",
        "smtp": {"user": "mailer", "pass": REDACTED_VALUE},
        "providers": [{"apiKey": REDACTED_VALUE}, {"name": "x"}],
        "token": None,
    }


@settings(max_examples=50, derandomize=True, deadline=None)
@given(database_url=_SECRET, jwt_secret=_SECRET)
def test_property_redacted_export_never_contains_secrets(
    database_url: str, jwt_secret: str
) -> None:
    tree = _tree(database_url, jwt_secret)

    rendered = json.dumps(redact_paths(tree))
    redacted = json.loads(rendered)

    assert database_url not in rendered
    assert jwt_secret not in rendered
    assert redacted["env"] == tree["env"]
    assert redacted["features"] == tree["features"]
    assert redacted["database"]["pool"] == tree["database"]["pool"]
