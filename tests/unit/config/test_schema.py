"""
confstack — unit tests for the built-in schema validator

File: tests/unit/config/test_schema.py
Last updated: 2026-02-12

Purpose
- Validate that schema declarations are interpreted deterministically.

What this test file should cover
- Default filling, unknown-key stripping, and ``None`` treated as absent.
- Path-qualified error messages for type, length, choice, format, and bounds.
- Section sub-validators and the protocol surface.
- Every built-in profile's default tree validates cleanly.

Non-functional requirements
- Error ordering is stable across runs.
"""

from __future__ import annotations

from typing import Any

import pytest

from confstack.config.environments import BUILTIN_PROFILES, DEVELOPMENT_PROFILE
from confstack.config.schema import (
    BuiltinSchemaValidator,
    ConfigValidationIssue,
    Field,
    SchemaValidator,
    Section,
    ValidationOutcome,
)

_SMALL = Section(
    {
        "name": Field("string", required=True, min_length=1),
        "port": Field("integer", default=3000, minimum=1, maximum=65535),
        "mode": Field("string", default="lax", choices=("strict", "lax")),
        "site": Field("string", fmt="url"),
        "contact": Field("string", fmt="email"),
        "tags": Field("list", default=[], items="string"),
        "nested": Section({"enabled": Field("boolean", default=False)}),
        "extra": Section({"key": Field("string", required=True)}, presence="optional"),
        "must": Section({"value": Field("integer", default=1)}, presence="required"),
    }
)


def _valid_small(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {"name": "svc", "must": {}}
    payload.update(overrides)
    return payload


def test_defaults_are_filled_and_unknown_keys_stripped() -> None:
    outcome = BuiltinSchemaValidator(_SMALL).validate(_valid_small(unknown="x"))

    assert outcome.valid
    assert outcome.errors == ()
    assert outcome.data == {
        "name": "svc",
        "port": 3000,
        "mode": "lax",
        "tags": [],
        "nested": {"enabled": False},
        "must": {"value": 1},
    }


def test_none_is_treated_as_absent() -> None:
    outcome = BuiltinSchemaValidator(_SMALL).validate(_valid_small(port=None, extra=None))

    assert outcome.valid
    assert outcome.data is not None
    assert outcome.data["port"] == 3000
    assert "extra" not in outcome.data


def test_missing_required_field_and_section_are_reported() -> None:
    outcome = BuiltinSchemaValidator(_SMALL).validate({})

    assert not outcome.valid
    assert outcome.data is None
    assert outcome.errors == ("name: missing required field", "must: missing required section")


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"name": 5}, "name: expected string, got int"),
        ({"name": ""}, "name: must not be empty"),
        ({"port": 0}, "port: must be >= 1"),
        ({"port": 70000}, "port: must be <= 65535"),
        ({"port": True}, "port: expected integer, got bool"),
        ({"mode": "loose"}, "mode: invalid value 'loose'; expected one of: strict, lax"),
        ({"site": "not a url"}, "site: must be a valid URL"),
        ({"contact": "nobody"}, "contact: must be a valid email address"),
        ({"tags": ["a", 2]}, "tags.1: expected string, got int"),
        ({"nested": "yes"}, "nested: expected object, got str"),
        ({"extra": {}}, "extra.key: missing required field"),
    ],
)
def test_field_constraints_produce_path_qualified_messages(
    overrides: dict[str, Any], message: str
) -> None:
    outcome = BuiltinSchemaValidator(_SMALL).validate(_valid_small(**overrides))

    assert not outcome.valid
    assert message in outcome.errors


def test_min_length_above_one_reports_character_count() -> None:
    schema = Section({"secret": Field("string", required=True, min_length=32)})

    outcome = BuiltinSchemaValidator(schema).validate({"secret": "short"})

    assert outcome.errors == ("secret: must be at least 32 characters",)


def test_validation_does_not_mutate_candidate() -> None:
    candidate = _valid_small(tags=["a"])

    outcome = BuiltinSchemaValidator(_SMALL).validate(candidate)
    assert outcome.data is not None
    outcome.data["tags"].append("b")

    assert candidate == {"name": "svc", "must": {}, "tags": ["a"]}


def test_section_validator_prefixes_paths() -> None:
    validator = BuiltinSchemaValidator()
    auth = validator.section_validator("auth")

    assert auth is not None
    assert validator.section_validator("missing") is None
    outcome = auth.validate({"jwt": {"secret": "x"}, "session": {"secret": "y" * 32}})
    assert not outcome.valid
    assert outcome.errors == ("auth.jwt.secret: must be at least 32 characters",)


def test_builtin_validator_satisfies_protocol() -> None:
    assert isinstance(BuiltinSchemaValidator(), SchemaValidator)


def test_issue_rendering_and_outcome_factory() -> None:
    issues = (ConfigValidationIssue("a.b", "broken"),)

    failed = ValidationOutcome.from_issues({"a": 1}, issues)
    passed = ValidationOutcome.from_issues({"a": 1}, ())

    assert issues[0].render() == "a.b: broken"
    assert failed == ValidationOutcome(valid=False, data=None, errors=("a.b: broken",))
    assert passed.valid and passed.data == {"a": 1}


@pytest.mark.parametrize("profile", BUILTIN_PROFILES, ids=lambda item: item.environment)
def test_builtin_profile_defaults_validate(profile: Any) -> None:
    outcome = BuiltinSchemaValidator().validate(profile.default_tree())

    assert outcome.errors == ()
    assert outcome.data is not None
    assert outcome.data["env"]["NODE_ENV"] == profile.environment


def test_application_schema_requires_core_sections() -> None:
    tree = DEVELOPMENT_PROFILE.default_tree()
    del tree["database"]
    tree["auth"]["jwt"]["secret"] = "too-short"

    outcome = BuiltinSchemaValidator().validate(tree)

    assert "database: missing required section" in outcome.errors
    assert "auth.jwt.secret: must be at least 32 characters" in outcome.errors
