"""
confstack — unit tests for the runtime config loader

File: tests/unit/config/test_loader.py
Last updated: 2026-02-12

Purpose
- Validate tree assembly from profile defaults and supplied environment variables.

What this test file should cover
- Precedence: supplied variables > profile variable defaults > profile tree defaults.
- Environment resolution from ``NODE_ENV`` with fallback and warning.
- Required-variable detection, accumulated diagnostics, and ``throw_on_error``.
- Cache identity on repeated loads without re-validation.
- Secret-manager fallback for required variables.
- Async validators.

Functional requirements
- Every test passes explicit ``env_vars``; the process environment is never read.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest
from structlog.testing import capture_logs

from confstack.config.coercion import EnvVarDefinition
from confstack.config.errors import (
    InvalidBooleanError,
    MissingRequiredEnvVarsError,
    UnknownEnvironmentError,
    ValidationFailedError,
)
from confstack.config.loader import (
    ConfigLoader,
    LoadOptions,
    resolve_environment,
    validate_config,
)
from confstack.config.schema import BuiltinSchemaValidator, ValidationOutcome
from confstack.config.secrets import EnvSecretProvider, SecretManager

PRODUCTION_ENV: dict[str, str] = {
    "DATABASE_URL": "postgresql://db.internal:5432/app",
    "JWT_SECRET": "j" * 40,
    "SESSION_SECRET": "s" * 40,
    "FROM_EMAIL": "noreply@example.com",
    "STRIPE_SECRET_KEY": "sk_live_example",
    "STRIPE_WEBHOOK_SECRET": "whsec_example",
}


class CountingValidator:
    """Delegating validator that records how often ``validate`` runs."""

    def __init__(self) -> None:
        self.calls = 0
        self._inner = BuiltinSchemaValidator()

    def validate(self, candidate: Mapping[str, Any]) -> ValidationOutcome:
        self.calls += 1
        return self._inner.validate(candidate)

    def section_validator(self, name: str) -> BuiltinSchemaValidator | None:
        return self._inner.section_validator(name)


class AsyncValidator(CountingValidator):
    async def validate(self, candidate: Mapping[str, Any]) -> ValidationOutcome:  # type: ignore[override]
        return super().validate(candidate)


@pytest.mark.parametrize(
    ("environ", "expected"),
    [
        ({}, "development"),
        ({"NODE_ENV": "staging"}, "staging"),
        ({"NODE_ENV": "Production"}, "development"),
        ({"NODE_ENV": "qa"}, "development"),
    ],
)
def test_resolve_environment_is_case_sensitive_with_fallback(
    environ: dict[str, str], expected: str
) -> None:
    assert resolve_environment(None, environ) == expected


def test_resolve_environment_prefers_explicit_name() -> None:
    assert resolve_environment(" test ", {"NODE_ENV": "staging"}) == "test"


@pytest.mark.asyncio
async def test_development_load_with_empty_environment_is_valid() -> None:
    result = await ConfigLoader().load(environment="development", env_vars={})

    assert result.is_valid
    assert result.environment == "development"
    assert result.config["env"]["NODE_ENV"] == "development"
    assert result.config["env"]["DEBUG"] is True
    assert result.config["env"]["LOG_LEVEL"] == "debug"
    # schema defaults fill sections the profile leaves out
    assert result.config["api"]["pagination"]["defaultLimit"] == 25


@pytest.mark.asyncio
async def test_supplied_variables_override_profile_defaults() -> None:
    result = await ConfigLoader().load(
        environment="development",
        env_vars={
            "PORT": "8080",
            "LOG_LEVEL": "warn",
            "DATABASE_URL": "postgresql://override/app",
            "ALLOWED_ORIGINS": "https://a.test,https://b.test",
        },
    )

    assert result.is_valid
    assert result.config["env"]["PORT"] == 8080
    assert result.config["env"]["LOG_LEVEL"] == "warn"
    assert result.config["database"]["url"] == "postgresql://override/app"
    assert result.config["security"]["cors"]["origin"] == ["https://a.test", "https://b.test"]
    # untouched profile defaults survive the merge
    assert result.config["database"]["pool"] == {"min": 2, "max": 10}


@pytest.mark.asyncio
async def test_environment_resolved_from_node_env_in_supplied_variables() -> None:
    result = await ConfigLoader().load(env_vars={"NODE_ENV": "test"})

    assert result.environment == "test"
    assert result.config["env"]["PORT"] == 3001
    assert result.warnings == ()


@pytest.mark.asyncio
async def test_unregistered_node_env_falls_back_with_warning() -> None:
    result = await ConfigLoader().load(env_vars={"NODE_ENV": "qa"})

    assert result.environment == "development"
    assert any("'qa' is not a registered environment" in item for item in result.warnings)


@pytest.mark.asyncio
async def test_explicit_unknown_environment_raises() -> None:
    with pytest.raises(UnknownEnvironmentError):
        await ConfigLoader().load(environment="qa", env_vars={})


@pytest.mark.asyncio
async def test_production_without_variables_reports_every_missing_secret() -> None:
    result = await ConfigLoader().load(environment="production", env_vars={})

    assert not result.is_valid
    assert set(result.missing_env_vars) >= {
        "DATABASE_URL",
        "JWT_SECRET",
        "SESSION_SECRET",
        "FROM_EMAIL",
        "STRIPE_SECRET_KEY",
        "STRIPE_WEBHOOK_SECRET",
    }
    assert "APP_URL" not in result.missing_env_vars
    assert any(
        error.startswith("Missing required environment variables:")
        for error in result.validation_errors
    )


@pytest.mark.asyncio
async def test_production_with_required_variables_validates() -> None:
    result = await ConfigLoader().load(environment="production", env_vars=PRODUCTION_ENV)

    assert result.is_valid, result.validation_errors
    assert result.config["auth"]["jwt"]["secret"] == "j" * 40
    assert result.config["billing"]["stripe"]["secretKey"] == "sk_live_example"
    assert result.config["email"]["sender"]["email"] == "noreply@example.com"
    assert result.config["auth"]["session"]["maxAge"] == 86400


@pytest.mark.asyncio
async def test_throw_on_error_raises_missing_variables_first() -> None:
    with pytest.raises(MissingRequiredEnvVarsError) as excinfo:
        await ConfigLoader().load(environment="production", env_vars={}, throw_on_error=True)

    assert "JWT_SECRET" in excinfo.value.missing


@pytest.mark.asyncio
async def test_schema_failures_accumulate_or_raise() -> None:
    env_vars = {"JWT_SECRET": "short"}

    result = await ConfigLoader().load(environment="development", env_vars=env_vars)
    assert "auth.jwt.secret: must be at least 32 characters" in result.validation_errors
    assert result.config["auth"]["jwt"]["secret"] == "short"

    with pytest.raises(ValidationFailedError) as excinfo:
        await ConfigLoader().load(
            environment="development", env_vars=env_vars, throw_on_error=True
        )
    assert "auth.jwt.secret: must be at least 32 characters" in excinfo.value.errors


@pytest.mark.asyncio
async def test_coercion_failures_are_collected_not_raised() -> None:
    with capture_logs() as logs:
        result = await ConfigLoader().load(
            environment="development", env_vars={"DEBUG": "yes", "PORT": "eighty"}
        )

    assert "DEBUG: must be 'true' or 'false', got 'yes'" in result.validation_errors
    assert "PORT: must be a number, got 'eighty'" in result.validation_errors
    # the profile default stays in place for fields that failed to parse
    assert result.config["env"]["DEBUG"] is True
    assert {entry["variable"] for entry in logs if entry["event"] == "config_env_coercion_failed"} == {
        "DEBUG",
        "PORT",
    }


@pytest.mark.asyncio
async def test_throw_on_error_raises_only_for_required_unparseable_fields() -> None:
    definitions = {
        "MAINTENANCE": EnvVarDefinition("MAINTENANCE", "boolean", required=True),
        "DEBUG": EnvVarDefinition("DEBUG", "boolean"),
    }
    loader = ConfigLoader(
        definitions=lambda _environment: definitions,
        mappings={"MAINTENANCE": "features.maintenance", "DEBUG": "env.DEBUG"},
    )

    result = await loader.load(
        environment="development",
        env_vars={"MAINTENANCE": "true", "DEBUG": "yes"},
        throw_on_error=True,
        validate=False,
    )
    assert "DEBUG: must be 'true' or 'false', got 'yes'" in result.validation_errors
    assert result.config["features"]["maintenance"] is True

    with pytest.raises(InvalidBooleanError):
        await loader.load(
            environment="development",
            env_vars={"MAINTENANCE": "maybe"},
            throw_on_error=True,
            validate=False,
        )


@pytest.mark.asyncio
async def test_non_strict_mode_adds_summary_warning() -> None:
    result = await ConfigLoader().load(
        environment="development", env_vars={"JWT_SECRET": "short"}, strict=False
    )

    assert result.warnings
    assert result.warnings[-1].startswith(
        "Configuration validation failed but running in non-strict mode:"
    )


@pytest.mark.asyncio
async def test_repeated_load_returns_cached_tree_without_revalidating() -> None:
    validator = CountingValidator()
    loader = ConfigLoader(validator=validator)

    first = await loader.load(environment="development", env_vars={})
    second = await loader.load(environment="development", env_vars={"PORT": "9999"})

    assert validator.calls == 1
    assert second.cached
    assert second.config is first.config
    assert "development" in loader.cache

    loader.clear_cache()
    third = await loader.load(environment="development", env_vars={})
    assert validator.calls == 2
    assert third.config is not first.config
    assert third.config == first.config


@pytest.mark.asyncio
async def test_invalid_or_unvalidated_trees_are_not_cached() -> None:
    validator = CountingValidator()
    loader = ConfigLoader(validator=validator)

    await loader.load(environment="development", env_vars={"JWT_SECRET": "short"})
    await loader.load(environment="development", env_vars={}, validate=False)

    assert len(loader.cache) == 0
    assert validator.calls == 1


@pytest.mark.asyncio
async def test_merge_with_defaults_false_ignores_variable_overlay() -> None:
    result = await ConfigLoader().load(
        environment="development",
        env_vars={"PORT": "8080"},
        merge_with_defaults=False,
        validate=False,
    )

    assert result.config["env"]["PORT"] == 3000


@pytest.mark.asyncio
async def test_async_validator_is_awaited() -> None:
    validator = AsyncValidator()

    result = await ConfigLoader(validator=validator).load(environment="test", env_vars={})

    assert result.is_valid
    assert validator.calls == 1


@pytest.mark.asyncio
async def test_secret_manager_fills_missing_required_variables() -> None:
    secrets = SecretManager([EnvSecretProvider(PRODUCTION_ENV)])
    loader = ConfigLoader(secret_manager=secrets)

    result = await loader.load(environment="production", env_vars={})

    assert result.missing_env_vars == ()
    assert result.is_valid, result.validation_errors
    assert result.config["database"]["url"] == PRODUCTION_ENV["DATABASE_URL"]


@pytest.mark.asyncio
async def test_secret_manager_misses_still_report_missing_variables() -> None:
    loader = ConfigLoader(secret_manager=SecretManager([EnvSecretProvider({})]))

    result = await loader.load(environment="staging", env_vars={})

    assert "JWT_SECRET" in result.missing_env_vars


@pytest.mark.asyncio
async def test_validate_config_accepts_sync_and_async_validators() -> None:
    tree = {"env": {"PORT": 0}}

    sync_outcome = await validate_config(tree)
    async_outcome = await validate_config(tree, AsyncValidator())

    assert "env.PORT: must be >= 1" in sync_outcome.errors
    assert sync_outcome.errors == async_outcome.errors


def test_load_options_defaults() -> None:
    options = LoadOptions()

    assert options.validate and options.strict and options.merge_with_defaults
    assert not options.throw_on_error
    assert options.environment is None and options.env_vars is None


@pytest.mark.asyncio
@pytest.mark.parametrize("environment", ["staging", "production"])
async def test_deployed_environments_never_fall_back_to_local_credentials(
    environment: str,
) -> None:
    result = await ConfigLoader().load(environment=environment, env_vars={})

    assert not result.is_valid
    assert "database.url: missing required field" in result.validation_errors
    assert "auth.jwt.secret: missing required field" in result.validation_errors
    assert "auth.session.secret: missing required field" in result.validation_errors
    assert "url" not in result.config["database"]
    assert "secret" not in result.config["auth"]["jwt"]
