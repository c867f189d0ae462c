"""
confstack — runtime config loader.

File: src/confstack/config/loader.py
Last updated: 2026-02-12

Purpose
- Build one environment's configuration tree from profile defaults and environment
  variables, validate it, and report everything that went wrong.

What should be included in this file
- Precedence logic: supplied variables > profile variable defaults > profile tree defaults.
- Deterministic variable coercion and path mapping.
- Per-environment caching of trees that validated cleanly.
- A ``LoadResult`` that never drops a diagnostic.

Functional requirements
- Missing required variables and schema failures are collected, and only raised
  when the caller sets ``throw_on_error``.
- A cache hit returns the same tree object without validating again.

Non-functional requirements
- Suspension happens only at the validator and secret-manager boundaries.
"""

from __future__ import annotations

import inspect
import os
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, replace
from typing import Any

import structlog

from confstack.config.coercion import (
    EnvVarDefinition,
    coerce_env_value,
    infer_env_value,
    is_blank,
)
from confstack.config.definitions import definitions_by_name
from confstack.config.environments import default_registry
from confstack.config.errors import (
    EnvVarCoercionError,
    MissingRequiredEnvVarsError,
    MissingRequiredVarError,
    SecretNotFoundError,
    ValidationFailedError,
)
from confstack.config.merge import deep_copy_tree, merge_config
from confstack.config.paths import ENV_PATH_MAPPINGS, map_env_vars
from confstack.config.profiles import ConfigProfile, ProfileRegistry
from confstack.config.schema import BuiltinSchemaValidator, SchemaValidator, ValidationOutcome
from confstack.config.secrets import SecretManager
from confstack.config.values import MISSING, ConfigTree
from confstack.constants import DEFAULT_ENVIRONMENT, ENVIRONMENT_VARIABLE, ENVIRONMENTS

DefinitionSource = Callable[[str], Mapping[str, EnvVarDefinition]]


@dataclass(frozen=True, slots=True)
class LoadOptions:
    """Per-call loader options."""

    environment: str | None = None
    env_vars: Mapping[str, str] | None = None
    validate: bool = True
    throw_on_error: bool = False
    merge_with_defaults: bool = True
    strict: bool = True


@dataclass(frozen=True, slots=True)
class LoadResult:
    """Outcome of one load call; ``config`` may be unvalidated when errors are present."""

    config: ConfigTree
    environment: str
    validation_errors: tuple[str, ...] = ()
    missing_env_vars: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    cached: bool = False

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors and not self.missing_env_vars

    def to_dict(self) -> dict[str, object]:
        return {
            "environment": self.environment,
            "cached": self.cached,
            "validation_errors": list(self.validation_errors),
            "missing_env_vars": list(self.missing_env_vars),
            "warnings": list(self.warnings),
        }


class ConfigCache:
    """Environment -> validated tree, owned by a single loader."""

    __slots__ = ("_trees",)

    def __init__(self) -> None:
        self._trees: dict[str, ConfigTree] = {}

    def get(self, environment: str) -> ConfigTree | None:
        return self._trees.get(environment)

    def put(self, environment: str, tree: ConfigTree) -> None:
        self._trees[environment] = tree

    def discard(self, environment: str) -> None:
        self._trees.pop(environment, None)

    def clear(self) -> None:
        self._trees.clear()

    def __contains__(self, environment: object) -> bool:
        return environment in self._trees

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._trees))

    def __len__(self) -> int:
        return len(self._trees)


def resolve_environment(
    explicit: str | None = None,
    environ: Mapping[str, str] | None = None,
    known: tuple[str, ...] | None = None,
) -> str:
    """Pick the active environment name; never raises.

    An explicit name wins as-is. Otherwise ``NODE_ENV`` is used when it names a
    known environment (case-sensitive), and anything else falls back to
    ``development``.
    """

    if explicit is not None and explicit.strip():
        return explicit.strip()
    env_map = os.environ if environ is None else environ
    candidate = env_map.get(ENVIRONMENT_VARIABLE)
    allowed = ENVIRONMENTS if known is None else known
    if candidate is not None and candidate in allowed:
        return candidate
    return DEFAULT_ENVIRONMENT


class ConfigLoader:
    """Assemble, validate, and cache configuration trees per environment."""

    def __init__(
        self,
        registry: ProfileRegistry | None = None,
        validator: SchemaValidator | None = None,
        *,
        cache: ConfigCache | None = None,
        definitions: DefinitionSource | None = None,
        secret_manager: SecretManager | None = None,
        mappings: Mapping[str, str] | None = None,
        logger: Any | None = None,
    ) -> None:
        self._registry = registry if registry is not None else default_registry()
        self._validator = validator if validator is not None else BuiltinSchemaValidator()
        self._cache = cache if cache is not None else ConfigCache()
        self._definitions = definitions if definitions is not None else definitions_by_name
        self._secret_manager = secret_manager
        self._mappings = ENV_PATH_MAPPINGS if mappings is None else mappings
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    @property
    def registry(self) -> ProfileRegistry:
        return self._registry

    @property
    def validator(self) -> SchemaValidator:
        return self._validator

    @property
    def cache(self) -> ConfigCache:
        return self._cache

    def clear_cache(self) -> None:
        self._cache.clear()

    async def load(self, options: LoadOptions | None = None, **overrides: Any) -> LoadResult:
        """Load one environment's configuration.

        Keyword overrides are applied on top of ``options`` (for example
        ``load(environment="test", env_vars={})``).
        """

        opts = options if options is not None else LoadOptions()
        if overrides:
            opts = replace(opts, **overrides)

        env_map: Mapping[str, str] = os.environ if opts.env_vars is None else opts.env_vars
        warnings: list[str] = []
        environment = resolve_environment(opts.environment, env_map, self._registry.environments)
        requested = env_map.get(ENVIRONMENT_VARIABLE) if opts.environment is None else None
        if requested is not None and requested != environment:
            warnings.append(
                f"{ENVIRONMENT_VARIABLE}={requested!r} is not a registered environment; "
                f"using {environment!r}"
            )

        cached_tree = self._cache.get(environment)
        if cached_tree is not None:
            self._logger.debug("config_cache_hit", environment=environment)
            return LoadResult(config=cached_tree, environment=environment, cached=True)

        profile = self._registry.get_profile(environment)
        definitions = self._definitions(environment)
        errors: list[str] = []

        effective = {**profile.env_var_defaults, **env_map}
        await self._fill_from_secrets(profile, definitions, effective)

        missing = tuple(name for name in profile.required_env_vars if is_blank(effective.get(name)))
        if missing:
            failure = MissingRequiredEnvVarsError(missing)
            self._logger.warning(
                "config_missing_env_vars", environment=environment, missing=list(missing)
            )
            if opts.throw_on_error:
                raise failure
            errors.append(str(failure))

        typed = self._coerce(effective, definitions, missing, errors, opts.throw_on_error)
        overlay = map_env_vars(typed, self._mappings)

        if opts.merge_with_defaults:
            candidate = merge_config(profile.default_tree(), overlay)
        else:
            candidate = profile.default_tree()

        config = candidate
        if opts.validate:
            outcome = await self._run_validator(candidate)
            if outcome.valid and outcome.data is not None:
                config = outcome.data
            else:
                self._logger.warning(
                    "config_validation_failed",
                    environment=environment,
                    error_count=len(outcome.errors),
                )
                if opts.throw_on_error:
                    raise ValidationFailedError([*errors, *outcome.errors])
                errors.extend(outcome.errors)

        if errors and not opts.strict:
            warnings.append(
                "Configuration validation failed but running in non-strict mode: "
                + "; ".join(errors)
            )

        if opts.validate and not errors:
            self._cache.put(environment, config)

        self._logger.info(
            "config_loaded",
            environment=environment,
            validated=opts.validate,
            error_count=len(errors),
            missing_count=len(missing),
        )
        return LoadResult(
            config=config,
            environment=environment,
            validation_errors=tuple(errors),
            missing_env_vars=missing,
            warnings=tuple(warnings),
        )

    async def _fill_from_secrets(
        self,
        profile: ConfigProfile,
        definitions: Mapping[str, EnvVarDefinition],
        effective: dict[str, str],
    ) -> None:
        if self._secret_manager is None:
            return
        for name in profile.required_env_vars:
            if not is_blank(effective.get(name)):
                continue
            try:
                effective[name] = await self._secret_manager.get_secret_value(name)
            except SecretNotFoundError:
                definition = definitions.get(name)
                if definition is not None and definition.has_default:
                    effective[name] = str(definition.default)

    def _coerce(
        self,
        effective: Mapping[str, str],
        definitions: Mapping[str, EnvVarDefinition],
        missing: tuple[str, ...],
        errors: list[str],
        throw_on_error: bool,
    ) -> dict[str, Any]:
        typed: dict[str, Any] = {}
        for name, raw in effective.items():
            definition = definitions.get(name)
            if definition is None:
                if not is_blank(raw):
                    typed[name] = infer_env_value(raw)
                continue
            try:
                value = coerce_env_value(definition, raw)
            except MissingRequiredVarError as exc:
                if name in missing:
                    continue
                if throw_on_error:
                    raise
                errors.append(str(exc))
                continue
            except EnvVarCoercionError as exc:
                self._logger.warning("config_env_coercion_failed", variable=name, reason=exc.detail)
                if throw_on_error and definition.required:
                    raise
                errors.append(str(exc))
                continue
            if value is not MISSING:
                typed[name] = value
        return typed

    async def _run_validator(self, candidate: ConfigTree) -> ValidationOutcome:
        outcome = self._validator.validate(deep_copy_tree(candidate))
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return outcome


async def validate_config(
    tree: Mapping[str, Any],
    validator: SchemaValidator | None = None,
) -> ValidationOutcome:
    """Validate an arbitrary tree, awaiting the validator when it is asynchronous."""

    active = validator if validator is not None else BuiltinSchemaValidator()
    outcome = active.validate(tree)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    return outcome


__all__ = [
    "ConfigCache",
    "ConfigLoader",
    "LoadOptions",
    "LoadResult",
    "resolve_environment",
    "validate_config",
]
