"""
confstack config package public API.

File: src/confstack/config/__init__.py
Last updated: 2026-02-12

Purpose
- Export the loader, manager, schema, profile, and secret entrypoints plus the
  public error types.

What should be included in this file
- Re-exports only; no side effects at import time.

Functional requirements
- Callers should never need to import from a private submodule.

Non-functional requirements
- Keep import-time surface small and deterministic.
"""

from confstack.config.coercion import (
    EnvVarDefinition,
    EnvVarReport,
    coerce_env_value,
    infer_env_value,
    is_blank,
    validate_env_vars,
)
from confstack.config.definitions import definitions_by_name, env_var_definitions
from confstack.config.environments import (
    BUILTIN_PROFILES,
    DEVELOPMENT_PROFILE,
    PRODUCTION_PROFILE,
    STAGING_PROFILE,
    TEST_PROFILE,
    default_registry,
)
from confstack.config.errors import (
    ConfigError,
    EnvVarCoercionError,
    EnvVarValidationError,
    InvalidBooleanError,
    InvalidJsonError,
    InvalidNumberError,
    MiddlewareFailedError,
    MissingRequiredEnvVarsError,
    MissingRequiredVarError,
    NotInitializedError,
    SecretNotFoundError,
    SectionValidationFailedError,
    UnknownEnvironmentError,
    ValidationFailedError,
)
from confstack.config.exporters import EXPORT_FORMATS, render_export
from confstack.config.loader import (
    ConfigCache,
    ConfigLoader,
    LoadOptions,
    LoadResult,
    resolve_environment,
    validate_config,
)
from confstack.config.manager import (
    ChangeEvent,
    ConfigManager,
    DispatchError,
    ManagerState,
    get_config_manager,
    reset_config_manager,
)
from confstack.config.merge import merge_config
from confstack.config.paths import ENV_PATH_MAPPINGS, get_path, has_path, map_env_vars, set_path
from confstack.config.profiles import ConfigProfile, ProfileRegistry
from confstack.config.schema import (
    APPLICATION_SCHEMA,
    BuiltinSchemaValidator,
    Field,
    SchemaValidator,
    Section,
    ValidationOutcome,
)
from confstack.config.secrets import (
    EnvSecretProvider,
    FileSecretProvider,
    SecretManager,
    SecretProvider,
)
from confstack.config.values import MISSING, ConfigTree

__all__ = [
    "APPLICATION_SCHEMA",
    "BUILTIN_PROFILES",
    "DEVELOPMENT_PROFILE",
    "ENV_PATH_MAPPINGS",
    "EXPORT_FORMATS",
    "MISSING",
    "PRODUCTION_PROFILE",
    "STAGING_PROFILE",
    "TEST_PROFILE",
    "BuiltinSchemaValidator",
    "ChangeEvent",
    "ConfigCache",
    "ConfigError",
    "ConfigLoader",
    "ConfigManager",
    "ConfigProfile",
    "ConfigTree",
    "DispatchError",
    "EnvSecretProvider",
    "EnvVarCoercionError",
    "EnvVarDefinition",
    "EnvVarReport",
    "EnvVarValidationError",
    "Field",
    "FileSecretProvider",
    "InvalidBooleanError",
    "InvalidJsonError",
    "InvalidNumberError",
    "LoadOptions",
    "LoadResult",
    "ManagerState",
    "MiddlewareFailedError",
    "MissingRequiredEnvVarsError",
    "MissingRequiredVarError",
    "NotInitializedError",
    "ProfileRegistry",
    "SchemaValidator",
    "SecretManager",
    "SecretNotFoundError",
    "SecretProvider",
    "Section",
    "SectionValidationFailedError",
    "UnknownEnvironmentError",
    "ValidationFailedError",
    "ValidationOutcome",
    "coerce_env_value",
    "default_registry",
    "definitions_by_name",
    "env_var_definitions",
    "get_config_manager",
    "get_path",
    "has_path",
    "infer_env_value",
    "is_blank",
    "map_env_vars",
    "merge_config",
    "render_export",
    "reset_config_manager",
    "resolve_environment",
    "set_path",
    "validate_config",
    "validate_env_vars",
]
