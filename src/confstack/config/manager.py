"""
confstack — live configuration manager.

File: src/confstack/config/manager.py
Last updated: 2026-02-12

Purpose
- Own the loaded configuration for one process component and expose safe reads,
  reloads, environment switches, middleware, and change notification.

What should be included in this file
- The ``ManagerState`` lifecycle and a single in-flight operation guard.
- Ordered middleware applied after validation and before exposure.
- Watcher notification with per-watcher failure isolation.
- An explicit process-wide default manager accessor.

Functional requirements
- Reads before the manager is ready raise ``NotInitializedError``.
- Every read returns a deep copy; callers can never mutate manager state.
- A failing middleware aborts the operation and leaves the previous state intact.
- A failing watcher never stops the other watchers or the caller.

Non-functional requirements
- Watchers are awaited before ``initialize`` returns, so observers never learn
  about an older state after the manager has moved on.
"""

from __future__ import annotations

import asyncio
import copy
import inspect
from collections import deque
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

import structlog

from confstack.config.errors import (
    MiddlewareFailedError,
    NotInitializedError,
    SectionValidationFailedError,
)
from confstack.config.exporters import render_export
from confstack.config.loader import ConfigLoader, LoadOptions, LoadResult
from confstack.config.paths import get_path, has_path
from confstack.config.profiles import ProfileRegistry
from confstack.config.schema import SchemaValidator
from confstack.config.secrets import SecretManager
from confstack.config.values import MISSING, ConfigTree
from confstack.constants import DISPATCH_ERROR_HISTORY
from confstack.security.redaction import redact_paths

Middleware = Callable[[ConfigTree, str], "ConfigTree | Awaitable[ConfigTree]"]
Watcher = Callable[["ChangeEvent"], "object | Awaitable[object]"]

INITIAL_LOAD_CHANGE = "initial load"


class ManagerState(StrEnum):
    """Lifecycle of a ``ConfigManager``."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    RELOADING = "reloading"
    SWITCHING_ENVIRONMENT = "switching_environment"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """Delivered to every watcher after a successful initialize/reload/switch."""

    environment: str
    previous_environment: str | None
    old_config: ConfigTree | None
    new_config: ConfigTree
    changes: tuple[str, ...]
    timestamp: datetime

    @property
    def is_initial(self) -> bool:
        return self.old_config is None


@dataclass(frozen=True, slots=True)
class DispatchError:
    """Watcher failure captured without interrupting the triggering operation."""

    stage: str
    environment: str
    target: str
    error_type: str
    message: str


class ConfigManager:
    """Cached, observable accessor for one validated configuration tree."""

    def __init__(
        self,
        loader: ConfigLoader | None = None,
        *,
        registry: ProfileRegistry | None = None,
        validator: SchemaValidator | None = None,
        secret_manager: SecretManager | None = None,
        options: LoadOptions | None = None,
        dispatch_error_limit: int = DISPATCH_ERROR_HISTORY,
        logger: Any | None = None,
    ) -> None:
        self._logger = logger if logger is not None else structlog.get_logger(__name__)
        if loader is None:
            loader = ConfigLoader(
                registry,
                validator,
                secret_manager=secret_manager,
                logger=self._logger,
            )
        self._loader = loader
        self._options = options if options is not None else LoadOptions()
        self._target_environment: str | None = self._options.environment
        self._state = ManagerState.UNINITIALIZED
        self._config: ConfigTree | None = None
        self._environment: str | None = None
        self._load_result: LoadResult | None = None
        self._middleware: list[Middleware] = []
        self._watchers: list[Watcher] = []
        self._dispatch_errors = deque[DispatchError](maxlen=max(1, dispatch_error_limit))
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> ManagerState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is ManagerState.READY

    @property
    def environment(self) -> str | None:
        return self._environment

    @property
    def load_result(self) -> LoadResult | None:
        return self._load_result

    @property
    def loader(self) -> ConfigLoader:
        return self._loader

    async def initialize(self, options: LoadOptions | None = None) -> ConfigTree:
        """Load, transform, diff, and publish configuration; return a copy of it."""

        async with self._lock:
            transition = (
                ManagerState.INITIALIZING if self._config is None else ManagerState.RELOADING
            )
            return await self._apply(options if options is not None else self._options, transition)

    async def reload(self, options: LoadOptions | None = None) -> ConfigTree:
        """Drop cached trees and load again with ``options`` or the last-used options."""

        async with self._lock:
            self._loader.clear_cache()
            return await self._apply(
                options if options is not None else self._options, ManagerState.RELOADING
            )

    async def switch_environment(
        self, environment: str, options: LoadOptions | None = None
    ) -> ConfigTree:
        """Replace the active configuration with ``environment``'s.

        On success ``environment`` becomes the target for later ``initialize`` and
        ``reload`` calls whose options leave the environment unset.
        """

        async with self._lock:
            base = options if options is not None else self._options
            self._loader.clear_cache()
            tree = await self._apply(
                replace(base, environment=environment), ManagerState.SWITCHING_ENVIRONMENT
            )
            self._target_environment = environment
            return tree

    async def _apply(self, options: LoadOptions, transition: ManagerState) -> ConfigTree:
        if options.environment is None and self._target_environment is not None:
            options = replace(options, environment=self._target_environment)
        previous_state = self._state
        previous_config = self._config
        previous_environment = self._environment
        self._state = transition
        try:
            result = await self._loader.load(options)
            transformed = await self._run_middleware(copy.deepcopy(result.config), result.environment)
        except BaseException:
            self._state = previous_state
            raise

        self._config = transformed
        self._environment = result.environment
        self._load_result = result
        self._options = options
        self._state = ManagerState.READY

        if previous_config is None:
            changes: tuple[str, ...] = (INITIAL_LOAD_CHANGE,)
        else:
            changes = tuple(diff_paths(previous_config, transformed))

        self._logger.info(
            "config_manager_ready",
            environment=result.environment,
            transition=transition.value,
            change_count=len(changes),
            error_count=len(result.validation_errors),
        )

        event = ChangeEvent(
            environment=result.environment,
            previous_environment=previous_environment,
            old_config=copy.deepcopy(previous_config),
            new_config=copy.deepcopy(transformed),
            changes=changes,
            timestamp=datetime.now(UTC),
        )
        await self._notify_watchers(event)
        return copy.deepcopy(transformed)

    async def _run_middleware(self, tree: ConfigTree, environment: str) -> ConfigTree:
        current = tree
        for middleware in tuple(self._middleware):
            try:
                result = middleware(current, environment)
                if inspect.isawaitable(result):
                    result = await result
                if not isinstance(result, Mapping):
                    raise TypeError(
                        f"middleware returned {type(result).__name__}, expected a mapping"
                    )
            except Exception as exc:
                self._logger.error(
                    "config_middleware_failed",
                    middleware=_callable_name(middleware),
                    error_type=type(exc).__name__,
                )
                raise MiddlewareFailedError(middleware, exc) from exc
            current = dict(result)
        return current

    async def _notify_watchers(self, event: ChangeEvent) -> None:
        for watcher in tuple(self._watchers):
            name = _callable_name(watcher)
            try:
                result = watcher(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:  # noqa: BLE001 - watcher failures are isolated.
                error = DispatchError(
                    stage="watcher",
                    environment=event.environment,
                    target=name,
                    error_type=exc.__class__.__name__,
                    message=str(exc),
                )
                self._dispatch_errors.append(error)
                self._logger.warning(
                    "config_watcher_failed",
                    watcher=name,
                    error_type=error.error_type,
                    error_message=error.message,
                )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_config(self) -> ConfigTree:
        return copy.deepcopy(self._require_config())

    def get_section(
        self,
        name: str,
        *,
        validate: bool = False,
        default: Any = MISSING,
    ) -> Any:
        """Return one top-level section.

        ``default`` is returned when the section is absent (``None`` when no
        default is given). With ``validate=True`` the section is checked against
        its sub-schema and ``SectionValidationFailedError`` is raised on failure.
        """

        config = self._require_config()
        if name not in config:
            return None if default is MISSING else default
        section = copy.deepcopy(config[name])
        if not validate:
            return section

        section_validator = self._loader.validator.section_validator(name)
        if section_validator is None:
            return section
        outcome = section_validator.validate(section)
        if inspect.isawaitable(outcome):
            close = getattr(outcome, "close", None)
            if callable(close):
                close()
            raise TypeError("section validation requires a synchronous validator")
        if not outcome.valid:
            raise SectionValidationFailedError(name, outcome.errors)
        return outcome.data

    def get(self, path: str, default: Any = None) -> Any:
        return copy.deepcopy(get_path(self._require_config(), path, default))

    def has(self, path: str) -> bool:
        return has_path(self._require_config(), path)

    def is_feature_enabled(self, feature: str) -> bool:
        return get_path(self._require_config(), f"features.{feature}", False) is True

    def get_sanitized_config(self) -> ConfigTree:
        return redact_paths(self._require_config())

    def export(self, fmt: str = "json", *, redact: bool = False) -> str:
        tree = self.get_sanitized_config() if redact else self.get_config()
        return render_export(tree, fmt)

    def _require_config(self) -> ConfigTree:
        if self._state is not ManagerState.READY or self._config is None:
            raise NotInitializedError(self._state.value)
        return self._config

    # ------------------------------------------------------------------
    # Middleware and watchers
    # ------------------------------------------------------------------

    def use(self, middleware: Middleware) -> None:
        if not callable(middleware):
            raise TypeError("middleware must be callable")
        self._middleware.append(middleware)

    def remove_middleware(self, middleware: Middleware) -> bool:
        try:
            self._middleware.remove(middleware)
        except ValueError:
            return False
        return True

    def watch(self, watcher: Watcher) -> Callable[[], bool]:
        """Register ``watcher``; the returned callable unregisters it."""

        if not callable(watcher):
            raise TypeError("watcher must be callable")
        self._watchers.append(watcher)
        return lambda: self.unwatch(watcher)

    def unwatch(self, watcher: Watcher) -> bool:
        try:
            self._watchers.remove(watcher)
        except ValueError:
            return False
        return True

    def dispatch_errors(self, *, limit: int | None = None) -> tuple[DispatchError, ...]:
        """Return recorded watcher failures, oldest first."""

        errors = tuple(self._dispatch_errors)
        if limit is None:
            return errors
        if limit <= 0:
            return ()
        return errors[-limit:]


def diff_paths(old: Any, new: Any, prefix: str = "") -> list[str]:
    """Sorted dotted paths whose values differ between ``old`` and ``new``."""

    if isinstance(old, Mapping) and isinstance(new, Mapping):
        changed: list[str] = []
        for key in sorted(set(old) | set(new), key=str):
            path = f"{prefix}.{key}" if prefix else str(key)
            if key not in old or key not in new:
                changed.append(path)
                continue
            changed.extend(diff_paths(old[key], new[key], path))
        return sorted(changed)
    if old == new and type(old) is type(new):
        return []
    return [prefix or "<root>"]


def _callable_name(target: object) -> str:
    name = getattr(target, "__qualname__", None) or getattr(target, "__name__", None)
    if isinstance(name, str) and name:
        return name
    return target.__class__.__name__


_DEFAULT_MANAGER: ConfigManager | None = None


def get_config_manager(**kwargs: Any) -> ConfigManager:
    """Return the process-wide default manager, creating it on first use.

    Keyword arguments are only honoured by the call that creates the manager.
    """

    global _DEFAULT_MANAGER
    if _DEFAULT_MANAGER is None:
        _DEFAULT_MANAGER = ConfigManager(**kwargs)
    return _DEFAULT_MANAGER


def reset_config_manager() -> None:
    global _DEFAULT_MANAGER
    _DEFAULT_MANAGER = None


__all__ = [
    "INITIAL_LOAD_CHANGE",
    "ChangeEvent",
    "ConfigManager",
    "DispatchError",
    "ManagerState",
    "Middleware",
    "Watcher",
    "diff_paths",
    "get_config_manager",
    "reset_config_manager",
]
