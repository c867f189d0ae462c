"""
confstack — secret lookup providers.

File: src/confstack/config/secrets.py
Last updated: 2026-02-12

Purpose
- Supply values for required variables that the environment does not carry.

What should be included in this file
- A ``SecretProvider`` protocol plus environment and file backed providers.
- ``SecretManager`` trying providers in order with a TTL cache.

Functional requirements
- Providers may be synchronous or asynchronous.
- A lookup that every provider fails raises ``SecretNotFoundError`` listing why.

Non-functional requirements
- Secret values are never logged.
"""

from __future__ import annotations

import inspect
import json
import os
import time
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import structlog
import yaml

from confstack.config.errors import SecretNotFoundError

DEFAULT_SECRET_CACHE_TTL_SECONDS = 300.0


@runtime_checkable
class SecretProvider(Protocol):
    """Backend able to resolve a secret by name."""

    name: str

    def get_secret(self, secret_name: str) -> str | Awaitable[str]: ...


class EnvSecretProvider:
    """Read secrets from a process-environment style mapping."""

    name = "env"

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ

    def get_secret(self, secret_name: str) -> str:
        environ = os.environ if self._environ is None else self._environ
        value = environ.get(secret_name)
        if value is None or not value.strip():
            raise KeyError(f"{secret_name} not set in environment")
        return value


class FileSecretProvider:
    """Read secrets from a JSON or YAML document.

    Entries may be plain strings or mappings with a ``value`` key. A missing file
    behaves like an empty one.
    """

    name = "file"

    def __init__(self, path: str | Path = "secrets.json") -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get_secret(self, secret_name: str) -> str:
        entry = self._read().get(secret_name)
        if isinstance(entry, Mapping):
            entry = entry.get("value")
        if entry is None or (isinstance(entry, str) and not entry.strip()):
            raise KeyError(f"{secret_name} not found in {self._path}")
        return str(entry)

    def list_secrets(self) -> tuple[str, ...]:
        return tuple(sorted(self._read()))

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        text = self._path.read_text(encoding="utf-8")
        if self._path.suffix.lower() in {".yaml", ".yml"}:
            parsed = yaml.safe_load(text)
        else:
            parsed = json.loads(text)
        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ValueError(f"secrets file root must be a mapping: {self._path}")
        return parsed


@dataclass(frozen=True, slots=True)
class _CachedSecret:
    value: str
    expires_at: float


class SecretManager:
    """Resolve secrets through an ordered provider chain with expiry-based caching."""

    def __init__(
        self,
        providers: Sequence[SecretProvider],
        *,
        cache_ttl_seconds: float = DEFAULT_SECRET_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        logger: Any | None = None,
    ) -> None:
        if not providers:
            raise ValueError("SecretManager requires at least one provider")
        if cache_ttl_seconds < 0:
            raise ValueError("cache_ttl_seconds must be >= 0")
        self._providers = tuple(providers)
        self._ttl = float(cache_ttl_seconds)
        self._clock = clock
        self._cache: dict[str, _CachedSecret] = {}
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    @property
    def providers(self) -> tuple[SecretProvider, ...]:
        return self._providers

    async def get_secret_value(self, secret_name: str) -> str:
        now = self._clock()
        cached = self._cache.get(secret_name)
        if cached is not None and cached.expires_at > now:
            return cached.value

        failures: list[str] = []
        for provider in self._providers:
            try:
                result = provider.get_secret(secret_name)
                value = await result if inspect.isawaitable(result) else result
            except Exception as exc:  # noqa: BLE001 - every provider failure falls through.
                failures.append(f"{provider.name}: {type(exc).__name__}")
                continue
            self._cache[secret_name] = _CachedSecret(value=value, expires_at=now + self._ttl)
            self._logger.debug(
                "secret_resolved", secret_name=secret_name, provider=provider.name
            )
            return value

        self._logger.warning("secret_not_found", secret_name=secret_name, failures=failures)
        raise SecretNotFoundError(secret_name, failures)

    def clear_cache(self) -> None:
        self._cache.clear()


__all__ = [
    "DEFAULT_SECRET_CACHE_TTL_SECONDS",
    "EnvSecretProvider",
    "FileSecretProvider",
    "SecretManager",
    "SecretProvider",
]
