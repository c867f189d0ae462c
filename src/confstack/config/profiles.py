"""
confstack — environment profile registry.

File: src/confstack/config/profiles.py
Last updated: 2026-02-12

Purpose
- Hold one immutable profile per environment: default tree, variable defaults,
  and the variables that environment cannot run without.

Functional requirements
- Unknown environments are a hard failure.
- Registered profiles cannot be changed through references held by callers.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from confstack.config.errors import UnknownEnvironmentError
from confstack.config.merge import deep_copy_tree
from confstack.config.values import ConfigTree


@dataclass(frozen=True, slots=True)
class ConfigProfile:
    """Environment-specific defaults and requirements."""

    environment: str
    defaults: Mapping[str, Any] = field(default_factory=dict)
    env_var_defaults: Mapping[str, str] = field(default_factory=dict)
    required_env_vars: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.environment.strip():
            raise ValueError("profile environment must not be empty")
        object.__setattr__(self, "defaults", _freeze(copy.deepcopy(dict(self.defaults))))
        object.__setattr__(self, "env_var_defaults", MappingProxyType(dict(self.env_var_defaults)))
        object.__setattr__(self, "required_env_vars", tuple(self.required_env_vars))

    def default_tree(self) -> ConfigTree:
        """Return a mutable deep copy of the profile defaults."""

        return deep_copy_tree(_thaw(self.defaults))


class ProfileRegistry:
    """Environment name -> profile lookup."""

    __slots__ = ("_profiles",)

    def __init__(self, profiles: Iterable[ConfigProfile] = ()) -> None:
        self._profiles: dict[str, ConfigProfile] = {}
        for profile in profiles:
            self.register_profile(profile)

    def register_profile(self, profile: ConfigProfile, *, replace: bool = False) -> None:
        if profile.environment in self._profiles and not replace:
            raise ValueError(f"profile already registered for {profile.environment!r}")
        self._profiles[profile.environment] = profile

    def get_profile(self, environment: str) -> ConfigProfile:
        try:
            return self._profiles[environment]
        except KeyError:
            raise UnknownEnvironmentError(environment, self.environments) from None

    @property
    def environments(self) -> tuple[str, ...]:
        return tuple(self._profiles)

    def __contains__(self, environment: object) -> bool:
        return environment in self._profiles

    def __iter__(self) -> Iterator[ConfigProfile]:
        return iter(tuple(self._profiles.values()))

    def __len__(self) -> int:
        return len(self._profiles)


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


__all__ = ["ConfigProfile", "ProfileRegistry"]
