"""
confstack — shared configuration value types.

File: src/confstack/config/values.py
Last updated: 2026-02-12

Purpose
- Define the ``ConfigTree`` aliases and the ``MISSING`` sentinel used to mark
  absent values without overloading ``None``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Final, TypeAlias

ConfigScalar: TypeAlias = str | int | float | bool | None
ConfigValue: TypeAlias = ConfigScalar | list["ConfigValue"] | dict[str, "ConfigValue"]
ConfigTree: TypeAlias = dict[str, Any]


class _Missing(Enum):
    """Marker for "no value"; distinct from ``None``, which is a real value."""

    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing.MISSING
Missing: TypeAlias = _Missing

__all__ = ["MISSING", "ConfigScalar", "ConfigTree", "ConfigValue", "Missing"]
