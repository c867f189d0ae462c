"""
confstack — environment variable coercion.

File: src/confstack/config/coercion.py
Last updated: 2026-02-12

Purpose
- Turn raw environment strings into typed configuration values.

What should be included in this file
- ``EnvVarDefinition`` describing one recognised variable.
- Declared-type coercion (string, number, boolean, array, json).
- A heuristic for variables without a definition.

Functional requirements
- Blank strings count as absent.
- Booleans accept only ``true``/``false`` (case-insensitive).
- Absent optional variables without a default produce ``MISSING`` so callers can
  omit the key instead of injecting ``None``.

Non-functional requirements
- Pure functions; no environment access.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Final, Literal

from confstack.config.errors import (
    EnvVarCoercionError,
    EnvVarValidationError,
    InvalidBooleanError,
    InvalidJsonError,
    InvalidNumberError,
    MissingRequiredVarError,
)
from confstack.config.values import MISSING, Missing

EnvVarType = Literal["string", "number", "boolean", "array", "json"]
EnvVarValidator = Callable[[Any], "bool | str"]

ENV_VAR_TYPES: Final[tuple[str, ...]] = ("string", "number", "boolean", "array", "json")

_INTEGER_TEXT: Final[re.Pattern[str]] = re.compile(r"[+-]?\d+")
_HEURISTIC_INT: Final[re.Pattern[str]] = re.compile(r"\d+")
_HEURISTIC_FLOAT: Final[re.Pattern[str]] = re.compile(r"\d+\.\d+")


@dataclass(frozen=True, slots=True)
class EnvVarDefinition:
    """Declared shape of one recognised environment variable."""

    name: str
    type: EnvVarType = "string"
    required: bool = False
    default: Any = MISSING
    description: str = ""
    validate: EnvVarValidator | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("definition name must not be empty")
        if self.type not in ENV_VAR_TYPES:
            raise ValueError(f"unsupported env var type {self.type!r} for {self.name}")

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING


def is_blank(raw: str | None) -> bool:
    """Return ``True`` when ``raw`` is absent or whitespace-only."""

    return raw is None or not raw.strip()


def coerce_env_value(definition: EnvVarDefinition, raw: str | None) -> Any | Missing:
    """Coerce ``raw`` according to ``definition``.

    Returns ``MISSING`` for an absent optional variable without a default.
    Raises a subclass of ``EnvVarCoercionError`` on any parse or validation failure.
    """

    if raw is None or is_blank(raw):
        if definition.required:
            raise MissingRequiredVarError(definition.name)
        return definition.default

    value = _parse_typed(definition.name, definition.type, raw)

    if definition.validate is not None:
        verdict = definition.validate(value)
        if isinstance(verdict, str):
            raise EnvVarValidationError(definition.name, verdict)
        if verdict is not True:
            raise EnvVarValidationError(definition.name, "failed custom validation")

    return value


@dataclass(frozen=True, slots=True)
class EnvVarReport:
    """Outcome of checking a batch of variables against their definitions."""

    errors: tuple[str, ...] = ()
    values: dict[str, Any] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not self.errors


def validate_env_vars(
    definitions: Iterable[EnvVarDefinition], environ: Mapping[str, str]
) -> EnvVarReport:
    """Coerce every defined variable, collecting each failure instead of stopping.

    ``values`` holds the typed value (or default) for every variable that passed;
    absent optional variables without a default are left out.
    """

    errors: list[str] = []
    values: dict[str, Any] = {}
    for definition in definitions:
        try:
            value = coerce_env_value(definition, environ.get(definition.name))
        except EnvVarCoercionError as exc:
            errors.append(str(exc))
            continue
        if value is not MISSING:
            values[definition.name] = value
    return EnvVarReport(errors=tuple(errors), values=values)


def infer_env_value(raw: str) -> Any:
    """Best-effort typing for a variable that has no definition.

    ``true``/``false`` become booleans, digit runs become ints, and ``d+.d+``
    becomes a float. Text opening with ``{`` or ``[`` is parsed as JSON before any
    comma splitting and stays a string when it is not valid JSON. Other
    comma-separated text becomes a list; everything else stays a string.
    """

    lowered = raw.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if _HEURISTIC_INT.fullmatch(raw):
        return int(raw)
    if _HEURISTIC_FLOAT.fullmatch(raw):
        return float(raw)
    if raw.startswith(("{", "[")):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw
    if "," in raw:
        return _split_list(raw)
    return raw


def _parse_typed(name: str, kind: EnvVarType, raw: str) -> Any:
    if kind == "string":
        return raw
    if kind == "boolean":
        lowered = raw.lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        raise InvalidBooleanError(name, raw)
    if kind == "number":
        return _parse_number(name, raw)
    if kind == "array":
        return _split_list(raw)
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidJsonError(name, exc.msg) from exc


def _parse_number(name: str, raw: str) -> int | float:
    text = raw.strip()
    if _INTEGER_TEXT.fullmatch(text):
        return int(text)
    try:
        parsed = float(text)
    except ValueError as exc:
        raise InvalidNumberError(name, raw) from exc
    if not math.isfinite(parsed):
        raise InvalidNumberError(name, raw)
    return parsed


def _split_list(raw: str) -> list[str]:
    return [segment.strip() for segment in raw.split(",")]


__all__ = [
    "ENV_VAR_TYPES",
    "EnvVarDefinition",
    "EnvVarReport",
    "EnvVarType",
    "EnvVarValidator",
    "coerce_env_value",
    "infer_env_value",
    "is_blank",
    "validate_env_vars",
]
