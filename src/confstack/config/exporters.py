"""
confstack — configuration export formats.

File: src/confstack/config/exporters.py
Last updated: 2026-02-12

Purpose
- Serialize configuration trees for ``export``: JSON, dotenv lines, and YAML.

Functional requirements
- JSON and YAML output keep the tree's key order.
- The ``env`` format emits only the operational variable subset, skipping absent keys.
- Booleans render as lowercase ``true``/``false`` in ``env`` output.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Final, Literal

import yaml

from confstack.config.paths import get_path
from confstack.constants import ENV_EXPORT_VARIABLES

ExportFormat = Literal["json", "env", "yaml"]
EXPORT_FORMATS: Final[tuple[str, ...]] = ("json", "env", "yaml")


def render_export(tree: Mapping[str, Any], fmt: str = "json") -> str:
    if fmt == "json":
        return json.dumps(tree, indent=2, ensure_ascii=False)
    if fmt == "env":
        return render_env_lines(tree)
    if fmt == "yaml":
        return yaml.safe_dump(_plain(tree), sort_keys=False, allow_unicode=True)
    expected = ", ".join(EXPORT_FORMATS)
    raise ValueError(f"unsupported export format {fmt!r}; expected one of: {expected}")


def render_env_lines(tree: Mapping[str, Any]) -> str:
    """Render the fixed ``NAME=value`` subset; unset values are left out."""

    lines: list[str] = []
    for name, dotted_path in ENV_EXPORT_VARIABLES:
        value = get_path(tree, dotted_path)
        if value is None:
            continue
        lines.append(f"{name}={format_env_value(value)}")
    return "\n".join(lines)


def format_env_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return ",".join(format_env_value(item) for item in value)
    if isinstance(value, Mapping):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def _plain(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


__all__ = ["EXPORT_FORMATS", "ExportFormat", "format_env_value", "render_env_lines", "render_export"]
