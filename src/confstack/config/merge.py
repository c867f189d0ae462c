"""
confstack — deep merge of configuration trees.

File: src/confstack/config/merge.py
Last updated: 2026-02-12

Purpose
- Layer an environment overlay on top of profile defaults.

Functional requirements
- Right-biased: overlay values win, base-only keys survive.
- Mappings merge recursively; lists and scalars are replaced wholesale.
- Overlay keys holding ``MISSING`` are skipped.
- Inputs are never mutated; the result shares no containers with them.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from confstack.config.values import MISSING, ConfigTree


def merge_config(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> ConfigTree:
    """Return a new tree with ``overlay`` laid over ``base``.

    Mappings on both sides merge recursively; any other overlay value (lists
    included) replaces the base value wholesale. ``MISSING`` overlay values are
    skipped. Neither input is modified.
    """

    merged = deep_copy_tree(base)
    _merge_into(merged, overlay)
    return merged


def deep_copy_tree(value: Mapping[str, Any]) -> ConfigTree:
    return {key: _deep_copy_value(item) for key, item in value.items()}


def _merge_into(target: ConfigTree, overlay: Mapping[str, Any]) -> None:
    for key, value in overlay.items():
        if value is MISSING:
            continue
        existing = target.get(key)
        if isinstance(value, Mapping) and isinstance(existing, dict):
            _merge_into(existing, value)
        else:
            target[key] = _deep_copy_value(value)


def _deep_copy_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _deep_copy_value(item) for key, item in value.items() if item is not MISSING}
    if isinstance(value, list):
        return [_deep_copy_value(item) for item in value]
    return copy.deepcopy(value)


__all__ = ["deep_copy_tree", "merge_config"]
