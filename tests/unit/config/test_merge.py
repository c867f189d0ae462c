"""
confstack — unit tests for deep merge

File: tests/unit/config/test_merge.py
Last updated: 2026-02-12

What this test file should cover
- Right-biased precedence at every depth.
- List replacement, ``MISSING`` skipping, and input immutability.
"""

from __future__ import annotations

import copy
from typing import Any

from hypothesis import given, settings
from hypothesis import strategies as st

from confstack.config.merge import deep_copy_tree, merge_config
from confstack.config.values import MISSING

_KEY = st.sampled_from(("a", "b", "c", "d"))
_LEAF = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-5, max_value=5),
    st.text(max_size=4),
    st.lists(st.integers(min_value=0, max_value=3), max_size=3),
)
_TREE = st.dictionaries(
    _KEY,
    st.recursive(
        _LEAF,
        lambda children: st.dictionaries(_KEY, children, max_size=3),
        max_leaves=8,
    ),
    max_size=3,
)


def _leaf_paths(tree: dict[str, Any], prefix: tuple[str, ...] = ()) -> list[tuple[str, ...]]:
    paths: list[tuple[str, ...]] = []
    for key, value in tree.items():
        if isinstance(value, dict) and value:
            paths.extend(_leaf_paths(value, (*prefix, key)))
        else:
            paths.append((*prefix, key))
    return paths


def _lookup(tree: dict[str, Any], path: tuple[str, ...]) -> Any:
    cursor: Any = tree
    for part in path:
        cursor = cursor[part]
    return cursor


def test_nested_mappings_merge_and_scalars_override() -> None:
    base = {"database": {"url": "postgresql://base", "pool": {"min": 2, "max": 10}}}
    overlay = {"database": {"pool": {"max": 20}}}

    merged = merge_config(base, overlay)

    assert merged == {"database": {"url": "postgresql://base", "pool": {"min": 2, "max": 20}}}


def test_lists_are_replaced_not_concatenated() -> None:
    merged = merge_config({"origins": ["a", "b"]}, {"origins": ["c"]})

    assert merged == {"origins": ["c"]}


def test_mapping_overlay_replaces_scalar_base() -> None:
    merged = merge_config({"cache": False}, {"cache": {"enabled": True}})

    assert merged == {"cache": {"enabled": True}}


def test_missing_overlay_values_are_skipped() -> None:
    merged = merge_config({"env": {"PORT": 3000}}, {"env": {"PORT": MISSING, "HOST": "h"}})

    assert merged == {"env": {"PORT": 3000, "HOST": "h"}}


def test_merge_does_not_mutate_or_alias_inputs() -> None:
    base = {"security": {"cors": {"origin": ["a"]}}}
    overlay = {"security": {"rateLimit": {"enabled": True}}}
    base_before = copy.deepcopy(base)
    overlay_before = copy.deepcopy(overlay)

    merged = merge_config(base, overlay)
    merged["security"]["cors"]["origin"].append("mutated")
    merged["security"]["rateLimit"]["enabled"] = False

    assert base == base_before
    assert overlay == overlay_before


def test_deep_copy_tree_detaches_nested_containers() -> None:
    source = {"a": {"b": [1, {"c": 2}]}}

    copied = deep_copy_tree(source)
    copied["a"]["b"][1]["c"] = 99

    assert source["a"]["b"][1]["c"] == 2


@settings(max_examples=75, derandomize=True, deadline=None)
@given(base=_TREE, overlay=_TREE)
def test_property_overlay_leaves_win(base: dict[str, Any], overlay: dict[str, Any]) -> None:
    merged = merge_config(base, overlay)

    for path in _leaf_paths(overlay):
        value = _lookup(overlay, path)
        if isinstance(value, dict):
            # An empty overlay mapping merges into a base mapping without replacing it.
            assert isinstance(_lookup(merged, path), dict)
            continue
        assert _lookup(merged, path) == value


@settings(max_examples=75, derandomize=True, deadline=None)
@given(base=_TREE)
def test_property_empty_overlay_is_identity(base: dict[str, Any]) -> None:
    assert merge_config(base, {}) == base
    assert merge_config({}, base) == base
