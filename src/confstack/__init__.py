"""
confstack — layered multi-environment configuration engine.

File: src/confstack/__init__.py
Last updated: 2026-02-12

Purpose
- Package root exposing the loader, manager, and redaction entry points.
"""

from __future__ import annotations

from confstack.config import (
    ConfigLoader,
    ConfigManager,
    LoadOptions,
    LoadResult,
    get_config_manager,
    reset_config_manager,
)
from confstack.security import redact_paths

__version__ = "0.1.0"

__all__ = [
    "ConfigLoader",
    "ConfigManager",
    "LoadOptions",
    "LoadResult",
    "__version__",
    "get_config_manager",
    "redact_paths",
    "reset_config_manager",
]
