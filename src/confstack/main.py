"""
confstack — process entrypoint

File: src/confstack/main.py
Last updated: 2026-02-12

Purpose
- Turn a CLI run into a process exit status for ``python -m confstack`` and the
  ``confstack`` console script.

Functional requirements
- 0 success, 1 validation failed, 2 configuration error, 3 internal error.
- A configuration failure anywhere in the exception chain (unknown environment,
  unreadable or malformed document) maps to 2 with a one-line ``error:`` message.
- Anything else maps to 3 and prints the traceback to stderr.
"""

from __future__ import annotations

import sys
import traceback
from collections.abc import Iterator, Sequence
from enum import IntEnum
from typing import Final

import yaml

from confstack.config.errors import ConfigError
from confstack.ui.cli import run_cli


class ExitCode(IntEnum):
    SUCCESS = 0
    VALIDATION_FAILED = 1
    CONFIG_ERROR = 2
    INTERNAL_ERROR = 3


_CONFIG_FAILURES: Final[tuple[type[BaseException], ...]] = (
    ConfigError,
    yaml.YAMLError,
    FileNotFoundError,
    NotADirectoryError,
    PermissionError,
)


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    try:
        code: object = run_cli(argv)
    except SystemExit as exc:
        code = exc.code
    except Exception as exc:
        return _report(exc)
    return _as_exit_code(code)


def _as_exit_code(code: object) -> int:
    """Clamp a handler result or ``SystemExit`` payload onto ``ExitCode``."""

    if code is None:
        return ExitCode.SUCCESS
    if isinstance(code, int) and code in tuple(ExitCode):
        return int(code)
    if isinstance(code, str) and code.strip():
        sys.stderr.write(f"{code.strip()}\n")
    return ExitCode.INTERNAL_ERROR


def _report(exc: Exception) -> int:
    if any(isinstance(item, _CONFIG_FAILURES) for item in _causes(exc)):
        message = str(exc).strip() or type(exc).__name__
        sys.stderr.write(f"error: {message}\n")
        return ExitCode.CONFIG_ERROR
    traceback.print_exception(exc, file=sys.stderr)
    return ExitCode.INTERNAL_ERROR


def _causes(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None


__all__ = ["ExitCode", "cli_entrypoint"]
