"""Unit tests for the CLI renderer."""

from __future__ import annotations

import io

import pytest

from confstack.ui.render import CLIRenderer, create_renderer


class _TTY(io.StringIO):
    def isatty(self) -> bool:
        return True


def test_plain_output_without_tty() -> None:
    stream = io.StringIO()
    renderer = create_renderer(stream=stream)

    renderer.kv("Environment", "staging")
    renderer.ok("billing")
    renderer.fail("cache")
    renderer.items(["a", "b"])

    assert not renderer.color
    assert stream.getvalue().splitlines() == [
        "Environment: staging",
        "  OK  billing",
        "  FAIL  cache",
        "  - a",
        "  - b",
    ]


def test_color_respects_tty_and_no_color(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NO_COLOR", raising=False)
    assert CLIRenderer(stream=_TTY()).color
    assert not CLIRenderer(stream=_TTY(), no_color=True).color

    monkeypatch.setenv("NO_COLOR", "1")
    assert not CLIRenderer(stream=_TTY()).color


def test_table_aligns_columns_and_skips_empty() -> None:
    stream = io.StringIO()
    renderer = CLIRenderer(stream=stream)

    renderer.table(("Service", "Provider"), [])
    assert stream.getvalue() == ""

    renderer.table(("Service", "Provider"), [("database", "postgresql"), ("cache", "redis")])
    assert stream.getvalue().splitlines() == [
        "  Service   Provider",
        "  --------  ----------",
        "  database  postgresql",
        "  cache     redis",
    ]


def test_next_steps_section() -> None:
    stream = io.StringIO()
    CLIRenderer(stream=stream).next_steps(["confstack validate --env production"])

    assert stream.getvalue() == "\nNext steps:\n  $ confstack validate --env production\n"
