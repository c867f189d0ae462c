"""Module entrypoint for ``python -m confstack``."""

from __future__ import annotations

from confstack.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
