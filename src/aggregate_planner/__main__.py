"""Module entrypoint for ``python -m aggregate_planner``."""

from __future__ import annotations

from aggregate_planner.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
