"""Command-line surface of aggregate-planner."""

from aggregate_planner.ui.cli import CLIError, build_parser, main, run_cli

__all__ = ["CLIError", "build_parser", "main", "run_cli"]
