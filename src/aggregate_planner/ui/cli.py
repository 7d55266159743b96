"""Command-line interface router for aggregate-planner."""

from __future__ import annotations

import argparse
import json
import logging
import os
import secrets
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Final

import yaml

from aggregate_planner.aggregation import (
    Aggregator,
    AggregatorError,
    AggregationResult,
    RecordingAggregator,
    SpecFileAggregator,
    run_aggregation,
    should_skip,
)
from aggregate_planner.config import (
    ConfigLoadError,
    ConfigValidationError,
    addons_from_config,
    dump_effective_config,
    load_config,
    sdk_from_config,
)
from aggregate_planner.inputs import (
    DependencyFileError,
    RunmodeMappingError,
    load_dependencies,
    load_properties,
    load_runmode_mapping,
)
from aggregate_planner.main import ExitCode
from aggregate_planner.observability import correlation_scope, setup_logging, shutdown_logging
from aggregate_planner.planning.artifact_lookup import RequiredArtifactNotFoundError

OUTPUT_FORMATS: Final[tuple[str, ...]] = ("json", "yaml")

logger = logging.getLogger(__name__)


@dataclass
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code.

    Not frozen: raising sets ``__cause__`` and ``__traceback__`` on the instance.
    """

    message: str
    exit_code: int = int(ExitCode.AGGREGATION_FAILED)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="aggregate-planner",
        description=(
            "aggregate-planner - plan AEM feature-model aggregates from a runmode mapping.\n\n"
            "Common workflows:\n"
            "  aggregate-planner plan                 Print the three aggregate batches\n"
            "  aggregate-planner aggregate            Write batch files for the aggregator\n"
            "  aggregate-planner config               Show the effective configuration\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to TOML config (default: ./aggregate-planner.toml if present).",
    )
    common.add_argument(
        "--mapping",
        dest="mapping_path",
        default=None,
        help="Runmode mapping file (default: <generated_features_dir>/<mapping_file>).",
    )
    common.add_argument(
        "--dependencies",
        dest="dependencies_path",
        default=None,
        help="YAML file listing project dependencies and dependency management.",
    )
    common.add_argument(
        "--sdk-version",
        default=None,
        help="Use this SDK version instead of looking it up in the dependencies.",
    )
    common.add_argument(
        "--output-dir",
        default=None,
        help="Directory receiving aggregate batch files.",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Log at DEBUG level.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # plan ----------------------------------------------------------------
    plan_parser = subparsers.add_parser(
        "plan",
        parents=[common],
        help="Compute the user, product and final aggregates without writing them",
        description=(
            "Build the runmode models and print every aggregate batch.\n\n"
            "Examples:\n"
            "  aggregate-planner plan\n"
            "  aggregate-planner plan --format yaml --sdk-version 2024.1.0\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    plan_parser.add_argument(
        "--format",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        default="json",
        help="Output format (default: json)",
    )
    plan_parser.set_defaults(handler=_cmd_plan)

    # aggregate -----------------------------------------------------------
    aggregate_parser = subparsers.add_parser(
        "aggregate",
        parents=[common],
        help="Run the three aggregation phases and write batch files",
        description=(
            "Hand the user, product and final batches to the aggregator in order.\n"
            "Setting the configured skip variable (default AEM_ANALYSER_SKIP) skips the run.\n\n"
            "Examples:\n"
            "  aggregate-planner aggregate\n"
            "  aggregate-planner aggregate --output-dir target/aggregates --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    aggregate_parser.add_argument(
        "--json", action="store_true", help="Emit deterministic JSON output"
    )
    aggregate_parser.set_defaults(handler=_cmd_aggregate)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Print the effective configuration as JSON",
    )
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return int(ExitCode.CONFIG_ERROR)

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


def main(argv: Sequence[str] | None = None) -> int:
    return run_cli(argv)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_plan(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    result = _run_logged(args, config, RecordingAggregator())

    payload = result.to_dict()
    if args.output_format == "yaml":
        sys.stdout.write(yaml.safe_dump(payload, sort_keys=False, default_flow_style=False))
    else:
        _emit_json(payload)
    return int(ExitCode.SUCCESS)


def _cmd_aggregate(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    skip_env_var = config["run"]["skip_env_var"]

    if should_skip(skip_env_var, os.environ):
        message = f"Skipping AEM analyser plugin as variable {skip_env_var} is set."
        if _flag(args, "json"):
            _emit_json({"command": "aggregate", "skipped": True, "reason": message})
        else:
            print(message, file=sys.stderr)
        return int(ExitCode.SUCCESS)

    aggregator = SpecFileAggregator(config["paths"]["output_dir"])
    result = _run_logged(args, config, aggregator)

    if _flag(args, "json"):
        _emit_json(
            {
                "command": "aggregate",
                "skipped": False,
                "written": [path.as_posix() for path in aggregator.written],
                "final_classifiers": sorted(result.final_classifiers),
            }
        )
        return int(ExitCode.SUCCESS)

    for classifier in sorted(result.final_classifiers):
        print(classifier)
    return int(ExitCode.SUCCESS)


def _cmd_config(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    print(dump_effective_config(config))
    return int(ExitCode.SUCCESS)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, object] = {
        "sdk.version": _optional_str(getattr(args, "sdk_version", None)),
        "paths.dependencies_file": _absolute(getattr(args, "dependencies_path", None)),
        "paths.output_dir": _absolute(getattr(args, "output_dir", None)),
    }
    try:
        return load_config(
            _optional_str(getattr(args, "config_path", None)),
            cli_overrides=overrides,
        )
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=int(ExitCode.CONFIG_ERROR)) from exc


def _run_logged(
    args: argparse.Namespace,
    config: Mapping[str, Any],
    aggregator: Aggregator,
) -> AggregationResult:
    run_id = _new_run_id()
    setup_logging(
        config["observability"],
        run_id=run_id,
        level="DEBUG" if _flag(args, "verbose") else None,
    )
    try:
        with correlation_scope(correlation_id=str(args.command)):
            logger.info("cli_command_started", extra={"command": args.command})
            return _run(args, config, aggregator)
    finally:
        shutdown_logging()


def _run(
    args: argparse.Namespace,
    config: Mapping[str, Any],
    aggregator: Aggregator,
) -> AggregationResult:
    paths = config["paths"]
    mapping_arg = _optional_str(getattr(args, "mapping_path", None))
    explicit_dependencies = getattr(args, "dependencies_path", None) is not None

    try:
        if mapping_arg is not None:
            runmodes = load_properties(mapping_arg)
        else:
            runmodes = load_runmode_mapping(
                paths["generated_features_dir"], filename=paths["mapping_file"]
            )
        lookup = load_dependencies(paths["dependencies_file"], required=explicit_dependencies)
        return run_aggregation(
            runmodes,
            lookup=lookup,
            aggregator=aggregator,
            sdk=sdk_from_config(config),
            addons=addons_from_config(config),
        )
    except (RunmodeMappingError, DependencyFileError) as exc:
        raise CLIError(str(exc), exit_code=int(ExitCode.CONFIG_ERROR)) from exc
    except RequiredArtifactNotFoundError as exc:
        raise CLIError(str(exc), exit_code=int(ExitCode.ARTIFACT_NOT_FOUND)) from exc
    except AggregatorError as exc:
        raise CLIError(
            f"aggregation failed: {exc}", exit_code=int(ExitCode.AGGREGATION_FAILED)
        ) from exc


def _new_run_id() -> str:
    stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
    return f"{stamp}-{secrets.token_hex(4)}"


def _absolute(value: object) -> str | None:
    text = _optional_str(value)
    if text is None:
        return None
    return Path(text).expanduser().resolve().as_posix()


def _optional_str(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = [
    "CLIError",
    "build_parser",
    "main",
    "run_cli",
]
