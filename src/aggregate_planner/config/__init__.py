"""
aggregate-planner config package public API.

File: src/aggregate_planner/config/__init__.py

Purpose
- Export config loading/validation entrypoints and public error types.

Functional requirements
- Support loading from ``aggregate-planner.toml`` + ``AGGREGATE_PLANNER_`` env overrides.
- Fail fast with clear structured validation/load errors.
"""

from aggregate_planner.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    ConfigLoadError,
    dump_effective_config,
    load_config,
    normalize_paths,
)
from aggregate_planner.config.schema import (
    DEFAULT_CONFIG,
    PATH_FIELDS,
    ConfigSchemaVersion,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    PlannerConfig,
    addons_from_config,
    assert_valid_config,
    default_config,
    merge_config,
    migration_guidance,
    sdk_from_config,
    validate_config,
)

__all__ = [
    "ConfigLoadError",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "PATH_FIELDS",
    "PlannerConfig",
    "addons_from_config",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "load_config",
    "merge_config",
    "migration_guidance",
    "normalize_paths",
    "sdk_from_config",
    "validate_config",
]
