"""Stable constants shared across planner layers."""

from __future__ import annotations

from typing import Final

# Schema versions for persisted contracts.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Default build layout (relative to the config file location unless overridden).
DEFAULT_GENERATED_FEATURES_DIR: Final[str] = "target/cp-conversion/fm.out"
DEFAULT_OUTPUT_DIR: Final[str] = "target/aggregates"
DEFAULT_LOG_DIR: Final[str] = "target/aggregate-planner/logs"

DEFAULT_SKIP_ENV_VAR: Final[str] = "AEM_ANALYSER_SKIP"

__all__ = [
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_GENERATED_FEATURES_DIR",
    "DEFAULT_LOG_DIR",
    "DEFAULT_OUTPUT_DIR",
    "DEFAULT_SKIP_ENV_VAR",
]
