"""
aggregate-planner - configuration schema and validation.

File: src/aggregate_planner/config/schema.py

Purpose
- Define authoritative configuration defaults and strict validation rules.

What should be included in this file
- Schema versioning and migration guidance.
- Validation rules for required fields, types, and enums.
- Deterministic deep-merge helpers.

Functional requirements
- Validate config payloads and return structured errors (field path + message).

Non-functional requirements
- Keep rules deterministic and easy to audit.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, NotRequired, TypedDict

from aggregate_planner.constants import (
    CONFIG_SCHEMA_VERSION,
    DEFAULT_GENERATED_FEATURES_DIR,
    DEFAULT_LOG_DIR,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_SKIP_ENV_VAR,
)
from aggregate_planner.domain.models import Addon, PlatformSdk
from aggregate_planner.inputs.dependencies import DEFAULT_DEPENDENCIES_FILE
from aggregate_planner.inputs.runmode_mapping import DEFAULT_MAPPING_FILE

ConfigSchemaVersion: Final[int] = CONFIG_SCHEMA_VERSION

_ENV_NAME_PATTERN = re.compile(r"^[A-Z_][A-Z0-9_]*$")
_COORDINATE_PART_PATTERN = re.compile(r"^[^\s:]+$")
_LOG_LEVELS: Final[tuple[str, ...]] = ("CRITICAL", "DEBUG", "ERROR", "INFO", "WARNING")

# Config paths that should be normalized relative to config file location.
PATH_FIELDS: Final[tuple[tuple[str, ...], ...]] = (
    ("paths", "generated_features_dir"),
    ("paths", "dependencies_file"),
    ("paths", "output_dir"),
    ("observability", "log_dir"),
)


class MetaConfig(TypedDict):
    schema_version: int


class SdkConfig(TypedDict):
    group_id: str
    artifact_id: str
    version: NotRequired[str | None]


class AddonConfig(TypedDict):
    group_id: str
    artifact_id: str
    classifier: str


class PathsConfig(TypedDict):
    generated_features_dir: str
    mapping_file: str
    dependencies_file: str
    output_dir: str


class RunConfig(TypedDict):
    skip_env_var: str


class ObservabilityConfig(TypedDict):
    log_level: Literal["CRITICAL", "DEBUG", "ERROR", "INFO", "WARNING"]
    log_dir: str
    log_to_console: bool


class PlannerConfig(TypedDict):
    meta: MetaConfig
    sdk: SdkConfig
    addons: list[AddonConfig] | None
    paths: PathsConfig
    run: RunConfig
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[PlannerConfig] = {
    "meta": {
        "schema_version": ConfigSchemaVersion,
    },
    "sdk": {
        "group_id": "com.adobe.aem",
        "artifact_id": "aem-sdk-api",
        "version": None,
    },
    "addons": None,
    "paths": {
        "generated_features_dir": DEFAULT_GENERATED_FEATURES_DIR,
        "mapping_file": DEFAULT_MAPPING_FILE,
        "dependencies_file": DEFAULT_DEPENDENCIES_FILE,
        "output_dir": DEFAULT_OUTPUT_DIR,
    },
    "run": {
        "skip_env_var": DEFAULT_SKIP_ENV_VAR,
    },
    "observability": {
        "log_level": "INFO",
        "log_dir": DEFAULT_LOG_DIR,
        "log_to_console": False,
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized config when no issues were found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_config() -> PlannerConfig:
    """Return a deep copy of deterministic built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def migration_guidance(found_version: int) -> str:
    """Return deterministic migration guidance for schema version mismatch."""

    if found_version < ConfigSchemaVersion:
        return (
            f"schema version {found_version} is older than supported {ConfigSchemaVersion}; "
            "upgrade aggregate-planner.toml to the current schema"
        )
    if found_version > ConfigSchemaVersion:
        return (
            f"schema version {found_version} is newer than supported {ConfigSchemaVersion}; "
            "upgrade the aggregate-planner runtime"
        )
    return "schema version is current"


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``; lists replace wholesale."""

    merged = _deep_copy_mapping(base)
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate config and return structured issues with deterministic paths."""

    issues = _IssueCollector()
    root = _as_object(config, "<root>", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    normalized = _validate_root(root, issues)
    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def sdk_from_config(config: Mapping[str, Any]) -> PlatformSdk:
    section = config["sdk"]
    return PlatformSdk(
        group_id=section["group_id"],
        artifact_id=section["artifact_id"],
        version=section.get("version"),
    )


def addons_from_config(config: Mapping[str, Any]) -> tuple[Addon, ...] | None:
    """Configured addons, or ``None`` when the built-in defaults apply."""

    raw = config.get("addons")
    if raw is None:
        return None
    return tuple(Addon.from_dict(item) for item in raw)


def _validate_root(payload: Mapping[str, object], issues: _IssueCollector) -> dict[str, Any]:
    allowed = {"meta", "sdk", "addons", "paths", "run", "observability"}
    _reject_unknown_keys(payload, allowed, "", issues)
    _require_keys(payload, allowed - {"addons"}, "", issues)

    out: dict[str, Any] = {}
    _section(payload, key="meta", issues=issues, validator=_validate_meta, out=out)
    _section(payload, key="sdk", issues=issues, validator=_validate_sdk, out=out)
    _section(payload, key="paths", issues=issues, validator=_validate_paths, out=out)
    _section(payload, key="run", issues=issues, validator=_validate_run, out=out)
    _section(
        payload, key="observability", issues=issues, validator=_validate_observability, out=out
    )
    out["addons"] = _validate_addons(payload.get("addons"), "addons", issues)
    return out


def _section(
    payload: Mapping[str, object],
    *,
    key: str,
    issues: _IssueCollector,
    validator: Callable[[dict[str, object], str, _IssueCollector], dict[str, Any]],
    out: dict[str, Any],
) -> None:
    raw = payload.get(key)
    if raw is None:
        return
    section_obj = _as_object(raw, key, issues)
    if section_obj is None:
        return
    out[key] = validator(section_obj, key, issues)


def _validate_meta(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    _reject_unknown_keys(payload, {"schema_version"}, path, issues)
    _require_keys(payload, {"schema_version"}, path, issues)

    out: dict[str, Any] = {}
    if "schema_version" in payload:
        field = _join(path, "schema_version")
        parsed = _as_int(payload["schema_version"], field, issues, minimum=1)
        if parsed is not None:
            out["schema_version"] = parsed
            if parsed != ConfigSchemaVersion:
                issues.add(field, migration_guidance(parsed))
    return out


def _validate_sdk(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    _reject_unknown_keys(payload, {"group_id", "artifact_id", "version"}, path, issues)
    _require_keys(payload, {"group_id", "artifact_id"}, path, issues)

    out: dict[str, Any] = {"version": None}
    for key in ("group_id", "artifact_id"):
        if key in payload:
            parsed = _as_coordinate_part(payload[key], _join(path, key), issues)
            if parsed is not None:
                out[key] = parsed
    version = payload.get("version")
    if version is not None:
        out["version"] = _as_coordinate_part(version, _join(path, "version"), issues)
    return out


def _validate_addons(
    value: object, path: str, issues: _IssueCollector
) -> list[dict[str, str]] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        issues.add(path, f"expected array of tables, got {type(value).__name__}")
        return None

    out: list[dict[str, str]] = []
    seen: set[tuple[str, str]] = set()
    for index, item in enumerate(value):
        item_path = f"{path}[{index}]"
        entry = _as_object(item, item_path, issues)
        if entry is None:
            continue
        allowed = {"group_id", "artifact_id", "classifier"}
        _reject_unknown_keys(entry, allowed, item_path, issues)
        _require_keys(entry, allowed, item_path, issues)
        parsed: dict[str, str] = {}
        for key in sorted(allowed):
            if key not in entry:
                continue
            part = _as_coordinate_part(entry[key], _join(item_path, key), issues)
            if part is not None:
                parsed[key] = part
        if len(parsed) != len(allowed):
            continue
        identity = (parsed["group_id"], parsed["artifact_id"])
        if identity in seen:
            issues.add(item_path, f"duplicate addon {identity[0]}:{identity[1]}")
            continue
        seen.add(identity)
        out.append(parsed)
    return out


def _validate_paths(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"generated_features_dir", "mapping_file", "dependencies_file", "output_dir"}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    for key in sorted(allowed):
        if key not in payload:
            continue
        parsed = _as_path_text(payload[key], _join(path, key), issues)
        if parsed is not None:
            out[key] = parsed
    mapping_file = out.get("mapping_file")
    if isinstance(mapping_file, str) and ("/" in mapping_file or "\\" in mapping_file):
        issues.add(_join(path, "mapping_file"), "must be a file name, not a path")
    return out


def _validate_run(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    _reject_unknown_keys(payload, {"skip_env_var"}, path, issues)
    _require_keys(payload, {"skip_env_var"}, path, issues)

    out: dict[str, Any] = {}
    if "skip_env_var" in payload:
        parsed = _as_env_name(payload["skip_env_var"], _join(path, "skip_env_var"), issues)
        if parsed is not None:
            out["skip_env_var"] = parsed
    return out


def _validate_observability(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"log_level", "log_dir", "log_to_console"}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    if "log_level" in payload:
        raw_level = payload["log_level"]
        level = raw_level.upper() if isinstance(raw_level, str) else raw_level
        parsed_level = _as_enum(level, _join(path, "log_level"), issues, allowed_values=_LOG_LEVELS)
        if parsed_level is not None:
            out["log_level"] = parsed_level
    if "log_dir" in payload:
        parsed_dir = _as_path_text(payload["log_dir"], _join(path, "log_dir"), issues)
        if parsed_dir is not None:
            out["log_dir"] = parsed_dir
    if "log_to_console" in payload:
        parsed_flag = _as_bool(payload["log_to_console"], _join(path, "log_to_console"), issues)
        if parsed_flag is not None:
            out["log_to_console"] = parsed_flag
    return out


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _as_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if not parsed:
        issues.add(path, "must not be empty")
        return None
    return parsed


def _as_path_text(value: object, path: str, issues: _IssueCollector) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if "\x00" in parsed:
        issues.add(path, "must not contain NUL bytes")
        return None
    return parsed


def _as_coordinate_part(value: object, path: str, issues: _IssueCollector) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if not _COORDINATE_PART_PATTERN.fullmatch(parsed):
        issues.add(path, "must not contain whitespace or ':'")
        return None
    return parsed


def _as_env_name(value: object, path: str, issues: _IssueCollector) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if not _ENV_NAME_PATTERN.fullmatch(parsed):
        issues.add(path, "must be an env var name (example: AEM_ANALYSER_SKIP)")
        return None
    return parsed


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_int(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: int | None = None,
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return value


def _as_enum(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allowed_values: tuple[str, ...],
) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if parsed not in allowed_values:
        expected = ", ".join(sorted(allowed_values))
        issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
        return None
    return parsed


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key not in allowed:
            issues.add(_join(path, key), "unknown field")


def _require_keys(
    payload: Mapping[str, object],
    required: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(required):
        if key not in payload:
            issues.add(_join(path, key), "missing required field")


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        if isinstance(value, Mapping):
            existing = target.get(key)
            if isinstance(existing, dict):
                _merge_into(existing, value)
            elif isinstance(existing, Mapping):
                nested = _deep_copy_mapping(existing)
                _merge_into(nested, value)
                target[key] = nested
            else:
                nested_new: dict[str, Any] = {}
                _merge_into(nested_new, value)
                target[key] = nested_new
        else:
            target[key] = _deep_copy_value(value)


def _deep_copy_mapping(value: Mapping[str, object]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key in sorted(value):
        out[key] = _deep_copy_value(value[key])
    return out


def _deep_copy_value(value: object) -> Any:
    if isinstance(value, Mapping):
        out: dict[str, Any] = {}
        for key, item in value.items():
            if isinstance(key, str):
                out[key] = _deep_copy_value(item)
        return out
    if isinstance(value, list):
        return [_deep_copy_value(item) for item in value]
    if isinstance(value, tuple):
        return tuple(_deep_copy_value(item) for item in value)
    return copy.deepcopy(value)


__all__ = [
    "DEFAULT_CONFIG",
    "PATH_FIELDS",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "PlannerConfig",
    "addons_from_config",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "migration_guidance",
    "sdk_from_config",
    "validate_config",
]
