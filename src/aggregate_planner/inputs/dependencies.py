"""YAML build description: direct dependencies and dependency management."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Final, cast

import yaml

from aggregate_planner.domain.models import DEFAULT_ARTIFACT_TYPE, ArtifactCoordinate
from aggregate_planner.planning.artifact_lookup import ArtifactLookup

DEFAULT_DEPENDENCIES_FILE: Final[str] = "dependencies.yaml"

_SECTIONS: Final[tuple[str, ...]] = ("dependencies", "dependency_management")
_ENTRY_KEYS: Final[frozenset[str]] = frozenset(
    {"group_id", "artifact_id", "version", "type", "classifier"}
)


class DependencyFileError(ValueError):
    """Raised when the build description cannot be read or is malformed."""


def load_dependencies(path: str | Path, *, required: bool = True) -> ArtifactLookup:
    """Load a build description into an ``ArtifactLookup``; absent optional files are empty."""

    source = Path(path)
    if not source.exists():
        if required:
            raise DependencyFileError(f"dependencies file not found: {source}")
        return ArtifactLookup()

    try:
        with source.open("r", encoding="utf-8") as handle:
            loaded = cast("object", yaml.safe_load(handle))
    except yaml.YAMLError as exc:
        raise DependencyFileError(f"invalid YAML in {source}: {exc}") from exc
    except OSError as exc:
        raise DependencyFileError(f"unable to read dependencies file {source}: {exc}") from exc

    return parse_dependencies(loaded, source=str(source))


def parse_dependencies(payload: object, *, source: str = "<memory>") -> ArtifactLookup:
    if payload is None:
        return ArtifactLookup()
    if not isinstance(payload, Mapping):
        raise DependencyFileError(f"{source}: root must be a mapping")

    unknown = sorted(str(key) for key in payload if key not in _SECTIONS)
    if unknown:
        raise DependencyFileError(f"{source}: unknown sections {unknown}")

    sections: dict[str, tuple[ArtifactCoordinate, ...]] = {}
    for section in _SECTIONS:
        raw = payload.get(section)
        if raw is None:
            sections[section] = ()
            continue
        if not isinstance(raw, list):
            raise DependencyFileError(f"{source}: {section} must be a list")
        sections[section] = tuple(
            _parse_entry(item, f"{source}: {section}[{index}]") for index, item in enumerate(raw)
        )

    return ArtifactLookup(sections["dependencies"], sections["dependency_management"])


def _parse_entry(item: object, path: str) -> ArtifactCoordinate:
    try:
        if isinstance(item, str):
            return ArtifactCoordinate.parse(item)
        if isinstance(item, Mapping):
            unknown = sorted(str(key) for key in item if key not in _ENTRY_KEYS)
            if unknown:
                raise DependencyFileError(f"{path}: unknown fields {unknown}")
            classifier = item.get("classifier")
            return ArtifactCoordinate(
                group_id=_text(item.get("group_id")),
                artifact_id=_text(item.get("artifact_id")),
                version=_text(item.get("version")),
                type=_text(item.get("type", DEFAULT_ARTIFACT_TYPE)),
                classifier=None if classifier is None else _text(classifier),
            )
    except DependencyFileError:
        raise
    except ValueError as exc:
        raise DependencyFileError(f"{path}: {exc}") from exc
    raise DependencyFileError(f"{path}: expected a Maven id string or a mapping")


def _text(value: object) -> str:
    # YAML reads unquoted versions such as 1.0 as numbers.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return cast("str", value)


__all__ = [
    "DEFAULT_DEPENDENCIES_FILE",
    "DependencyFileError",
    "load_dependencies",
    "parse_dependencies",
]
