"""
aggregate-planner - conflict-resolution rules for feature-model aggregation.

File: src/aggregate_planner/domain/overrides.py

Purpose
- Model the artifact and configuration override rules attached to every aggregate.
- Render rules in the textual form consumed by the aggregation backend.

Functional requirements
- Rule lists are ordered; the first matching artifact rule decides the policy.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from aggregate_planner.domain.models import ArtifactCoordinate

WILDCARD: Final[str] = "*"


class ArtifactPolicy(StrEnum):
    """Which colliding artifacts survive a merge."""

    ALL = "ALL"
    FIRST = "FIRST"
    HIGHEST = "HIGHEST"


class ConfigurationPolicy(StrEnum):
    """How colliding configuration blocks are combined."""

    MERGE_LATEST = "MERGE_LATEST"


@dataclass(frozen=True, slots=True)
class ArtifactOverride:
    """Artifact rule; ``None`` type or version matches any."""

    group_id: str
    artifact_id: str
    policy: ArtifactPolicy
    type: str | None = None
    version: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "policy", ArtifactPolicy(self.policy))

    def matches(self, coordinate: ArtifactCoordinate) -> bool:
        return (
            _field_matches(self.group_id, coordinate.group_id)
            and _field_matches(self.artifact_id, coordinate.artifact_id)
            and _field_matches(self.type, coordinate.type)
            and _field_matches(self.version, coordinate.version)
        )

    def render(self) -> str:
        if self.type is None and self.version is None:
            return f"{self.group_id}:{self.artifact_id}:{self.policy.value}"
        return (
            f"{self.group_id}:{self.artifact_id}:{self.type or WILDCARD}:"
            f"{self.version or WILDCARD}:{self.policy.value}"
        )


@dataclass(frozen=True, slots=True)
class ConfigurationOverride:
    """Configuration rule keyed by a PID pattern (``*`` matches every PID)."""

    pattern: str
    policy: ConfigurationPolicy

    def __post_init__(self) -> None:
        object.__setattr__(self, "policy", ConfigurationPolicy(self.policy))

    def render(self) -> str:
        return f"{self.pattern}={self.policy.value}"


def select_artifact_override(
    rules: Sequence[ArtifactOverride], coordinate: ArtifactCoordinate
) -> ArtifactOverride | None:
    """Return the first rule matching ``coordinate``."""

    for rule in rules:
        if rule.matches(coordinate):
            return rule
    return None


def _field_matches(pattern: str | None, value: str) -> bool:
    return pattern is None or pattern == WILDCARD or pattern == value


__all__ = [
    "WILDCARD",
    "ArtifactOverride",
    "ArtifactPolicy",
    "ConfigurationOverride",
    "ConfigurationPolicy",
    "select_artifact_override",
]
