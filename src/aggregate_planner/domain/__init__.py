"""Domain models and conflict-resolution rules for aggregate planning."""

from aggregate_planner.domain.models import (
    CANONICAL_KEYS,
    STANDARD_TIERS,
    Addon,
    AggregateBatch,
    AggregateSpec,
    AggregationPhase,
    ArtifactCoordinate,
    PlatformSdk,
    Role,
    RoleTierKey,
    TierKind,
)
from aggregate_planner.domain.overrides import (
    ArtifactOverride,
    ArtifactPolicy,
    ConfigurationOverride,
    ConfigurationPolicy,
    select_artifact_override,
)

__all__ = [
    "CANONICAL_KEYS",
    "STANDARD_TIERS",
    "Addon",
    "AggregateBatch",
    "AggregateSpec",
    "AggregationPhase",
    "ArtifactCoordinate",
    "ArtifactOverride",
    "ArtifactPolicy",
    "ConfigurationOverride",
    "ConfigurationPolicy",
    "PlatformSdk",
    "Role",
    "RoleTierKey",
    "TierKind",
    "select_artifact_override",
]
