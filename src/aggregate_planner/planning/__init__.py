"""
aggregate-planner - planning layer.

File: src/aggregate_planner/planning/__init__.py

Purpose
- Runmode model construction and pruning, artifact lookup, and aggregate spec generation.

Functional requirements
- Must emit only aggregates that differ from their generic parent.

Non-functional requirements
- Must produce repeatable plans given the same mapping and dependency lists.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from aggregate_planner.planning.aggregate_plan import (
    DEFAULT_ADDONS,
    FEATURE_MODEL_TYPE,
    FINAL_ARTIFACT_OVERRIDES,
    AggregatePlanGenerator,
    final_aggregate_name,
    product_aggregate_name,
    user_aggregate_name,
)
from aggregate_planner.planning.artifact_lookup import (
    ArtifactLookup,
    RequiredArtifactNotFoundError,
)
from aggregate_planner.planning.model_builder import DEFAULT_RUNMODE, ModelSet, build_model
from aggregate_planner.planning.pruner import prune_models

if TYPE_CHECKING:
    from collections.abc import Mapping


def plan_model(runmodes: Mapping[str, str]) -> ModelSet:
    """Build the runmode model and prune it to the aggregates worth creating."""

    return prune_models(build_model(runmodes))


__all__ = [
    "DEFAULT_ADDONS",
    "DEFAULT_RUNMODE",
    "FEATURE_MODEL_TYPE",
    "FINAL_ARTIFACT_OVERRIDES",
    "AggregatePlanGenerator",
    "ArtifactLookup",
    "ModelSet",
    "RequiredArtifactNotFoundError",
    "build_model",
    "final_aggregate_name",
    "plan_model",
    "product_aggregate_name",
    "prune_models",
    "user_aggregate_name",
]
