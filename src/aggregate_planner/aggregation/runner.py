"""Strictly sequenced three-phase aggregation driver."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from aggregate_planner.domain.models import AggregateBatch
from aggregate_planner.planning.aggregate_plan import AggregatePlanGenerator
from aggregate_planner.planning.model_builder import build_model
from aggregate_planner.planning.pruner import prune_models

if TYPE_CHECKING:
    from aggregate_planner.aggregation.aggregator import Aggregator
    from aggregate_planner.domain.models import Addon, PlatformSdk
    from aggregate_planner.planning.artifact_lookup import ArtifactLookup
    from aggregate_planner.planning.model_builder import ModelSet

AGGREGATES_CONTEXT_KEY: Final[str] = f"{__name__}-aggregates"

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AggregationResult:
    """Outcome of a full run; replaces shared build-context bookkeeping."""

    model: ModelSet
    batches: tuple[AggregateBatch, ...]
    final_classifiers: frozenset[str]

    def batch(self, phase: str) -> AggregateBatch:
        for item in self.batches:
            if item.phase == phase:
                return item
        raise KeyError(phase)

    def as_context(self) -> dict[str, frozenset[str]]:
        return {AGGREGATES_CONTEXT_KEY: self.final_classifiers}

    def to_dict(self) -> dict[str, object]:
        return {
            "model": self.model.to_dict(),
            "batches": [item.to_dict() for item in self.batches],
            "final_classifiers": sorted(self.final_classifiers),
        }


def run_aggregation(
    runmodes: Mapping[str, str],
    *,
    lookup: ArtifactLookup,
    aggregator: Aggregator,
    sdk: PlatformSdk | None = None,
    addons: Sequence[Addon] | None = None,
) -> AggregationResult:
    """
    Plan and hand off the user, product, and final aggregates in that order.

    Each batch is fully consumed by ``aggregator`` before the next one is built.
    A missing SDK raises ``RequiredArtifactNotFoundError`` after the user batch
    has already been handed off; nothing is rolled back.
    """

    model = prune_models(build_model(runmodes))
    generator = AggregatePlanGenerator(lookup, sdk=sdk, addons=addons)
    batches: list[AggregateBatch] = []

    user_batch = generator.user_aggregates(model)
    _hand_off(aggregator, user_batch, batches)

    product_batch = generator.product_aggregates()
    _hand_off(aggregator, product_batch, batches)

    final_batch = generator.final_aggregates(model.keys())
    _hand_off(aggregator, final_batch, batches)

    return AggregationResult(
        model=model,
        batches=tuple(batches),
        final_classifiers=frozenset(final_batch.classifiers),
    )


def should_skip(env_var: str | None, environ: Mapping[str, str]) -> bool:
    """True when ``env_var`` is set to a truthy value."""

    if not env_var:
        return False
    raw = environ.get(env_var)
    if raw is None:
        return False
    return raw.strip().lower() in _TRUTHY


def _hand_off(
    aggregator: Aggregator,
    batch: AggregateBatch,
    batches: list[AggregateBatch],
) -> None:
    logger.info(
        "aggregation_phase_started",
        extra={"phase": batch.phase.value, "aggregates": len(batch)},
    )
    aggregator.aggregate(batch)
    batches.append(batch)
    logger.info("aggregation_phase_completed", extra={"phase": batch.phase.value})


__all__ = [
    "AGGREGATES_CONTEXT_KEY",
    "AggregationResult",
    "run_aggregation",
    "should_skip",
]
