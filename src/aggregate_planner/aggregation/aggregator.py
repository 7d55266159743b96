"""
aggregate-planner - aggregator hand-off.

File: src/aggregate_planner/aggregation/aggregator.py

Purpose
- Define the contract of the backend that merges feature models per aggregate spec.
- Provide an in-memory recorder and a YAML hand-off writer.

Functional requirements
- A batch may only reference classifiers that an earlier batch published.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

import yaml

from aggregate_planner.domain.models import AggregateBatch
from aggregate_planner.utils.fs import atomic_write

logger = logging.getLogger(__name__)


class AggregatorError(RuntimeError):
    """Raised when a batch cannot be handed to the aggregator."""


@runtime_checkable
class Aggregator(Protocol):
    """Consumes one batch: resolves sources, applies overrides, publishes by classifier."""

    def aggregate(self, batch: AggregateBatch) -> None: ...


class _PublishingAggregator:
    """Shared bookkeeping of batches and published classifiers."""

    def __init__(self) -> None:
        self._batches: list[AggregateBatch] = []
        self._published: set[str] = set()

    @property
    def batches(self) -> tuple[AggregateBatch, ...]:
        return tuple(self._batches)

    @property
    def published(self) -> frozenset[str]:
        return frozenset(self._published)

    def aggregate(self, batch: AggregateBatch) -> None:
        self._check_references(batch)
        self._publish(batch)
        self._batches.append(batch)
        self._published.update(batch.classifiers)
        logger.info(
            "aggregation_batch_published",
            extra={"phase": batch.phase.value, "classifiers": list(batch.classifiers)},
        )

    def _publish(self, batch: AggregateBatch) -> None:
        return None

    def _check_references(self, batch: AggregateBatch) -> None:
        for spec in batch.specs:
            missing = [name for name in spec.include_classifiers if name not in self._published]
            if missing:
                raise AggregatorError(
                    f"{spec.classifier} references unpublished aggregates: {', '.join(missing)}"
                )


class RecordingAggregator(_PublishingAggregator):
    """Keeps every batch in memory."""


class SpecFileAggregator(_PublishingAggregator):
    """Writes each batch as ``<NN>-<phase>-aggregates.yaml`` for an external backend."""

    def __init__(self, output_dir: str | Path) -> None:
        super().__init__()
        self._output_dir = Path(output_dir)
        self._written: list[Path] = []

    @property
    def written(self) -> tuple[Path, ...]:
        return tuple(self._written)

    def _publish(self, batch: AggregateBatch) -> None:
        index = len(self._written) + 1
        destination = self._output_dir / f"{index:02d}-{batch.phase.value}-aggregates.yaml"
        rendered = yaml.safe_dump(batch.to_dict(), sort_keys=False, default_flow_style=False)
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
            atomic_write(destination, rendered)
        except OSError as exc:
            raise AggregatorError(f"unable to write {destination}: {exc}") from exc
        self._written.append(destination)


__all__ = ["Aggregator", "AggregatorError", "RecordingAggregator", "SpecFileAggregator"]
