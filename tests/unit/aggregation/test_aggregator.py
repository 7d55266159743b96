"""
aggregate-planner - unit tests for aggregator implementations

File: tests/unit/aggregation/test_aggregator.py
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from aggregate_planner.aggregation.aggregator import (
    Aggregator,
    AggregatorError,
    RecordingAggregator,
    SpecFileAggregator,
)
from aggregate_planner.aggregation.runner import run_aggregation
from aggregate_planner.domain.models import (
    AggregateBatch,
    AggregateSpec,
    AggregationPhase,
    PlatformSdk,
)
from aggregate_planner.planning.artifact_lookup import ArtifactLookup


@pytest.mark.unit
def test_implementations_satisfy_the_protocol(tmp_path: Path) -> None:
    assert isinstance(RecordingAggregator(), Aggregator)
    assert isinstance(SpecFileAggregator(tmp_path), Aggregator)


@pytest.mark.unit
def test_references_to_unpublished_classifiers_are_rejected() -> None:
    aggregator = RecordingAggregator()
    final = AggregateBatch(
        AggregationPhase.FINAL,
        (
            AggregateSpec(
                classifier="aggregated-author",
                include_classifiers=("product-aggregated-author", "user-aggregated-author"),
            ),
        ),
    )

    with pytest.raises(AggregatorError, match="product-aggregated-author, user-aggregated-author"):
        aggregator.aggregate(final)

    assert aggregator.batches == ()
    assert aggregator.published == frozenset()


@pytest.mark.unit
def test_spec_file_aggregator_writes_one_numbered_file_per_phase(tmp_path: Path) -> None:
    output_dir = tmp_path / "target" / "aggregates"
    aggregator = SpecFileAggregator(output_dir)

    run_aggregation(
        {"(default)": "all.json"},
        lookup=ArtifactLookup(),
        aggregator=aggregator,
        sdk=PlatformSdk(version="2024.3.15"),
    )

    assert [path.name for path in aggregator.written] == [
        "01-user-aggregates.yaml",
        "02-product-aggregates.yaml",
        "03-final-aggregates.yaml",
    ]
    assert sorted(path.name for path in output_dir.iterdir()) == [
        path.name for path in aggregator.written
    ]

    final = yaml.safe_load((output_dir / "03-final-aggregates.yaml").read_text(encoding="utf-8"))
    assert final["phase"] == "final"
    assert [item["classifier"] for item in final["aggregates"]] == [
        "aggregated-author",
        "aggregated-publish",
    ]
    assert final["aggregates"][0]["artifacts_overrides"][-1] == "*:*:jar:*:ALL"

    product = yaml.safe_load(
        (output_dir / "02-product-aggregates.yaml").read_text(encoding="utf-8")
    )
    assert product["aggregates"][0]["include_artifacts"] == [
        "com.adobe.aem:aem-sdk-api:slingosgifeature:aem-author-sdk:2024.3.15"
    ]


@pytest.mark.unit
def test_unwritable_output_dir_is_an_aggregator_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    aggregator = SpecFileAggregator(blocker / "aggregates")

    with pytest.raises(AggregatorError, match="unable to write"):
        aggregator.aggregate(AggregateBatch(AggregationPhase.USER, ()))

    assert aggregator.written == ()
