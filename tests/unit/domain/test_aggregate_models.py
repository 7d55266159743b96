"""
aggregate-planner - unit tests for artifact coordinates and aggregate specs

File: tests/unit/domain/test_aggregate_models.py

Purpose
- Validate Maven coordinate parsing/rendering and aggregate spec/batch invariants.
"""

from __future__ import annotations

import json

import pytest

from aggregate_planner.domain.models import (
    Addon,
    AggregateBatch,
    AggregateSpec,
    AggregationPhase,
    ArtifactCoordinate,
    PlatformSdk,
)
from aggregate_planner.domain.overrides import ArtifactOverride, ArtifactPolicy


@pytest.mark.unit
@pytest.mark.parametrize(
    ("mvn_id", "expected"),
    [
        (
            "com.adobe.aem:aem-sdk-api:2024.1.0",
            ("com.adobe.aem", "aem-sdk-api", "2024.1.0", "jar", None),
        ),
        ("g:a:zip:1.0", ("g", "a", "1.0", "zip", None)),
        (
            "g:a:slingosgifeature:aem-author-sdk:1.0",
            ("g", "a", "1.0", "slingosgifeature", "aem-author-sdk"),
        ),
    ],
)
def test_coordinate_parse_forms(mvn_id: str, expected: tuple[str | None, ...]) -> None:
    coordinate = ArtifactCoordinate.parse(mvn_id)

    assert (
        coordinate.group_id,
        coordinate.artifact_id,
        coordinate.version,
        coordinate.type,
        coordinate.classifier,
    ) == expected
    assert coordinate.to_mvn_id() == mvn_id


@pytest.mark.unit
@pytest.mark.parametrize("mvn_id", ["g:a", "g:a:b:c:d:e", "g:a b:1.0", ":a:1.0"])
def test_coordinate_parse_rejects_malformed_ids(mvn_id: str) -> None:
    with pytest.raises(ValueError):
        ArtifactCoordinate.parse(mvn_id)


@pytest.mark.unit
def test_with_feature_model_keeps_version_and_sets_type_and_classifier() -> None:
    sdk = ArtifactCoordinate("com.adobe.aem", "aem-sdk-api", "2024.2.1")

    model = sdk.with_feature_model(classifier="aem-publish-sdk", model_type="slingosgifeature")

    assert model.version == "2024.2.1"
    assert model.key == "com.adobe.aem:aem-sdk-api"
    assert str(model) == "com.adobe.aem:aem-sdk-api:slingosgifeature:aem-publish-sdk:2024.2.1"


@pytest.mark.unit
def test_addon_from_dict_and_platform_sdk_defaults() -> None:
    addon = Addon.from_dict(
        {
            "group_id": "com.adobe.aem",
            "artifact_id": "aem-forms-sdk-api",
            "classifier": "aem-forms-sdk",
        }
    )
    assert addon == Addon("com.adobe.aem", "aem-forms-sdk-api", "aem-forms-sdk")

    sdk = PlatformSdk()
    assert (sdk.group_id, sdk.artifact_id, sdk.version) == ("com.adobe.aem", "aem-sdk-api", None)

    with pytest.raises(ValueError):
        Addon.from_dict({"group_id": "g", "artifact_id": "a"})


@pytest.mark.unit
def test_aggregate_spec_deduplicates_sources_preserving_order() -> None:
    first = ArtifactCoordinate.parse("g:a:1")
    second = ArtifactCoordinate.parse("g:b:1")
    spec = AggregateSpec(
        classifier="product-aggregated-author",
        include_artifacts=(first, second, first),
        include_classifiers=("x", "y", "x"),
    )

    assert spec.include_artifacts == (first, second)
    assert spec.include_classifiers == ("x", "y")


@pytest.mark.unit
def test_aggregate_spec_artifact_policy_uses_first_matching_rule() -> None:
    spec = AggregateSpec(
        classifier="aggregated-author",
        artifacts_overrides=(
            ArtifactOverride("com.adobe.cq", "core.wcm.components.core", ArtifactPolicy.FIRST),
            ArtifactOverride("*", "*", ArtifactPolicy.ALL, type="jar"),
        ),
    )

    core = ArtifactCoordinate.parse("com.adobe.cq:core.wcm.components.core:2.23.0")
    other = ArtifactCoordinate.parse("org.example:lib:1.0")
    package = ArtifactCoordinate.parse("org.example:content:zip:1.0")

    assert spec.artifact_policy_for(core) is ArtifactPolicy.FIRST
    assert spec.artifact_policy_for(other) is ArtifactPolicy.ALL
    assert spec.artifact_policy_for(package) is None


@pytest.mark.unit
def test_batch_rejects_duplicate_classifiers() -> None:
    spec = AggregateSpec(classifier="user-aggregated-author")

    with pytest.raises(ValueError, match="duplicate classifier"):
        AggregateBatch(AggregationPhase.USER, (spec, spec))


@pytest.mark.unit
def test_batch_serialization_is_stable_and_renders_rules() -> None:
    spec = AggregateSpec(
        classifier="user-aggregated-author",
        files_include=("**/author.json",),
        artifacts_overrides=(ArtifactOverride("*", "*", ArtifactPolicy.HIGHEST),),
    )
    batch = AggregateBatch("user", (spec,))  # type: ignore[arg-type]

    assert batch.phase is AggregationPhase.USER
    assert batch.classifiers == ("user-aggregated-author",)
    assert batch.get("user-aggregated-author") is spec
    with pytest.raises(KeyError):
        batch.get("missing")

    payload = json.loads(batch.to_json())
    assert payload == {
        "phase": "user",
        "aggregates": [
            {
                "classifier": "user-aggregated-author",
                "files_include": ["**/author.json"],
                "include_artifacts": [],
                "include_classifiers": [],
                "mark_as_complete": False,
                "artifacts_overrides": ["*:*:HIGHEST"],
                "configuration_overrides": [],
            }
        ],
    }
