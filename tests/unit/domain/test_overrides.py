"""
aggregate-planner - unit tests for conflict-resolution rules

File: tests/unit/domain/test_overrides.py

Purpose
- Validate rule rendering, wildcard matching and first-match-wins selection.
"""

from __future__ import annotations

import pytest

from aggregate_planner.domain.models import ArtifactCoordinate
from aggregate_planner.domain.overrides import (
    ArtifactOverride,
    ArtifactPolicy,
    ConfigurationOverride,
    ConfigurationPolicy,
    select_artifact_override,
)
from aggregate_planner.planning.aggregate_plan import (
    FINAL_ARTIFACT_OVERRIDES,
    MERGE_ARTIFACT_OVERRIDES,
    MERGE_CONFIGURATION_OVERRIDES,
)


@pytest.mark.unit
def test_final_rule_table_renders_in_declared_order() -> None:
    assert [rule.render() for rule in FINAL_ARTIFACT_OVERRIDES] == [
        "com.adobe.cq:core.wcm.components.core:FIRST",
        "com.adobe.cq:core.wcm.components.extensions.amp:FIRST",
        "org.apache.sling:org.apache.sling.models.impl:FIRST",
        "*:core.wcm.components.content:zip:*:FIRST",
        "*:core.wcm.components.extensions.amp.content:zip:*:FIRST",
        "*:*:jar:*:ALL",
    ]


@pytest.mark.unit
def test_merge_rules_render() -> None:
    assert [rule.render() for rule in MERGE_ARTIFACT_OVERRIDES] == ["*:*:HIGHEST"]
    assert [rule.render() for rule in MERGE_CONFIGURATION_OVERRIDES] == ["*=MERGE_LATEST"]


@pytest.mark.unit
def test_policies_are_coerced_from_text() -> None:
    rule = ArtifactOverride("g", "a", "FIRST", version="1.0")  # type: ignore[arg-type]
    config = ConfigurationOverride("*", "MERGE_LATEST")  # type: ignore[arg-type]

    assert rule.policy is ArtifactPolicy.FIRST
    assert rule.render() == "g:a:*:1.0:FIRST"
    assert config.policy is ConfigurationPolicy.MERGE_LATEST

    with pytest.raises(ValueError):
        ArtifactOverride("g", "a", "LATEST")  # type: ignore[arg-type]


@pytest.mark.unit
def test_first_match_wins_over_catch_all() -> None:
    core = ArtifactCoordinate.parse("com.adobe.cq:core.wcm.components.core:2.23.0")

    selected = select_artifact_override(FINAL_ARTIFACT_OVERRIDES, core)

    assert selected is FINAL_ARTIFACT_OVERRIDES[0]
    assert selected.policy is ArtifactPolicy.FIRST


@pytest.mark.unit
def test_catch_all_only_covers_jar_artifacts() -> None:
    content = ArtifactCoordinate.parse("org.example:site.content:zip:1.0")
    components = ArtifactCoordinate.parse("com.adobe.cq:core.wcm.components.content:zip:2.23.0")
    library = ArtifactCoordinate.parse("org.example:lib:1.0")

    assert select_artifact_override(FINAL_ARTIFACT_OVERRIDES, content) is None
    assert select_artifact_override(FINAL_ARTIFACT_OVERRIDES, components) is (
        FINAL_ARTIFACT_OVERRIDES[3]
    )
    assert select_artifact_override(FINAL_ARTIFACT_OVERRIDES, library) is (
        FINAL_ARTIFACT_OVERRIDES[-1]
    )


@pytest.mark.unit
@pytest.mark.parametrize(
    ("rule", "coordinate", "expected"),
    [
        (ArtifactOverride("*", "*", ArtifactPolicy.HIGHEST), "g:a:zip:1.0", True),
        (ArtifactOverride("g", "*", ArtifactPolicy.ALL), "other:a:1.0", False),
        (ArtifactOverride("g", "a", ArtifactPolicy.FIRST, version="2.0"), "g:a:1.0", False),
        (ArtifactOverride("g", "a", ArtifactPolicy.FIRST, version="*"), "g:a:1.0", True),
    ],
)
def test_artifact_override_matching(
    rule: ArtifactOverride, coordinate: str, expected: bool
) -> None:
    assert rule.matches(ArtifactCoordinate.parse(coordinate)) is expected


@pytest.mark.unit
def test_empty_rule_list_selects_nothing() -> None:
    assert select_artifact_override((), ArtifactCoordinate.parse("g:a:1.0")) is None
