"""
aggregate-planner - unit tests for model pruning

File: tests/unit/planning/test_pruner.py

Purpose
- Validate removal of tiers equal to their generic parent and of generic keys
  fully covered by standard tiers.
"""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from aggregate_planner.domain.models import RoleTierKey
from aggregate_planner.planning.model_builder import DEFAULT_RUNMODE, ModelSet, build_model
from aggregate_planner.planning.pruner import prune_models

_TOKENS = (
    DEFAULT_RUNMODE,
    "author",
    "publish",
    "author.dev",
    "author.stage",
    "author.prod",
    "publish.dev",
    "dev",
    "stage",
    "prod",
    "it",
)


def _model(entries: dict[str, list[str]]) -> ModelSet:
    return ModelSet({RoleTierKey.parse(name): names for name, names in entries.items()})


@pytest.mark.unit
def test_default_only_mapping_prunes_to_generic_roles() -> None:
    pruned = prune_models(build_model({DEFAULT_RUNMODE: "X"}))

    assert pruned.to_dict() == {"author": ["X"], "publish": ["X"]}


@pytest.mark.unit
def test_generic_role_removed_when_all_standard_tiers_remain() -> None:
    model = build_model({"author.dev": "A", "author.stage": "B", "author.prod": "C"})

    pruned = prune_models(model)

    assert pruned.to_dict() == {
        "author.dev": ["A"],
        "author.stage": ["B"],
        "author.prod": ["C"],
        "publish": [],
    }


@pytest.mark.unit
def test_partial_tier_coverage_keeps_generic_role() -> None:
    model = build_model({DEFAULT_RUNMODE: "X", "prod": "P"})

    pruned = prune_models(model)

    assert pruned.to_dict() == {
        "author": ["X"],
        "author.prod": ["P", "X"],
        "publish": ["X"],
        "publish.prod": ["P", "X"],
    }


@pytest.mark.unit
def test_custom_tiers_survive_even_when_equal_to_generic() -> None:
    model = _model({"author": ["X"], "author.it": ["X"], "publish": []})

    pruned = prune_models(model)

    assert RoleTierKey.parse("author.it") in pruned
    assert pruned.to_dict() == {"author": ["X"], "author.it": ["X"], "publish": []}


@pytest.mark.unit
def test_tiers_are_kept_when_generic_key_is_absent() -> None:
    model = _model({"author.dev": [], "author.stage": []})

    assert prune_models(model) == model


@pytest.mark.unit
def test_pruning_does_not_mutate_its_input() -> None:
    model = build_model({DEFAULT_RUNMODE: "X"})
    snapshot = model.copy()

    prune_models(model)

    assert model == snapshot
    assert len(model) == 8


@pytest.mark.unit
def test_second_pruning_is_a_no_op_for_the_documented_cases() -> None:
    for mapping in (
        {DEFAULT_RUNMODE: "X"},
        {"author.dev": "A", "author.stage": "B", "author.prod": "C"},
    ):
        once = prune_models(build_model(mapping))
        assert prune_models(once) == once


@pytest.mark.unit
@settings(max_examples=100, deadline=None)
@given(
    entries=st.dictionaries(
        keys=st.sampled_from(_TOKENS),
        values=st.sampled_from(("a.json", "b.json", "c.json")),
    )
)
def test_pruning_is_idempotent(entries: dict[str, str]) -> None:
    once = prune_models(build_model(entries))

    assert prune_models(once) == once
