"""
aggregate-planner - unit tests for runmode model construction

File: tests/unit/planning/test_model_builder.py

Purpose
- Validate routing of runmode tokens onto role/tier keys.

What this test file should cover
- ``(default)`` fan-out, role-prefixed starts-with routing, bare tier tokens,
  custom tier creation, and tokens nothing can route.
- Independence from mapping iteration order.
"""

from __future__ import annotations

import logging

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from aggregate_planner.domain.models import CANONICAL_KEYS, RoleTierKey
from aggregate_planner.planning.model_builder import DEFAULT_RUNMODE, ModelSet, build_model

_TOKENS = (
    DEFAULT_RUNMODE,
    "author",
    "publish",
    "author.dev",
    "author.stage",
    "publish.prod",
    "dev",
    "stage",
    "prod",
    "it",
    "qa",
)


def _key(text: str) -> RoleTierKey:
    return RoleTierKey.parse(text)


@pytest.mark.unit
def test_empty_mapping_yields_eight_empty_canonical_keys() -> None:
    model = build_model({})

    assert model.keys() == CANONICAL_KEYS
    assert all(model.features(key) == frozenset() for key in model)


@pytest.mark.unit
def test_default_runmode_contributes_to_every_canonical_key() -> None:
    model = build_model({DEFAULT_RUNMODE: "default.json"})

    assert model.to_dict() == {key.name: ["default.json"] for key in CANONICAL_KEYS}


@pytest.mark.unit
def test_role_token_matches_every_key_starting_with_it() -> None:
    model = build_model({"author": "author.json", "publish.prod": "publish.prod.json"})

    assert model.to_dict() == {
        "author": ["author.json"],
        "author.dev": ["author.json"],
        "author.stage": ["author.json"],
        "author.prod": ["author.json"],
        "publish": [],
        "publish.dev": [],
        "publish.stage": [],
        "publish.prod": ["publish.prod.json"],
    }


@pytest.mark.unit
def test_bare_tier_token_applies_to_both_roles() -> None:
    model = build_model({"stage": "stage.json"})

    assert model.features(_key("author.stage")) == {"stage.json"}
    assert model.features(_key("publish.stage")) == {"stage.json"}
    assert model.features(_key("author")) == frozenset()


@pytest.mark.unit
def test_custom_tier_token_creates_keys_for_both_roles() -> None:
    model = build_model({DEFAULT_RUNMODE: "default.json", "it": "it.json"})

    assert len(model) == 10
    assert model.features(_key("author.it")) == {"it.json"}
    assert model.features(_key("publish.it")) == {"it.json"}
    assert _key("author.it").is_custom
    assert [key.name for key in model.keys()][-1] == "publish.it"


@pytest.mark.unit
def test_role_prefixed_custom_tier_is_not_routed(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="aggregate_planner.planning.model_builder"):
        model = build_model({"author.it": "x.json", "authoring": "y.json", "  ": "z.json"})

    assert model == ModelSet.canonical()
    unrouted = [r for r in caplog.records if r.getMessage() == "planning_runmode_token_unrouted"]
    assert sorted(getattr(record, "runmode") for record in unrouted) == [
        "  ",
        "author.it",
        "authoring",
    ]


@pytest.mark.unit
def test_model_set_copy_is_independent() -> None:
    model = build_model({"dev": "dev.json"})
    clone = model.copy()

    clone.add(_key("author.dev"), "extra.json")
    clone.remove(_key("publish"))

    assert model.features(_key("author.dev")) == {"dev.json"}
    assert _key("publish") in model
    assert model != clone


@pytest.mark.unit
@settings(max_examples=75, deadline=None)
@given(
    entries=st.dictionaries(
        keys=st.sampled_from(_TOKENS),
        values=st.sampled_from(("a.json", "b.json", "c.json", "d.json")),
        max_size=len(_TOKENS),
    ),
    data=st.data(),
)
def test_model_is_independent_of_mapping_order(
    entries: dict[str, str], data: st.DataObject
) -> None:
    shuffled_keys = data.draw(st.permutations(list(entries)))
    shuffled = {token: entries[token] for token in shuffled_keys}

    assert build_model(shuffled) == build_model(entries)
