"""Removal of role/tier keys whose aggregate would be redundant."""

from __future__ import annotations

import logging

from aggregate_planner.domain.models import STANDARD_TIERS, Role, RoleTierKey
from aggregate_planner.planning.model_builder import ModelSet

logger = logging.getLogger(__name__)


def prune_models(model: ModelSet) -> ModelSet:
    """
    Return a copy of ``model`` without redundant keys.

    Two passes run in order. First, a standard tier whose features equal its
    role's generic features is dropped. Then, a generic role key is dropped when
    all three standard tiers of that role remain.

    Custom tiers are never evaluated. A generic key with an empty feature set is
    kept unless all three standard tiers remain.
    """

    pruned = model.copy()
    removed: list[str] = []

    for role in Role:
        generic = RoleTierKey.generic(role)
        if generic not in pruned:
            continue
        for tier in STANDARD_TIERS:
            specialised = RoleTierKey(role, tier)
            if specialised in pruned and pruned.features(specialised) == pruned.features(generic):
                pruned.remove(specialised)
                removed.append(specialised.name)

    for role in Role:
        generic = RoleTierKey.generic(role)
        if generic not in pruned:
            continue
        if all(RoleTierKey(role, tier) in pruned for tier in STANDARD_TIERS):
            pruned.remove(generic)
            removed.append(generic.name)

    logger.info(
        "planning_model_pruned",
        extra={"removed": removed, "remaining": [key.name for key in pruned.keys()]},
    )
    return pruned


__all__ = ["prune_models"]
