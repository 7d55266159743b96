"""
aggregate-planner - three-phase aggregate spec generation.

File: src/aggregate_planner/planning/aggregate_plan.py

Purpose
- Turn the pruned runmode model into user, product, and final aggregate batches.
- Attach the conflict-resolution rule tables of each phase.

Functional requirements
- Phase A: one user aggregate per surviving role/tier key.
- Phase B: one product aggregate per role, the SDK feature model plus resolved addons.
- Phase C: one final aggregate per user aggregate, layering it over the product.
- The base SDK is required; addon lookups that miss are skipped.

Non-functional requirements
- Deterministic spec and rule ordering.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Final

from aggregate_planner.domain.models import (
    Addon,
    AggregateBatch,
    AggregateSpec,
    AggregationPhase,
    ArtifactCoordinate,
    PlatformSdk,
    Role,
    RoleTierKey,
)
from aggregate_planner.domain.overrides import (
    ArtifactOverride,
    ArtifactPolicy,
    ConfigurationOverride,
    ConfigurationPolicy,
)
from aggregate_planner.planning.artifact_lookup import ArtifactLookup
from aggregate_planner.planning.model_builder import ModelSet

FEATURE_MODEL_TYPE: Final[str] = "slingosgifeature"

USER_AGGREGATE_PREFIX: Final[str] = "user-aggregated-"
PRODUCT_AGGREGATE_PREFIX: Final[str] = "product-aggregated-"
FINAL_AGGREGATE_PREFIX: Final[str] = "aggregated-"

SDK_FEATURE_MODEL_CLASSIFIERS: Final[dict[Role, str]] = {
    Role.AUTHOR: "aem-author-sdk",
    Role.PUBLISH: "aem-publish-sdk",
}

DEFAULT_ADDONS: Final[tuple[Addon, ...]] = (
    Addon("com.adobe.aem", "aem-forms-sdk-api", "aem-forms-sdk"),
    Addon("com.adobe.aem", "aem-cif-sdk-api", "aem-cif-sdk"),
)

MERGE_ARTIFACT_OVERRIDES: Final[tuple[ArtifactOverride, ...]] = (
    ArtifactOverride("*", "*", ArtifactPolicy.HIGHEST),
)
MERGE_CONFIGURATION_OVERRIDES: Final[tuple[ConfigurationOverride, ...]] = (
    ConfigurationOverride("*", ConfigurationPolicy.MERGE_LATEST),
)

# First match wins; the catch-all jar rule must stay last.
FINAL_ARTIFACT_OVERRIDES: Final[tuple[ArtifactOverride, ...]] = (
    ArtifactOverride("com.adobe.cq", "core.wcm.components.core", ArtifactPolicy.FIRST),
    ArtifactOverride("com.adobe.cq", "core.wcm.components.extensions.amp", ArtifactPolicy.FIRST),
    ArtifactOverride("org.apache.sling", "org.apache.sling.models.impl", ArtifactPolicy.FIRST),
    ArtifactOverride("*", "core.wcm.components.content", ArtifactPolicy.FIRST, type="zip"),
    ArtifactOverride(
        "*", "core.wcm.components.extensions.amp.content", ArtifactPolicy.FIRST, type="zip"
    ),
    ArtifactOverride("*", "*", ArtifactPolicy.ALL, type="jar"),
)

logger = logging.getLogger(__name__)


def user_aggregate_name(key: RoleTierKey) -> str:
    return USER_AGGREGATE_PREFIX + key.name


def product_aggregate_name(role: Role) -> str:
    return PRODUCT_AGGREGATE_PREFIX + role.value


def final_aggregate_name(key: RoleTierKey) -> str:
    return FINAL_AGGREGATE_PREFIX + key.name


class AggregatePlanGenerator:
    """Builds the aggregate batch of each phase; the caller sequences the phases."""

    def __init__(
        self,
        lookup: ArtifactLookup,
        *,
        sdk: PlatformSdk | None = None,
        addons: Sequence[Addon] | None = None,
    ) -> None:
        self._lookup = lookup
        self._sdk = sdk if sdk is not None else PlatformSdk()
        self._addons: tuple[Addon, ...] = DEFAULT_ADDONS if addons is None else tuple(addons)

    @property
    def sdk(self) -> PlatformSdk:
        return self._sdk

    @property
    def addons(self) -> tuple[Addon, ...]:
        return self._addons

    def user_aggregates(self, model: ModelSet) -> AggregateBatch:
        """Phase A: one aggregate of the project's own feature files per key."""

        specs = tuple(
            AggregateSpec(
                classifier=user_aggregate_name(key),
                files_include=tuple("**/" + name for name in sorted(names)),
                mark_as_complete=False,
                artifacts_overrides=MERGE_ARTIFACT_OVERRIDES,
                configuration_overrides=MERGE_CONFIGURATION_OVERRIDES,
            )
            for key, names in model.items()
        )
        return AggregateBatch(AggregationPhase.USER, specs)

    def product_aggregates(self) -> AggregateBatch:
        """
        Phase B: the SDK feature model of each role plus the resolved addons.

        Raises ``RequiredArtifactNotFoundError`` when the SDK cannot be resolved.
        """

        sdk = self.resolve_sdk()
        logger.info("planning_sdk_resolved", extra={"artifact": sdk.to_mvn_id()})
        addons = self.resolve_addons()

        specs: list[AggregateSpec] = []
        for role in Role:
            base = sdk.with_feature_model(
                classifier=SDK_FEATURE_MODEL_CLASSIFIERS[role],
                model_type=FEATURE_MODEL_TYPE,
            )
            specs.append(
                AggregateSpec(
                    classifier=product_aggregate_name(role),
                    include_artifacts=(base, *addons),
                    mark_as_complete=False,
                    artifacts_overrides=MERGE_ARTIFACT_OVERRIDES,
                    configuration_overrides=MERGE_CONFIGURATION_OVERRIDES,
                )
            )
        return AggregateBatch(AggregationPhase.PRODUCT, tuple(specs))

    def final_aggregates(self, user_keys: Iterable[RoleTierKey]) -> AggregateBatch:
        """Phase C: each user aggregate layered over its role's product aggregate."""

        specs = tuple(
            AggregateSpec(
                classifier=final_aggregate_name(key),
                include_classifiers=(
                    product_aggregate_name(key.role),
                    user_aggregate_name(key),
                ),
                # Content packages may reference bundles outside the aggregate.
                mark_as_complete=False,
                artifacts_overrides=FINAL_ARTIFACT_OVERRIDES,
                configuration_overrides=MERGE_CONFIGURATION_OVERRIDES,
            )
            for key in sorted(user_keys, key=RoleTierKey.sort_key)
        )
        return AggregateBatch(AggregationPhase.FINAL, specs)

    def resolve_sdk(self) -> ArtifactCoordinate:
        if self._sdk.version is not None:
            return ArtifactCoordinate(
                self._sdk.group_id, self._sdk.artifact_id, self._sdk.version
            )
        return self._lookup.require(self._sdk.group_id, self._sdk.artifact_id)

    def resolve_addons(self) -> tuple[ArtifactCoordinate, ...]:
        """Feature-model coordinates of every addon present in the dependencies."""

        resolved: list[ArtifactCoordinate] = []
        for addon in self._addons:
            found = self._lookup.find(addon.group_id, addon.artifact_id)
            if found is None:
                logger.debug(
                    "planning_addon_absent",
                    extra={"addon": f"{addon.group_id}:{addon.artifact_id}"},
                )
                continue
            logger.info("planning_addon_resolved", extra={"artifact": found.to_mvn_id()})
            resolved.append(
                found.with_feature_model(
                    classifier=addon.classifier, model_type=FEATURE_MODEL_TYPE
                )
            )
        return tuple(resolved)


__all__ = [
    "DEFAULT_ADDONS",
    "FEATURE_MODEL_TYPE",
    "FINAL_ARTIFACT_OVERRIDES",
    "MERGE_ARTIFACT_OVERRIDES",
    "MERGE_CONFIGURATION_OVERRIDES",
    "SDK_FEATURE_MODEL_CLASSIFIERS",
    "AggregatePlanGenerator",
    "final_aggregate_name",
    "product_aggregate_name",
    "user_aggregate_name",
]
