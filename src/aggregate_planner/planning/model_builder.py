"""Runmode mapping to per-role/per-tier feature sets."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Final

from aggregate_planner.domain.models import CANONICAL_KEYS, Role, RoleTierKey

DEFAULT_RUNMODE: Final[str] = "(default)"

_ROLE_PREFIXES: Final[tuple[str, ...]] = tuple(role.value for role in Role)

logger = logging.getLogger(__name__)


class ModelSet:
    """Mapping of ``RoleTierKey`` to feature-model file names, iterated in key order."""

    __slots__ = ("_features",)

    def __init__(self, entries: Mapping[RoleTierKey, Iterable[str]] | None = None) -> None:
        self._features: dict[RoleTierKey, set[str]] = {}
        if entries is not None:
            for key, names in entries.items():
                self.ensure(key)
                for name in names:
                    self.add(key, name)

    @classmethod
    def canonical(cls) -> ModelSet:
        """A model holding the eight canonical keys with empty sets."""
        return cls({key: () for key in CANONICAL_KEYS})

    def keys(self) -> tuple[RoleTierKey, ...]:
        return tuple(sorted(self._features, key=RoleTierKey.sort_key))

    def items(self) -> tuple[tuple[RoleTierKey, frozenset[str]], ...]:
        return tuple((key, frozenset(self._features[key])) for key in self.keys())

    def features(self, key: RoleTierKey) -> frozenset[str]:
        return frozenset(self._features[key])

    def ensure(self, key: RoleTierKey) -> None:
        self._features.setdefault(key, set())

    def add(self, key: RoleTierKey, feature: str) -> None:
        self._features.setdefault(key, set()).add(feature)

    def remove(self, key: RoleTierKey) -> None:
        del self._features[key]

    def copy(self) -> ModelSet:
        return ModelSet({key: names for key, names in self._features.items()})

    def to_dict(self) -> dict[str, list[str]]:
        return {key.name: sorted(names) for key, names in self.items()}

    def __contains__(self, key: object) -> bool:
        return key in self._features

    def __iter__(self) -> Iterator[RoleTierKey]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._features)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ModelSet):
            return NotImplemented
        return self._features == other._features

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ModelSet({self.to_dict()!r})"


def build_model(runmodes: Mapping[str, str]) -> ModelSet:
    """
    Distribute each runmode's feature file onto the role/tier keys it applies to.

    ``(default)`` contributes to every canonical key. A token starting with a role
    name contributes to each canonical key whose name starts with the token. Any
    other token is a bare tier and contributes to ``author.<tier>`` and
    ``publish.<tier>``, creating custom tier keys as needed.
    """

    model = ModelSet.canonical()
    remaining = dict(runmodes)

    default_feature = remaining.pop(DEFAULT_RUNMODE, None)
    if default_feature is not None:
        for key in CANONICAL_KEYS:
            model.add(key, default_feature)

    for token in sorted(remaining):
        feature = remaining[token]
        targets = _route_token(token)
        if not targets:
            logger.warning(
                "planning_runmode_token_unrouted",
                extra={"runmode": token, "feature": feature},
            )
            continue
        for key in targets:
            model.add(key, feature)

    logger.debug("planning_model_built", extra={"model": model.to_dict()})
    return model


def _route_token(token: str) -> tuple[RoleTierKey, ...]:
    if not token.strip():
        return ()
    if token.startswith(_ROLE_PREFIXES):
        return tuple(key for key in CANONICAL_KEYS if key.name.startswith(token))
    return tuple(RoleTierKey.for_tier(role, token) for role in Role)


__all__ = ["DEFAULT_RUNMODE", "ModelSet", "build_model"]
