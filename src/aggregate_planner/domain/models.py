"""Dataclass domain models for runmode keys, artifact coordinates, and aggregate specs."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final, NoReturn, TypeVar

if TYPE_CHECKING:
    from aggregate_planner.domain.overrides import (
        ArtifactOverride,
        ArtifactPolicy,
        ConfigurationOverride,
    )

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

DEFAULT_ARTIFACT_TYPE: Final[str] = "jar"

TEnum = TypeVar("TEnum", bound=StrEnum)
T = TypeVar("T")

_MAX_TEXT = 1024
_WHITESPACE_RE = re.compile(r"\s")


class Role(StrEnum):
    AUTHOR = "author"
    PUBLISH = "publish"


class TierKind(StrEnum):
    GENERIC = "generic"
    DEV = "dev"
    STAGE = "stage"
    PROD = "prod"
    CUSTOM = "custom"


class AggregationPhase(StrEnum):
    """The three strictly ordered aggregation phases."""

    USER = "user"
    PRODUCT = "product"
    FINAL = "final"


STANDARD_TIERS: Final[tuple[TierKind, ...]] = (TierKind.DEV, TierKind.STAGE, TierKind.PROD)

_ROLE_ORDER: Final[dict[Role, int]] = {Role.AUTHOR: 0, Role.PUBLISH: 1}
_TIER_ORDER: Final[dict[TierKind, int]] = {
    TierKind.GENERIC: 0,
    TierKind.DEV: 1,
    TierKind.STAGE: 2,
    TierKind.PROD: 3,
    TierKind.CUSTOM: 4,
}
_STANDARD_TIER_NAMES: Final[dict[str, TierKind]] = {tier.value: tier for tier in STANDARD_TIERS}


def _fail(path: str, message: str) -> NoReturn:
    raise ValueError(f"{path}: {message}")


def _as_str(value: object, path: str, *, max_len: int = _MAX_TEXT) -> str:
    if not isinstance(value, str):
        _fail(path, f"expected string, got {type(value).__name__}")
    normalized = value.strip()
    if not normalized:
        _fail(path, "must not be empty")
    if len(normalized) > max_len:
        _fail(path, f"must be <= {max_len} characters")
    return normalized


def _as_token(value: object, path: str) -> str:
    parsed = _as_str(value, path)
    if _WHITESPACE_RE.search(parsed) or ":" in parsed:
        _fail(path, f"must not contain whitespace or ':', got {parsed!r}")
    return parsed


def _as_enum(enum_type: type[TEnum], value: object, path: str) -> TEnum:
    if isinstance(value, enum_type):
        return value
    if not isinstance(value, str):
        _fail(path, f"expected string enum value, got {type(value).__name__}")
    try:
        return enum_type(value)
    except ValueError:
        allowed = ", ".join(sorted(item.value for item in enum_type))
        _fail(path, f"invalid value {value!r}; expected one of: {allowed}")


def _unique(items: Iterable[T]) -> tuple[T, ...]:
    return tuple(dict.fromkeys(items))


@dataclass(frozen=True, slots=True)
class RoleTierKey:
    """A role, optionally refined by a standard or custom environment tier."""

    role: Role
    tier: TierKind = TierKind.GENERIC
    custom_name: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", _as_enum(Role, self.role, "RoleTierKey.role"))
        object.__setattr__(self, "tier", _as_enum(TierKind, self.tier, "RoleTierKey.tier"))
        if self.tier is TierKind.CUSTOM:
            name = _as_str(self.custom_name, "RoleTierKey.custom_name")
            if name in _STANDARD_TIER_NAMES:
                _fail("RoleTierKey.custom_name", f"{name!r} is a standard tier")
            object.__setattr__(self, "custom_name", name)
        elif self.custom_name is not None:
            _fail("RoleTierKey.custom_name", "only custom tiers carry a name")

    @classmethod
    def generic(cls, role: Role | str) -> RoleTierKey:
        return cls(Role(role))

    @classmethod
    def for_tier(cls, role: Role | str, token: str) -> RoleTierKey:
        """Key for ``role`` refined by a bare tier token (``dev``, ``it``, ...)."""
        token = token.strip()
        standard = _STANDARD_TIER_NAMES.get(token)
        if standard is not None:
            return cls(Role(role), standard)
        return cls(Role(role), TierKind.CUSTOM, token)

    @classmethod
    def parse(cls, text: str) -> RoleTierKey:
        """Parse the dotted string form, e.g. ``author`` or ``publish.prod``."""
        role_text, dot, tier_text = text.partition(".")
        try:
            role = Role(role_text)
        except ValueError:
            _fail("RoleTierKey", f"unknown role in {text!r}")
        if not dot:
            return cls(role)
        if not tier_text:
            _fail("RoleTierKey", f"empty tier in {text!r}")
        return cls.for_tier(role, tier_text)

    @property
    def name(self) -> str:
        if self.tier is TierKind.GENERIC:
            return self.role.value
        if self.tier is TierKind.CUSTOM:
            return f"{self.role.value}.{self.custom_name}"
        return f"{self.role.value}.{self.tier.value}"

    @property
    def is_generic(self) -> bool:
        return self.tier is TierKind.GENERIC

    @property
    def is_custom(self) -> bool:
        return self.tier is TierKind.CUSTOM

    def sort_key(self) -> tuple[int, int, str]:
        return (_ROLE_ORDER[self.role], _TIER_ORDER[self.tier], self.custom_name or "")

    def __str__(self) -> str:
        return self.name


CANONICAL_KEYS: Final[tuple[RoleTierKey, ...]] = tuple(
    RoleTierKey(role, tier)
    for role in (Role.AUTHOR, Role.PUBLISH)
    for tier in (TierKind.GENERIC, *STANDARD_TIERS)
)


@dataclass(frozen=True, slots=True)
class ArtifactCoordinate:
    """Maven-style artifact coordinate."""

    group_id: str
    artifact_id: str
    version: str
    type: str = DEFAULT_ARTIFACT_TYPE
    classifier: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "group_id", _as_token(self.group_id, "ArtifactCoordinate.group_id")
        )
        object.__setattr__(
            self, "artifact_id", _as_token(self.artifact_id, "ArtifactCoordinate.artifact_id")
        )
        object.__setattr__(self, "version", _as_token(self.version, "ArtifactCoordinate.version"))
        object.__setattr__(self, "type", _as_token(self.type, "ArtifactCoordinate.type"))
        if self.classifier is not None:
            object.__setattr__(
                self,
                "classifier",
                _as_token(self.classifier, "ArtifactCoordinate.classifier"),
            )

    @classmethod
    def parse(cls, mvn_id: str) -> ArtifactCoordinate:
        """Parse ``group:artifact[:type[:classifier]]:version``."""
        parts = _as_str(mvn_id, "ArtifactCoordinate").split(":")
        if len(parts) == 3:
            return cls(parts[0], parts[1], parts[2])
        if len(parts) == 4:
            return cls(parts[0], parts[1], parts[3], type=parts[2])
        if len(parts) == 5:
            return cls(parts[0], parts[1], parts[4], type=parts[2], classifier=parts[3])
        _fail(
            "ArtifactCoordinate",
            f"expected group:artifact[:type[:classifier]]:version, got {mvn_id!r}",
        )

    @property
    def key(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    def with_feature_model(self, *, classifier: str, model_type: str) -> ArtifactCoordinate:
        """Same group/artifact/version, retyped as a feature model with ``classifier``."""
        return ArtifactCoordinate(
            group_id=self.group_id,
            artifact_id=self.artifact_id,
            version=self.version,
            type=model_type,
            classifier=classifier,
        )

    def to_mvn_id(self) -> str:
        if self.classifier is not None:
            return (
                f"{self.group_id}:{self.artifact_id}:{self.type}:"
                f"{self.classifier}:{self.version}"
            )
        if self.type != DEFAULT_ARTIFACT_TYPE:
            return f"{self.group_id}:{self.artifact_id}:{self.type}:{self.version}"
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "group_id": self.group_id,
            "artifact_id": self.artifact_id,
            "version": self.version,
            "type": self.type,
            "classifier": self.classifier,
        }

    def __str__(self) -> str:
        return self.to_mvn_id()


@dataclass(frozen=True, slots=True)
class Addon:
    """Optional vendor extension layered onto the platform SDK."""

    group_id: str
    artifact_id: str
    classifier: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "group_id", _as_token(self.group_id, "Addon.group_id"))
        object.__setattr__(self, "artifact_id", _as_token(self.artifact_id, "Addon.artifact_id"))
        object.__setattr__(self, "classifier", _as_token(self.classifier, "Addon.classifier"))

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Addon:
        return cls(
            group_id=_as_str(data.get("group_id"), "Addon.group_id"),
            artifact_id=_as_str(data.get("artifact_id"), "Addon.artifact_id"),
            classifier=_as_str(data.get("classifier"), "Addon.classifier"),
        )


@dataclass(frozen=True, slots=True)
class PlatformSdk:
    """Base platform coordinates; ``version`` pins the SDK and bypasses lookup."""

    group_id: str = "com.adobe.aem"
    artifact_id: str = "aem-sdk-api"
    version: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "group_id", _as_token(self.group_id, "PlatformSdk.group_id"))
        object.__setattr__(
            self, "artifact_id", _as_token(self.artifact_id, "PlatformSdk.artifact_id")
        )
        if self.version is not None:
            object.__setattr__(self, "version", _as_token(self.version, "PlatformSdk.version"))


@dataclass(frozen=True, slots=True)
class AggregateSpec:
    """One planned feature-model aggregate and its conflict-resolution policy."""

    classifier: str
    files_include: tuple[str, ...] = ()
    include_artifacts: tuple[ArtifactCoordinate, ...] = ()
    include_classifiers: tuple[str, ...] = ()
    mark_as_complete: bool = False
    artifacts_overrides: tuple[ArtifactOverride, ...] = ()
    configuration_overrides: tuple[ConfigurationOverride, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "classifier", _as_token(self.classifier, "AggregateSpec.classifier")
        )
        object.__setattr__(self, "files_include", tuple(self.files_include))
        object.__setattr__(self, "include_artifacts", _unique(self.include_artifacts))
        object.__setattr__(self, "include_classifiers", _unique(self.include_classifiers))
        object.__setattr__(self, "artifacts_overrides", tuple(self.artifacts_overrides))
        object.__setattr__(self, "configuration_overrides", tuple(self.configuration_overrides))

    def artifact_policy_for(self, coordinate: ArtifactCoordinate) -> ArtifactPolicy | None:
        """Policy of the first artifact override matching ``coordinate``."""
        from aggregate_planner.domain.overrides import select_artifact_override

        override = select_artifact_override(self.artifacts_overrides, coordinate)
        return None if override is None else override.policy

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "classifier": self.classifier,
            "files_include": list(self.files_include),
            "include_artifacts": [item.to_mvn_id() for item in self.include_artifacts],
            "include_classifiers": list(self.include_classifiers),
            "mark_as_complete": self.mark_as_complete,
            "artifacts_overrides": [item.render() for item in self.artifacts_overrides],
            "configuration_overrides": [item.render() for item in self.configuration_overrides],
        }


@dataclass(frozen=True, slots=True)
class AggregateBatch:
    """Aggregate specs for a single phase; classifiers are unique within a batch."""

    phase: AggregationPhase
    specs: tuple[AggregateSpec, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "phase", _as_enum(AggregationPhase, self.phase, "AggregateBatch.phase")
        )
        specs = tuple(self.specs)
        seen: set[str] = set()
        for spec in specs:
            if spec.classifier in seen:
                _fail("AggregateBatch.specs", f"duplicate classifier {spec.classifier!r}")
            seen.add(spec.classifier)
        object.__setattr__(self, "specs", specs)

    @property
    def classifiers(self) -> tuple[str, ...]:
        return tuple(spec.classifier for spec in self.specs)

    def get(self, classifier: str) -> AggregateSpec:
        for spec in self.specs:
            if spec.classifier == classifier:
                return spec
        raise KeyError(classifier)

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "phase": self.phase.value,
            "aggregates": [spec.to_dict() for spec in self.specs],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    def __len__(self) -> int:
        return len(self.specs)


__all__ = [
    "CANONICAL_KEYS",
    "DEFAULT_ARTIFACT_TYPE",
    "STANDARD_TIERS",
    "Addon",
    "AggregateBatch",
    "AggregateSpec",
    "AggregationPhase",
    "ArtifactCoordinate",
    "PlatformSdk",
    "Role",
    "RoleTierKey",
    "TierKind",
]
