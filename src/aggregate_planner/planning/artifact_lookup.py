"""Exact group/artifact lookup over a build's dependency lists."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from aggregate_planner.domain.models import ArtifactCoordinate


class RequiredArtifactNotFoundError(LookupError):
    """Raised when a required artifact is in neither dependency list."""

    def __init__(self, group_id: str, artifact_id: str) -> None:
        self.group_id = group_id
        self.artifact_id = artifact_id
        super().__init__(
            "Unable to find SDK artifact in dependencies or dependency management: "
            f"{group_id}:{artifact_id}"
        )


class ArtifactLookup:
    """Search direct dependencies, then dependency management, for an exact match."""

    __slots__ = ("_dependencies", "_dependency_management")

    def __init__(
        self,
        dependencies: Iterable[ArtifactCoordinate] = (),
        dependency_management: Iterable[ArtifactCoordinate] = (),
    ) -> None:
        self._dependencies: tuple[ArtifactCoordinate, ...] = tuple(dependencies)
        self._dependency_management: tuple[ArtifactCoordinate, ...] = tuple(
            dependency_management
        )

    @property
    def dependencies(self) -> Sequence[ArtifactCoordinate]:
        return self._dependencies

    @property
    def dependency_management(self) -> Sequence[ArtifactCoordinate]:
        return self._dependency_management

    def find(self, group_id: str, artifact_id: str) -> ArtifactCoordinate | None:
        """
        Return the first coordinate matching ``group_id:artifact_id``, or ``None``.

        Versions are taken as declared; no range resolution happens.
        """

        for source in (self._dependencies, self._dependency_management):
            for candidate in source:
                if candidate.group_id == group_id and candidate.artifact_id == artifact_id:
                    return candidate
        return None

    def require(self, group_id: str, artifact_id: str) -> ArtifactCoordinate:
        found = self.find(group_id, artifact_id)
        if found is None:
            raise RequiredArtifactNotFoundError(group_id, artifact_id)
        return found


__all__ = ["ArtifactLookup", "RequiredArtifactNotFoundError"]
