"""Abstract interface of the external dependency-update capability.

One implementation exists per package manager. azdep never parses manifests
or resolves versions itself; it only sequences these calls.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from azdep.models import (
    Credential,
    Dependency,
    DependencyFile,
    FetchedFiles,
    PullRequest,
    RequirementsUnlock,
    Source,
)


class UpdateChecker(ABC):
    """Update check for a single dependency."""

    @abstractmethod
    def up_to_date(self) -> bool: ...

    def requirements_unlocked_or_can_be(self) -> bool:
        """False when only the `none` unlock level may be attempted."""
        return True

    @abstractmethod
    def can_update(self, requirements_to_unlock: RequirementsUnlock) -> bool: ...

    @abstractmethod
    def updated_dependencies(self, requirements_to_unlock: RequirementsUnlock) -> list[Dependency]: ...


class UpdateCapability(ABC):
    def __init__(self, credentials: Sequence[Credential]) -> None:
        self.credentials = list(credentials)

    @abstractmethod
    def fetch_files(self, source: Source) -> FetchedFiles: ...

    @abstractmethod
    def parse(self, files: list[DependencyFile], source: Source) -> list[Dependency]: ...

    @abstractmethod
    def checker(self, dependency: Dependency, files: list[DependencyFile]) -> UpdateChecker: ...

    @abstractmethod
    def updated_files(self, dependencies: list[Dependency], files: list[DependencyFile]) -> list[DependencyFile]: ...

    @abstractmethod
    def create_pull_request(
        self,
        source: Source,
        commit: str,
        dependencies: list[Dependency],
        files: list[DependencyFile],
    ) -> PullRequest | None:
        """Open the pull request. None means an identical one is already open."""
