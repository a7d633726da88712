"""Shared test fixtures."""

from unittest.mock import MagicMock

import pytest

from azdep.capabilities.base import UpdateCapability, UpdateChecker
from azdep.models import (
    Credential,
    Dependency,
    DependencyFile,
    FetchedFiles,
    PackageManager,
    Project,
    PullRequest,
    Repository,
    RequirementsUnlock,
    Source,
    UpdatePolicy,
)
from azdep.providers.base import SourceControlProvider

FILES = [DependencyFile(name="package.json", content="{}")]


class FakeChecker(UpdateChecker):
    def __init__(
        self,
        dependency: Dependency,
        up_to_date: bool = False,
        allowed: set[RequirementsUnlock] | None = None,
        unlockable: bool = True,
    ) -> None:
        self.dependency = dependency
        self._up_to_date = up_to_date
        self._allowed = {RequirementsUnlock.NONE} if allowed is None else allowed
        self._unlockable = unlockable
        self.probed: list[RequirementsUnlock] = []
        self.unlocked_with: RequirementsUnlock | None = None

    def up_to_date(self) -> bool:
        return self._up_to_date

    def requirements_unlocked_or_can_be(self) -> bool:
        return self._unlockable

    def can_update(self, requirements_to_unlock: RequirementsUnlock) -> bool:
        self.probed.append(requirements_to_unlock)
        return requirements_to_unlock in self._allowed

    def updated_dependencies(self, requirements_to_unlock: RequirementsUnlock) -> list[Dependency]:
        self.unlocked_with = requirements_to_unlock
        return [Dependency(name=self.dependency.name, version="2.0.0")]


class FakeCapability(UpdateCapability):
    """In-memory update capability that records every call it receives."""

    def __init__(self, dependencies: list[Dependency], pull_request: PullRequest | None = None) -> None:
        super().__init__([])
        self.dependencies = dependencies
        self.pull_request = pull_request
        self.checker_options: dict[str, dict] = {}
        self.checkers: dict[str, FakeChecker] = {}
        self.calls: list[str] = []
        self.sources: list[Source] = []
        self.created: list[list[Dependency]] = []

    def fetch_files(self, source: Source) -> FetchedFiles:
        self.calls.append("fetch")
        self.sources.append(source)
        return FetchedFiles(files=FILES, commit="abc123")

    def parse(self, files: list[DependencyFile], source: Source) -> list[Dependency]:
        self.calls.append("parse")
        return self.dependencies

    def checker(self, dependency: Dependency, files: list[DependencyFile]) -> UpdateChecker:
        self.calls.append(f"check:{dependency.name}")
        checker = FakeChecker(dependency, **self.checker_options.get(dependency.name, {}))
        self.checkers[dependency.name] = checker
        return checker

    def updated_files(self, dependencies: list[Dependency], files: list[DependencyFile]) -> list[DependencyFile]:
        return [DependencyFile(name="package.json", content='{"updated": true}')]

    def create_pull_request(
        self, source: Source, commit: str, dependencies: list[Dependency], files: list[DependencyFile]
    ) -> PullRequest | None:
        assert commit == "abc123"
        self.calls.append(f"pr:{dependencies[0].name}")
        self.created.append(dependencies)
        return self.pull_request


@pytest.fixture
def make_checker() -> type[FakeChecker]:
    return FakeChecker


@pytest.fixture
def make_capability() -> type[FakeCapability]:
    return FakeCapability


@pytest.fixture
def project() -> Project:
    return Project(id="p-1", name="Platform")


@pytest.fixture
def repository() -> Repository:
    return Repository(id="r-1", name="billing-api")


@pytest.fixture
def credential() -> Credential:
    return Credential(username="x-access-token", password="pat_secret")  # type: ignore[arg-type]


@pytest.fixture
def policy() -> UpdatePolicy:
    return UpdatePolicy(
        package_manager=PackageManager.NPM_AND_YARN,
        directory="/",
        runs_today=True,
    )


@pytest.fixture
def pull_request() -> PullRequest:
    return PullRequest(id=42, created_by_id="creator-guid")


@pytest.fixture
def provider() -> MagicMock:
    mock = MagicMock(spec=SourceControlProvider)
    mock.organisation = "contoso"
    return mock
