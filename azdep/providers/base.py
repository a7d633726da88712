"""Abstract base class for source-control providers."""

from abc import ABC, abstractmethod

from azdep.models import Project, PullRequest, Repository, WorkItem


class SourceControlProvider(ABC):
    @property
    @abstractmethod
    def organisation(self) -> str: ...

    @abstractmethod
    def list_projects(self) -> list[Project]: ...

    @abstractmethod
    def list_repositories(self, project: Project) -> list[Repository]: ...

    @abstractmethod
    def get_file(self, project: Project, repository: Repository, path: str) -> str | None:
        """Return the file content, or None when the file does not exist."""

    @abstractmethod
    def find_work_items(self, project: Project, title: str) -> list[int]: ...

    @abstractmethod
    def create_work_item(self, project: Project, work_item: WorkItem) -> int: ...

    @abstractmethod
    def set_auto_complete(self, project: Project, repository: Repository, pull_request: PullRequest) -> None: ...

    @abstractmethod
    def approve(self, project: Project, repository: Repository, pull_request: PullRequest) -> None: ...
