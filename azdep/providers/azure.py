"""Azure DevOps REST API provider."""

import httpx

from azdep.errors import NotFound, Unauthorized
from azdep.models import Credential, Project, PullRequest, Repository, WorkItem
from azdep.providers.base import SourceControlProvider

BASE_URL = "https://dev.azure.com"
API_VERSION = "5.0"

# Azure DevOps reviewer vote meaning "approved"
VOTE_APPROVED = 10


class AzureDevOpsProvider(SourceControlProvider):
    def __init__(
        self,
        organisation: str,
        credential: Credential,
        endpoint: str = BASE_URL,
        timeout: float = 30,
        retries: int = 3,
    ) -> None:
        self._organisation = organisation
        self._api_endpoint = f"{endpoint.rstrip('/')}/{organisation}"
        self._client = httpx.Client(
            auth=(credential.username, credential.password.get_secret_value()),
            transport=httpx.HTTPTransport(retries=retries),
            timeout=timeout,
        )

    @property
    def organisation(self) -> str:
        return self._organisation

    def close(self) -> None:
        self._client.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        json: dict | list | None = None,
        content_type: str = "application/json",
    ) -> httpx.Response:
        """Send a request; only 401 and 404 raise, every other status is returned as is."""
        headers = {"Content-Type": content_type} if json is not None else {}
        response = self._client.request(
            method,
            f"{self._api_endpoint}{path}",
            params=params,
            json=json,
            headers=headers,
        )
        if response.status_code == 401:
            raise Unauthorized(str(response.url))
        if response.status_code == 404:
            raise NotFound(str(response.url))
        return response

    def list_projects(self) -> list[Project]:
        nodes = self.request("GET", "/_apis/projects").json()["value"]
        return [Project(id=n["id"], name=n["name"]) for n in nodes]

    def list_repositories(self, project: Project) -> list[Repository]:
        nodes = self.request("GET", f"/{project.id}/_apis/git/repositories").json()["value"]
        return [Repository(id=n["id"], name=n["name"]) for n in nodes]

    def get_file(self, project: Project, repository: Repository, path: str) -> str | None:
        try:
            response = self.request(
                "GET",
                f"/{project.id}/_apis/git/repositories/{repository.id}/items",
                params={"path": path},
            )
        except NotFound:
            return None
        return response.text

    def find_work_items(self, project: Project, title: str) -> list[int]:
        escaped = title.replace("'", "''")
        query = {"query": f"Select [System.Id] From WorkItems Where [System.Title] = '{escaped}'"}
        data = self.request(
            "POST",
            f"/{project.id}/_apis/wit/wiql",
            params={"api-version": API_VERSION},
            json=query,
        ).json()
        return [item["id"] for item in data["workItems"]]

    def create_work_item(self, project: Project, work_item: WorkItem) -> int:
        data = self.request(
            "POST",
            f"/{project.id}/_apis/wit/workitems/$Bug",
            params={"api-version": API_VERSION},
            json=work_item.to_patch(),
            content_type="application/json-patch+json",
        ).json()
        return data["id"]

    def set_auto_complete(self, project: Project, repository: Repository, pull_request: PullRequest) -> None:
        body = {
            "autoCompleteSetBy": {"id": pull_request.created_by_id},
            "completionOptions": {"deleteSourceBranch": True},
        }
        self.request(
            "PATCH",
            f"/{project.id}/_apis/git/repositories/{repository.id}/pullrequests/{pull_request.id}",
            params={"api-version": API_VERSION},
            json=body,
        )

    def approve(self, project: Project, repository: Repository, pull_request: PullRequest) -> None:
        self.request(
            "PUT",
            f"/{project.id}/_apis/git/repositories/{repository.id}"
            f"/pullrequests/{pull_request.id}/reviewers/{pull_request.created_by_id}",
            params={"api-version": API_VERSION},
            json={"vote": VOTE_APPROVED},
        )
