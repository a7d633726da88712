"""Tests for azdep.orchestrator: traversal and failure isolation."""

from datetime import date
from unittest.mock import MagicMock, call

import pytest

from azdep.models import PackageManager, Project, Repository, TicketKind
from azdep.orchestrator import Orchestrator
from azdep.pipeline import UpdatePipeline
from azdep.tickets import TicketManager

TUESDAY = date(2024, 6, 4)

TWO_ENTRIES = """\
version: 1
update_configs:
  - package_manager: "javascript"
    update_schedule: "daily"
  - package_manager: "python"
    directory: "/tools"
    update_schedule: "weekly"
"""

BAD_THEN_GOOD = """\
version: 1
update_configs:
  - package_manager: "cobol"
    update_schedule: "daily"
  - package_manager: "python"
    update_schedule: "daily"
"""

REPOS = [Repository(id="r-1", name="billing-api"), Repository(id="r-2", name="ledger")]


def _files(mapping: dict[tuple[str, str], str | None]):
    def get_file(project: Project, repository: Repository, path: str) -> str | None:
        return mapping.get((repository.name, path))

    return get_file


@pytest.fixture
def pipeline() -> MagicMock:
    return MagicMock(spec=UpdatePipeline)


@pytest.fixture
def tickets() -> MagicMock:
    return MagicMock(spec=TicketManager)


@pytest.fixture
def orchestrator(provider: MagicMock, pipeline: MagicMock, tickets: MagicMock, project: Project) -> Orchestrator:
    provider.list_projects.return_value = [project]
    provider.list_repositories.return_value = REPOS
    return Orchestrator(provider, pipeline, tickets, today=TUESDAY)


class TestTraversal:
    def test_visits_every_project_and_repository(self, provider: MagicMock, pipeline: MagicMock, tickets: MagicMock) -> None:
        projects = [Project(id="p-1", name="Platform"), Project(id="p-2", name="Data")]
        provider.list_projects.return_value = projects
        provider.list_repositories.side_effect = lambda p: [Repository(id=f"{p.id}-r", name=f"{p.name}-repo")]
        provider.get_file.return_value = "update_configs: []\n"

        assert Orchestrator(provider, pipeline, tickets, today=TUESDAY).run() == 0
        assert provider.list_repositories.call_args_list == [call(projects[0]), call(projects[1])]
        assert provider.get_file.call_count == 4
        tickets.ensure_ticket.assert_not_called()

    def test_translates_each_entry_with_run_date(
        self, orchestrator: Orchestrator, provider: MagicMock, pipeline: MagicMock, project: Project
    ) -> None:
        provider.get_file.side_effect = _files(
            {
                ("billing-api", ".dependabot/config.yml"): TWO_ENTRIES,
                ("billing-api", "azure-pipelines.yml"): "trigger: [main]\n",
                ("ledger", "azure-pipelines.yml"): "trigger: [main]\n",
            }
        )
        orchestrator.run()

        policies = [c.args[2] for c in pipeline.run.call_args_list]
        assert [p.package_manager for p in policies] == [PackageManager.NPM_AND_YARN, PackageManager.PIP]
        assert [p.runs_today for p in policies] == [True, False]
        assert policies[1].directory == "/tools"
        assert all(c.args[:2] == (project, REPOS[0]) for c in pipeline.run.call_args_list)


class TestTickets:
    def test_missing_update_config_raises_ticket_and_still_checks_pipeline(
        self, orchestrator: Orchestrator, provider: MagicMock, pipeline: MagicMock, tickets: MagicMock, project: Project
    ) -> None:
        provider.get_file.side_effect = _files({("ledger", ".dependabot/config.yml"): "update_configs: []\n"})
        orchestrator.run()

        assert tickets.ensure_ticket.call_args_list == [
            call(project, REPOS[0], TicketKind.MISSING_UPDATE_CONFIG),
            call(project, REPOS[0], TicketKind.MISSING_PIPELINE_CONFIG),
            call(project, REPOS[1], TicketKind.MISSING_PIPELINE_CONFIG),
        ]
        pipeline.run.assert_not_called()


class TestFailureIsolation:
    def test_repository_failure_does_not_stop_next_repository(
        self, orchestrator: Orchestrator, provider: MagicMock, tickets: MagicMock, project: Project, caplog
    ) -> None:
        def get_file(project: Project, repository: Repository, path: str) -> str | None:
            if repository.name == "billing-api":
                raise RuntimeError("connection reset")
            return None

        provider.get_file.side_effect = get_file
        with caplog.at_level("INFO"):
            assert orchestrator.run() == 1

        assert "contoso => Platform => billing-api => Failed processing: connection reset" in caplog.messages
        assert call(project, REPOS[1], TicketKind.MISSING_UPDATE_CONFIG) in tickets.ensure_ticket.call_args_list

    def test_pipeline_failure_isolated_per_entry(
        self, orchestrator: Orchestrator, provider: MagicMock, pipeline: MagicMock, tickets: MagicMock, caplog
    ) -> None:
        provider.get_file.side_effect = _files(
            {
                ("billing-api", ".dependabot/config.yml"): TWO_ENTRIES,
                ("billing-api", "azure-pipelines.yml"): "steps: []\n",
                ("ledger", ".dependabot/config.yml"): TWO_ENTRIES,
                ("ledger", "azure-pipelines.yml"): "steps: []\n",
            }
        )
        pipeline.run.side_effect = [RuntimeError("npm registry down"), {}, {}, {}]
        with caplog.at_level("INFO"):
            assert orchestrator.run() == 0

        assert pipeline.run.call_count == 4
        assert "contoso => Platform => billing-api => npm_and_yarn => Failed processing: npm registry down" in caplog.messages

    def test_translation_failure_aborts_remaining_entries_of_repository_only(
        self, orchestrator: Orchestrator, provider: MagicMock, pipeline: MagicMock, caplog
    ) -> None:
        provider.get_file.side_effect = _files(
            {
                ("billing-api", ".dependabot/config.yml"): BAD_THEN_GOOD,
                ("ledger", ".dependabot/config.yml"): TWO_ENTRIES,
                ("ledger", "azure-pipelines.yml"): "steps: []\n",
            }
        )
        with caplog.at_level("INFO"):
            assert orchestrator.run() == 1

        repos_run = [c.args[1].name for c in pipeline.run.call_args_list]
        assert repos_run == ["ledger", "ledger"]
        assert "contoso => Platform => billing-api => Failed processing: Unsupported package manager: cobol" in caplog.messages

    def test_invalid_document_is_a_repository_failure(
        self, orchestrator: Orchestrator, provider: MagicMock, pipeline: MagicMock
    ) -> None:
        provider.get_file.side_effect = _files(
            {
                ("billing-api", ".dependabot/config.yml"): "version: 1\n",
                ("ledger", ".dependabot/config.yml"): "update_configs: []\n",
                ("ledger", "azure-pipelines.yml"): "steps: []\n",
            }
        )
        assert orchestrator.run() == 1

    def test_listing_failure_is_fatal(self, provider: MagicMock, pipeline: MagicMock, tickets: MagicMock) -> None:
        provider.list_projects.side_effect = RuntimeError("401")
        with pytest.raises(RuntimeError):
            Orchestrator(provider, pipeline, tickets).run()
