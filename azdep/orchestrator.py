"""Organisation traversal: projects → repositories → update configs."""

import logging
from datetime import date

from azdep.log import TraversalLog
from azdep.models import Project, Repository, TicketKind
from azdep.pipeline import UpdatePipeline
from azdep.policy import PIPELINE_CONFIG_PATH, UPDATE_CONFIG_PATH, parse_update_config, translate
from azdep.providers.base import SourceControlProvider
from azdep.tickets import TicketManager

logger = logging.getLogger(__name__)


class Orchestrator:
    """Walk every repository of an organisation, depth first.

    Listing projects or repositories is not guarded: if the organisation can't
    be enumerated the run fails. Everything below that is isolated per
    repository, and pipeline failures per config entry.
    """

    def __init__(
        self,
        provider: SourceControlProvider,
        pipeline: UpdatePipeline,
        tickets: TicketManager,
        today: date | None = None,
    ) -> None:
        self._provider = provider
        self._pipeline = pipeline
        self._tickets = tickets
        # fixed once so every entry in the run sees the same schedule decision
        self._today = today or date.today()
        self._log = TraversalLog(logger, provider.organisation)

    def run(self) -> int:
        """Process the organisation. Returns the number of repositories that failed."""
        self._log.info("Fetch projects...")
        failures = 0
        for project in self._provider.list_projects():
            failures += self.process_project(project)
        return failures

    def process_project(self, project: Project) -> int:
        self._log.child(project.name).info("Checking repositories...")
        failures = 0
        for repository in self._provider.list_repositories(project):
            if not self.process_repository(project, repository):
                failures += 1
        return failures

    def process_repository(self, project: Project, repository: Repository) -> bool:
        log = self._log.child(project.name, repository.name)
        try:
            self._process_update_config(project, repository, log)

            log.info("Checking for Azure Pipeline configuration file...")
            if self._provider.get_file(project, repository, PIPELINE_CONFIG_PATH) is None:
                log.info("Azure Pipeline configuration file does not exist, raising bug if required...")
                self._tickets.ensure_ticket(project, repository, TicketKind.MISSING_PIPELINE_CONFIG)
        except Exception as exc:
            log.error(f"Failed processing: {exc}")
            return False
        return True

    def _process_update_config(self, project: Project, repository: Repository, log: TraversalLog) -> None:
        log.info("Checking for Dependabot configuration file...")
        text = self._provider.get_file(project, repository, UPDATE_CONFIG_PATH)
        if text is None:
            log.info("Dependabot configuration file does not exist, raising bug if required...")
            self._tickets.ensure_ticket(project, repository, TicketKind.MISSING_UPDATE_CONFIG)
            return

        config = parse_update_config(text)
        for entry in config.update_configs:
            # an unsupported value aborts the remaining entries of this repository
            policy = translate(entry, self._today)
            try:
                self._pipeline.run(project, repository, policy)
            except Exception as exc:
                log.child(policy.package_manager.value).error(f"Failed processing: {exc}")
