"""Drive one update policy through the update capability, end to end."""

import logging
from enum import Enum

from azdep.capabilities.base import UpdateChecker
from azdep.capabilities.registry import CapabilityRegistry
from azdep.log import TraversalLog
from azdep.matcher import matches
from azdep.models import UNLOCK_ORDER, Project, Repository, RequirementsUnlock, Source, UpdatePolicy
from azdep.providers.base import SourceControlProvider

logger = logging.getLogger(__name__)


class DependencyOutcome(str, Enum):
    IGNORED = "ignored"
    UP_TO_DATE = "up_to_date"
    UNUPDATABLE = "unupdatable"
    REQUEST_ALREADY_EXISTS = "request_already_exists"
    MANUAL = "manual"  # pull request created, left for review
    AUTOMERGE_APPLIED = "automerge_applied"


def select_unlock(checker: UpdateChecker) -> RequirementsUnlock | None:
    """Return the least disruptive unlock level that allows an update, or None."""
    candidates = UNLOCK_ORDER if checker.requirements_unlocked_or_can_be() else (RequirementsUnlock.NONE,)
    for unlock in candidates:
        if checker.can_update(requirements_to_unlock=unlock):
            return unlock
    return None


class UpdatePipeline:
    def __init__(self, provider: SourceControlProvider, capabilities: CapabilityRegistry) -> None:
        self._provider = provider
        self._capabilities = capabilities

    def source_for(self, project: Project, repository: Repository, policy: UpdatePolicy) -> Source:
        return Source(
            repo=f"{self._provider.organisation}/{project.id}/_git/{repository.id}",
            directory=policy.directory,
        )

    def run(self, project: Project, repository: Repository, policy: UpdatePolicy) -> dict[str, DependencyOutcome]:
        """Process every top-level dependency once.

        Returns the outcome per dependency name. A name the parser yields more
        than once is processed each time and only its last outcome is kept.
        Nothing is caught here; the orchestrator owns the failure boundary.
        """
        log = TraversalLog(
            logger, self._provider.organisation, project.name, repository.name, policy.package_manager.value
        )
        if not policy.runs_today:
            log.info("Skipping dependency checking")
            return {}

        log.info(
            f"Dependabot configuration {{ directory: {policy.directory}, "
            f"ignore: {sorted(policy.ignore_names)}, automerged: {sorted(policy.automerge_names)} }}"
        )
        capability = self._capabilities.get(policy.package_manager)
        source = self.source_for(project, repository, policy)

        log.info("Fetching dependency files...")
        fetched = capability.fetch_files(source)
        files = fetched.files

        log.info("Parsing dependencies information...")
        dependencies = [dep for dep in capability.parse(files, source) if dep.top_level]

        outcomes: dict[str, DependencyOutcome] = {}
        for dep in dependencies:
            dep_log = log.child(f"{dep.name} ({dep.version})")

            if matches(dep.name, policy.ignore_names):
                dep_log.info("Dependency ignored")
                outcomes[dep.name] = DependencyOutcome.IGNORED
                continue

            dep_log.info("Checking for updates...")
            checker = capability.checker(dep, files)
            if checker.up_to_date():
                dep_log.info("Already up to date")
                outcomes[dep.name] = DependencyOutcome.UP_TO_DATE
                continue

            unlock = select_unlock(checker)
            if unlock is None:
                dep_log.info("Cannot be updated")
                outcomes[dep.name] = DependencyOutcome.UNUPDATABLE
                continue

            updated_deps = checker.updated_dependencies(requirements_to_unlock=unlock)
            update_log = log.child(f"{dep.name} ({dep.version} -> {updated_deps[0].version})")

            update_log.info("Generating file updates...")
            updated_files = capability.updated_files(updated_deps, files)

            update_log.info("Creating pull request...")
            pull_request = capability.create_pull_request(source, fetched.commit, updated_deps, updated_files)
            if pull_request is None:
                update_log.info("Pull request already exists")
                outcomes[dep.name] = DependencyOutcome.REQUEST_ALREADY_EXISTS
                continue
            update_log.info(f"Pull request created ({pull_request.id})")

            if not matches(dep.name, policy.automerge_names):
                outcomes[dep.name] = DependencyOutcome.MANUAL
                continue

            dep_log.info(f"Setting pull request to auto-complete by {pull_request.created_by_id}...")
            self._provider.set_auto_complete(project, repository, pull_request)
            dep_log.info(f"Adding automatic approval by {pull_request.created_by_id}...")
            self._provider.approve(project, repository, pull_request)
            outcomes[dep.name] = DependencyOutcome.AUTOMERGE_APPLIED

        return outcomes
