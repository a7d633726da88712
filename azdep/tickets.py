"""Tracking work items for repositories that are missing required configuration."""

import logging

from azdep.log import TraversalLog
from azdep.models import Project, Repository, TicketKind, WorkItem
from azdep.policy import PIPELINE_CONFIG_PATH, UPDATE_CONFIG_PATH
from azdep.providers.base import SourceControlProvider

logger = logging.getLogger(__name__)

_DEPENDABOT_DOCS = "https://dependabot.com/docs/config-file"


def build_work_item(repository: Repository, kind: TicketKind) -> WorkItem:
    match kind:
        case TicketKind.MISSING_UPDATE_CONFIG:
            return WorkItem(
                title=f"[{repository.name}] Configure Dependabot",
                tags="Dependabot",
                repro_steps=(
                    f"Please add `{UPDATE_CONFIG_PATH}` to the default branch of the `{repository.name}` repo."
                    "<p>This will automatically configure the Dependabot service to provide dependency updates.</p>"
                    f'<p>See <a href="{_DEPENDABOT_DOCS}">{_DEPENDABOT_DOCS}</a> for more information.</p>'
                ),
            )
        case TicketKind.MISSING_PIPELINE_CONFIG:
            return WorkItem(
                title=f"[{repository.name}] Configure Azure Pipeline",
                tags="Azure Pipeline",
                repro_steps=(
                    f"Please add `{PIPELINE_CONFIG_PATH}` to the default branch of the `{repository.name}` repo."
                ),
            )


class TicketManager:
    """Raise at most one open work item per repository and missing file.

    Idempotency is a title query followed by a create. Two overlapping runs
    can still both create the item; the run is single-threaded so this is
    accepted.
    """

    def __init__(self, provider: SourceControlProvider) -> None:
        self._provider = provider

    def ensure_ticket(self, project: Project, repository: Repository, kind: TicketKind) -> int | None:
        """Create the work item unless one with the same title exists. Returns the new id, if any."""
        log = TraversalLog(logger, self._provider.organisation, project.name, repository.name)
        work_item = build_work_item(repository, kind)

        existing = self._provider.find_work_items(project, work_item.title)
        if existing:
            log.info(f"Work item '{work_item.title}' already exists ({existing[0]})")
            return None

        work_item_id = self._provider.create_work_item(project, work_item)
        log.info(f"Raised work item '{work_item.title}' ({work_item_id})")
        return work_item_id
