import logging
import re
from fluffybot.models.webhook import (
    IssueAttributes,
    IssueEvent,
    MergeRequestEvent,
)
from fluffybot.models.worker import TaskMode
from fluffybot.platforms.gitlab import GitLabClient
from fluffybot.worker.dispatcher import WorkerDispatcher


logger = logging.getLogger(__name__)

CLOSING_KEYWORD_PATTERN = re.compile(r"(?:closes|fixes|resolves) #(\d+)", re.IGNORECASE)


def extract_issue_iid_from_description(description: str | None) -> int | None:
    """Find the issue linked by "Closes #N" / "Fixes #N" / "Resolves #N"."""
    if not description:
        return None
    match = CLOSING_KEYWORD_PATTERN.search(description)
    if match is None:
        return None
    return int(match.group(1))


class MergeEventRouter:
    """Starts a wiki-update worker for the issue a merged MR closes."""

    def __init__(self, gitlab: GitLabClient, dispatcher: WorkerDispatcher):
        self.gitlab = gitlab
        self.dispatcher = dispatcher

    async def handle(self, event: MergeRequestEvent) -> str | None:
        """Return the dispatched job name, or None when nothing was started."""
        project_id = event.project.id
        mr_iid = event.object_attributes.iid

        logger.info(f"Processing MR merge event: project={project_id}, MR={mr_iid}")

        issue_iid = extract_issue_iid_from_description(event.object_attributes.description)
        if issue_iid is None:
            logger.info(f"No linked issue in MR !{mr_iid} description, skipping wiki update")
            return None

        try:
            issue = await self.gitlab.get_issue(project_id, issue_iid)
            issue_event = IssueEvent(
                object_kind="issue",
                user=event.user,
                project=event.project,
                object_attributes=IssueAttributes(
                    iid=issue_iid,
                    title=issue.get("title"),
                    description=issue.get("description"),
                    action="update",
                ),
            )
            job_name = await self.dispatcher.dispatch(
                issue_event,
                f"Wiki update after MR !{mr_iid} merge",
                task_mode=TaskMode.WIKI,
                mr_iid=mr_iid,
            )
        except Exception as e:
            # A failed wiki update must not affect the merge itself.
            logger.error(f"Failed to create wiki update worker: {e}", exc_info=True)
            return None

        logger.info(f"Created wiki update worker: {job_name}")
        return job_name
