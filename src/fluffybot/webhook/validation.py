import logging
from fluffybot.models.webhook import IssueEvent


logger = logging.getLogger(__name__)


def validate_issue_event(event: IssueEvent) -> str | None:
    """Return the reason an issue event must be ignored, or None to accept it.

    Rules are checked in order; close and reopen come before the generic
    open/update check so their reasons stay specific.
    """
    if not event.is_issue_hook():
        return "Not an issue hook"

    if event.is_close_action():
        return "Issue is being closed - ignoring"

    # A reopen that also edits the description arrives again as "update".
    if event.is_reopen_action():
        return "Issue is being reopened - ignoring (description update will trigger separately)"

    if not event.is_open_or_update():
        return "Issue action is not open or update"

    if event.action == "update" and not event.has_description_change():
        logger.debug(f"Skipping update without description change for issue #{event.issue_iid}")
        return "Update without description change - ignoring"

    if event.project is None or event.project.id is None:
        return "Missing project information"

    if event.object_attributes is None:
        return "Missing object attributes"

    if event.issue_iid is None:
        return "Missing issue IID"

    if event.issue_title is None:
        return "Missing issue title"

    return None
