import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any
from pydantic import ValidationError
from fluffybot.models.webhook import (
    IssueEvent,
    IssueNoteEvent,
    MergeRequestEvent,
    MergeRequestNoteEvent,
    WebhookEvent,
    parse_webhook_event,
)
from .validation import validate_issue_event


logger = logging.getLogger(__name__)

SUPPORTED_KINDS = ("issue", "note", "merge_request")
SUPPORTED_NOTEABLE_TYPES = ("Issue", "MergeRequest")


class Route(str, Enum):
    IGNORE = "ignore"
    DISPATCH_ISSUE = "dispatch_issue"
    ISSUE_NOTE = "issue_note"
    MR_LINE_NOTE = "mr_line_note"
    MERGE = "merge"


@dataclass(frozen=True)
class RouteDecision:
    route: Route
    message: str
    event: WebhookEvent | None = None

    @property
    def accepted(self) -> bool:
        return self.route != Route.IGNORE

    @property
    def status(self) -> str:
        return "accepted" if self.accepted else "ignored"


def ignore(message: str) -> RouteDecision:
    logger.debug(f"Webhook ignored: {message}")
    return RouteDecision(route=Route.IGNORE, message=message)


def mentions(text: str | None, bot_username: str) -> bool:
    return f"@{bot_username}" in (text or "")


def route_event(body: Any, bot_username: str) -> RouteDecision:
    """Decide what to do with one webhook body. Makes no remote calls."""
    if not isinstance(body, dict):
        return ignore("Failed to parse payload")

    user = body.get("user") if isinstance(body.get("user"), dict) else {}
    if user.get("username") == bot_username:
        return ignore("Event from bot itself")

    object_kind = body.get("object_kind")
    if object_kind not in SUPPORTED_KINDS:
        return ignore("Unsupported webhook type")

    if object_kind == "note":
        attributes = body.get("object_attributes") if isinstance(body.get("object_attributes"), dict) else {}
        if not mentions(attributes.get("note"), bot_username):
            return ignore(f"Comment does not mention @{bot_username}")
        if attributes.get("noteable_type") not in SUPPORTED_NOTEABLE_TYPES:
            return ignore("Unsupported noteable type")

    try:
        event = parse_webhook_event(body)
    except ValidationError as e:
        logger.error(f"Failed to parse {object_kind} hook payload: {e}")
        return ignore("Failed to parse payload")

    if isinstance(event, IssueEvent):
        return _route_issue(event, bot_username)

    if isinstance(event, IssueNoteEvent):
        return RouteDecision(Route.ISSUE_NOTE, "Issue comment processing started", event)

    if isinstance(event, MergeRequestNoteEvent):
        if not event.is_line_comment():
            return ignore("Not a line comment")
        return RouteDecision(Route.MR_LINE_NOTE, "MR comment processing started", event)

    if isinstance(event, MergeRequestEvent):
        if not event.is_merged():
            return ignore("MR not merged")
        return RouteDecision(Route.MERGE, "MR merge event processing started", event)

    return ignore("Unsupported webhook type")


def _route_issue(event: IssueEvent, bot_username: str) -> RouteDecision:
    reason = validate_issue_event(event)
    if reason is not None:
        return ignore(reason)

    if not event.has_assignee(bot_username):
        return ignore("Bot not assigned")

    return RouteDecision(Route.DISPATCH_ISSUE, "Task accepted and worker job is being created", event)
