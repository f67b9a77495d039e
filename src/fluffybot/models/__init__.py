from .conversation import IntentType, ResponderIntent
from .webhook import (
    IssueEvent,
    IssueNoteEvent,
    MergeRequestEvent,
    MergeRequestNoteEvent,
    WebhookEvent,
    parse_webhook_event,
)
from .worker import JobStatus, JobStatusView, TaskMode, WorkerTask

__all__ = [
    "IntentType",
    "ResponderIntent",
    "IssueEvent",
    "IssueNoteEvent",
    "MergeRequestEvent",
    "MergeRequestNoteEvent",
    "WebhookEvent",
    "parse_webhook_event",
    "JobStatus",
    "JobStatusView",
    "TaskMode",
    "WorkerTask",
]
