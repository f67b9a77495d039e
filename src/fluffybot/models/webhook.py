from typing import Annotated, Any, Union

from pydantic import BaseModel, Discriminator, Field, Tag, TypeAdapter


class GitLabUser(BaseModel):
    id: int | None = None
    username: str
    name: str | None = None


class GitLabProject(BaseModel):
    id: int | None = None
    path_with_namespace: str | None = None
    git_http_url: str | None = None


class DescriptionChange(BaseModel):
    previous: str | None = None
    current: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.previous is None and self.current is None


class IssueChanges(BaseModel):
    description: DescriptionChange | None = None


class IssueAttributes(BaseModel):
    id: int | None = None
    iid: int | None = None
    title: str | None = None
    description: str | None = None
    state: str | None = None
    action: str | None = None


class IssueEvent(BaseModel):
    object_kind: str  # "issue"
    user: GitLabUser
    project: GitLabProject | None = None
    assignees: list[GitLabUser] = Field(default_factory=list)
    object_attributes: IssueAttributes | None = None
    changes: IssueChanges | None = None

    @property
    def action(self) -> str | None:
        return self.object_attributes.action if self.object_attributes else None

    @property
    def issue_iid(self) -> int | None:
        return self.object_attributes.iid if self.object_attributes else None

    @property
    def issue_title(self) -> str | None:
        return self.object_attributes.title if self.object_attributes else None

    @property
    def issue_description(self) -> str | None:
        return self.object_attributes.description if self.object_attributes else None

    def is_issue_hook(self) -> bool:
        return self.object_kind == "issue"

    def is_open_or_update(self) -> bool:
        return self.action in ("open", "update")

    def is_close_action(self) -> bool:
        return self.action == "close"

    def is_reopen_action(self) -> bool:
        return self.action == "reopen"

    def description_change(self) -> DescriptionChange | None:
        if self.changes is None or self.changes.description is None:
            return None
        return self.changes.description

    def has_description_change(self) -> bool:
        change = self.description_change()
        return change is not None and not change.is_empty

    def has_assignee(self, username: str) -> bool:
        return any(assignee.username == username for assignee in self.assignees)

    def task_description(self) -> str:
        parts = []
        if self.issue_title is not None:
            parts.append(f"# {self.issue_title}\n\n")
        if self.issue_description is not None:
            parts.append(self.issue_description)
        return "".join(parts).strip()


class NoteAttributes(BaseModel):
    id: int | None = None
    note: str
    noteable_type: str


class NoteIssue(BaseModel):
    iid: int
    title: str | None = None
    description: str | None = None


class IssueNoteEvent(BaseModel):
    object_kind: str  # "note"
    user: GitLabUser
    project: GitLabProject
    issue: NoteIssue
    object_attributes: NoteAttributes


class NotePosition(BaseModel):
    base_sha: str | None = None
    head_sha: str | None = None
    start_sha: str | None = None
    old_path: str | None = None
    new_path: str | None = None
    old_line: int | None = None
    new_line: int | None = None

    @property
    def file_path(self) -> str | None:
        return self.new_path if self.new_path is not None else self.old_path

    @property
    def line(self) -> int | None:
        return self.new_line if self.new_line is not None else self.old_line


class MergeRequestNoteAttributes(NoteAttributes):
    position: NotePosition | None = None


class NoteMergeRequest(BaseModel):
    id: int | None = None
    iid: int
    title: str | None = None
    description: str | None = None
    source_branch: str | None = None
    target_branch: str | None = None


class MergeRequestNoteEvent(BaseModel):
    object_kind: str  # "note"
    user: GitLabUser
    project: GitLabProject
    merge_request: NoteMergeRequest
    object_attributes: MergeRequestNoteAttributes

    def is_line_comment(self) -> bool:
        position = self.object_attributes.position
        return position is not None and position.line is not None


class MergeRequestAttributes(BaseModel):
    id: int | None = None
    iid: int
    title: str | None = None
    description: str | None = None
    source_branch: str | None = None
    target_branch: str | None = None
    state: str | None = None  # opened, closed, locked, merged
    action: str | None = None  # open, close, reopen, update, merge, ...


class MergeRequestEvent(BaseModel):
    object_kind: str  # "merge_request"
    user: GitLabUser
    project: GitLabProject
    object_attributes: MergeRequestAttributes

    def is_merged(self) -> bool:
        # GitLab keeps sending "update" actions on already-merged MRs.
        return (
            self.object_attributes.state == "merged"
            and self.object_attributes.action == "merge"
        )


def event_tag(value: Any) -> str | None:
    """Discriminator: object_kind, qualified by noteable_type for notes."""
    if isinstance(value, dict):
        kind = value.get("object_kind")
        attributes = value.get("object_attributes") or {}
        noteable_type = attributes.get("noteable_type") if isinstance(attributes, dict) else None
    else:
        kind = getattr(value, "object_kind", None)
        noteable_type = getattr(getattr(value, "object_attributes", None), "noteable_type", None)

    if kind == "note":
        return f"note:{noteable_type}"
    return kind


WebhookEvent = Annotated[
    Union[
        Annotated[IssueEvent, Tag("issue")],
        Annotated[IssueNoteEvent, Tag("note:Issue")],
        Annotated[MergeRequestNoteEvent, Tag("note:MergeRequest")],
        Annotated[MergeRequestEvent, Tag("merge_request")],
    ],
    Discriminator(event_tag),
]

_webhook_event_adapter = TypeAdapter(WebhookEvent)


def parse_webhook_event(body: dict[str, Any]) -> WebhookEvent:
    """Decode a raw webhook body into its typed variant.

    Raises pydantic.ValidationError for unknown kinds and malformed payloads.
    """
    return _webhook_event_adapter.validate_python(body)
