from datetime import datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict


class TaskMode(str, Enum):
    ISSUE = "issue"
    WIKI = "wiki"


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class WorkerTask(BaseModel):
    """Everything a worker container needs; exported one env var per field."""
    model_config = ConfigDict(frozen=True)

    gitlab_url: str
    gitlab_token: str
    bot_username: str
    project_path: str
    project_id: int
    issue_iid: int
    anthropic_api_key: str
    task_mode: TaskMode = TaskMode.ISSUE
    mr_iid: int | None = None
    description_previous: str | None = None
    description_current: str | None = None
    skip_mr_creation: bool = False


class JobStatusView(BaseModel):
    name: str
    status: JobStatus
    project_id: int | None = None
    issue_iid: int | None = None
    start_time: datetime | None = None
    completion_time: datetime | None = None
    succeeded: int = 0
    failed: int = 0
    message: str | None = None
