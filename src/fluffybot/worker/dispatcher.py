import asyncio
import logging
from kubernetes import client
from kubernetes.client.rest import ApiException
from fluffybot.config import Settings
from fluffybot.models.webhook import IssueEvent
from fluffybot.models.worker import TaskMode, WorkerTask
from fluffybot.platforms.gitlab import GitLabClient
from .job_spec import build_job_spec, generate_job_name


logger = logging.getLogger(__name__)

DISPATCH_FAILURE_COMMENT = "❌ Failed to create the worker job\n\nError: {error}\n\nPlease contact an administrator."


class DispatchError(Exception):
    """The worker job could not be submitted to the cluster."""

    def __init__(self, message: str, job_name: str | None = None):
        self.job_name = job_name
        super().__init__(message)


class WorkerDispatcher:
    def __init__(self, settings: Settings, batch_api: client.BatchV1Api, gitlab: GitLabClient):
        self.settings = settings
        self.batch_api = batch_api
        self.gitlab = gitlab

    def build_task(
        self,
        event: IssueEvent,
        task_mode: TaskMode = TaskMode.ISSUE,
        mr_iid: int | None = None,
    ) -> WorkerTask:
        description_previous = None
        description_current = None
        change = event.description_change()
        if change is not None:
            description_previous = change.previous
            description_current = change.current

        return WorkerTask(
            gitlab_url=self.settings.gitlab_url,
            gitlab_token=self.settings.gitlab_token,
            bot_username=self.settings.bot_username,
            project_path=event.project.path_with_namespace or "",
            project_id=event.project.id,
            issue_iid=event.issue_iid,
            anthropic_api_key=self.settings.anthropic_api_key or "",
            task_mode=task_mode,
            mr_iid=mr_iid,
            description_previous=description_previous,
            description_current=description_current,
            skip_mr_creation=False,
        )

    async def dispatch(
        self,
        event: IssueEvent,
        task_description: str,
        task_mode: TaskMode = TaskMode.ISSUE,
        mr_iid: int | None = None,
    ) -> str:
        """Create one worker Job for the event and return its name.

        On failure an error comment is posted to the issue and DispatchError
        is raised.
        """
        task = self.build_task(event, task_mode=task_mode, mr_iid=mr_iid)
        job_name = generate_job_name(task.issue_iid)
        namespace = self.settings.worker_namespace

        logger.info(
            f"Dispatching {task.task_mode.value} worker {job_name} for project={task.project_id}, "
            f"issue={task.issue_iid}: {task_description[:80]!r}"
        )

        try:
            job = build_job_spec(job_name, task, self.settings)
            loop = asyncio.get_running_loop()
            created = await loop.run_in_executor(
                None,
                lambda: self.batch_api.create_namespaced_job(namespace=namespace, body=job),
            )
        except ApiException as e:
            if e.status == 409:
                message = f"Job name collision for {job_name}: another dispatch for this issue started in the same second"
            else:
                message = f"Failed to create worker job: {e.status} {e.reason}"
            logger.error(message)
            await self._post_error_comment(task, message)
            raise DispatchError(message, job_name=job_name) from e
        except Exception as e:
            message = f"Failed to create worker job: {e}"
            logger.error(message, exc_info=True)
            await self._post_error_comment(task, message)
            raise DispatchError(message, job_name=job_name) from e

        created_name = created.metadata.name
        logger.info(f"Created worker job: {created_name} in namespace: {namespace}")
        return created_name

    async def _post_error_comment(self, task: WorkerTask, error: str) -> None:
        await post_dispatch_failure(self.gitlab, task.project_id, task.issue_iid, error)


async def post_dispatch_failure(gitlab: GitLabClient, project_id: int, issue_iid: int, error: str) -> None:
    """Tell the issue its worker was not started. Never raises."""
    try:
        await gitlab.post_issue_comment(project_id, issue_iid, DISPATCH_FAILURE_COMMENT.format(error=error))
    except Exception as e:
        logger.error(f"Failed to post error comment: {e}")
