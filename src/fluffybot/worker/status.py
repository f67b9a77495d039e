import asyncio
import logging
from kubernetes import client
from kubernetes.client.rest import ApiException
from fluffybot.models.worker import JobStatus, JobStatusView
from .job_spec import APP_LABEL


logger = logging.getLogger(__name__)

APP_SELECTOR = f"app={APP_LABEL}"


def determine_job_status(status: client.V1JobStatus | None) -> JobStatus:
    """Collapse the Job status block into pending/running/succeeded/failed."""
    if status is None:
        return JobStatus.PENDING
    if (status.succeeded or 0) > 0:
        return JobStatus.SUCCEEDED
    if (status.failed or 0) > 0:
        return JobStatus.FAILED
    if (status.active or 0) > 0:
        return JobStatus.RUNNING
    return JobStatus.PENDING


def _label_int(labels: dict[str, str], key: str) -> int | None:
    value = labels.get(key)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Non-numeric {key} label: {value}")
        return None


def to_status_view(job: client.V1Job) -> JobStatusView:
    labels = job.metadata.labels or {}
    status = job.status
    return JobStatusView(
        name=job.metadata.name,
        status=determine_job_status(status),
        project_id=_label_int(labels, "project-id"),
        issue_iid=_label_int(labels, "issue-iid"),
        start_time=status.start_time if status else None,
        completion_time=status.completion_time if status else None,
        succeeded=(status.succeeded or 0) if status else 0,
        failed=(status.failed or 0) if status else 0,
    )


class JobStatusReporter:
    def __init__(self, batch_api: client.BatchV1Api, core_api: client.CoreV1Api, namespace: str):
        self.batch_api = batch_api
        self.core_api = core_api
        self.namespace = namespace

    async def _run(self, fn):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, fn)

    async def list_jobs(self) -> list[JobStatusView]:
        jobs = await self._run(
            lambda: self.batch_api.list_namespaced_job(self.namespace, label_selector=APP_SELECTOR)
        )
        return [to_status_view(job) for job in jobs.items]

    async def get_job(self, name: str) -> JobStatusView | None:
        try:
            job = await self._run(lambda: self.batch_api.read_namespaced_job(name, self.namespace))
        except ApiException as e:
            if e.status == 404:
                return None
            raise

        labels = job.metadata.labels or {}
        if labels.get("app") != APP_LABEL:
            return None
        return to_status_view(job)

    async def get_job_logs(self, name: str) -> str:
        pods = await self._run(
            lambda: self.core_api.list_namespaced_pod(
                self.namespace, label_selector=f"{APP_SELECTOR},job-name={name}"
            )
        )
        if not pods.items:
            return f"No pods found for job: {name}"

        pod_name = pods.items[0].metadata.name
        return await self._run(
            lambda: self.core_api.read_namespaced_pod_log(pod_name, self.namespace)
        )
