"""Kubernetes Job manifest for a worker run.

The container environment is the contract with the worker image: variable
names and value formats must stay stable.
"""
import time
from kubernetes import client
from fluffybot.config import Settings
from fluffybot.models.worker import WorkerTask


APP_LABEL = "fluffybot-worker"
MANAGED_BY_LABEL = "fluffybot-webhook"
JOB_NAME_PREFIX = "fluffybot-worker"
JOB_TTL_SECONDS = 3600
CONTAINER_NAME = "worker"
ENTRYPOINT = "/entrypoint.sh"
WORKSPACE_VOLUME = "workspace"
WORKSPACE_MOUNT_PATH = "/workspace"


def generate_job_name(issue_iid: int, timestamp: int | None = None) -> str:
    if timestamp is None:
        timestamp = int(time.time())
    return f"{JOB_NAME_PREFIX}-{issue_iid}-{timestamp}"


def job_labels(task: WorkerTask) -> dict[str, str]:
    return {
        "app": APP_LABEL,
        "managed-by": MANAGED_BY_LABEL,
        "project-id": str(task.project_id),
        "issue-iid": str(task.issue_iid),
    }


def task_environment(task: WorkerTask) -> dict[str, str]:
    env = {
        "GITLAB_URL": task.gitlab_url,
        "GITLAB_TOKEN": task.gitlab_token,
        "BOT_USERNAME": task.bot_username,
        "PROJECT_PATH": task.project_path,
        "PROJECT_ID": str(task.project_id),
        "ISSUE_IID": str(task.issue_iid),
        "ANTHROPIC_API_KEY": task.anthropic_api_key,
        "SKIP_MR_CREATION": str(task.skip_mr_creation).lower(),
        "TASK_MODE": task.task_mode.value,
    }
    if task.mr_iid is not None:
        env["MR_IID"] = str(task.mr_iid)
    if task.description_previous is not None:
        env["DESCRIPTION_PREVIOUS"] = task.description_previous
    if task.description_current is not None:
        env["DESCRIPTION_CURRENT"] = task.description_current
    return env


def build_job_spec(job_name: str, task: WorkerTask, settings: Settings) -> client.V1Job:
    labels = job_labels(task)

    container = client.V1Container(
        name=CONTAINER_NAME,
        image=settings.worker_image,
        command=[ENTRYPOINT],
        env=[client.V1EnvVar(name=name, value=value) for name, value in task_environment(task).items()],
        resources=client.V1ResourceRequirements(
            requests={
                "cpu": settings.worker_cpu_request,
                "memory": settings.worker_memory_request,
            },
            limits={
                "cpu": settings.worker_cpu_limit,
                "memory": settings.worker_memory_limit,
            },
        ),
        volume_mounts=[client.V1VolumeMount(name=WORKSPACE_VOLUME, mount_path=WORKSPACE_MOUNT_PATH)],
    )

    image_pull_secrets = None
    if settings.worker_image_pull_secret:
        image_pull_secrets = [client.V1LocalObjectReference(name=settings.worker_image_pull_secret)]

    pod_spec = client.V1PodSpec(
        restart_policy="Never",
        containers=[container],
        image_pull_secrets=image_pull_secrets,
        volumes=[client.V1Volume(name=WORKSPACE_VOLUME, empty_dir=client.V1EmptyDirVolumeSource())],
    )

    return client.V1Job(
        api_version="batch/v1",
        kind="Job",
        metadata=client.V1ObjectMeta(
            name=job_name,
            namespace=settings.worker_namespace,
            labels=labels,
        ),
        spec=client.V1JobSpec(
            ttl_seconds_after_finished=JOB_TTL_SECONDS,
            backoff_limit=0,
            template=client.V1PodTemplateSpec(
                metadata=client.V1ObjectMeta(labels=dict(labels)),
                spec=pod_spec,
            ),
        ),
    )
