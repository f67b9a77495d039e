import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from fastapi import FastAPI, Header, HTTPException, BackgroundTasks, Request
from fastapi.responses import PlainTextResponse
from kubernetes import client
from pydantic import BaseModel

from fluffybot.config import Settings
from fluffybot.conversation.responders import IssueNoteResponder, MergeRequestNoteResponder
from fluffybot.models.webhook import IssueEvent, IssueNoteEvent, MergeRequestEvent, MergeRequestNoteEvent
from fluffybot.models.worker import JobStatusView
from fluffybot.platforms.gitlab import GitLabClient
from fluffybot.providers.base import LLMProvider
from fluffybot.providers.claude import ClaudeProvider
from fluffybot.providers.openai_compatible import OpenAICompatibleProvider
from fluffybot.webhook.merge import MergeEventRouter
from fluffybot.webhook.routing import Route, route_event
from fluffybot.worker.cluster import ClusterUnavailableError, load_cluster_clients
from fluffybot.worker.dispatcher import DispatchError, WorkerDispatcher, post_dispatch_failure
from fluffybot.worker.status import JobStatusReporter


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    return Settings()


@lru_cache
def get_cluster() -> tuple[client.BatchV1Api, client.CoreV1Api]:
    return load_cluster_clients()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info(f"fluffybot starting as @{settings.bot_username}...")
    yield
    logger.info("fluffybot shutting down...")


app = FastAPI(title="fluffybot", lifespan=lifespan)


class WebhookResponse(BaseModel):
    status: str
    message: str


def get_gitlab(settings: Settings) -> GitLabClient:
    return GitLabClient(
        token=settings.gitlab_token,
        base_url=settings.gitlab_url,
        timeout=settings.gitlab_timeout,
    )


def get_provider(settings: Settings) -> LLMProvider | None:
    """Get LLM provider based on settings."""
    if settings.default_provider == "anthropic" and settings.anthropic_api_key:
        return ClaudeProvider(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
            max_tokens=settings.llm_max_tokens,
            timeout=settings.llm_timeout,
        )
    elif settings.default_provider == "openai" and settings.openai_api_key:
        return OpenAICompatibleProvider(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            max_tokens=settings.llm_max_tokens,
            timeout=settings.llm_timeout,
        )
    return None


def get_dispatcher(settings: Settings, gitlab: GitLabClient) -> WorkerDispatcher:
    batch_api, _ = get_cluster()
    return WorkerDispatcher(settings=settings, batch_api=batch_api, gitlab=gitlab)


def get_job_status_reporter() -> JobStatusReporter:
    settings = get_settings()
    batch_api, core_api = get_cluster()
    return JobStatusReporter(batch_api, core_api, namespace=settings.worker_namespace)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}


@app.get("/webhook/health", response_class=PlainTextResponse)
async def webhook_health():
    return "OK"


@app.post("/webhook/gitlab", response_model=WebhookResponse)
async def gitlab_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    x_gitlab_token: str | None = Header(default=None),
):
    settings = get_settings()

    # Verify webhook token when one is configured
    if settings.gitlab_webhook_secret:
        if x_gitlab_token != settings.gitlab_webhook_secret:
            raise HTTPException(status_code=401, detail="Invalid webhook token")

    try:
        body = await request.json()
    except ValueError as e:
        logger.error(f"Failed to parse webhook body: {e}")
        return WebhookResponse(status="ignored", message="Failed to parse payload")

    decision = route_event(body, settings.bot_username)

    if decision.route == Route.DISPATCH_ISSUE:
        background_tasks.add_task(run_issue_dispatch, decision.event)
    elif decision.route == Route.ISSUE_NOTE:
        background_tasks.add_task(run_issue_note, decision.event)
    elif decision.route == Route.MR_LINE_NOTE:
        background_tasks.add_task(run_mr_line_note, decision.event)
    elif decision.route == Route.MERGE:
        background_tasks.add_task(run_merge_event, decision.event)

    return WebhookResponse(status=decision.status, message=decision.message)


@app.get("/jobs", response_model=list[JobStatusView])
async def list_jobs():
    try:
        return await get_job_status_reporter().list_jobs()
    except Exception as e:
        logger.error(f"Failed to list jobs: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to list jobs: {e}")


@app.get("/jobs/{name}", response_model=JobStatusView)
async def get_job_status(name: str):
    try:
        job = await get_job_status_reporter().get_job(name)
    except Exception as e:
        logger.error(f"Failed to get job {name}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get job: {e}")

    if job is None:
        raise HTTPException(status_code=404, detail=f"Job not found: {name}")
    return job


@app.get("/jobs/{name}/logs", response_class=PlainTextResponse)
async def get_job_logs(name: str):
    try:
        logs = await get_job_status_reporter().get_job_logs(name)
    except Exception as e:
        logger.error(f"Failed to get job logs: {e}")
        return PlainTextResponse(f"Failed to get job logs: {e}", status_code=500)
    return PlainTextResponse(logs)


async def run_issue_dispatch(event: IssueEvent):
    """Background task to launch a worker for an accepted issue event."""
    settings = get_settings()
    gitlab = get_gitlab(settings)

    try:
        dispatcher = get_dispatcher(settings, gitlab)
        job_name = await dispatcher.dispatch(event, event.task_description())
        logger.info(f"Worker job created: {job_name}")
    except ClusterUnavailableError as e:
        logger.error(f"Cannot dispatch worker for issue #{event.issue_iid}: {e}")
        await post_dispatch_failure(gitlab, event.project.id, event.issue_iid, str(e))
    except DispatchError as e:
        logger.error(f"Failed to create worker job for issue #{event.issue_iid}: {e}")
    except Exception as e:
        logger.exception(f"Worker dispatch failed for issue #{event.issue_iid}: {e}")


async def run_issue_note(event: IssueNoteEvent):
    settings = get_settings()
    provider = get_provider(settings)
    if not provider:
        logger.error("No LLM provider configured")
        return

    responder = IssueNoteResponder(
        gitlab=get_gitlab(settings),
        provider=provider,
        bot_username=settings.bot_username,
    )
    await responder.handle(event)


async def run_mr_line_note(event: MergeRequestNoteEvent):
    settings = get_settings()
    provider = get_provider(settings)
    if not provider:
        logger.error("No LLM provider configured")
        return

    responder = MergeRequestNoteResponder(
        gitlab=get_gitlab(settings),
        provider=provider,
        bot_username=settings.bot_username,
    )
    await responder.handle(event)


async def run_merge_event(event: MergeRequestEvent):
    settings = get_settings()
    gitlab = get_gitlab(settings)

    try:
        router = MergeEventRouter(gitlab=gitlab, dispatcher=get_dispatcher(settings, gitlab))
        await router.handle(event)
    except Exception as e:
        logger.exception(f"MR merge handling failed for MR !{event.object_attributes.iid}: {e}")


def run():
    import uvicorn

    uvicorn.run("fluffybot.main:app", host="0.0.0.0", port=8080)
