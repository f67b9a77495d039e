import asyncio
import logging
from typing import Any
from urllib.parse import quote
import httpx
from .base import GitPlatform


logger = logging.getLogger(__name__)

WIKI_CONTEXT_HEADER = "# Project Wiki\n\n"
WIKI_PAGE_SEPARATOR = "\n---\n\n"


class GitLabAPIError(Exception):
    """Non-2xx response from the GitLab REST API."""

    def __init__(self, status_code: int, body: str, operation: str = "request"):
        self.status_code = status_code
        self.body = body
        self.operation = operation
        super().__init__(f"GitLab {operation} failed: {status_code} {body}")


class GitLabClient(GitPlatform):
    def __init__(self, token: str, base_url: str = "https://gitlab.com", timeout: float = 30.0):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.api_url = f"{self.base_url}/api/v4"
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient() as client:
            response = await client.request(
                method,
                f"{self.api_url}{path}",
                headers=self._headers(),
                json=json,
                params=params,
                timeout=self.timeout,
            )
        if response.is_error:
            logger.error(f"GitLab API error: status={response.status_code}, body={response.text}")
            raise GitLabAPIError(response.status_code, response.text, operation)
        return response

    # Issues

    async def get_issue(self, project_id: int, issue_iid: int) -> dict[str, Any]:
        response = await self._request(
            "GET", f"/projects/{project_id}/issues/{issue_iid}", "get issue"
        )
        return response.json()

    async def update_issue_description(self, project_id: int, issue_iid: int, description: str) -> None:
        await self._request(
            "PUT",
            f"/projects/{project_id}/issues/{issue_iid}",
            "update issue description",
            json={"description": description},
        )

    async def post_issue_comment(self, project_id: int, issue_iid: int, comment: str) -> None:
        await self._request(
            "POST",
            f"/projects/{project_id}/issues/{issue_iid}/notes",
            "post comment",
            json={"body": comment},
        )
        logger.debug(f"Comment posted to project={project_id}, issue={issue_iid}")

    async def get_related_merge_requests(self, project_id: int, issue_iid: int) -> list[dict[str, Any]]:
        response = await self._request(
            "GET",
            f"/projects/{project_id}/issues/{issue_iid}/related_merge_requests",
            "get related merge requests",
        )
        return response.json()

    # Merge requests

    async def create_merge_request(
        self,
        project_id: int,
        source_branch: str,
        target_branch: str,
        title: str,
        description: str,
    ) -> int:
        response = await self._request(
            "POST",
            f"/projects/{project_id}/merge_requests",
            "create merge request",
            json={
                "source_branch": source_branch,
                "target_branch": target_branch,
                "title": title,
                "description": description,
                "remove_source_branch": True,
            },
        )
        iid = response.json()["iid"]
        logger.info(f"Merge request created: project={project_id}, iid={iid}")
        return iid

    async def get_mr_info(self, project_id: int, mr_iid: int) -> dict[str, Any]:
        response = await self._request(
            "GET", f"/projects/{project_id}/merge_requests/{mr_iid}", "get merge request"
        )
        return response.json()

    async def get_mr_changes(self, project_id: int, mr_iid: int) -> dict[str, Any]:
        response = await self._request(
            "GET",
            f"/projects/{project_id}/merge_requests/{mr_iid}/changes",
            "get merge request changes",
        )
        return response.json()

    async def get_mr_diffs(self, project_id: int, mr_iid: int) -> list[dict[str, Any]]:
        response = await self._request(
            "GET",
            f"/projects/{project_id}/merge_requests/{mr_iid}/diffs",
            "get merge request diffs",
        )
        return response.json()

    async def post_mr_comment(self, project_id: int, mr_iid: int, comment: str) -> None:
        await self._request(
            "POST",
            f"/projects/{project_id}/merge_requests/{mr_iid}/notes",
            "post MR comment",
            json={"body": comment},
        )
        logger.debug(f"Comment posted to project={project_id}, MR={mr_iid}")

    # Wiki

    async def list_wiki_pages(self, project_id: int) -> list[dict[str, Any]]:
        response = await self._request("GET", f"/projects/{project_id}/wikis", "list wiki pages")
        return response.json()

    async def get_wiki_page(self, project_id: int, slug: str) -> dict[str, Any]:
        encoded_slug = quote(slug, safe="")
        response = await self._request(
            "GET", f"/projects/{project_id}/wikis/{encoded_slug}", "get wiki page"
        )
        return response.json()

    async def create_wiki_page(
        self, project_id: int, title: str, content: str, format: str = "markdown"
    ) -> dict[str, Any]:
        response = await self._request(
            "POST",
            f"/projects/{project_id}/wikis",
            "create wiki page",
            json={"title": title, "content": content, "format": format},
        )
        logger.info(f"Created wiki page: project={project_id}, title={title}")
        return response.json()

    async def update_wiki_page(
        self,
        project_id: int,
        slug: str,
        content: str,
        title: str | None = None,
        format: str = "markdown",
    ) -> dict[str, Any]:
        payload = {"content": content, "format": format}
        if title:
            payload["title"] = title
        encoded_slug = quote(slug, safe="")
        response = await self._request(
            "PUT",
            f"/projects/{project_id}/wikis/{encoded_slug}",
            "update wiki page",
            json=payload,
        )
        logger.info(f"Updated wiki page: project={project_id}, slug={slug}")
        return response.json()

    async def get_wiki_context(self, project_id: int) -> str:
        """Concatenate every wiki page into one prompt context, in list order.

        A wiki with no pages yields an empty string. Listing or page failures
        degrade to missing content rather than an error.
        """
        try:
            pages = await self.list_wiki_pages(project_id)
        except (GitLabAPIError, httpx.HTTPError) as e:
            logger.warning(f"Failed to list wiki pages for project={project_id}: {e}")
            return ""

        slugs = [page["slug"] for page in pages if page.get("slug")]
        if not slugs:
            logger.info(f"No wiki pages found for project={project_id}")
            return ""

        sections = await asyncio.gather(
            *(self._wiki_page_section(project_id, slug) for slug in slugs)
        )

        context = WIKI_CONTEXT_HEADER
        for section in sections:
            if section:
                context += section + WIKI_PAGE_SEPARATOR
        return context

    async def _wiki_page_section(self, project_id: int, slug: str) -> str:
        try:
            page = await self.get_wiki_page(project_id, slug)
        except (GitLabAPIError, httpx.HTTPError) as e:
            logger.warning(f"Failed to get wiki page {slug}: {e}")
            return ""

        title = page.get("title")
        content = page.get("content")
        if title is None or content is None:
            return ""
        return f"## {title}\n\n{content}\n"
