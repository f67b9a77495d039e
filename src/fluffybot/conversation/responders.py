import logging
from fluffybot.models.conversation import IntentType
from fluffybot.models.webhook import IssueNoteEvent, MergeRequestNoteEvent
from fluffybot.platforms.gitlab import GitLabClient
from fluffybot.providers.base import LLMProvider
from .diff_context import LineAnchor, extract_code_context
from .intent import parse_intent
from .prompts import build_issue_comment_prompt, build_line_comment_prompt


logger = logging.getLogger(__name__)

SUGGESTION_MARKER = "💡 "
RESPONSE_PARSE_FAILURE = "❌ Failed to parse the AI response."
COMMENT_FAILURE = "❌ An error occurred while processing the comment: {error}"
LINE_COMMENT_FAILURE = "❌ An error occurred while processing the line comment: {error}"


class IssueNoteResponder:
    """Answers @-mentions on issues with a JSON-intent LLM reply."""

    def __init__(self, gitlab: GitLabClient, provider: LLMProvider, bot_username: str = "fluffybot"):
        self.gitlab = gitlab
        self.provider = provider
        self.bot_username = bot_username

    async def handle(self, event: IssueNoteEvent) -> None:
        project_id = event.project.id
        issue_iid = event.issue.iid
        comment = event.object_attributes.note

        logger.info(f"Processing comment on project={project_id}, issue={issue_iid}")

        try:
            issue = await self.gitlab.get_issue(project_id, issue_iid)
            wiki_context = await self.gitlab.get_wiki_context(project_id)

            prompt = build_issue_comment_prompt(
                comment=comment,
                issue_title=issue.get("title") or "",
                issue_description=issue.get("description") or "",
                wiki_context=wiki_context,
                bot_name=self.bot_username,
            )
            response = await self.provider.chat(prompt)
            await self.gitlab.post_issue_comment(project_id, issue_iid, self.render_reply(response))
        except Exception as e:
            logger.error(f"Failed to handle comment: {e}")
            await self._notify_failure(project_id, issue_iid, COMMENT_FAILURE.format(error=e))

    @staticmethod
    def render_reply(response: str) -> str:
        """Turn the model's raw reply into the comment body to post."""
        intent = parse_intent(response)
        if intent is None:
            return RESPONSE_PARSE_FAILURE
        if intent.type == IntentType.SUGGEST_PROMPT:
            return SUGGESTION_MARKER + intent.content
        return intent.content

    async def _notify_failure(self, project_id: int, issue_iid: int, message: str) -> None:
        try:
            await self.gitlab.post_issue_comment(project_id, issue_iid, message)
        except Exception as e:
            logger.error(f"Failed to post failure comment: {e}")


class MergeRequestNoteResponder:
    """Explains the code under a merge request line comment."""

    def __init__(self, gitlab: GitLabClient, provider: LLMProvider, bot_username: str = "fluffybot"):
        self.gitlab = gitlab
        self.provider = provider
        self.bot_username = bot_username

    async def handle(self, event: MergeRequestNoteEvent) -> None:
        project_id = event.project.id
        mr_iid = event.merge_request.iid
        comment = event.object_attributes.note
        position = event.object_attributes.position

        if position is None or position.line is None:
            logger.debug("Not a line comment, ignoring")
            return

        anchor = LineAnchor(
            path=position.file_path or "",
            line=position.line,
            new_side=position.new_line is not None,
        )
        logger.info(f"Processing line comment on project={project_id}, MR={mr_iid}, {anchor.path}:{anchor.line}")

        try:
            mr_info = await self.gitlab.get_mr_info(project_id, mr_iid)
            mr_data = await self.gitlab.get_mr_changes(project_id, mr_iid)
            code_context = extract_code_context(mr_data.get("changes") or [], anchor)

            prompt = build_line_comment_prompt(
                comment=comment,
                mr_title=mr_info.get("title") or "",
                mr_description=mr_info.get("description") or "",
                file_path=anchor.path,
                line=anchor.line,
                code_context=code_context,
                bot_name=self.bot_username,
            )
            response = await self.provider.chat(prompt)
            await self.gitlab.post_mr_comment(project_id, mr_iid, response)
        except Exception as e:
            logger.error(f"Failed to handle line comment: {e}")
            await self._notify_failure(project_id, mr_iid, LINE_COMMENT_FAILURE.format(error=e))

    async def _notify_failure(self, project_id: int, mr_iid: int, message: str) -> None:
        try:
            await self.gitlab.post_mr_comment(project_id, mr_iid, message)
        except Exception as e:
            logger.error(f"Failed to post failure comment: {e}")
