import httpx
import pytest
from unittest.mock import AsyncMock
from fluffybot.conversation.responders import IssueNoteResponder, MergeRequestNoteResponder
from fluffybot.models.webhook import IssueNoteEvent, MergeRequestNoteEvent
from fluffybot.platforms.gitlab import GitLabAPIError


@pytest.fixture
def issue_note_event(project_payload) -> IssueNoteEvent:
    return IssueNoteEvent(
        object_kind="note",
        user={"username": "alice"},
        project=project_payload,
        issue={"iid": 9, "title": "Retry uploads"},
        object_attributes={"note": "@fluffybot how does retry work?", "noteable_type": "Issue"},
    )


@pytest.fixture
def mr_note_event(mr_note_payload) -> MergeRequestNoteEvent:
    return MergeRequestNoteEvent(**mr_note_payload)


@pytest.fixture
def mock_gitlab():
    client = AsyncMock()
    client.get_issue.return_value = {"title": "Retry uploads", "description": "Retry 3 times"}
    client.get_wiki_context.return_value = "# Project Wiki\n\n## Home\n\nUploader service\n"
    client.get_mr_info.return_value = {"title": "Add retries", "description": "Closes #9"}
    client.get_mr_changes.return_value = {
        "changes": [{
            "old_path": "app/upload.py",
            "new_path": "app/upload.py",
            "diff": "@@ -56,2 +56,3 @@\n def upload():\n+    retry()\n     return True\n",
        }],
    }
    return client


@pytest.fixture
def mock_provider():
    provider = AsyncMock()
    provider.chat.return_value = '{"type": "answer", "content": "It retries three times."}'
    return provider


@pytest.mark.asyncio
async def test_issue_answer_is_posted_verbatim(issue_note_event, mock_gitlab, mock_provider):
    responder = IssueNoteResponder(gitlab=mock_gitlab, provider=mock_provider)

    await responder.handle(issue_note_event)

    mock_gitlab.get_issue.assert_called_once_with(42, 9)
    mock_gitlab.get_wiki_context.assert_called_once_with(42)
    prompt = mock_provider.chat.call_args.args[0]
    assert "Uploader service" in prompt
    assert "how does retry work?" in prompt
    mock_gitlab.post_issue_comment.assert_called_once_with(42, 9, "It retries three times.")


@pytest.mark.asyncio
async def test_issue_suggestion_is_prefixed(issue_note_event, mock_gitlab, mock_provider):
    mock_provider.chat.return_value = '```json\n{"type": "suggest_prompt", "content": "Add: retry with backoff"}\n```'
    responder = IssueNoteResponder(gitlab=mock_gitlab, provider=mock_provider)

    await responder.handle(issue_note_event)

    mock_gitlab.post_issue_comment.assert_called_once_with(42, 9, "💡 Add: retry with backoff")


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", ["not json", '{"type": "joke", "content": "x"}', '{"type": "answer"}'])
async def test_issue_protocol_violation_posts_generic_failure(issue_note_event, mock_gitlab, mock_provider, reply):
    mock_provider.chat.return_value = reply
    responder = IssueNoteResponder(gitlab=mock_gitlab, provider=mock_provider)

    await responder.handle(issue_note_event)

    mock_gitlab.post_issue_comment.assert_called_once_with(42, 9, "❌ Failed to parse the AI response.")


@pytest.mark.asyncio
async def test_issue_llm_failure_is_reported_not_raised(issue_note_event, mock_gitlab, mock_provider):
    mock_provider.chat.side_effect = httpx.ReadTimeout("timed out")
    responder = IssueNoteResponder(gitlab=mock_gitlab, provider=mock_provider)

    await responder.handle(issue_note_event)

    posted = mock_gitlab.post_issue_comment.call_args.args[2]
    assert posted.startswith("❌ An error occurred while processing the comment")
    assert "timed out" in posted


@pytest.mark.asyncio
async def test_issue_gitlab_failure_is_reported(issue_note_event, mock_gitlab, mock_provider):
    mock_gitlab.get_issue.side_effect = GitLabAPIError(500, "boom", "get issue")
    responder = IssueNoteResponder(gitlab=mock_gitlab, provider=mock_provider)

    await responder.handle(issue_note_event)

    mock_provider.chat.assert_not_called()
    assert "500" in mock_gitlab.post_issue_comment.call_args.args[2]


@pytest.mark.asyncio
async def test_issue_failure_comment_errors_are_swallowed(issue_note_event, mock_gitlab, mock_provider):
    mock_gitlab.get_issue.side_effect = GitLabAPIError(503, "down", "get issue")
    mock_gitlab.post_issue_comment.side_effect = GitLabAPIError(503, "down", "post comment")
    responder = IssueNoteResponder(gitlab=mock_gitlab, provider=mock_provider)

    await responder.handle(issue_note_event)


@pytest.mark.asyncio
async def test_line_comment_reply_posted_to_mr(mr_note_event, mock_gitlab, mock_provider):
    mock_provider.chat.return_value = "This line retries the upload."
    responder = MergeRequestNoteResponder(gitlab=mock_gitlab, provider=mock_provider)

    await responder.handle(mr_note_event)

    mock_gitlab.get_mr_info.assert_called_once_with(42, 5)
    mock_gitlab.get_mr_changes.assert_called_once_with(42, 5)
    prompt = mock_provider.chat.call_args.args[0]
    assert "app/upload.py" in prompt
    assert "57" in prompt
    assert ">57| +    retry()" in prompt
    assert "what does this do?" in prompt
    mock_gitlab.post_mr_comment.assert_called_once_with(42, 5, "This line retries the upload.")


@pytest.mark.asyncio
async def test_line_comment_failure_is_reported(mr_note_event, mock_gitlab, mock_provider):
    mock_gitlab.get_mr_changes.side_effect = GitLabAPIError(404, "missing", "get merge request changes")
    responder = MergeRequestNoteResponder(gitlab=mock_gitlab, provider=mock_provider)

    await responder.handle(mr_note_event)

    posted = mock_gitlab.post_mr_comment.call_args.args[2]
    assert posted.startswith("❌ An error occurred while processing the line comment")


@pytest.mark.asyncio
async def test_non_line_comment_makes_no_calls(mr_note_event, mock_gitlab, mock_provider):
    mr_note_event.object_attributes.position = None
    responder = MergeRequestNoteResponder(gitlab=mock_gitlab, provider=mock_provider)

    await responder.handle(mr_note_event)

    mock_gitlab.get_mr_info.assert_not_called()
    mock_provider.chat.assert_not_called()
