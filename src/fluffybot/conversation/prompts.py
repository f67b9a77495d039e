ISSUE_COMMENT_PROMPT = """You are {bot_name}, the AI assistant for GitLab issues.
You reply to a user's comment on an issue.
{wiki_block}
Response format (JSON):
{{
  "type": "answer" | "suggest_prompt",
  "content": "<the reply shown to the user, in Markdown>"
}}

Rules:
- Plain question -> type: "answer"
- Request for a code change -> type: "suggest_prompt", with an example of what to add to the issue description
- Never edit the issue directly
- Respond with exactly one JSON object and nothing else
- IMPORTANT: output raw JSON only. Do NOT wrap it in a Markdown code block (```json).
- Use mermaid diagrams (```mermaid ... ```) inside "content" when a flow or structure is easier to show than to tell
- Use the wiki context to answer accurately about the project's structure, entities and recent changes

---

Issue title: {issue_title}

Issue description:
{issue_description}

---

User comment: {comment}"""


WIKI_BLOCK = """
# Project wiki context

{wiki_context}
---
"""


LINE_COMMENT_PROMPT = """You are {bot_name}, the code review AI assistant for GitLab merge requests.
You give a detailed, useful explanation in reply to a line comment.

Follow these rules:
- Be concise and clear
- Use mermaid diagrams (```mermaid ... ```) when helpful
- Code examples are welcome

# Merge request
- Title: {mr_title}
- Description: {mr_description}

# Comment position
- File: {file_path}
- Line: {line}

# Code context
```
{code_context}
```

# User question
{comment}

---
Answer the user's question using the information above."""


def build_issue_comment_prompt(
    comment: str,
    issue_title: str,
    issue_description: str,
    wiki_context: str = "",
    bot_name: str = "fluffybot",
) -> str:
    """Build the JSON-intent prompt for a comment on an issue."""
    wiki_block = ""
    if wiki_context and wiki_context.strip():
        wiki_block = WIKI_BLOCK.format(wiki_context=wiki_context)

    return ISSUE_COMMENT_PROMPT.format(
        bot_name=bot_name,
        wiki_block=wiki_block,
        issue_title=issue_title,
        issue_description=issue_description,
        comment=comment,
    )


def build_line_comment_prompt(
    comment: str,
    mr_title: str,
    mr_description: str,
    file_path: str,
    line: int,
    code_context: str,
    bot_name: str = "fluffybot",
) -> str:
    return LINE_COMMENT_PROMPT.format(
        bot_name=bot_name,
        mr_title=mr_title,
        mr_description=mr_description,
        file_path=file_path,
        line=line,
        code_context=code_context,
        comment=comment,
    )
