from .diff_context import LineAnchor, extract_code_context
from .intent import parse_intent, strip_code_fence
from .prompts import build_issue_comment_prompt, build_line_comment_prompt
from .responders import IssueNoteResponder, MergeRequestNoteResponder

__all__ = [
    "LineAnchor",
    "extract_code_context",
    "parse_intent",
    "strip_code_fence",
    "build_issue_comment_prompt",
    "build_line_comment_prompt",
    "IssueNoteResponder",
    "MergeRequestNoteResponder",
]
