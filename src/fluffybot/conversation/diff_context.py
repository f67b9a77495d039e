from dataclasses import dataclass
from typing import Any
from unidiff import PatchSet
from unidiff.errors import UnidiffParseError


CONTEXT_RADIUS = 5


@dataclass(frozen=True)
class LineAnchor:
    """A file/line position taken from a diff note."""
    path: str
    line: int
    new_side: bool = True


def fallback_context(anchor: LineAnchor) -> str:
    return f"File: {anchor.path}, Line: {anchor.line}"


def _find_change(changes: list[dict[str, Any]], path: str) -> dict[str, Any] | None:
    for change in changes:
        if change.get("new_path") == path or change.get("old_path") == path:
            return change
    return None


def extract_code_context(
    changes: list[dict[str, Any]],
    anchor: LineAnchor,
    radius: int = CONTEXT_RADIUS,
) -> str:
    """Render the diff lines around the commented line, marking it with '>'."""
    change = _find_change(changes, anchor.path)
    if change is None or not change.get("diff"):
        return fallback_context(anchor)

    old_path = change.get("old_path") or anchor.path
    new_path = change.get("new_path") or anchor.path
    diff_text = f"--- a/{old_path}\n+++ b/{new_path}\n{change['diff']}"
    if not diff_text.endswith("\n"):
        diff_text += "\n"

    try:
        patch = PatchSet(diff_text)
    except UnidiffParseError:
        return fallback_context(anchor)

    rendered: list[tuple[int, str, str]] = []
    found = False
    for patched_file in patch:
        for hunk in patched_file:
            for line in hunk:
                number = line.target_line_no if anchor.new_side else line.source_line_no
                if number is None or abs(number - anchor.line) > radius:
                    continue
                if number == anchor.line:
                    found = True
                rendered.append((number, line.line_type, line.value.rstrip("\n")))

    if not found:
        return fallback_context(anchor)

    width = len(str(max(number for number, _, _ in rendered)))
    lines = [f"File: {anchor.path}, Line: {anchor.line}"]
    for number, line_type, value in rendered:
        marker = ">" if number == anchor.line else " "
        lines.append(f"{marker}{number:>{width}}| {line_type}{value}")
    return "\n".join(lines)
