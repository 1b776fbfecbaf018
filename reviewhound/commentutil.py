"""Helpers to build comment bodies and track comments already posted."""

from __future__ import annotations

import logging
from typing import TextIO

from reviewhound.models import Comment, Severity

logger = logging.getLogger(__name__)

BODY_PREFIX = "<sub>reported by reviewhound :dog:</sub><br>"

_SEVERITY_MARKS = {
    Severity.ERROR: "🚫",
    Severity.WARNING: "⚠️",
    Severity.INFO: "📝",
}


class PostedComments:
    """Bodies of comments already posted, keyed by path and line."""

    def __init__(self) -> None:
        self._comments: dict[str, dict[int, list[str]]] = {}

    def is_posted(self, comment: Comment, line_num: int, body: str) -> bool:
        """True if the same body was posted at the same path and line."""
        path = comment.result.diagnostic.location.path
        return body in self._comments.get(path, {}).get(line_num, [])

    def add_posted_comment(self, path: str, line_num: int, body: str) -> None:
        """Record a posted comment."""
        self._comments.setdefault(path, {}).setdefault(line_num, []).append(body)

    def debug_log(self) -> None:
        """Log every recorded path and line at debug level."""
        for filename, lines in self._comments.items():
            for line in lines:
                logger.debug("posted: %s:%d", filename, line)


def _count_backticks(text: str) -> int:
    """Longest run of backticks that starts a line."""
    in_backticks = True
    count = 0
    max_count = 0
    for ch in text:
        if in_backticks:
            if ch == "`":
                count += 1
            else:
                in_backticks = False
                max_count = max(max_count, count)
                count = 0
        if ch == "\n":
            in_backticks = True
            count = 0
    return max(max_count, count)


def get_code_fence_length(code: str) -> int:
    """Number of backticks needed for a fence that safely wraps code."""
    return max(_count_backticks(code) + 1, 3)


def write_code_fence(stream: TextIO, length: int) -> None:
    """Write a fence of the given number of backticks."""
    stream.write("`" * length)


def _tool_name(comment: Comment) -> str:
    source = comment.result.diagnostic.source
    if source is not None and source.name:
        return source.name
    return comment.tool_name


def markdown_comment(comment: Comment) -> str:
    """Build the Markdown body of a comment."""
    diagnostic = comment.result.diagnostic
    parts = []
    mark = _SEVERITY_MARKS.get(diagnostic.severity, "")
    if mark:
        parts.append(f"{mark} ")
    tool = _tool_name(comment)
    if tool:
        parts.append(f"**[{tool}]** ")
    code = diagnostic.code
    if code is not None and code.value:
        if code.url:
            parts.append(f"<[{code.value}]({code.url})> ")
        else:
            parts.append(f"<{code.value}> ")
    parts.append(BODY_PREFIX)
    parts.append(diagnostic.message)
    return "".join(parts)