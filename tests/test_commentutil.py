import io
import logging

import pytest

from reviewhound.commentutil import (
    BODY_PREFIX,
    PostedComments,
    get_code_fence_length,
    markdown_comment,
    write_code_fence,
)
from reviewhound.models import (
    Code,
    Comment,
    Diagnostic,
    FilteredDiagnostic,
    Location,
    Severity,
    Source,
)


@pytest.mark.parametrize(
    "code, want",
    [
        ("", 3),
        ("`inline code`", 3),
        ("``foo`bar``", 3),
        ('func main() {\nprintln("Hello World")\n}\n', 3),
        ("```\nLook! You can see my backticks.\n```\n", 4),
        ('```go\nfunc main() {\nprintln("Hello World")\n}\n```', 4),
        ('```go\nfunc main() {\nprintln("Hello World")\n}\n`````', 6),
        ("`````\n````\n```", 6),
    ],
)
def test_get_code_fence_length(code, want):
    assert get_code_fence_length(code) == want


def test_write_code_fence():
    buf = io.StringIO()
    write_code_fence(buf, 10)
    assert buf.getvalue() == "``````````"


def _comment(message, tool_name="", **diag):
    return Comment(
        tool_name=tool_name,
        result=FilteredDiagnostic(diagnostic=Diagnostic(message=message, **diag)),
    )


@pytest.mark.parametrize(
    "comment, want",
    [
        (
            _comment("test message 1", tool_name="tool-name"),
            "**[tool-name]** " + BODY_PREFIX + "test message 1",
        ),
        (
            _comment("test message 2 (no tool)"),
            BODY_PREFIX + "test message 2 (no tool)",
        ),
        (
            _comment(
                "test message 3",
                tool_name="global-tool-name",
                source=Source(name="custom-tool-name"),
            ),
            "**[custom-tool-name]** " + BODY_PREFIX + "test message 3",
        ),
        (
            _comment(
                "test message 4",
                source=Source(name="tool-name"),
                severity=Severity.WARNING,
            ),
            "⚠️ **[tool-name]** " + BODY_PREFIX + "test message 4",
        ),
        (
            _comment(
                "test message 5 (code)",
                source=Source(name="tool-name"),
                code=Code(value="CODE14"),
            ),
            "**[tool-name]** <CODE14> " + BODY_PREFIX + "test message 5 (code)",
        ),
        (
            _comment(
                "test message 6 (code with URL)",
                source=Source(name="tool-name"),
                code=Code(value="CODE14", url="https://example.com/#CODE14"),
            ),
            "**[tool-name]** <[CODE14](https://example.com/#CODE14)> "
            + BODY_PREFIX
            + "test message 6 (code with URL)",
        ),
    ],
)
def test_markdown_comment(comment, want):
    assert markdown_comment(comment) == want


def _at(path):
    return Comment(
        result=FilteredDiagnostic(diagnostic=Diagnostic(location=Location(path=path)))
    )


def test_posted_comments():
    posted = PostedComments()
    posted.add_posted_comment("a.go", 3, "body")
    posted.add_posted_comment("a.go", 3, "other")
    assert posted.is_posted(_at("a.go"), 3, "body")
    assert posted.is_posted(_at("a.go"), 3, "other")
    assert not posted.is_posted(_at("a.go"), 3, "missing")
    assert not posted.is_posted(_at("a.go"), 4, "body")
    assert not posted.is_posted(_at("b.go"), 3, "body")


def test_posted_comments_debug_log(caplog):
    posted = PostedComments()
    posted.add_posted_comment("a.go", 3, "body")
    with caplog.at_level(logging.DEBUG, logger="reviewhound.commentutil"):
        posted.debug_log()
    assert "posted: a.go:3" in caplog.text