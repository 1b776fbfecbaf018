"""GitHub helpers: Markdown links and GitHub Actions annotations."""

from __future__ import annotations

import os
import sys
import threading

from reviewhound.models import Comment, Diagnostic, Severity

MAX_LOGGING_ANNOTATIONS_PER_STEP = 10

_TOO_MANY_ANNOTATIONS = """reviewhound: Too many results (annotations) in diff.
You may miss some annotations due to GitHub limitation for annotation created by logging command.
Please check GitHub Actions log console to see all results.

Limitation:
- 10 warning annotations and 10 error annotations per step
- 50 annotations per job (sum of annotations from all the steps)
- 50 annotations per run (separate from the job annotations, these annotations aren't created by users)"""

_warn_lock = threading.Lock()
_warned = False


def is_in_github_action() -> bool:
    """True when running inside GitHub Actions."""
    return bool(os.environ.get("GITHUB_ACTIONS"))


def path_link(owner: str, repo: str, sha: str, path: str, line: int) -> str:
    """Link to a file, and optionally a line, at a commit on GitHub."""
    sha = sha or "master"
    fragment = f"#L{line}" if line > 0 else ""
    return f"http://github.com/{owner}/{repo}/blob/{sha}/{path}{fragment}"


def basic_location_format(diagnostic: Diagnostic) -> str:
    """Format the location as `path|line col column|`."""
    loc = diagnostic.location
    out = loc.path + "|"
    rng = loc.range
    start = rng.start if rng is not None else None
    lnum = start.line if start is not None else 0
    col = start.column if start is not None else 0
    if lnum:
        out += str(lnum)
        if col:
            out += f" col {col}"
    return out + "|"


def linked_markdown_diagnostic(
    owner: str, repo: str, sha: str, diagnostic: Diagnostic
) -> str:
    """Markdown linking the diagnostic's location, followed by its message."""
    path = diagnostic.location.path
    if not path:
        return diagnostic.message
    link = path_link(owner, repo, sha, path, diagnostic.start_line())
    return f"[{basic_location_format(diagnostic)}]({link}) {diagnostic.message}"


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return _escape_data(value).replace(":", "%3A").replace(",", "%2C")


def _issue_command(name: str, message: str, props: dict[str, str] | None = None) -> None:
    command = f"::{name}"
    if props:
        command += " " + ",".join(
            f"{key}={_escape_property(value)}" for key, value in props.items()
        )
    sys.stdout.write(f"{command}::{_escape_data(message)}\n")


def _location_props(diagnostic: Diagnostic) -> dict[str, str]:
    props: dict[str, str] = {}
    if diagnostic.location.path:
        props["file"] = diagnostic.location.path
    rng = diagnostic.location.range
    start = rng.start if rng is not None else None
    if start is not None and start.line > 0:
        props["line"] = str(start.line)
    if start is not None and start.column > 0:
        props["col"] = str(start.column)
    return props


def report_as_github_actions_log(
    tool_name: str, default_level: str, diagnostic: Diagnostic
) -> None:
    """Print the diagnostic as a GitHub Actions annotation command."""
    message = (
        f"[{tool_name}] reported by reviewhound 🐶\n{diagnostic.message}"
        f"\n\nRaw Output:\n{diagnostic.original_output}"
    )
    props = _location_props(diagnostic)

    level = default_level
    if diagnostic.severity == Severity.ERROR:
        level = "error"
    elif diagnostic.severity in (Severity.INFO, Severity.WARNING):
        level = "warning"

    if level in ("warning", "info"):
        _issue_command("warning", message, props)
    elif level in ("error", ""):
        _issue_command("error", message, props)
    else:
        _issue_command("error", f"Unknown level: {level}")
        _issue_command("error", message, props)


def warn_too_many_annotation_once() -> None:
    """Print the too-many-annotations warning, at most once per process."""
    global _warned
    with _warn_lock:
        if _warned:
            return
        _warned = True
    _issue_command("error", _TOO_MANY_ANNOTATIONS)


class GitHubActionLogWriter:
    """Reports comments as GitHub Actions annotations."""

    def __init__(self, level: str) -> None:
        self.level = level
        self.report_num = 0

    def post(self, comment: Comment) -> None:
        """Print one comment as an annotation."""
        self.report_num += 1
        if self.report_num == MAX_LOGGING_ANNOTATIONS_PER_STEP:
            warn_too_many_annotation_once()
        report_as_github_actions_log(
            comment.tool_name, self.level, comment.result.diagnostic
        )

    def flush(self) -> None:
        """Raise if more annotations were reported than a step can show."""
        if self.report_num >= MAX_LOGGING_ANNOTATIONS_PER_STEP:
            raise RuntimeError(
                "GitHubActionLogWriter: reported too many annotation "
                f"(N={self.report_num})"
            )