"""Core data types shared by the review services."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


class Severity(enum.IntEnum):
    """Severity of a diagnostic, numbered as in the diagnostic format."""

    UNKNOWN_SEVERITY = 0
    ERROR = 1
    WARNING = 2
    INFO = 3


@dataclass
class Position:
    """A 1-based line and column; zero means unset."""

    line: int = 0
    column: int = 0


@dataclass
class Range:
    """A span between two positions; either end may be missing."""

    start: Position | None = None
    end: Position | None = None


@dataclass
class Location:
    """A file path and an optional range inside it."""

    path: str = ""
    range: Range | None = None


@dataclass
class Code:
    """A rule code reported by a tool, with an optional documentation link."""

    value: str = ""
    url: str = ""


@dataclass
class Source:
    """The tool that produced a diagnostic."""

    name: str = ""
    url: str = ""


@dataclass
class Suggestion:
    """A replacement text for a range of the source."""

    range: Range | None = None
    text: str = ""


def _line_of(position: Position | None) -> int:
    return position.line if position is not None else 0


@dataclass
class Diagnostic:
    """A single finding of a linter or compiler."""

    message: str = ""
    location: Location = field(default_factory=Location)
    severity: Severity = Severity.UNKNOWN_SEVERITY
    source: Source | None = None
    code: Code | None = None
    suggestions: list[Suggestion] = field(default_factory=list)
    original_output: str = ""

    def start_line(self) -> int:
        """Line where the diagnostic starts, or 0 if unknown."""
        rng = self.location.range if self.location is not None else None
        return _line_of(rng.start if rng is not None else None)

    def end_line(self) -> int:
        """Line where the diagnostic ends, or 0 if unknown."""
        rng = self.location.range if self.location is not None else None
        return _line_of(rng.end if rng is not None else None)


@dataclass
class FilteredDiagnostic:
    """A diagnostic together with what is known about its place in the diff."""

    diagnostic: Diagnostic = field(default_factory=Diagnostic)
    should_report: bool = False
    in_diff_file: bool = False
    in_diff_context: bool = False
    first_suggestion_in_diff_context: bool = False
    source_lines: dict[int, str] = field(default_factory=dict)
    old_path: str = ""
    old_line: int = 0


@dataclass
class Comment:
    """A reported result to be posted as a comment."""

    result: FilteredDiagnostic = field(default_factory=FilteredDiagnostic)
    tool_name: str = ""


@runtime_checkable
class CommentService(Protocol):
    """Something that posts comments."""

    def post(self, comment: Comment) -> None:
        """Post or queue one comment."""


@runtime_checkable
class BulkCommentService(CommentService, Protocol):
    """A comment service that sends its comments all at once on flush."""

    def flush(self) -> None:
        """Send every queued comment."""


@runtime_checkable
class DiffService(Protocol):
    """Something that provides a unified diff."""

    def diff(self) -> bytes:
        """Return the diff text."""

    def strip(self) -> int:
        """Return the number of leading path components to strip."""