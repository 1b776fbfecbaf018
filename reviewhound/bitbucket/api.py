"""Requests, client interface and shared helpers for Bitbucket Code Insights."""

from __future__ import annotations

import dataclasses
import hashlib
import json
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from reviewhound.models import Comment, Diagnostic, Severity

HTTP_TIMEOUT = 10.0

REPORT_TYPE_BUG = "BUG"

REPORT_RESULT_PASSED = "PASSED"
REPORT_RESULT_FAILED = "FAILED"
REPORT_RESULT_PENDING = "PENDING"

ANNOTATION_TYPE_CODE_SMELL = "CODE_SMELL"

ANNOTATION_SEVERITY_HIGH = "HIGH"
ANNOTATION_SEVERITY_MEDIUM = "MEDIUM"
ANNOTATION_SEVERITY_LOW = "LOW"


@dataclass
class ReportRequest:
    """Parameters used to create or update a report."""

    owner: str = ""
    repository: str = ""
    commit: str = ""
    report_id: str = ""
    report_type: str = ""
    title: str = ""
    reporter: str = ""
    result: str = ""
    details: str = ""
    logo_url: str = ""


@dataclass
class AnnotationsRequest:
    """Parameters used to create or update annotations of a report."""

    owner: str = ""
    repository: str = ""
    commit: str = ""
    report_id: str = ""
    comments: list[Comment] = field(default_factory=list)


@runtime_checkable
class APIClient(Protocol):
    """Client for the Bitbucket Code Insights API."""

    def create_or_update_report(self, req: ReportRequest) -> None:
        """Create or update the given report."""

    def create_or_update_annotations(self, req: AnnotationsRequest) -> None:
        """Create or update annotations of a report."""


class UnexpectedResponseError(Exception):
    """The Code Insights API answered with an unexpected status code."""

    def __init__(self, code: int, body: bytes = b"") -> None:
        self.code = code
        self.body = body
        message = f"received unexpected {code} code from Bitbucket API"
        if body:
            message += " with message:\n" + body.decode("utf-8", errors="replace")
        super().__init__(message)


def external_id_from_diagnostic(diagnostic: Diagnostic) -> str:
    """Stable identifier of a diagnostic: the SHA-256 of its content."""
    try:
        payload = json.dumps(
            dataclasses.asdict(diagnostic), sort_keys=True, ensure_ascii=False
        ).encode("utf-8")
    except (TypeError, ValueError):
        payload = diagnostic.original_output.encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


def report_id(*ids: str) -> str:
    """Join parts into a lower-case report id without spaces."""
    return "-".join(ids).lower().replace(" ", "_")


def report_title(tool: str, reporter: str) -> str:
    """Title of the report for a tool."""
    return f"[{tool}] {reporter} report"


_SEVERITIES = {
    Severity.INFO: ANNOTATION_SEVERITY_LOW,
    Severity.WARNING: ANNOTATION_SEVERITY_MEDIUM,
    Severity.ERROR: ANNOTATION_SEVERITY_HIGH,
}


def convert_severity(severity: Severity) -> str:
    """Annotation severity for a diagnostic severity, or "" if unknown."""
    return _SEVERITIES.get(severity, "")