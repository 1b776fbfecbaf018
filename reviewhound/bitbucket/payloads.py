"""JSON bodies for the Bitbucket Cloud and Server Code Insights APIs."""

from __future__ import annotations

from typing import Any

from reviewhound.bitbucket.api import (
    ANNOTATION_SEVERITY_LOW,
    ANNOTATION_TYPE_CODE_SMELL,
    REPORT_RESULT_FAILED,
    ReportRequest,
    convert_severity,
    external_id_from_diagnostic,
)
from reviewhound.models import Comment


def _code_url(comment: Comment) -> str:
    code = comment.result.diagnostic.code
    return code.url if code is not None else ""


def _details(comment: Comment) -> str:
    return f"[{comment.tool_name}] {comment.result.diagnostic.message}"


def build_cloud_report(req: ReportRequest) -> dict[str, Any]:
    """Report body for the Cloud API."""
    report = {
        "title": req.title,
        "report_type": req.report_type,
        "reporter": req.reporter,
        "result": req.result,
        "details": req.details,
    }
    if req.logo_url:
        report["logo_url"] = req.logo_url
    return report


def _cloud_annotation(comment: Comment) -> dict[str, Any]:
    diagnostic = comment.result.diagnostic
    annotation: dict[str, Any] = {
        "external_id": external_id_from_diagnostic(diagnostic),
        "annotation_type": ANNOTATION_TYPE_CODE_SMELL,
        "summary": diagnostic.message,
        "details": _details(comment),
        "line": diagnostic.start_line(),
        "path": diagnostic.location.path,
    }
    severity = convert_severity(diagnostic.severity)
    if severity:
        annotation["severity"] = severity
    link = _code_url(comment)
    if link:
        annotation["link"] = link
    return annotation


def build_cloud_annotations(comments: list[Comment]) -> list[dict[str, Any]]:
    """Annotation bodies for the Cloud API, one per comment."""
    return [_cloud_annotation(comment) for comment in comments]


def _server_result(result: str) -> str:
    return "FAIL" if result == REPORT_RESULT_FAILED else "PASS"


def build_server_report(req: ReportRequest) -> dict[str, Any]:
    """Report body for the Server API."""
    report = {
        "title": req.title,
        "reporter": req.reporter,
        "result": _server_result(req.result),
        "details": req.details,
    }
    if req.logo_url:
        report["logoUrl"] = req.logo_url
    return report


def _server_annotation(comment: Comment) -> dict[str, Any]:
    diagnostic = comment.result.diagnostic
    severity = convert_severity(diagnostic.severity) or ANNOTATION_SEVERITY_LOW
    annotation: dict[str, Any] = {
        "path": diagnostic.location.path,
        "line": diagnostic.start_line() - 1,
        "message": _details(comment),
        "severity": severity,
        "externalId": external_id_from_diagnostic(diagnostic),
        "type": ANNOTATION_TYPE_CODE_SMELL,
    }
    link = _code_url(comment)
    if link:
        annotation["link"] = link
    return annotation


def build_server_annotations(comments: list[Comment]) -> dict[str, Any]:
    """Annotation list body for the Server API."""
    return {"annotations": [_server_annotation(comment) for comment in comments]}