import pytest

from reviewhound.bitbucket.annotator import (
    ANNOTATIONS_BATCH_SIZE,
    FAILED_DETAILS,
    LOGO_URL,
    PASSED_DETAILS,
    PENDING_DETAILS,
    REPORTER,
    ReportAnnotator,
)
from reviewhound.bitbucket.api import (
    REPORT_RESULT_FAILED,
    REPORT_RESULT_PASSED,
    REPORT_RESULT_PENDING,
    REPORT_TYPE_BUG,
    AnnotationsRequest,
    ReportRequest,
    report_id,
    report_title,
)
from reviewhound.models import (
    Comment,
    Diagnostic,
    FilteredDiagnostic,
    Location,
    Position,
    Range,
)

OWNER = "test-owner"
REPO = "test-repo"
SHA = "test-commit"
RUNNERS = ["runner1", "runner2"]


class RecordingClient:
    def __init__(self, fail_annotations=False):
        self.calls = []
        self.fail_annotations = fail_annotations

    def create_or_update_report(self, req):
        self.calls.append(("report", req))

    def create_or_update_annotations(self, req):
        if self.fail_annotations:
            raise ConnectionError("boom")
        self.calls.append(("annotations", req))


def build_comment(tool_name, line, path="main.go"):
    return Comment(
        tool_name=tool_name,
        result=FilteredDiagnostic(
            diagnostic=Diagnostic(
                location=Location(path=path, range=Range(start=Position(line=line))),
                message="test message",
            )
        ),
    )


def report_req(runner, result):
    details = {
        REPORT_RESULT_PASSED: PASSED_DETAILS,
        REPORT_RESULT_PENDING: PENDING_DETAILS,
    }.get(result, FAILED_DETAILS)
    return (
        "report",
        ReportRequest(
            report_id=report_id(runner, REPORTER),
            owner=OWNER,
            repository=REPO,
            commit=SHA,
            report_type=REPORT_TYPE_BUG,
            title=report_title(runner, REPORTER),
            reporter=REPORTER,
            result=result,
            details=details,
            logo_url=LOGO_URL,
        ),
    )


def annotations_req(runner, comments):
    return (
        "annotations",
        AnnotationsRequest(
            owner=OWNER,
            repository=REPO,
            commit=SHA,
            report_id=report_id(runner, REPORTER),
            comments=comments,
        ),
    )


def pending_calls():
    return [report_req(runner, REPORT_RESULT_PENDING) for runner in RUNNERS]


def test_empty_runners_list():
    client = RecordingClient()
    annotator = ReportAnnotator(client, OWNER, REPO, SHA, None)
    annotator.flush()
    assert client.calls == []


def test_no_comments():
    client = RecordingClient()
    annotator = ReportAnnotator(client, OWNER, REPO, SHA, RUNNERS)
    annotator.flush()
    assert client.calls == pending_calls() + [
        report_req("runner1", REPORT_RESULT_PASSED),
        report_req("runner2", REPORT_RESULT_PASSED),
    ]


def test_one_comment():
    client = RecordingClient()
    annotator = ReportAnnotator(client, OWNER, REPO, SHA, RUNNERS)
    comment = build_comment("runner2", 1)
    annotator.post(comment)
    annotator.flush()
    assert client.calls == pending_calls() + [
        report_req("runner1", REPORT_RESULT_PASSED),
        report_req("runner2", REPORT_RESULT_FAILED),
        annotations_req("runner2", [comment]),
    ]


def test_duplicate_comments():
    client = RecordingClient()
    annotator = ReportAnnotator(client, OWNER, REPO, SHA, RUNNERS)
    first = build_comment("runner2", 1)
    annotator.post(first)
    annotator.post(build_comment("runner2", 1))
    annotator.flush()
    assert client.calls == pending_calls() + [
        report_req("runner1", REPORT_RESULT_PASSED),
        report_req("runner2", REPORT_RESULT_FAILED),
        annotations_req("runner2", [first]),
    ]


def test_many_comments_are_batched():
    client = RecordingClient()
    annotator = ReportAnnotator(client, OWNER, REPO, SHA, RUNNERS)
    comments = [build_comment("runner2", idx) for idx in range(333)]
    for comment in comments:
        annotator.post(comment)
    annotator.flush()

    batches = [
        annotations_req("runner2", comments[start:start + ANNOTATIONS_BATCH_SIZE])
        for start in range(0, len(comments), ANNOTATIONS_BATCH_SIZE)
    ]
    assert client.calls == pending_calls() + [
        report_req("runner1", REPORT_RESULT_PASSED),
        report_req("runner2", REPORT_RESULT_FAILED),
    ] + batches
    assert [len(call[1].comments) for call in batches] == [100, 100, 100, 33]


def test_unknown_tool_gets_its_own_report():
    client = RecordingClient()
    annotator = ReportAnnotator(client, OWNER, REPO, SHA, ["", "runner1"])
    comment = build_comment("other", 3)
    annotator.post(comment)
    annotator.flush()
    assert client.calls == [
        report_req("runner1", REPORT_RESULT_PENDING),
        report_req("runner1", REPORT_RESULT_PASSED),
        report_req("other", REPORT_RESULT_FAILED),
        annotations_req("other", [comment]),
    ]


def test_post_cleans_path():
    client = RecordingClient()
    annotator = ReportAnnotator(client, OWNER, REPO, SHA, [])
    comment = build_comment("tool", 1, path="./sub/../main.go")
    annotator.post(comment)
    assert comment.result.diagnostic.location.path == "main.go"


def test_annotation_failure_is_reported():
    client = RecordingClient(fail_annotations=True)
    annotator = ReportAnnotator(client, OWNER, REPO, SHA, ["runner1"])
    annotator.post(build_comment("runner1", 1))
    with pytest.raises(RuntimeError, match="failed to post annotations"):
        annotator.flush()