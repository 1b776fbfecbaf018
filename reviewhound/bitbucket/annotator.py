"""Comment service that posts results as Bitbucket Code Insights reports."""

from __future__ import annotations

import contextlib
import os
import threading

from reviewhound.bitbucket.api import (
    REPORT_RESULT_FAILED,
    REPORT_RESULT_PASSED,
    REPORT_RESULT_PENDING,
    REPORT_TYPE_BUG,
    APIClient,
    AnnotationsRequest,
    ReportRequest,
    external_id_from_diagnostic,
    report_id,
    report_title,
)
from reviewhound.models import Comment

LOGO_URL = ""
REPORTER = "reviewhound"
# Maximum number of annotations sent in one request.
ANNOTATIONS_BATCH_SIZE = 100

PASSED_DETAILS = "Great news! Reviewhound couldn't spot any issues!"
PENDING_DETAILS = "Please wait for Reviewhound to finish checking your code for issues."
FAILED_DETAILS = "Woof-Woof! This report generated for you by reviewhound."


def _details_for(status: str) -> str:
    if status == REPORT_RESULT_PASSED:
        return PASSED_DETAILS
    if status == REPORT_RESULT_PENDING:
        return PENDING_DETAILS
    return FAILED_DETAILS


class ReportAnnotator:
    """Collects comments and posts one Code Insights report per tool."""

    def __init__(
        self,
        client: APIClient,
        owner: str,
        repo: str,
        sha: str,
        runners: list[str] | None,
    ) -> None:
        self.client = client
        self.owner = owner
        self.repo = repo
        self.sha = sha
        # Working directory relative to the repository root.
        self.wd = ""
        self._lock = threading.Lock()
        self._comments: dict[str, list[Comment]] = {}
        self._seen: set[str] = set()

        # Known runners get a report even when they find nothing.
        for runner in runners or ():
            if not runner:
                continue
            self._comments[runner] = []
            with contextlib.suppress(Exception):
                self._create_or_update_report(
                    report_id(runner, REPORTER),
                    report_title(runner, REPORTER),
                    REPORT_RESULT_PENDING,
                )

    def post(self, comment: Comment) -> None:
        """Hold a comment until flush; duplicates are dropped."""
        location = comment.result.diagnostic.location
        path = os.path.join(self.wd, location.path)
        if path:
            path = os.path.normpath(path)
        location.path = path.replace(os.sep, "/")

        with self._lock:
            # The API rejects annotations with duplicate external ids.
            external_id = external_id_from_diagnostic(comment.result.diagnostic)
            if external_id not in self._seen:
                self._comments.setdefault(comment.tool_name, []).append(comment)
                self._seen.add(external_id)

    def flush(self) -> None:
        """Create or update the report of every tool and post its annotations."""
        with self._lock:
            for tool, comments in self._comments.items():
                rid = report_id(tool, REPORTER)
                title = report_title(tool, REPORTER)
                if not comments:
                    self._create_or_update_report(rid, title, REPORT_RESULT_PASSED)
                    continue

                self._create_or_update_report(rid, title, REPORT_RESULT_FAILED)
                for start in range(0, len(comments), ANNOTATIONS_BATCH_SIZE):
                    req = AnnotationsRequest(
                        owner=self.owner,
                        repository=self.repo,
                        commit=self.sha,
                        report_id=rid,
                        comments=comments[start:start + ANNOTATIONS_BATCH_SIZE],
                    )
                    try:
                        self.client.create_or_update_annotations(req)
                    except Exception as err:
                        raise RuntimeError(
                            f"failed to post annotations: {err}"
                        ) from err

    def _create_or_update_report(self, rid: str, title: str, status: str) -> None:
        self.client.create_or_update_report(
            ReportRequest(
                owner=self.owner,
                repository=self.repo,
                commit=self.sha,
                report_id=rid,
                report_type=REPORT_TYPE_BUG,
                title=title,
                reporter=REPORTER,
                result=status,
                details=_details_for(status),
                logo_url=LOGO_URL,
            )
        )