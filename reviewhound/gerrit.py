"""Diff and comment services for Gerrit changes."""

from __future__ import annotations

import json
import os
import subprocess
import threading
from typing import Any
from urllib.parse import quote

import requests

from reviewhound.models import Comment
from reviewhound.serviceutil import git_rel_workdir

STRIP_DIFF_RESULT = 1


def _parse_gerrit_json(text: str) -> Any:
    # Gerrit prefixes JSON bodies with a line guarding against XSSI.
    if text.startswith(")]}"):
        text = text.partition("\n")[2]
    return json.loads(text) if text.strip() else {}


class GerritClient:
    """Minimal client for the Gerrit REST API."""

    def __init__(self, base_url: str, session: requests.Session | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()

    def get_change_detail(self, change_id: str, fields: list[str]) -> dict[str, Any]:
        """Detail of a change, with the requested optional fields."""
        resp = self.session.get(
            f"{self.base_url}/changes/{quote(change_id, safe='')}/detail",
            params={"o": fields},
        )
        resp.raise_for_status()
        return _parse_gerrit_json(resp.text)

    def set_review(self, change_id: str, revision_id: str, review: dict[str, Any]) -> None:
        """Post a review to a revision of a change."""
        resp = self.session.post(
            f"{self.base_url}/changes/{quote(change_id, safe='')}"
            f"/revisions/{quote(revision_id, safe='')}/review",
            json=review,
        )
        resp.raise_for_status()
        _parse_gerrit_json(resp.text)


def _git(*args: str) -> bytes:
    return subprocess.run(
        ["git", *args], check=True, capture_output=True
    ).stdout


def _workdir(service: str) -> str:
    try:
        return git_rel_workdir()
    except (OSError, ValueError) as err:
        raise RuntimeError(f"{service} needs 'git' command: {err}") from err


class ChangeDiff:
    """Diff of a Gerrit change, computed with the local git."""

    def __init__(self, client: GerritClient, branch: str, change_id: str) -> None:
        self.client = client
        self.branch = branch
        self.change_id = change_id
        self.wd = _workdir("ChangeDiff")

    def diff(self) -> bytes:
        """Diff of the change's current revision against its branch."""
        change = self.client.get_change_detail(self.change_id, ["CURRENT_REVISION"])
        return self._git_diff(change.get("current_revision", ""), self.branch)

    @staticmethod
    def _git_diff(base_sha: str, target_sha: str) -> bytes:
        try:
            merge_base = _git("merge-base", target_sha, base_sha).decode().strip("\n")
        except (OSError, subprocess.CalledProcessError) as err:
            raise RuntimeError(f"failed to get merge-base commit: {err}") from err
        try:
            return _git("diff", "--find-renames", merge_base, base_sha)
        except (OSError, subprocess.CalledProcessError) as err:
            raise RuntimeError(f"failed to run git diff: {err}") from err

    def strip(self) -> int:
        """Git diffs carry one leading path component to strip."""
        return STRIP_DIFF_RESULT


class ChangeReviewCommenter:
    """Posts comments as one review on a Gerrit change revision."""

    def __init__(self, client: GerritClient, change_id: str, revision_id: str) -> None:
        self.client = client
        self.change_id = change_id
        self.revision_id = revision_id
        self.wd = _workdir("ChangeReviewCommenter")
        self._lock = threading.Lock()
        self._comments: list[Comment] = []

    def post(self, comment: Comment) -> None:
        """Hold a comment until flush."""
        location = comment.result.diagnostic.location
        path = os.path.join(self.wd, location.path)
        location.path = os.path.normpath(path) if path else path
        with self._lock:
            self._comments.append(comment)

    def flush(self) -> None:
        """Post every held comment that lies in a diffed file."""
        with self._lock:
            by_path: dict[str, list[dict[str, Any]]] = {}
            for comment in self._comments:
                if not comment.result.in_diff_file:
                    continue
                diagnostic = comment.result.diagnostic
                entry: dict[str, Any] = {}
                if diagnostic.start_line():
                    entry["line"] = diagnostic.start_line()
                if diagnostic.message:
                    entry["message"] = diagnostic.message
                by_path.setdefault(diagnostic.location.path, []).append(entry)
            review: dict[str, Any] = {"comments": by_path} if by_path else {}
            self.client.set_review(self.change_id, self.revision_id, review)