"""Client for the Bitbucket Server Code Insights API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlsplit

import requests

from reviewhound.bitbucket.api import (
    HTTP_TIMEOUT,
    REPORT_RESULT_PENDING,
    AnnotationsRequest,
    ReportRequest,
    UnexpectedResponseError,
)
from reviewhound.bitbucket.payloads import (
    build_server_annotations,
    build_server_report,
)


def server_variables(bb_url: str) -> dict[str, str]:
    """Protocol and domain (with any path) of a Bitbucket Server URL."""
    try:
        parsed = urlsplit(bb_url)
    except ValueError as err:
        raise ValueError(f"failed to parse Bitbucket Server URL: {err}") from err
    if not parsed.scheme:
        raise ValueError(f"unable to determine scheme of Bitbucket Server URL: {bb_url!r}")
    host = parsed.netloc.rpartition("@")[2]
    if not host:
        raise ValueError(f"unable to determine host of Bitbucket Server URL: {bb_url!r}")
    return {"protocol": parsed.scheme, "bitbucketDomain": host + parsed.path}


@dataclass(frozen=True)
class ServerConfig:
    """Where the Server API lives and how to authenticate with it."""

    protocol: str
    bitbucket_domain: str
    basic: tuple[str, str] | None = None
    token: str = ""

    @property
    def base_url(self) -> str:
        """Root URL of the Code Insights REST API."""
        return f"{self.protocol}://{self.bitbucket_domain}/rest/insights/1.0"

    def request_options(self) -> dict[str, Any]:
        """Keyword arguments for a requests call carrying the credentials."""
        if self.token:
            return {"headers": {"Authorization": f"Bearer {self.token}"}}
        if self.basic is not None:
            return {"auth": self.basic}
        return {}


def build_server_config(
    bb_url: str, user: str, password: str, token: str
) -> ServerConfig:
    """Configuration for a Bitbucket Server at bb_url."""
    variables = server_variables(bb_url)
    return ServerConfig(
        protocol=variables["protocol"],
        bitbucket_domain=variables["bitbucketDomain"],
        basic=(user, password) if user and password else None,
        token=token,
    )


def _segment(value: str) -> str:
    return quote(value, safe="")


class ServerAPIClient:
    """Creates reports and annotations through the Server Code Insights API."""

    def __init__(
        self, config: ServerConfig, session: requests.Session | None = None
    ) -> None:
        self.config = config
        self.session = session if session is not None else requests.Session()

    def _report_url(self, owner: str, repo: str, commit: str, rid: str) -> str:
        return (
            f"{self.config.base_url}/projects/{_segment(owner)}/repos/{_segment(repo)}"
            f"/commits/{_segment(commit)}/reports/{_segment(rid)}"
        )

    def _execute(self, method: str, url: str, body: Any, expected: int) -> None:
        try:
            resp = self.session.request(
                method, url, json=body, timeout=HTTP_TIMEOUT,
                **self.config.request_options(),
            )
        except requests.RequestException as err:
            raise ConnectionError(f"bitbucket Server API error: {err}") from err
        if resp.status_code != expected:
            raise UnexpectedResponseError(resp.status_code, resp.content)

    def create_or_update_report(self, req: ReportRequest) -> None:
        """Replace the report, dropping its old annotations."""
        # The Server API has no pending status.
        if req.result == REPORT_RESULT_PENDING:
            return
        url = self._report_url(req.owner, req.repository, req.commit, req.report_id)
        try:
            self._execute("DELETE", url, None, 204)
        except (ConnectionError, UnexpectedResponseError) as err:
            raise RuntimeError(
                f"failed to delete code insights report: {err}"
            ) from err
        try:
            self._execute("PUT", url, build_server_report(req), 200)
        except (ConnectionError, UnexpectedResponseError) as err:
            raise RuntimeError(
                f"failed to create code insights report: {err}"
            ) from err

    def create_or_update_annotations(self, req: AnnotationsRequest) -> None:
        """Add annotations to a report."""
        url = (
            self._report_url(req.owner, req.repository, req.commit, req.report_id)
            + "/annotations"
        )
        try:
            self._execute("POST", url, build_server_annotations(req.comments), 204)
        except (ConnectionError, UnexpectedResponseError) as err:
            raise RuntimeError(f"failed to create annotations: {err}") from err