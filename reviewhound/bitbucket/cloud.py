"""Client for the Bitbucket Cloud Code Insights API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

from reviewhound.bitbucket.api import (
    HTTP_TIMEOUT,
    AnnotationsRequest,
    ReportRequest,
    UnexpectedResponseError,
)
from reviewhound.bitbucket.payloads import build_cloud_annotations, build_cloud_report

CLOUD_API_URL = "https://api.bitbucket.org/2.0"
# Inside Pipelines the API is reached over plain HTTP through an
# authenticating proxy that runs next to every pipeline.
PIPELINE_API_URL = "http://api.bitbucket.org/2.0"
PIPELINE_PROXY_URL = "http://localhost:29418"
# Pipes run in containers and reach the same proxy through Docker's DNS name.
PIPE_PROXY_URL = "http://host.docker.internal:29418"


@dataclass(frozen=True)
class CloudAuth:
    """Credentials sent with every Cloud API request."""

    basic: tuple[str, str] | None = None
    token: str = ""

    def request_options(self) -> dict[str, Any]:
        """Keyword arguments for a requests call carrying these credentials."""
        if self.token:
            return {"headers": {"Authorization": f"Bearer {self.token}"}}
        if self.basic is not None:
            return {"auth": self.basic}
        return {}


def build_cloud_auth(user: str, password: str, token: str) -> CloudAuth:
    """Credentials from a user and password, an access token, or neither."""
    basic = (user, password) if user and password else None
    return CloudAuth(basic=basic, token=token)


def _segment(value: str) -> str:
    return quote(value, safe="")


class CloudAPIClient:
    """Creates reports and annotations through the Cloud Code Insights API."""

    def __init__(
        self,
        server_url: str = CLOUD_API_URL,
        auth: CloudAuth | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.server_url = server_url.rstrip("/")
        self.auth = auth if auth is not None else CloudAuth()
        self.session = session if session is not None else requests.Session()

    def _report_url(self, owner: str, repo: str, commit: str, rid: str) -> str:
        return (
            f"{self.server_url}/repositories/{_segment(owner)}/{_segment(repo)}"
            f"/commit/{_segment(commit)}/reports/{_segment(rid)}"
        )

    def _execute(self, method: str, url: str, body: Any, expected: int) -> None:
        try:
            resp = self.session.request(
                method, url, json=body, timeout=HTTP_TIMEOUT,
                **self.auth.request_options(),
            )
        except requests.RequestException as err:
            raise ConnectionError(f"bitbucket Cloud API error: {err}") from err
        if resp.status_code != expected:
            raise UnexpectedResponseError(resp.status_code, resp.content)

    def create_or_update_report(self, req: ReportRequest) -> None:
        """Create or update the given report."""
        url = self._report_url(req.owner, req.repository, req.commit, req.report_id)
        try:
            self._execute("PUT", url, build_cloud_report(req), 200)
        except (ConnectionError, UnexpectedResponseError) as err:
            raise RuntimeError(
                f"failed to create code insights report: {err}"
            ) from err

    def create_or_update_annotations(self, req: AnnotationsRequest) -> None:
        """Create or update annotations of a report in one call."""
        url = (
            self._report_url(req.owner, req.repository, req.commit, req.report_id)
            + "/annotations"
        )
        try:
            self._execute("POST", url, build_cloud_annotations(req.comments), 200)
        except (ConnectionError, UnexpectedResponseError) as err:
            raise RuntimeError(
                f"failed to create code insights annotations: {err}"
            ) from err


def new_cloud_api_client(
    is_in_pipeline: bool, is_in_pipe: bool, auth: CloudAuth | None = None
) -> CloudAPIClient:
    """Client configured for running locally, in a pipeline or in a pipe."""
    session = requests.Session()
    server_url = CLOUD_API_URL
    if is_in_pipeline:
        proxy = PIPE_PROXY_URL if is_in_pipe else PIPELINE_PROXY_URL
        session.proxies.update({"http": proxy, "https": proxy})
        server_url = PIPELINE_API_URL
    return CloudAPIClient(server_url, auth, session)