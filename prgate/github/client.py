"""httpx-based client for the GitHub REST API.

All methods return typed responses or raise RemoteAPIError. Errors are
never retried here; the scheduler's next tick is the retry.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import httpx

from .models import Comment, CreatedPullRequest, PullRequest, PullRequestFile

logger = logging.getLogger(__name__)

_PER_PAGE = 100


class RemoteAPIError(Exception):
    """Raised when the remote API is unreachable or returns an error."""

    def __init__(self, status_code: int | None, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        prefix = f"GitHub API error {status_code}" if status_code else "GitHub API unreachable"
        super().__init__(f"{prefix}: {detail}")


class GitHubClient:
    """Synchronous httpx client scoped to one repository."""

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str = "",
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def _headers(self) -> dict[str, str]:
        h = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            h["Authorization"] = f"Bearer {self._token}"
        return h

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    def _request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
    ) -> httpx.Response:
        if not url.startswith("http"):
            url = f"{self._base_url}{url}"
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                resp = client.request(
                    method, url, headers=self._headers, params=params, json=json_data,
                )
        except httpx.ConnectError as e:
            raise RemoteAPIError(None, f"connection failed: {e}") from e
        except httpx.TimeoutException as e:
            raise RemoteAPIError(None, "request timed out") from e
        except httpx.HTTPError as e:
            raise RemoteAPIError(None, f"{type(e).__name__}: {e}") from e

        if resp.status_code >= 400:
            detail = resp.text
            try:
                detail = resp.json().get("message", resp.text)
            except ValueError:
                pass
            raise RemoteAPIError(resp.status_code, str(detail))
        return resp

    def _paginate(self, path: str, params: dict[str, Any]) -> Iterator[dict[str, Any]]:
        """Yield items across pages by following the Link: rel="next" header."""
        url: str | None = path
        page_params: dict[str, Any] | None = {**params, "per_page": _PER_PAGE}
        while url:
            resp = self._request("GET", url, params=page_params)
            payload = resp.json()
            if not isinstance(payload, list):
                raise RemoteAPIError(resp.status_code, "expected a JSON list")
            yield from payload
            url = resp.links.get("next", {}).get("url")
            page_params = None  # the next URL already carries the query

    # ── High-level methods ───────────────────────────────────────────────

    def list_open_pull_requests(self) -> list[PullRequest]:
        """GET /pulls (open, newest first)"""
        items = self._paginate(
            f"{self._repo_path}/pulls",
            {"state": "open", "sort": "created", "direction": "desc"},
        )
        return [PullRequest.model_validate(item) for item in items]

    def list_pull_request_files(self, number: int) -> list[PullRequestFile]:
        """GET /pulls/{n}/files"""
        items = self._paginate(f"{self._repo_path}/pulls/{number}/files", {})
        return [PullRequestFile.model_validate(item) for item in items]

    def create_comment(self, number: int, body: str) -> Comment:
        """POST /issues/{n}/comments"""
        resp = self._request(
            "POST", f"{self._repo_path}/issues/{number}/comments", json_data={"body": body},
        )
        return Comment.model_validate(resp.json())

    def create_pull_request(self, title: str, head: str, base: str, body: str) -> CreatedPullRequest:
        """POST /pulls"""
        resp = self._request(
            "POST",
            f"{self._repo_path}/pulls",
            json_data={"title": title, "head": head, "base": base, "body": body},
        )
        created = CreatedPullRequest.model_validate(resp.json())
        logger.info("Opened pull request #%d: %s", created.number, created.html_url)
        return created
