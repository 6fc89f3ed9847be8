"""GitHub REST API client and GitHub Actions event context.

Covers what the coverage report needs: upserting issue and commit comments,
finding the pull request for a commit, and listing the files a pull request
changes.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import requests

logger = logging.getLogger(__name__)

# GitHub API constants
GITHUB_API_BASE = "https://api.github.com"
_GITHUB_AUTH_ENV_KEY = "GITHUB_" + "TOKEN"
_REQUEST_TIMEOUT = 30
_PER_PAGE = 100

# Expected number of parts when splitting "owner/repo"
_OWNER_REPO_PARTS = 2


@dataclass
class RepoRef:
    """Repository coordinates."""

    owner: str
    """Repository owner (username or organization)."""

    repo: str
    """Repository name."""


@dataclass
class EventContext:
    """What the report needs from the triggering workflow event."""

    repo: RepoRef | None
    """Repository the workflow runs in."""

    event_name: str
    """Triggering event (``pull_request``, ``push``, ...)."""

    pr_number: int | None
    """Pull request number carried by the event payload, if any."""

    commit_sha: str
    """PR head SHA for pull request events, otherwise ``GITHUB_SHA``."""


class GitHubAPIError(Exception):
    """Exception raised when GitHub API operations fail."""


class GitHubAPI:
    """Client for the GitHub REST API.

    Handles authentication, requests and pagination.
    """

    def __init__(self, token: str | None = None, base_url: str = GITHUB_API_BASE) -> None:
        """Initialize the GitHub API client.

        Args:
            token: GitHub access token. Falls back to the GITHUB_TOKEN
                environment variable.
            base_url: API root, overridable for GitHub Enterprise.

        Raises:
            GitHubAPIError: If no token is available.
        """
        self._token = token or os.environ.get(_GITHUB_AUTH_ENV_KEY)
        if not self._token:
            raise GitHubAPIError(
                f"GitHub token required. Set {_GITHUB_AUTH_ENV_KEY} environment variable "
                "or pass token to constructor."
            )
        self._base_url = base_url.rstrip("/")
        self._session_headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _repo_url(self, repo: RepoRef) -> str:
        return f"{self._base_url}/repos/{repo.owner}/{repo.repo}"

    # ── Issue (PR) comments ──────────────────────────────────────

    def list_issue_comments(self, repo: RepoRef, pr_number: int) -> list[dict[str, Any]]:
        """Return every comment on a pull request."""
        return self._get_paginated(f"{self._repo_url(repo)}/issues/{pr_number}/comments")

    def create_issue_comment(self, repo: RepoRef, pr_number: int, body: str) -> dict[str, Any]:
        """Create a comment on a pull request."""
        result: dict[str, Any] = self._post(
            f"{self._repo_url(repo)}/issues/{pr_number}/comments", {"body": body}
        )
        return result

    def update_issue_comment(self, repo: RepoRef, comment_id: int, body: str) -> dict[str, Any]:
        """Replace the body of an existing pull request comment."""
        result: dict[str, Any] = self._patch(
            f"{self._repo_url(repo)}/issues/comments/{comment_id}", {"body": body}
        )
        return result

    # ── Commit comments ──────────────────────────────────────────

    def list_commit_comments(self, repo: RepoRef, commit_sha: str) -> list[dict[str, Any]]:
        """Return every comment on a commit."""
        return self._get_paginated(f"{self._repo_url(repo)}/commits/{commit_sha}/comments")

    def create_commit_comment(self, repo: RepoRef, commit_sha: str, body: str) -> dict[str, Any]:
        """Create a comment on a commit."""
        result: dict[str, Any] = self._post(
            f"{self._repo_url(repo)}/commits/{commit_sha}/comments", {"body": body}
        )
        return result

    def update_commit_comment(self, repo: RepoRef, comment_id: int, body: str) -> dict[str, Any]:
        """Replace the body of an existing commit comment."""
        result: dict[str, Any] = self._patch(
            f"{self._repo_url(repo)}/comments/{comment_id}", {"body": body}
        )
        return result

    # ── Pull requests ────────────────────────────────────────────

    def list_pulls_for_commit(self, repo: RepoRef, commit_sha: str) -> list[dict[str, Any]]:
        """Return pull requests associated with a commit."""
        return self._get_paginated(f"{self._repo_url(repo)}/commits/{commit_sha}/pulls")

    def list_pull_files(self, repo: RepoRef, pr_number: int) -> list[str]:
        """Return the paths a pull request touches."""
        files = self._get_paginated(f"{self._repo_url(repo)}/pulls/{pr_number}/files")
        return [str(f["filename"]) for f in files if "filename" in f]

    # ── Transport ────────────────────────────────────────────────

    def _get_paginated(self, url: str) -> list[dict[str, Any]]:
        """GET every page of a list endpoint."""
        items: list[dict[str, Any]] = []
        page = 1
        while True:
            batch = self._get(url, params={"per_page": _PER_PAGE, "page": page})
            if not isinstance(batch, list):
                raise GitHubAPIError(f"Expected a list from {url}, got {type(batch).__name__}")
            items.extend(batch)
            if len(batch) < _PER_PAGE:
                return items
            page += 1

    def _get(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """Make a GET request to the GitHub API.

        Raises:
            GitHubAPIError: If the request fails.
        """
        try:
            response = requests.get(
                url, headers=self._session_headers, params=params, timeout=_REQUEST_TIMEOUT
            )
            response.raise_for_status()
            return response.json()
        except Exception as exc:
            raise GitHubAPIError(f"GET request failed: {exc}") from exc

    def _post(self, url: str, data: dict[str, Any]) -> Any:
        """Make a POST request to the GitHub API.

        Raises:
            GitHubAPIError: If the request fails.
        """
        try:
            response = requests.post(
                url, json=data, headers=self._session_headers, timeout=_REQUEST_TIMEOUT
            )
            response.raise_for_status()
            return response.json()
        except Exception as exc:
            raise GitHubAPIError(f"POST request failed: {exc}") from exc

    def _patch(self, url: str, data: dict[str, Any]) -> Any:
        """Make a PATCH request to the GitHub API.

        Raises:
            GitHubAPIError: If the request fails.
        """
        try:
            response = requests.patch(
                url, json=data, headers=self._session_headers, timeout=_REQUEST_TIMEOUT
            )
            response.raise_for_status()
            return response.json()
        except Exception as exc:
            raise GitHubAPIError(f"PATCH request failed: {exc}") from exc


def _parse_repo(full_name: str | None) -> RepoRef | None:
    if not full_name:
        return None
    parts = full_name.split("/")
    if len(parts) != _OWNER_REPO_PARTS or not all(parts):
        return None
    return RepoRef(owner=parts[0], repo=parts[1])


def _load_event_payload() -> dict[str, Any]:
    event_path = os.environ.get("GITHUB_EVENT_PATH")
    if not event_path:
        return {}
    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Failed to read GitHub event payload %s: %s", event_path, e)
        return {}
    return payload if isinstance(payload, dict) else {}


def get_event_context() -> EventContext:
    """Read repository, PR number and commit SHA from the Actions environment."""
    event_name = os.environ.get("GITHUB_EVENT_NAME", "")
    payload = _load_event_payload()

    pr_number: int | None = None
    commit_sha = os.environ.get("GITHUB_SHA", "")

    pull_request = payload.get("pull_request")
    if isinstance(pull_request, dict):
        number = pull_request.get("number")
        if isinstance(number, int):
            pr_number = number
        head = pull_request.get("head")
        if isinstance(head, dict) and head.get("sha"):
            commit_sha = str(head["sha"])

    if pr_number is None:
        # refs/pull/<number>/merge
        github_ref = os.environ.get("GITHUB_REF", "")
        if github_ref.startswith("refs/pull/"):
            try:
                pr_number = int(github_ref.split("/")[2])
            except (IndexError, ValueError):
                pr_number = None

    return EventContext(
        repo=_parse_repo(os.environ.get("GITHUB_REPOSITORY")),
        event_name=event_name,
        pr_number=pr_number,
        commit_sha=commit_sha,
    )


def find_pull_request_for_commit(api: GitHubAPI, repo: RepoRef, commit_sha: str) -> int | None:
    """Return the number of the first open PR containing *commit_sha*."""
    pulls = api.list_pulls_for_commit(repo, commit_sha)
    open_pulls = [pr for pr in pulls if pr.get("state") == "open"]
    candidates = open_pulls or pulls
    if not candidates:
        logger.info("No pull request found for commit %s", commit_sha)
        return None
    number = candidates[0].get("number")
    return number if isinstance(number, int) else None
