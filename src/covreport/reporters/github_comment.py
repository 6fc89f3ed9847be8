"""Post the coverage report as a pull request and/or commit comment.

Comments are upserted: a previous comment carrying the same marker is
updated instead of adding a new one on every run.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from covreport.config import CommentOn

if TYPE_CHECKING:
    from covreport.utils.github import GitHubAPI, RepoRef

logger = logging.getLogger(__name__)


def _find_by_marker(comments: list[dict[str, Any]], marker: str) -> dict[str, Any] | None:
    for comment in comments:
        if marker in str(comment.get("body") or ""):
            return comment
    return None


class GitHubCommentReporter:
    """Upserts coverage report comments through the GitHub API."""

    def __init__(self, api: GitHubAPI, repo: RepoRef) -> None:
        self._api = api
        self._repo = repo

    def upsert_pr_comment(self, pr_number: int, body: str, marker: str) -> dict[str, Any]:
        """Create or update the report comment on a pull request.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        if marker not in body:
            logger.warning("Marker '%s' not found in comment body. Adding it.", marker)
            body = f"{marker}\n{body}"

        existing = _find_by_marker(self._api.list_issue_comments(self._repo, pr_number), marker)
        if existing:
            logger.info("Updating existing comment %d on PR #%d", existing["id"], pr_number)
            return self._api.update_issue_comment(self._repo, existing["id"], body)

        logger.info("Creating new comment on PR #%d", pr_number)
        return self._api.create_issue_comment(self._repo, pr_number, body)

    def upsert_commit_comment(self, commit_sha: str, body: str, marker: str) -> dict[str, Any]:
        """Create or update the report comment on a commit.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        if marker not in body:
            logger.warning("Marker '%s' not found in comment body. Adding it.", marker)
            body = f"{marker}\n{body}"

        existing = _find_by_marker(self._api.list_commit_comments(self._repo, commit_sha), marker)
        if existing:
            logger.info("Updating existing comment %d on commit %s", existing["id"], commit_sha)
            return self._api.update_commit_comment(self._repo, existing["id"], body)

        logger.info("Creating new comment on commit %s", commit_sha)
        return self._api.create_commit_comment(self._repo, commit_sha, body)

    def publish(
        self,
        body: str,
        marker: str,
        targets: list[CommentOn],
        *,
        pr_number: int | None = None,
        commit_sha: str = "",
    ) -> list[str]:
        """Post *body* to every requested target.

        Returns:
            URLs of the comments written.

        Raises:
            GitHubAPIError: If an API request fails.
        """
        urls: list[str] = []
        if CommentOn.PR in targets:
            if pr_number is None:
                logger.warning("No pull request found for this run; skipping PR comment")
            else:
                result = self.upsert_pr_comment(pr_number, body, marker)
                urls.append(str(result.get("html_url", "")))
        if CommentOn.COMMIT in targets:
            if not commit_sha:
                logger.warning("No commit SHA available; skipping commit comment")
            else:
                result = self.upsert_commit_comment(commit_sha, body, marker)
                urls.append(str(result.get("html_url", "")))
        return urls
