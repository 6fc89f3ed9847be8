"""Tests for upserting coverage comments (reporters/github_comment.py)."""

from __future__ import annotations

import logging
from unittest import mock

import pytest

from covreport.config import CommentOn
from covreport.reporters.github_comment import GitHubCommentReporter
from covreport.utils.github import GitHubAPIError, RepoRef

_MARKER = "<!-- bun-coverage-report-marker -->"
_BODY = f"{_MARKER}\n## Coverage Report\n"


@pytest.fixture
def mock_api() -> mock.Mock:
    api = mock.Mock()
    api.list_issue_comments.return_value = []
    api.list_commit_comments.return_value = []
    api.create_issue_comment.return_value = {"id": 10, "html_url": "https://example.test/pr#10"}
    api.update_issue_comment.return_value = {"id": 3, "html_url": "https://example.test/pr#3"}
    api.create_commit_comment.return_value = {"id": 11, "html_url": "https://example.test/c#11"}
    api.update_commit_comment.return_value = {"id": 4, "html_url": "https://example.test/c#4"}
    return api


@pytest.fixture
def repo() -> RepoRef:
    return RepoRef(owner="octocat", repo="hello-world")


@pytest.fixture
def comment_reporter(mock_api: mock.Mock, repo: RepoRef) -> GitHubCommentReporter:
    return GitHubCommentReporter(mock_api, repo)


class TestUpsertPRComment:
    def test_creates_when_no_marker_comment(
        self, comment_reporter: GitHubCommentReporter, mock_api: mock.Mock, repo: RepoRef
    ) -> None:
        mock_api.list_issue_comments.return_value = [{"id": 1, "body": "LGTM"}]

        comment_reporter.upsert_pr_comment(42, _BODY, _MARKER)

        mock_api.create_issue_comment.assert_called_once_with(repo, 42, _BODY)
        mock_api.update_issue_comment.assert_not_called()

    def test_updates_comment_with_marker(
        self, comment_reporter: GitHubCommentReporter, mock_api: mock.Mock, repo: RepoRef
    ) -> None:
        mock_api.list_issue_comments.return_value = [
            {"id": 1, "body": "LGTM"},
            {"id": 3, "body": f"{_MARKER}\nold report"},
        ]

        result = comment_reporter.upsert_pr_comment(42, _BODY, _MARKER)

        mock_api.update_issue_comment.assert_called_once_with(repo, 3, _BODY)
        mock_api.create_issue_comment.assert_not_called()
        assert result["id"] == 3

    def test_named_marker_ignores_unnamed_report(
        self, comment_reporter: GitHubCommentReporter, mock_api: mock.Mock, repo: RepoRef
    ) -> None:
        named = "<!-- bun-coverage-report-marker-web -->"
        mock_api.list_issue_comments.return_value = [{"id": 3, "body": f"{_MARKER}\nold"}]

        comment_reporter.upsert_pr_comment(42, f"{named}\nbody", named)

        mock_api.create_issue_comment.assert_called_once()

    def test_null_body_is_skipped(
        self, comment_reporter: GitHubCommentReporter, mock_api: mock.Mock
    ) -> None:
        mock_api.list_issue_comments.return_value = [{"id": 1, "body": None}]

        comment_reporter.upsert_pr_comment(42, _BODY, _MARKER)

        mock_api.create_issue_comment.assert_called_once()

    def test_adds_missing_marker(
        self,
        comment_reporter: GitHubCommentReporter,
        mock_api: mock.Mock,
        repo: RepoRef,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.WARNING):
            comment_reporter.upsert_pr_comment(42, "plain body", _MARKER)

        mock_api.create_issue_comment.assert_called_once_with(
            repo, 42, f"{_MARKER}\nplain body"
        )
        assert "not found in comment body" in caplog.text


class TestUpsertCommitComment:
    def test_creates(
        self, comment_reporter: GitHubCommentReporter, mock_api: mock.Mock, repo: RepoRef
    ) -> None:
        comment_reporter.upsert_commit_comment("abc", _BODY, _MARKER)

        mock_api.create_commit_comment.assert_called_once_with(repo, "abc", _BODY)

    def test_updates(
        self, comment_reporter: GitHubCommentReporter, mock_api: mock.Mock, repo: RepoRef
    ) -> None:
        mock_api.list_commit_comments.return_value = [{"id": 4, "body": _BODY}]

        comment_reporter.upsert_commit_comment("abc", _BODY, _MARKER)

        mock_api.update_commit_comment.assert_called_once_with(repo, 4, _BODY)


class TestPublish:
    def test_both_targets(
        self, comment_reporter: GitHubCommentReporter, mock_api: mock.Mock
    ) -> None:
        urls = comment_reporter.publish(
            _BODY, _MARKER, [CommentOn.PR, CommentOn.COMMIT], pr_number=42, commit_sha="abc"
        )

        assert urls == ["https://example.test/pr#10", "https://example.test/c#11"]

    def test_no_targets(
        self, comment_reporter: GitHubCommentReporter, mock_api: mock.Mock
    ) -> None:
        assert comment_reporter.publish(_BODY, _MARKER, [], pr_number=42, commit_sha="abc") == []
        mock_api.list_issue_comments.assert_not_called()

    def test_pr_target_without_pr_number(
        self,
        comment_reporter: GitHubCommentReporter,
        mock_api: mock.Mock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.WARNING):
            urls = comment_reporter.publish(_BODY, _MARKER, [CommentOn.PR], commit_sha="abc")

        assert urls == []
        mock_api.list_issue_comments.assert_not_called()
        assert "skipping PR comment" in caplog.text

    def test_commit_target_without_sha(
        self, comment_reporter: GitHubCommentReporter, mock_api: mock.Mock
    ) -> None:
        assert comment_reporter.publish(_BODY, _MARKER, [CommentOn.COMMIT], pr_number=1) == []
        mock_api.list_commit_comments.assert_not_called()

    def test_api_error_propagates(
        self, comment_reporter: GitHubCommentReporter, mock_api: mock.Mock
    ) -> None:
        mock_api.list_issue_comments.side_effect = GitHubAPIError("boom")

        with pytest.raises(GitHubAPIError):
            comment_reporter.publish(_BODY, _MARKER, [CommentOn.PR], pr_number=42)
