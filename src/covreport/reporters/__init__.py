"""Report renderers: markdown, terminal and GitHub comments."""

from covreport.reporters.github_comment import GitHubCommentReporter
from covreport.reporters.markdown import MarkdownReporter, ReportData, build_marker
from covreport.reporters.terminal import CLIReporter

__all__ = [
    "CLIReporter",
    "GitHubCommentReporter",
    "MarkdownReporter",
    "ReportData",
    "build_marker",
]
