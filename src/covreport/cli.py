"""Command-line entry point for covreport."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
from rich.console import Console
from rich.logging import RichHandler

from covreport import __version__
from covreport.config import ConfigError, FileCoverageMode, read_options
from covreport.models.coverage import final_to_dict, summary_to_dict
from covreport.reporters.github_comment import GitHubCommentReporter
from covreport.reporters.markdown import MarkdownReporter, ReportData, build_marker
from covreport.reporters.terminal import reporter
from covreport.reports.loader import ReportLoadError, load_final, load_summary
from covreport.reports.thresholds import evaluate_thresholds
from covreport.reports.trend import diff_summaries
from covreport.utils.actions import (
    ActionsLogHandler,
    append_step_summary,
    get_input,
    is_github_actions,
)
from covreport.utils.github import GitHubAPI, GitHubAPIError, get_event_context

if TYPE_CHECKING:
    from covreport.config import ReportOptions
    from covreport.models.coverage import FinalReport, SummaryReport

logger = logging.getLogger(__name__)

_PACKAGE_LOGGER = "covreport"


def _configure_logging(*, verbose: bool) -> None:
    """Install one handler on the package logger: workflow commands in CI, rich locally."""
    package_logger = logging.getLogger(_PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)

    handler: logging.Handler
    if is_github_actions():
        handler = ActionsLogHandler()
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def _echo_json(data: dict[str, Any]) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _create_api(token: str | None) -> GitHubAPI | None:
    try:
        return GitHubAPI(token=token or None)
    except GitHubAPIError as exc:
        logger.debug("GitHub API unavailable: %s", exc)
        return None


async def _load_reports(
    options: ReportOptions,
) -> tuple[SummaryReport, FinalReport, SummaryReport | None]:
    """Load summary, final map and compare summary concurrently."""
    if options.lcov_compare_path is None:
        summary, final = await asyncio.gather(
            load_summary(options.lcov_path), load_final(options.lcov_path)
        )
        return summary, final, None
    summary, final, compare = await asyncio.gather(
        load_summary(options.lcov_path),
        load_final(options.lcov_path),
        load_summary(options.lcov_compare_path),
    )
    return summary, final, compare


def _changed_files(options: ReportOptions, api: GitHubAPI | None) -> list[str]:
    if options.file_coverage_mode is not FileCoverageMode.CHANGES:
        return []
    repo = get_event_context().repo
    if api is None or repo is None or options.pr_number is None:
        logger.info("No pull request context; the file table will not list changed files")
        return []
    try:
        return api.list_pull_files(repo, options.pr_number)
    except GitHubAPIError as exc:
        logger.warning("Failed to list changed files for PR #%d: %s", options.pr_number, exc)
        return []


def _publish_comments(
    options: ReportOptions, api: GitHubAPI | None, body: str, marker: str
) -> None:
    if not options.comment_on:
        return
    repo = get_event_context().repo
    if api is None or repo is None:
        logger.warning("No GitHub token or repository available; skipping comments")
        return
    try:
        urls = GitHubCommentReporter(api, repo).publish(
            body,
            marker,
            options.comment_on,
            pr_number=options.pr_number,
            commit_sha=options.commit_sha,
        )
    except GitHubAPIError as exc:
        logger.warning("Failed to post coverage comment: %s", exc)
        return
    for url in urls:
        logger.info("Coverage comment: %s", url)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.version_option(version=__version__, prog_name="covreport")
@click.pass_context
def cli(ctx: click.Context, *, verbose: bool) -> None:
    """LCOV coverage summaries for pull requests."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _configure_logging(verbose=verbose)


@cli.command()
@click.argument("lcov_path", type=click.Path(dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the summary as JSON.")
def summary(lcov_path: str, *, as_json: bool) -> None:
    """Print the coverage summary of an LCOV report."""
    try:
        report = asyncio.run(load_summary(lcov_path))
    except ReportLoadError as exc:
        reporter.print_error(str(exc))
        raise SystemExit(1) from exc

    if as_json:
        _echo_json(summary_to_dict(report))
    else:
        reporter.print_summary(report)


@cli.command()
@click.argument("lcov_path", type=click.Path(dir_okay=False))
def final(lcov_path: str) -> None:
    """Print the per-line statement map of an LCOV report as JSON.

    Prints ``{}`` when the report cannot be read.
    """
    _echo_json(final_to_dict(asyncio.run(load_final(lcov_path))))


@cli.command()
@click.option("--lcov-path", default=None, help="LCOV report (default: coverage/lcov.info).")
@click.option("--lcov-compare-path", default=None, help="Previous LCOV report for trends.")
@click.option("--working-directory", default=None, help="Base directory for relative paths.")
@click.option("--bunfig-path", default=None, help="bunfig.toml holding coverage thresholds.")
@click.option("--name", default=None, help="Report name, for several reports on one PR.")
@click.option(
    "--file-coverage-mode",
    type=click.Choice([mode.value for mode in FileCoverageMode]),
    default=None,
    help="Which files to list in the file table.",
)
@click.option("--comment-on", default=None, help="Comma-separated: pr, commit or none.")
@click.option("--pr-number", default=None, help="Pull request number, or 'auto'.")
@click.option(
    "--enforce-thresholds",
    is_flag=True,
    help="Exit with status 1 when coverage is below a configured threshold.",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write the markdown report to this file.",
)
def report(
    output_path: Path | None,
    *,
    enforce_thresholds: bool,
    **option_values: str | None,
) -> None:
    """Build the markdown coverage report and publish it."""
    api = _create_api(get_input("github-token"))
    try:
        options = read_options(option_values, api=api)
        summary_report, final_report, compare_report = asyncio.run(_load_reports(options))
    except (ConfigError, ReportLoadError) as exc:
        reporter.print_error(str(exc))
        raise SystemExit(1) from exc

    trend = None
    if compare_report is not None:
        trend = diff_summaries(summary_report, compare_report)
    data = ReportData(
        summary=summary_report,
        final=final_report,
        trend=trend,
        thresholds=options.thresholds,
        name=options.name,
        file_coverage_mode=options.file_coverage_mode,
        changed_files=_changed_files(options, api),
        file_coverage_root_path=options.file_coverage_root_path,
        commit_sha=options.commit_sha,
    )
    markdown = MarkdownReporter().render(data)

    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(markdown, encoding="utf-8")
        logger.info("Markdown report written to %s", output_path)
    if append_step_summary(markdown) is None and output_path is None:
        click.echo(markdown)

    _publish_comments(options, api, markdown, build_marker(options.name))

    results = evaluate_thresholds(summary_report, options.thresholds)
    reporter.print_threshold_results(results)
    failed = [result for result in results if not result.passed]
    if enforce_thresholds and failed:
        for result in failed:
            logger.error(
                "%s coverage %.2f%% is below the threshold of %.2f%%",
                result.metric,
                result.pct,
                result.threshold,
            )
        raise SystemExit(1)
