"""Markdown coverage report for step summaries and comments.

Renders a summary table (one row per metric, with threshold status and trend)
and a collapsible per-file table listing uncovered lines.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from covreport.config import FileCoverageMode
from covreport.models.coverage import METRIC_NAMES, TOTAL_KEY
from covreport.reports.thresholds import Thresholds

if TYPE_CHECKING:
    from covreport.models.coverage import CoverageBundle, FinalReport, SummaryReport
    from covreport.reports.trend import TrendReport

_MARKER_PREFIX = "bun-coverage-report-marker"

_METRIC_LABELS = {
    "lines": "Lines",
    "statements": "Statements",
    "functions": "Functions",
    "branches": "Branches",
}

_STATUS_PASS = "🟢"
_STATUS_FAIL = "🔴"
_STATUS_NONE = "🔵"

_TREND_UP = "⬆️"
_TREND_DOWN = "⬇️"
_TREND_FLAT = "🟰"


def build_marker(name: str = "") -> str:
    """Return the hidden HTML marker that identifies this report's comment."""
    suffix = f"-{name}" if name else ""
    return f"<!-- {_MARKER_PREFIX}{suffix} -->"


def format_pct(value: float) -> str:
    """Format a percentage without trailing zeros (``50``, ``66.67``)."""
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_trend(delta: float) -> str:
    """Format a percentage-point change with a direction indicator."""
    if delta > 0:
        return f"{_TREND_UP} +{format_pct(delta)}%"
    if delta < 0:
        return f"{_TREND_DOWN} -{format_pct(-delta)}%"
    return f"{_TREND_FLAT} ±0%"


def compress_line_ranges(lines: list[int]) -> str:
    """Collapse sorted line numbers into ranges: ``[1, 2, 3, 7]`` -> ``1-3, 7``."""
    ranges: list[str] = []
    start: int | None = None
    prev: int | None = None
    for line in lines:
        if start is None:
            start = prev = line
            continue
        if prev is not None and line == prev + 1:
            prev = line
            continue
        ranges.append(str(start) if start == prev else f"{start}-{prev}")
        start = prev = line
    if start is not None:
        ranges.append(str(start) if start == prev else f"{start}-{prev}")
    return ", ".join(ranges)


def relative_report_path(path: str, root_path: str) -> str:
    """Strip *root_path* from an absolute report path.

    The root only matches whole path components: ``/home/ws`` strips
    ``/home/ws/src/a.ts`` but leaves ``/home/ws2/src/a.ts`` untouched.
    """
    if not root_path:
        return path
    root = root_path.rstrip("/\\")
    if path == root:
        return ""
    if path.startswith((f"{root}/", f"{root}\\")):
        return path[len(root) + 1 :].lstrip("/\\")
    return path


@dataclass
class ReportData:
    """Everything the markdown report is rendered from."""

    summary: SummaryReport
    """Current summary report."""

    final: FinalReport = field(default_factory=dict)
    """Per-line detail; empty when unavailable."""

    trend: TrendReport | None = None
    """Deltas against the compare report, when one was given."""

    thresholds: Thresholds = field(default_factory=Thresholds)
    """Configured minimum percentages."""

    name: str = ""
    """Report name shown in the heading."""

    file_coverage_mode: FileCoverageMode = FileCoverageMode.CHANGES
    """Which files to list."""

    changed_files: list[str] = field(default_factory=list)
    """Repository-relative paths changed by the pull request."""

    file_coverage_root_path: str = ""
    """Prefix stripped from report paths."""

    commit_sha: str = ""
    """Commit the report was generated for."""


class MarkdownReporter:
    """Render coverage reports as GitHub-flavoured markdown."""

    def render(self, data: ReportData) -> str:
        """Render the full report, starting with its comment marker."""
        sections: list[str] = [build_marker(data.name)]

        title = f"## Coverage Report for {data.name}" if data.name else "## Coverage Report"
        sections.append(title)
        sections.append("")

        total = data.summary.get(TOTAL_KEY)
        if total is not None:
            total_trend = data.trend.get(TOTAL_KEY) if data.trend else None
            sections.append(self.render_summary_table(total, data.thresholds, total_trend))
            sections.append("")

        if data.file_coverage_mode is not FileCoverageMode.NONE:
            sections.append(self.render_file_table(data))
            sections.append("")

        if data.commit_sha:
            sections.append(f"<em>Generated for commit {data.commit_sha}</em>")

        return "\n".join(sections).rstrip("\n") + "\n"

    def render_summary_table(
        self,
        total: CoverageBundle,
        thresholds: Thresholds,
        trend: dict[str, float] | None = None,
    ) -> str:
        """Render the metric table for the summary total."""
        lines = [
            "| Status | Category | Percentage | Covered / Total |",
            "| :---: | :--- | :---: | :---: |",
        ]
        for metric_name in METRIC_NAMES:
            metric = total.metric(metric_name)
            threshold = thresholds.get(metric_name)

            pct_cell = f"{format_pct(metric.pct)}%"
            if threshold is not None:
                pct_cell += f" (🎯 {format_pct(threshold)}%)"
            if trend is not None:
                pct_cell += f"<br>{format_trend(trend[metric_name])}"

            lines.append(
                f"| {self._status_icon(metric.pct, threshold)} "
                f"| {_METRIC_LABELS[metric_name]} "
                f"| {pct_cell} "
                f"| {metric.covered} / {metric.total} |"
            )
        return "\n".join(lines)

    def render_file_table(self, data: ReportData) -> str:
        """Render the collapsible per-file table for the selected files."""
        rows = self._file_rows(data)
        lines = ["<details>", "<summary>File Coverage</summary>", ""]
        if not rows:
            lines.append(
                "No files found."
                if data.file_coverage_mode is FileCoverageMode.ALL
                else "No changed files found."
            )
        else:
            lines.append(
                "| File | Lines | Statements | Functions | Branches | Uncovered Lines |"
            )
            lines.append("| :--- | :---: | :---: | :---: | :---: | :--- |")
            lines.extend(rows)
        lines.append("</details>")
        return "\n".join(lines)

    def _file_rows(self, data: ReportData) -> list[str]:
        changed = set(data.changed_files)
        rows: list[str] = []
        for key, bundle in data.summary.items():
            if key == TOTAL_KEY:
                continue
            rel_path = relative_report_path(key, data.file_coverage_root_path)
            if data.file_coverage_mode is FileCoverageMode.CHANGES and rel_path not in changed:
                continue

            file_trend = data.trend.get(key) if data.trend else None
            cells = [rel_path]
            for metric_name in METRIC_NAMES:
                cell = f"{format_pct(bundle.metric(metric_name).pct)}%"
                if file_trend is not None:
                    cell += f"<br>{format_trend(file_trend[metric_name])}"
                cells.append(cell)

            detail = data.final.get(key)
            cells.append(compress_line_ranges(detail.uncovered_lines()) if detail else "")
            rows.append("| " + " | ".join(cells) + " |")
        return rows

    def _status_icon(self, pct: float, threshold: float | None) -> str:
        if threshold is None:
            return _STATUS_NONE
        return _STATUS_PASS if pct >= threshold else _STATUS_FAIL
