"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from covreport.models.coverage import METRIC_NAMES, TOTAL_KEY
from covreport.reporters.markdown import format_pct

if TYPE_CHECKING:
    from covreport.models.coverage import CoverageBundle, SummaryReport
    from covreport.reports.thresholds import ThresholdResult

console = Console()

_HIGH_COVERAGE = 80.0
_MEDIUM_COVERAGE = 50.0


class CLIReporter:
    """Rich terminal output for coverage summaries."""

    def __init__(self, output: Console | None = None) -> None:
        self.console = output or console

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {message}")

    def print_summary(self, summary: SummaryReport) -> None:
        """Print one row per file followed by the total."""
        table = Table(title="Coverage Summary", title_style="bold cyan")
        table.add_column("File", style="bold")
        for metric_name in METRIC_NAMES:
            table.add_column(metric_name.capitalize(), justify="right")

        for key, bundle in summary.items():
            if key == TOTAL_KEY:
                continue
            table.add_row(key, *self._metric_cells(bundle))

        total = summary.get(TOTAL_KEY)
        if total is not None:
            table.add_section()
            table.add_row("[bold]Total[/bold]", *self._metric_cells(total, bold=True))

        self.console.print(table)

    def print_threshold_results(self, results: list[ThresholdResult]) -> None:
        """Print pass/fail per configured threshold."""
        for result in results:
            label = (
                f"{result.metric}: {format_pct(result.pct)}% "
                f"(threshold {format_pct(result.threshold)}%)"
            )
            if result.passed:
                self.console.print(f"[green]✓[/green] {label}")
            else:
                self.console.print(f"[red]✗[/red] {label}")

    def _metric_cells(self, bundle: CoverageBundle, *, bold: bool = False) -> list[str]:
        cells: list[str] = []
        for metric_name in METRIC_NAMES:
            metric = bundle.metric(metric_name)
            style = self._get_coverage_color(metric.pct)
            if bold:
                style = f"bold {style}"
            text = f"{format_pct(metric.pct)}% ({metric.covered}/{metric.total})"
            cells.append(f"[{style}]{text}[/{style}]")
        return cells

    def _get_coverage_color(self, percentage: float) -> str:
        """Get a color based on coverage percentage."""
        if percentage >= _HIGH_COVERAGE:
            return "green"
        if percentage >= _MEDIUM_COVERAGE:
            return "yellow"
        return "red"


reporter = CLIReporter()
