"""Build the summary report: one aggregate bundle plus one bundle per file."""

from __future__ import annotations

from typing import TYPE_CHECKING

from covreport.models.coverage import TOTAL_KEY
from covreport.reports.aggregate import aggregate_records

if TYPE_CHECKING:
    from covreport.models.coverage import CoverageRecord, SummaryReport


def build_summary(records: list[CoverageRecord]) -> SummaryReport:
    """Aggregate *records* into a summary keyed by ``"total"`` and source file.

    When two records share a source file the later one replaces the earlier
    entry, while both still count towards the total.
    """
    summary: SummaryReport = {TOTAL_KEY: aggregate_records(records)}
    for record in records:
        summary[record.source_file] = aggregate_records([record])
    return summary
