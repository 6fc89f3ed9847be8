"""Percentage deltas between two summary reports."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from covreport.models.coverage import METRIC_NAMES
from covreport.reports.aggregate import round_half_up

if TYPE_CHECKING:
    from covreport.models.coverage import CoverageBundle, SummaryReport

TrendReport = dict[str, dict[str, float]]
"""Summary key -> metric name -> percentage point change."""


def diff_bundles(current: CoverageBundle, previous: CoverageBundle) -> dict[str, float]:
    """Return ``current.pct - previous.pct`` for each metric."""
    return {
        metric: round_half_up(
            Decimal(str(current.metric(metric).pct)) - Decimal(str(previous.metric(metric).pct))
        )
        for metric in METRIC_NAMES
    }


def diff_summaries(current: SummaryReport, previous: SummaryReport) -> TrendReport:
    """Diff every key present in both summaries, in *current* order."""
    return {
        key: diff_bundles(bundle, previous[key])
        for key, bundle in current.items()
        if key in previous
    }
