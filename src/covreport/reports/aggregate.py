"""Reduce coverage records into a single metrics bundle."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from covreport.models.coverage import CoverageBundle, CoverageMetric

if TYPE_CHECKING:
    from collections.abc import Iterable

    from covreport.models.coverage import CoverageRecord

_PCT_QUANTUM = Decimal("0.01")


def round_half_up(value: Decimal | float, quantum: Decimal = _PCT_QUANTUM) -> float:
    """Round *value* half-up to the precision of *quantum*."""
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def compute_pct(covered: int, total: int) -> float:
    """Return ``covered / total`` as a percentage with two decimals, 0 when total is 0."""
    if total == 0:
        return 0.0
    ratio = Decimal(covered) * 100 / Decimal(total)
    return float(ratio.quantize(_PCT_QUANTUM, rounding=ROUND_HALF_UP))


def make_metric(covered: int, total: int) -> CoverageMetric:
    """Build a metric; LCOV has no notion of skipped items."""
    return CoverageMetric(total=total, covered=covered, skipped=0, pct=compute_pct(covered, total))


def aggregate_records(records: Iterable[CoverageRecord]) -> CoverageBundle:
    """Sum line, function and branch counters over *records*.

    Statements mirror lines since LCOV has no separate statement data.
    Aggregating one record gives exactly that file's contribution to the
    aggregate of a larger set.
    """
    total_lines = 0
    covered_lines = 0
    total_functions = 0
    covered_functions = 0
    total_branches = 0
    covered_branches = 0

    for record in records:
        total_lines += len(record.lines)
        covered_lines += sum(1 for line in record.lines if line.is_covered)

        total_functions += record.functions.found
        covered_functions += record.functions.hit

        total_branches += record.branches.found
        covered_branches += record.branches.hit

    return CoverageBundle(
        lines=make_metric(covered_lines, total_lines),
        statements=make_metric(covered_lines, total_lines),
        functions=make_metric(covered_functions, total_functions),
        branches=make_metric(covered_branches, total_branches),
    )
