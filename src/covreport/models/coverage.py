"""Coverage data models.

Records are what the LCOV parser produces, one per ``SF:`` block. Metrics and
bundles are the aggregated view consumed by the summary table, thresholds and
trend diffing. ``FileCoverageDetail`` is the per-line statement view used for
line annotations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

METRIC_NAMES = ("lines", "statements", "functions", "branches")
"""Metric keys of a bundle, in rendering order."""

TOTAL_KEY = "total"
"""Reserved summary key holding the aggregate over all records."""

# Synthetic statement width; LCOV carries no column data.
STATEMENT_START_COLUMN = 0
STATEMENT_END_COLUMN = 100


@dataclass
class LineHit:
    """Execution count for one ``DA:`` entry."""

    line: int
    """Line number as written in the report."""

    hit: int
    """Number of times the line was executed."""

    @property
    def is_covered(self) -> bool:
        """Return True if this line was executed at least once."""
        return self.hit > 0


@dataclass
class HitCounter:
    """File-level found/hit pair (``FNF``/``FNH`` or ``BRF``/``BRH``)."""

    found: int = 0
    hit: int = 0


@dataclass
class CoverageRecord:
    """Coverage data for one ``SF:`` ... ``end_of_record`` block."""

    source_file: str
    """Path exactly as it appears after ``SF:``."""

    lines: list[LineHit] = field(default_factory=list)
    """Line hits in order of appearance; duplicates are kept."""

    functions: HitCounter = field(default_factory=HitCounter)
    """Functions found/hit counters."""

    branches: HitCounter = field(default_factory=HitCounter)
    """Branches found/hit counters."""


@dataclass
class CoverageMetric:
    """Counts and percentage for a single metric."""

    total: int = 0
    covered: int = 0
    skipped: int = 0
    pct: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "covered": self.covered,
            "skipped": self.skipped,
            "pct": self.pct,
        }


@dataclass
class CoverageBundle:
    """Lines, statements, functions and branches for a set of records."""

    lines: CoverageMetric = field(default_factory=CoverageMetric)
    statements: CoverageMetric = field(default_factory=CoverageMetric)
    functions: CoverageMetric = field(default_factory=CoverageMetric)
    branches: CoverageMetric = field(default_factory=CoverageMetric)

    def metric(self, name: str) -> CoverageMetric:
        """Return the metric called *name* (one of ``METRIC_NAMES``)."""
        if name not in METRIC_NAMES:
            raise KeyError(name)
        metric: CoverageMetric = getattr(self, name)
        return metric

    def to_dict(self) -> dict[str, Any]:
        return {name: self.metric(name).to_dict() for name in METRIC_NAMES}


@dataclass
class StatementSpan:
    """Synthesized source span for one statement."""

    line: int
    start_column: int = STATEMENT_START_COLUMN
    end_column: int = STATEMENT_END_COLUMN

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": {"line": self.line, "column": self.start_column},
            "end": {"line": self.line, "column": self.end_column},
        }


@dataclass
class FileCoverageDetail:
    """Per-line statement detail for one file.

    Statement ids are the stringified zero-based position of the line entry in
    its record, not the line number.
    """

    path: str
    statement_map: dict[str, StatementSpan] = field(default_factory=dict)
    s: dict[str, int] = field(default_factory=dict)
    all: bool = False

    def uncovered_lines(self) -> list[int]:
        """Return sorted, de-duplicated line numbers whose statements were never hit."""
        return sorted(
            {span.line for stmt_id, span in self.statement_map.items() if self.s.get(stmt_id) == 0}
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "all": self.all,
            "statementMap": {
                stmt_id: span.to_dict() for stmt_id, span in self.statement_map.items()
            },
            "s": dict(self.s),
        }


SummaryReport = dict[str, CoverageBundle]
"""``"total"`` plus one bundle per source file, total first."""

FinalReport = dict[str, FileCoverageDetail]
"""Per-file statement detail keyed by source file."""


def summary_to_dict(summary: SummaryReport) -> dict[str, Any]:
    """Convert a summary report into its JSON-compatible shape."""
    return {key: bundle.to_dict() for key, bundle in summary.items()}


def final_to_dict(final: FinalReport) -> dict[str, Any]:
    """Convert a final report into its JSON-compatible shape."""
    return {key: detail.to_dict() for key, detail in final.items()}
