"""Data models for covreport."""

from covreport.models.coverage import (
    CoverageBundle,
    CoverageMetric,
    CoverageRecord,
    FileCoverageDetail,
    FinalReport,
    HitCounter,
    LineHit,
    StatementSpan,
    SummaryReport,
)

__all__ = [
    "CoverageBundle",
    "CoverageMetric",
    "CoverageRecord",
    "FileCoverageDetail",
    "FinalReport",
    "HitCounter",
    "LineHit",
    "StatementSpan",
    "SummaryReport",
]
