"""Summary, final-map and threshold reports built from parsed coverage records."""

from covreport.reports.aggregate import aggregate_records, compute_pct
from covreport.reports.final import build_final
from covreport.reports.loader import ReportLoadError, load_final, load_summary
from covreport.reports.summary import build_summary

__all__ = [
    "ReportLoadError",
    "aggregate_records",
    "build_final",
    "build_summary",
    "compute_pct",
    "load_final",
    "load_summary",
]
