"""covreport: LCOV coverage summaries and reports for pull requests."""

__version__ = "0.1.0"
