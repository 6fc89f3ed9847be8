"""Load LCOV reports from disk into summary and final reports.

The two entry points fail differently. The summary is required output, so a
failure is logged as an error and raised as ``ReportLoadError``. The final map
only adds line-level detail, so a failure is logged as a warning and an empty
report is returned.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from covreport.parsing.lcov import parse_lcov
from covreport.reports.final import build_final
from covreport.reports.summary import build_summary

if TYPE_CHECKING:
    from covreport.models.coverage import CoverageRecord, FinalReport, SummaryReport

logger = logging.getLogger(__name__)

_LCOV_HINT = "Make sure to run bun test --coverage --coverage-reporter=lcov before this action."


class ReportLoadError(RuntimeError):
    """Raised when a coverage report cannot be read or parsed."""

    def __init__(self, path: str | Path, message: str) -> None:
        super().__init__(message)
        self.path = str(path)


def resolve_report_path(report_path: str | Path) -> Path:
    """Resolve *report_path* against the current working directory."""
    return (Path.cwd() / report_path).resolve()


async def read_lcov_records(report_path: str | Path) -> list[CoverageRecord]:
    """Read and parse the LCOV file at *report_path*.

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not valid UTF-8.
    """
    resolved = resolve_report_path(report_path)
    content = await asyncio.to_thread(resolved.read_text, encoding="utf-8")
    records = parse_lcov(content)
    logger.debug("Parsed %d LCOV records from %s", len(records), resolved)
    return records


async def load_summary(report_path: str | Path) -> SummaryReport:
    """Load the summary report for the LCOV file at *report_path*.

    Raises:
        ReportLoadError: If the file cannot be read or parsed. The run
            should abort.
    """
    try:
        records = await read_lcov_records(report_path)
        return build_summary(records)
    except (OSError, ValueError) as exc:
        logger.error(
            'Failed to parse the LCOV file at path "%s". %s\n\nOriginal Error:\n%s',
            report_path,
            _LCOV_HINT,
            exc,
        )
        raise ReportLoadError(
            report_path, f'Failed to parse the LCOV file at path "{report_path}": {exc}'
        ) from exc


async def load_final(report_path: str | Path) -> FinalReport:
    """Load the per-line final report for the LCOV file at *report_path*.

    Returns an empty report when the file cannot be read or parsed.
    """
    try:
        records = await read_lcov_records(report_path)
        return build_final(records)
    except (OSError, ValueError) as exc:
        logger.warning(
            'Failed to parse LCOV file at path "%s". Line coverage will be empty. '
            "To include it, make sure to run bun test --coverage "
            "--coverage-reporter=lcov.\n\nOriginal Error:\n%s",
            report_path,
            exc,
        )
        return {}
