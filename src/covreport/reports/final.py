"""Build the per-line statement map from coverage records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from covreport.models.coverage import FileCoverageDetail, StatementSpan

if TYPE_CHECKING:
    from covreport.models.coverage import CoverageRecord, FinalReport


def build_file_detail(record: CoverageRecord) -> FileCoverageDetail:
    """Turn each line hit into a statement keyed by its position in the record."""
    detail = FileCoverageDetail(path=record.source_file)
    for index, line_hit in enumerate(record.lines):
        stmt_id = str(index)
        detail.statement_map[stmt_id] = StatementSpan(line=line_hit.line)
        detail.s[stmt_id] = line_hit.hit
    return detail


def build_final(records: list[CoverageRecord]) -> FinalReport:
    """Map each source file to its statement detail; later records win."""
    return {record.source_file: build_file_detail(record) for record in records}
