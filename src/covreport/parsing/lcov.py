"""LCOV ``.info`` text parser.

Reads the subset of LCOV needed for coverage summaries::

    SF:<path>
    DA:<line>,<hits>[,<checksum>]
    FNF:<functions found>
    FNH:<functions hit>
    BRF:<branches found>
    BRH:<branches hit>
    end_of_record

Every other directive is ignored so that reports from newer tools still parse.
"""

from __future__ import annotations

import logging
import re

from covreport.models.coverage import CoverageRecord, HitCounter, LineHit

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────

_LCOV_SF = "SF:"
_LCOV_DA = "DA:"
_LCOV_FNF = "FNF:"
_LCOV_FNH = "FNH:"
_LCOV_BRF = "BRF:"
_LCOV_BRH = "BRH:"
_LCOV_END = "end_of_record"
_LCOV_DA_PARTS = 2

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def _parse_int(value: str) -> int | None:
    """Read the leading integer of *value*, ignoring any trailing text."""
    match = _LEADING_INT_RE.match(value)
    if match is None:
        return None
    return int(match.group(1))


def _parse_line_hit(value: str) -> LineHit | None:
    parts = value.split(",")
    if len(parts) < _LCOV_DA_PARTS:
        return None
    line = _parse_int(parts[0])
    hit = _parse_int(parts[1])
    if line is None or hit is None:
        return None
    return LineHit(line=line, hit=hit)


def _set_counter(counter: HitCounter, attr: str, value: str, lineno: int, raw: str) -> None:
    number = _parse_int(value)
    if number is None:
        logger.warning("Ignoring malformed LCOV line %d: %r", lineno, raw)
        return
    setattr(counter, attr, number)


def parse_lcov(content: str) -> list[CoverageRecord]:
    """Parse LCOV text into coverage records, in input order.

    A record is emitted only when its ``SF:`` block reaches ``end_of_record``.
    A block interrupted by another ``SF:`` or by the end of input is dropped.
    Directives outside an open block are ignored.

    Args:
        content: Full text of the LCOV report.

    Returns:
        One record per closed block. Paths repeated across blocks produce
        separate records.
    """
    records: list[CoverageRecord] = []
    current: CoverageRecord | None = None

    for lineno, raw_line in enumerate(content.split("\n"), start=1):
        line = raw_line.strip()
        if not line:
            continue

        if line.startswith(_LCOV_SF):
            if current is not None:
                logger.debug("Dropping unterminated record for %s", current.source_file)
            current = CoverageRecord(source_file=line[len(_LCOV_SF) :])
        elif line == _LCOV_END:
            if current is not None and current.source_file:
                records.append(current)
            current = None
        elif current is None:
            continue
        elif line.startswith(_LCOV_DA):
            line_hit = _parse_line_hit(line[len(_LCOV_DA) :])
            if line_hit is None:
                logger.warning("Ignoring malformed LCOV line %d: %r", lineno, line)
            else:
                current.lines.append(line_hit)
        elif line.startswith(_LCOV_FNF):
            _set_counter(current.functions, "found", line[len(_LCOV_FNF) :], lineno, line)
        elif line.startswith(_LCOV_FNH):
            _set_counter(current.functions, "hit", line[len(_LCOV_FNH) :], lineno, line)
        elif line.startswith(_LCOV_BRF):
            _set_counter(current.branches, "found", line[len(_LCOV_BRF) :], lineno, line)
        elif line.startswith(_LCOV_BRH):
            _set_counter(current.branches, "hit", line[len(_LCOV_BRH) :], lineno, line)

    if current is not None:
        logger.debug("Dropping unterminated record for %s at end of input", current.source_file)

    return records
