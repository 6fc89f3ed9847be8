"""Coverage thresholds from ``bunfig.toml`` and their evaluation."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from covreport.models.coverage import METRIC_NAMES, TOTAL_KEY

if TYPE_CHECKING:
    from covreport.models.coverage import SummaryReport

logger = logging.getLogger(__name__)

_DEFAULT_BUNFIG_NAMES = ["bunfig.toml"]

# Bun writes thresholds as fractions; anything at or below this is scaled to a percentage.
_FRACTION_LIMIT = 1.0

_THRESHOLD_KEY_ALIASES = {
    "line": "lines",
    "lines": "lines",
    "statement": "statements",
    "statements": "statements",
    "function": "functions",
    "functions": "functions",
    "branch": "branches",
    "branches": "branches",
}

# A bare number covers these metrics.
_SCALAR_THRESHOLD_METRICS = ("lines", "statements", "functions")


@dataclass
class Thresholds:
    """Minimum coverage percentages per metric; None means not configured."""

    lines: float | None = None
    statements: float | None = None
    functions: float | None = None
    branches: float | None = None

    def get(self, metric: str) -> float | None:
        """Return the threshold for *metric* (one of ``METRIC_NAMES``)."""
        value: float | None = getattr(self, metric)
        return value

    @property
    def is_empty(self) -> bool:
        return all(self.get(metric) is None for metric in METRIC_NAMES)


@dataclass
class ThresholdResult:
    """Outcome of comparing one metric against its threshold."""

    metric: str
    pct: float
    threshold: float

    @property
    def passed(self) -> bool:
        return self.pct >= self.threshold


def _readable_file(path: Path) -> bool:
    return path.is_file() and os.access(path, os.R_OK)


def find_bunfig_path(working_directory: str | Path, explicit: str = "") -> Path | None:
    """Locate a readable ``bunfig.toml``.

    Args:
        working_directory: Directory relative paths are resolved against.
        explicit: User-provided path; empty means search the default names.

    Returns:
        The resolved path, or None (with a warning) when nothing readable exists.
    """
    root = Path(working_directory)
    candidates = [explicit] if explicit else _DEFAULT_BUNFIG_NAMES
    for candidate in candidates:
        path = (root / candidate).resolve()
        if _readable_file(path):
            return path

    search_path = (
        str((root / explicit).resolve()) if explicit else f'any default location in "{root}"'
    )
    logger.warning(
        "Failed to read bunfig.toml file at %s. Make sure you provide the bunfig-path "
        "option if you're using a non-default location or name of your config file. "
        "Will not include thresholds in the final report.",
        search_path,
    )
    return None


def _to_percentage(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    number = float(value)
    if number <= _FRACTION_LIMIT:
        number *= 100
    return round(number, 2)


def thresholds_from_value(raw: Any) -> Thresholds:
    """Build thresholds from a ``coverageThreshold`` value (number or table)."""
    thresholds = Thresholds()
    if isinstance(raw, dict):
        for key, value in raw.items():
            metric = _THRESHOLD_KEY_ALIASES.get(str(key))
            if metric is None:
                logger.debug("Ignoring unknown coverage threshold key %r", key)
                continue
            setattr(thresholds, metric, _to_percentage(value))
        return thresholds

    pct = _to_percentage(raw)
    if pct is not None:
        for metric in _SCALAR_THRESHOLD_METRICS:
            setattr(thresholds, metric, pct)
    return thresholds


def parse_coverage_thresholds(bunfig_path: Path) -> Thresholds:
    """Read ``[test].coverageThreshold`` from *bunfig_path*."""
    try:
        with open(bunfig_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to parse thresholds from %s: %s", bunfig_path, e)
        return Thresholds()

    test_section = data.get("test", {})
    if not isinstance(test_section, dict) or "coverageThreshold" not in test_section:
        return Thresholds()
    return thresholds_from_value(test_section["coverageThreshold"])


def evaluate_thresholds(summary: SummaryReport, thresholds: Thresholds) -> list[ThresholdResult]:
    """Compare the summary total against every configured threshold."""
    total = summary.get(TOTAL_KEY)
    if total is None:
        return []
    results: list[ThresholdResult] = []
    for metric in METRIC_NAMES:
        threshold = thresholds.get(metric)
        if threshold is None:
            continue
        results.append(
            ThresholdResult(metric=metric, pct=total.metric(metric).pct, threshold=threshold)
        )
    return results
