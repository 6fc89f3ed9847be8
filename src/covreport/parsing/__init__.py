"""Coverage report parsers."""

from covreport.parsing.lcov import parse_lcov

__all__ = ["parse_lcov"]
