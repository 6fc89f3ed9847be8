"""Utility modules for covreport."""
