"""Tests for the covreport CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from covreport.cli import cli

_LCOV = """SF:src/a.ts
DA:1,1
DA:2,0
FNF:2
FNH:1
BRF:0
BRH:0
end_of_record
"""

_LCOV_BASE = """SF:src/a.ts
DA:1,0
DA:2,0
FNF:2
FNH:0
end_of_record
"""


def _write_file(root: Path, rel_path: str, content: str) -> Path:
    f = root / rel_path
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(content, encoding="utf-8")
    return f


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    _write_file(tmp_path, "coverage/lcov.info", _LCOV)
    return tmp_path


def _report_args(project: Path, *extra: str) -> list[str]:
    return [
        "report",
        "--working-directory",
        str(project),
        "--comment-on",
        "none",
        "--file-coverage-mode",
        "all",
        *extra,
    ]


def test_version(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_help(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    for command in ("summary", "final", "report"):
        assert command in result.output


# ── summary / final ──────────────────────────────────────────────


def test_summary_json(runner: CliRunner, project: Path) -> None:
    result = runner.invoke(cli, ["summary", str(project / "coverage/lcov.info"), "--json"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert list(data) == ["total", "src/a.ts"]
    assert data["total"]["lines"] == {"total": 2, "covered": 1, "skipped": 0, "pct": 50}
    assert data["total"]["branches"]["pct"] == 0


def test_summary_table(runner: CliRunner, project: Path) -> None:
    result = runner.invoke(cli, ["summary", str(project / "coverage/lcov.info")])

    assert result.exit_code == 0
    assert "Coverage Summary" in result.stdout
    assert "Total" in result.stdout


def test_summary_missing_file_exits_1(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["summary", str(tmp_path / "missing.info"), "--json"])

    assert result.exit_code == 1
    assert "Failed to parse the LCOV file" in result.stdout


def test_final_json(runner: CliRunner, project: Path) -> None:
    result = runner.invoke(cli, ["final", str(project / "coverage/lcov.info")])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["src/a.ts"]["s"] == {"0": 1, "1": 0}
    assert data["src/a.ts"]["statementMap"]["1"]["end"] == {"line": 2, "column": 100}


def test_final_missing_file_prints_empty(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["final", str(tmp_path / "missing.info")])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {}


# ── report ───────────────────────────────────────────────────────


def test_report_writes_output(runner: CliRunner, project: Path) -> None:
    output = project / "out" / "report.md"

    result = runner.invoke(cli, _report_args(project, "--output", str(output)))

    assert result.exit_code == 0, result.output
    markdown = output.read_text(encoding="utf-8")
    assert markdown.startswith("<!-- bun-coverage-report-marker -->\n## Coverage Report\n")
    assert "| 🔵 | Lines | 50% | 1 / 2 |" in markdown
    assert "| src/a.ts | 50% | 50% | 50% | 0% | 2 |" in markdown
    assert "## Coverage Report" not in result.stdout


def test_report_echoes_markdown_without_output(runner: CliRunner, project: Path) -> None:
    result = runner.invoke(cli, _report_args(project, "--name", "web"))

    assert result.exit_code == 0
    assert "<!-- bun-coverage-report-marker-web -->" in result.stdout
    assert "## Coverage Report for web" in result.stdout


def test_report_writes_step_summary(
    runner: CliRunner, project: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    step_summary = project / "step_summary.md"
    monkeypatch.setenv("GITHUB_STEP_SUMMARY", str(step_summary))

    result = runner.invoke(cli, _report_args(project))

    assert result.exit_code == 0
    assert "## Coverage Report" in step_summary.read_text(encoding="utf-8")
    assert "## Coverage Report" not in result.stdout


def test_report_with_trend(runner: CliRunner, project: Path) -> None:
    _write_file(project, "base/lcov.info", _LCOV_BASE)

    result = runner.invoke(cli, _report_args(project, "--lcov-compare-path", "base/lcov.info"))

    assert result.exit_code == 0
    assert "| 🔵 | Lines | 50%<br>⬆️ +50% | 1 / 2 |" in result.stdout


def test_report_missing_lcov_exits_1(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, _report_args(tmp_path))

    assert result.exit_code == 1
    assert "Failed to parse the LCOV file" in result.stdout


def test_report_invalid_pr_number_exits_1(runner: CliRunner, project: Path) -> None:
    result = runner.invoke(
        cli,
        [
            "report",
            "--working-directory",
            str(project),
            "--comment-on",
            "pr",
            "--pr-number",
            "abc",
        ],
    )

    assert result.exit_code == 1
    assert "pr-number" in result.stdout


def test_report_threshold_failure_is_reported(runner: CliRunner, project: Path) -> None:
    _write_file(project, "bunfig.toml", "[test]\ncoverageThreshold = 0.9\n")

    result = runner.invoke(cli, _report_args(project))

    assert result.exit_code == 0
    assert "| 🔴 | Lines | 50% (🎯 90%) | 1 / 2 |" in result.stdout
    assert "lines: 50% (threshold 90%)" in result.stdout


def test_report_enforced_threshold_exits_1(runner: CliRunner, project: Path) -> None:
    _write_file(project, "bunfig.toml", "[test]\ncoverageThreshold = 0.9\n")

    result = runner.invoke(cli, _report_args(project, "--enforce-thresholds"))

    assert result.exit_code == 1


def test_report_enforced_threshold_passes(runner: CliRunner, project: Path) -> None:
    _write_file(project, "bunfig.toml", "[test]\ncoverageThreshold = 0.5\n")

    result = runner.invoke(cli, _report_args(project, "--enforce-thresholds"))

    assert result.exit_code == 0


def test_report_logs_workflow_commands_in_actions(
    runner: CliRunner, project: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("GITHUB_ACTIONS", "true")

    result = runner.invoke(cli, _report_args(project, "--output", str(project / "r.md")))

    assert result.exit_code == 0
    assert "::warning::Failed to read bunfig.toml" in result.stdout
