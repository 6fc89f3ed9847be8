"""Report options from action inputs, ``.covreport.yml`` and defaults.

Each setting is taken from the first source that provides it:

1. explicit override (CLI option)
2. action input (``INPUT_<NAME>`` environment variable)
3. ``.covreport.yml`` in the working directory (snake_case keys)
4. built-in default
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from covreport.reports.thresholds import (
    Thresholds,
    find_bunfig_path,
    parse_coverage_thresholds,
    thresholds_from_value,
)
from covreport.utils.actions import get_input
from covreport.utils.github import (
    GitHubAPIError,
    find_pull_request_for_commit,
    get_event_context,
)

if TYPE_CHECKING:
    from covreport.utils.github import EventContext, GitHubAPI

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".covreport.yml"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

_DEFAULT_LCOV_PATH = "coverage/lcov.info"
_DEFAULT_WORKING_DIRECTORY = "./"
_PR_NUMBER_AUTO = "auto"
_COMMENT_ON_NONE = "none"


class ConfigError(ValueError):
    """Raised when an option has an invalid value."""


class FileCoverageMode(Enum):
    """Which files get a row in the per-file table."""

    ALL = "all"
    CHANGES = "changes"
    NONE = "none"


class CommentOn(Enum):
    """Where the report is posted as a comment."""

    PR = "pr"
    COMMIT = "commit"


@dataclass
class ReportOptions:
    """Resolved options for one report run."""

    lcov_path: Path
    """Absolute path of the LCOV report."""

    lcov_compare_path: Path | None = None
    """Absolute path of the previous run's LCOV report, for trend indicators."""

    file_coverage_mode: FileCoverageMode = FileCoverageMode.CHANGES
    """Which files to list in the per-file table."""

    file_coverage_root_path: str = ""
    """Prefix stripped from report paths to match repository-relative paths."""

    name: str = ""
    """Report name; distinguishes several reports on one PR."""

    thresholds: Thresholds = field(default_factory=Thresholds)
    """Minimum coverage per metric."""

    working_directory: Path = field(default_factory=Path.cwd)
    """Directory relative paths were resolved against."""

    pr_number: int | None = None
    """Pull request to comment on."""

    commit_sha: str = ""
    """Commit the report describes."""

    comment_on: list[CommentOn] = field(default_factory=lambda: [CommentOn.PR])
    """Comment targets; empty means do not comment."""


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        else:
            result[key] = value
    return result


def load_file_config(working_directory: str | Path) -> dict[str, Any]:
    """Load ``.covreport.yml`` from *working_directory*; missing file gives ``{}``."""
    config_path = Path(working_directory) / CONFIG_FILE_NAME
    if not config_path.is_file():
        return {}
    try:
        parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    if not isinstance(parsed, dict):
        logger.warning("Ignoring %s: expected a mapping at the top level", config_path)
        return {}
    return _resolve_dict(parsed)


def parse_file_coverage_mode(raw: str) -> FileCoverageMode:
    """Parse ``all``/``changes``/``none``; empty means ``changes``."""
    if not raw:
        return FileCoverageMode.CHANGES
    try:
        return FileCoverageMode(raw.strip().lower())
    except ValueError as e:
        allowed = ", ".join(mode.value for mode in FileCoverageMode)
        raise ConfigError(f"Invalid file-coverage-mode {raw!r}; expected one of: {allowed}") from e


def parse_comment_on(raw: str) -> list[CommentOn]:
    """Parse a comma-separated list of ``pr``/``commit``; ``none`` disables comments."""
    targets: list[CommentOn] = []
    for part in raw.split(","):
        value = part.strip().lower()
        if not value or value == _COMMENT_ON_NONE:
            continue
        try:
            target = CommentOn(value)
        except ValueError as e:
            raise ConfigError(
                f"Invalid comment-on value {value!r}; expected pr, commit or none"
            ) from e
        if target not in targets:
            targets.append(target)
    return targets


def _setting(
    name: str,
    overrides: dict[str, str | None],
    file_config: dict[str, Any],
    default: str = "",
) -> str:
    key = name.replace("-", "_")
    override = overrides.get(key)
    if override is not None:
        return override
    from_input = get_input(name)
    if from_input:
        return from_input
    from_file = file_config.get(key)
    if from_file is not None and not isinstance(from_file, dict | list):
        return str(from_file)
    return default


def _resolve_pr_number(raw: str, context: EventContext, api: GitHubAPI | None) -> int | None:
    if not raw:
        return context.pr_number
    if raw.lower() == _PR_NUMBER_AUTO:
        if context.pr_number is not None:
            return context.pr_number
        if api is None or context.repo is None or not context.commit_sha:
            logger.warning("Cannot look up the pull request automatically outside GitHub Actions")
            return None
        try:
            return find_pull_request_for_commit(api, context.repo, context.commit_sha)
        except GitHubAPIError as e:
            logger.warning("Failed to look up the pull request for %s: %s", context.commit_sha, e)
            return None
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid pr-number {raw!r}; expected a number or 'auto'") from e


def _load_thresholds(
    working_directory: Path, bunfig_input: str, file_config: dict[str, Any]
) -> Thresholds:
    if "thresholds" in file_config:
        return thresholds_from_value(file_config["thresholds"])
    bunfig_path = find_bunfig_path(working_directory, bunfig_input)
    if bunfig_path is None:
        return Thresholds()
    return parse_coverage_thresholds(bunfig_path)


def read_options(
    overrides: dict[str, str | None] | None = None,
    *,
    api: GitHubAPI | None = None,
) -> ReportOptions:
    """Resolve every report option.

    Args:
        overrides: Explicit values keyed by snake_case option name; None
            entries fall through to the next source.
        api: GitHub client used to look up the PR for ``pr-number: auto``.

    Raises:
        ConfigError: If an option has an invalid value.
    """
    overrides = overrides or {}
    working_directory_raw = overrides.get("working_directory") or get_input("working-directory")
    working_directory = Path(working_directory_raw or _DEFAULT_WORKING_DIRECTORY).resolve()
    file_config = load_file_config(working_directory)

    def setting(name: str, default: str = "") -> str:
        return _setting(name, overrides, file_config, default)

    lcov_path = working_directory / setting("lcov-path", _DEFAULT_LCOV_PATH)
    compare_raw = setting("lcov-compare-path")
    lcov_compare_path = (working_directory / compare_raw).resolve() if compare_raw else None

    comment_on = parse_comment_on(setting("comment-on", CommentOn.PR.value))
    context = get_event_context()

    pr_number: int | None = None
    if CommentOn.PR in comment_on:
        pr_number = _resolve_pr_number(setting("pr-number"), context, api)

    return ReportOptions(
        lcov_path=lcov_path.resolve(),
        lcov_compare_path=lcov_compare_path,
        file_coverage_mode=parse_file_coverage_mode(setting("file-coverage-mode")),
        file_coverage_root_path=setting(
            "file-coverage-root-path", os.environ.get("GITHUB_WORKSPACE", str(Path.cwd()))
        ),
        name=setting("name"),
        thresholds=_load_thresholds(working_directory, setting("bunfig-path"), file_config),
        working_directory=working_directory,
        pr_number=pr_number,
        commit_sha=context.commit_sha,
        comment_on=comment_on,
    )
