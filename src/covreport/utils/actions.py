"""GitHub Actions runtime helpers: inputs, workflow-command logging, step summary."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import TextIO

logger = logging.getLogger(__name__)

_STEP_SUMMARY_ENV = "GITHUB_STEP_SUMMARY"

_LEVEL_COMMANDS = {
    logging.DEBUG: "debug",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


def is_github_actions() -> bool:
    """Return True when running inside a GitHub Actions job."""
    return os.getenv("GITHUB_ACTIONS") == "true"


def get_input(name: str) -> str:
    """Read an action input the way the Actions runtime exposes it.

    ``lcov-path`` is read from ``INPUT_LCOV-PATH``. Missing inputs are ``""``.
    """
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    return os.environ.get(key, "").strip()


def escape_command_data(message: str) -> str:
    """Escape a workflow-command payload so it stays on one line."""
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class ActionsLogHandler(logging.Handler):
    """Emit log records as GitHub workflow commands (``::warning::`` etc.).

    INFO records are printed as plain text.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__()
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved per call so redirected stdout is honoured.
        return self._stream if self._stream is not None else sys.stdout

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            command = _LEVEL_COMMANDS.get(record.levelno)
            if command is None:
                line = message
            else:
                line = f"::{command}::{escape_command_data(message)}"
            self.stream.write(line + "\n")
            self.flush()
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        self.stream.flush()


def append_step_summary(markdown: str) -> Path | None:
    """Append *markdown* to the job step summary when one is configured.

    Returns:
        The step summary path written to, or None outside GitHub Actions.
    """
    summary_path = os.environ.get(_STEP_SUMMARY_ENV)
    if not summary_path:
        logger.debug("%s is not set; skipping step summary", _STEP_SUMMARY_ENV)
        return None
    path = Path(summary_path)
    with path.open("a", encoding="utf-8") as f:
        f.write(markdown)
        if not markdown.endswith("\n"):
            f.write("\n")
    logger.info("Step summary written to %s", path)
    return path
