"""Shared utilities: logging, console output, and git invocation."""

from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path
from typing import NoReturn, Optional, Sequence

import click
from rich.console import Console
from rich.style import Style
from rich.theme import Theme

from .errors import UpstreamQueryError

INFO_PREFIX = "\033[94;1mi\033[0m "
SUCCESS_PREFIX = "\033[92;1m✔\033[0m "
ERROR_PREFIX = "\033[31m✘\033[0m "
WARNING_PREFIX = "○ "
DEBUG_PREFIX = "\033[95m◆\033[0m "
BOLD = "\033[1m"
RESET = "\033[0m"

_LOGGER_NAME = "git_changes"
_LOGGER = logging.getLogger(_LOGGER_NAME)

console = Console(
    stderr=True,
    theme=Theme(
        {
            "changes.title": Style(bold=True),
            "changes.border": Style(color="cyan"),
        }
    ),
)


def configure_logging(debug: bool = False) -> logging.Logger:
    """Configure the shared logger used across the CLI."""
    level = logging.DEBUG if debug else logging.INFO
    _LOGGER.setLevel(level)
    while _LOGGER.handlers:
        handler = _LOGGER.handlers.pop()
        handler.close()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(level)
    _LOGGER.addHandler(handler)
    _LOGGER.propagate = False
    return _LOGGER


def _log(prefix: str, message: str, level: int) -> None:
    logger = logging.getLogger(_LOGGER_NAME)
    lines = message.splitlines() or [""]
    for line in lines:
        if line:
            logger.log(level, f"{prefix}{line}")
        else:
            logger.log(level, prefix.rstrip())


def log_info(message: str) -> None:
    """Log an informational message with the standardized prefix."""
    _log(INFO_PREFIX, message, logging.INFO)


def log_success(message: str) -> None:
    """Log a success message with the standardized prefix."""
    _log(SUCCESS_PREFIX, message, logging.INFO)


def log_error(message: str) -> None:
    """Log an error message with the standardized prefix."""
    _log(ERROR_PREFIX, message, logging.ERROR)


def log_warning(message: str) -> None:
    """Log a warning message with the standardized prefix."""
    _log(WARNING_PREFIX, message, logging.WARNING)


def log_debug(message: str) -> None:
    """Log a debug message with the standardized prefix."""
    _log(DEBUG_PREFIX, message, logging.DEBUG)


def abort_on_user_interrupt(exc: BaseException | None = None) -> NoReturn:
    """Log a standardized cancellation message and exit the command."""

    log_error("operation cancelled by user (Ctrl+C).")
    raise click.exceptions.Exit(130) from exc


def format_bold(text: str) -> str:
    """Return text wrapped in ANSI bold styling."""
    return f"{BOLD}{text}{RESET}"


def run_git(args: Sequence[str], *, cwd: Path) -> str:
    """Run a git command and return its stdout.

    Bytes that are not valid UTF-8 come back as U+FFFD. Raises
    UpstreamQueryError when git is missing or exits with a failure.
    """
    command = ["git", *args]
    log_debug(f"running {' '.join(command)}")
    try:
        result = subprocess.run(
            command,
            cwd=str(cwd),
            check=True,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError as exc:
        raise UpstreamQueryError("git is required but was not found in PATH.") from exc
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or "").strip()
        message = f"git {args[0]} failed (exit status {exc.returncode})"
        if detail:
            message = f"{message}: {detail}"
        raise UpstreamQueryError(message) from exc
    return result.stdout


def read_git_config(name: str, *, cwd: Path) -> Optional[str]:
    """Return a git config value, or None if it is unset or git is unavailable."""
    try:
        value = run_git(["config", "--get", name], cwd=cwd)
    except UpstreamQueryError as exc:
        log_debug(f"git config {name} unavailable: {exc.message}")
        return None
    return value.strip() or None


def guess_git_remote(project_root: Path, remote: str = "origin") -> Optional[str]:
    """Return the URL of a git remote, if one is configured."""
    try:
        url = run_git(["remote", "get-url", remote], cwd=project_root)
    except UpstreamQueryError:
        return None
    return url.strip() or None


def stage_path(path: Path, *, cwd: Path) -> None:
    """Add a file to the git index."""
    run_git(["add", str(path)], cwd=cwd)
