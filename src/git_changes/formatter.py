"""Turn `git log` output into the Markdown body of a version section.

Each commit record starts with RECORD_MARKER. When commit links are enabled,
LINK_MARKER separates the link from the summary. The raw log is rewritten by a
fixed sequence of passes; each pass expects bare `\\n` newlines, so conversion to
the document's newline style happens last, followed by owner attribution removal.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from .utils import log_debug, run_git

RECORD_MARKER = "»"
LINK_MARKER = "«"
QUOTE_PREFIX = "    > "

_BLANK_RUN_PATTERN = re.compile(r"\n{3,}")
_BODY_LINE_PATTERN = re.compile(rf"^([^{RECORD_MARKER}])", re.MULTILINE)
_BLANK_QUOTE_PATTERN = re.compile(rf"^{re.escape(QUOTE_PREFIX)}\n", re.MULTILINE)
_RECORD_START_PATTERN = re.compile(rf"^{RECORD_MARKER}", re.MULTILINE)


def log_format(commit_base: Optional[str] = None) -> str:
    """Return the `--format` string for the log query."""
    fmt = f"{RECORD_MARKER} "
    if commit_base:
        fmt += f"[`%h`]({commit_base}/%H){LINK_MARKER}  "
    return fmt + "%s (%an)%n%n%b"


def log_arguments(
    log_range: Optional[str],
    *,
    commit_base: Optional[str] = None,
    directory: Optional[str] = None,
) -> list[str]:
    """Return the git arguments for the bounded, merge-free log query."""
    args = ["log"]
    if log_range:
        args.append(log_range)
    args.extend([f"--format={log_format(commit_base)}", "--no-merges"])
    if directory:
        args.extend(["--", directory])
    return args


def collapse_blank_runs(text: str) -> str:
    return _BLANK_RUN_PATTERN.sub("\n", text)


def quote_bodies(text: str) -> str:
    return _BODY_LINE_PATTERN.sub(lambda match: QUOTE_PREFIX + match.group(1), text)


def trim_blank_quotes(text: str) -> str:
    return _BLANK_QUOTE_PATTERN.sub(QUOTE_PREFIX.rstrip() + "\n", text)


def bullet_records(text: str) -> str:
    return _RECORD_START_PATTERN.sub("-", text)


def split_links(text: str) -> str:
    return text.replace(LINK_MARKER, "\n")


def apply_newline(text: str, newline: str) -> str:
    if newline == "\n":
        return text
    return text.replace("\n", newline)


def strip_owner(text: str, owner: Optional[str]) -> str:
    """Remove the ` (owner)` attribution suffix from every line."""
    if not owner:
        return text
    pattern = re.compile(rf" \({re.escape(owner)}\)(?=\r?$)", re.MULTILINE)
    return pattern.sub("", text)


def format_log(raw: str, *, newline: str = "\n", owner: Optional[str] = None) -> str:
    """Rewrite raw log output into list entries with quoted commit bodies."""
    text = collapse_blank_runs(raw)
    text = quote_bodies(text)
    text = trim_blank_quotes(text)
    text = bullet_records(text)
    text = split_links(text)
    text = apply_newline(text, newline)
    return strip_owner(text, owner)


def generate_changes(
    log_range: Optional[str],
    *,
    project_root: Path,
    newline: str = "\n",
    owner: Optional[str] = None,
    commit_base: Optional[str] = None,
    directory: Optional[str] = None,
) -> str:
    """Query git for the commits in `log_range` and return formatted Markdown."""
    args = log_arguments(log_range, commit_base=commit_base, directory=directory)
    raw = run_git(args, cwd=project_root)
    log_debug(f"git log returned {raw.count(RECORD_MARKER)} commit(s).")
    return format_log(raw, newline=newline, owner=owner)
