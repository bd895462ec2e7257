"""Merge a freshly generated version section into the changelog file.

A run reads the changelog once, builds the complete new document in memory,
and writes it once. Every error is raised before that write. The returned
ReleaseState is the only handle needed to stage or roll back the result after
the user reviewed it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rich.panel import Panel
from rich.text import Text

from .config import Config, ProjectMetadata, load_project_metadata
from .errors import DuplicateVersionError, MalformedDocumentError, UpstreamQueryError
from .footer import HomepageLookup, generate_footer
from .formatter import generate_changes
from .repository import resolve_commit_base
from .tags import log_range
from .utils import console, format_bold, log_debug, log_info, stage_path

HEADING = "# Changes"
DEFAULT_NEWLINE = "\n"

_HEADER_PATTERN = re.compile(rf"\A{re.escape(HEADING)}(\r?\n)\1")


@dataclass(frozen=True)
class ReleaseState:
    """What a run wrote, and what was there before.

    `previous` is None when the changelog file did not exist.
    """

    changes_file: Path
    previous: Optional[str]
    version: str


@dataclass(frozen=True)
class Document:
    """A parsed changelog: the heading block, its newline style, and the rest."""

    newline: str
    remainder: str

    @property
    def heading(self) -> str:
        return f"{HEADING}{self.newline}{self.newline}"

    @property
    def content(self) -> str:
        return self.heading + self.remainder


def parse_document(content: Optional[str], path: Path) -> Document:
    """Validate the changelog heading and capture the newline style."""
    if not content:
        return Document(newline=DEFAULT_NEWLINE, remainder="")
    match = _HEADER_PATTERN.match(content)
    if match is None:
        raise MalformedDocumentError(path)
    return Document(newline=match.group(1), remainder=content[match.end() :])


def has_version(content: str, version: str) -> bool:
    """Return True if the document has a section header for `version`."""
    pattern = re.compile(rf"^## {re.escape(version)}\r?$", re.MULTILINE)
    return pattern.search(content) is not None


def merge_section(
    document: Document,
    version: str,
    changes: str,
    footer: Optional[str] = None,
) -> str:
    """Return the document with a new version section inserted below the heading."""
    nl = document.newline
    merged = f"{document.heading}## {version}{nl}{nl}{changes}"
    if footer:
        merged += f"{nl}{footer}{nl}"
    if document.remainder:
        merged += f"{nl}{document.remainder}"
    return merged


def _read_existing(path: Path) -> Optional[str]:
    try:
        with path.open("r", encoding="utf-8", newline="") as handle:
            return handle.read()
    except FileNotFoundError:
        return None


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(content)


def _show_pending(changes: str) -> None:
    console.print(
        Panel(
            Text(changes.rstrip()),
            title=Text("Changes for next release", style="changes.title"),
            title_align="left",
            border_style="changes.border",
            expand=False,
        )
    )


async def write_changes(
    config: Config,
    *,
    project_root: Path,
    metadata: Optional[ProjectMetadata] = None,
    fetch_homepage: HomepageLookup | None = None,
) -> ReleaseState:
    """Write the section for the current version and return the release state."""
    project_root = Path(project_root)
    if metadata is None:
        metadata = load_project_metadata(project_root)
    path = project_root / config.changes_file

    previous = _read_existing(path)
    document = parse_document(previous, config.changes_file)
    style = "CRLF" if document.newline == "\r\n" else "LF"
    log_debug(f"loaded {path} ({style} newlines).")

    commit_base = resolve_commit_base(config.commits, metadata, project_root=project_root)
    query_range = log_range(document.content, config, metadata, project_root=project_root)
    directory = config.directory or ("." if config.workspace else None)
    version = metadata.version
    duplicate = has_version(document.content, version)
    try:
        changes = generate_changes(
            query_range,
            project_root=project_root,
            newline=document.newline,
            owner=metadata.owner_name(),
            commit_base=commit_base,
            directory=directory,
        )
    except UpstreamQueryError as exc:
        # The release tag may not exist yet when the section is already there.
        if not duplicate:
            raise
        log_debug(f"no pending changes for {version}: {exc.message}")
        changes = ""

    if duplicate:
        if changes:
            _show_pending(changes)
        raise DuplicateVersionError(version, config.changes_file, changes)

    footer = None
    if config.footer:
        footer = await generate_footer(cwd=project_root, fetch_homepage=fetch_homepage)

    _write(path, merge_section(document, version, changes, footer))
    log_info(f"added {format_bold(version)} to {path}.")
    return ReleaseState(changes_file=path, previous=previous, version=version)


def abort_changes(state: ReleaseState) -> int:
    """Restore the changelog to its state before the run and return exit status 1."""
    if state.previous is None:
        state.changes_file.unlink(missing_ok=True)
    else:
        _write(state.changes_file, state.previous)
    log_info(f"restored {state.changes_file}.")
    return 1


def add_changes(state: ReleaseState, *, project_root: Path) -> int:
    """Stage the edited changelog, or roll back if the new section was removed."""
    current = _read_existing(state.changes_file)
    if current is None or not has_version(current, state.version):
        log_info(f"section {format_bold(state.version)} was removed, rolling back.")
        return abort_changes(state)
    stage_path(state.changes_file, cwd=project_root)
    return 0
