"""Command-line entry point: draft, edit, then stage or roll back."""

from __future__ import annotations

import asyncio
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .changes import ReleaseState, abort_changes, add_changes, write_changes
from .config import Config, load_project_config
from .utils import (
    abort_on_user_interrupt,
    configure_logging,
    format_bold,
    log_debug,
    log_success,
    log_warning,
)


def build_config(
    project_root: Path,
    *,
    changes_file: Optional[Path] = None,
    tag_format: Optional[str] = None,
    commits: Optional[bool] = None,
    commit_url: Optional[str] = None,
    footer: Optional[bool] = None,
    workspace: Optional[bool] = None,
    directory: Optional[str] = None,
) -> Config:
    """Combine `.changes.yaml` with command-line overrides.

    `--commit-url` wins over everything. `--commits` keeps a template from the
    config file, and `--no-commits` turns commit links off.
    """
    config = load_project_config(project_root)
    if commit_url:
        config = replace(config, commits=commit_url)
    elif commits is False:
        config = replace(config, commits=None)
    elif commits and not isinstance(config.commits, str):
        config = replace(config, commits=True)
    return config.merged(
        changes_file=changes_file,
        tag_format=tag_format,
        footer=footer,
        workspace=workspace,
        directory=directory,
    )


def _review(state: ReleaseState, project_root: Path, *, edit: bool) -> int:
    if edit:
        try:
            click.edit(filename=str(state.changes_file))
        except click.ClickException as exc:
            log_warning(f"editor failed: {exc.message}")
            return abort_changes(state)
        except KeyboardInterrupt as exc:
            abort_changes(state)
            abort_on_user_interrupt(exc)
    status = add_changes(state, project_root=project_root)
    if status == 0:
        log_success(f"staged {format_bold(state.changes_file.name)} for {state.version}.")
    return status


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--root",
    type=click.Path(path_type=Path, exists=True, file_okay=False),
    default=Path("."),
    show_default=True,
    help="Project root containing the package metadata.",
)
@click.option(
    "--file",
    "-f",
    "changes_file",
    type=click.Path(path_type=Path, dir_okay=False),
    help="Changelog file, relative to the root.  [default: CHANGES.md]",
)
@click.option(
    "--tag-format",
    "-t",
    help="Tag template for the previous release.  [default: v${version}]",
)
@click.option(
    "--commits/--no-commits",
    default=None,
    help="Link each entry to its commit, using homepage or repository metadata.",
)
@click.option(
    "--commit-url",
    metavar="URL",
    help="Base URL template for commit links, e.g. '${homepage}/commit'.",
)
@click.option(
    "--footer/--no-footer",
    default=None,
    help="Append a release footer with author and date.",
)
@click.option(
    "--workspace/--no-workspace",
    default=None,
    help="Use '<directory>@<version>' tags and only list commits below the root.",
)
@click.option(
    "--dir",
    "directory",
    help="Only list commits touching this path.",
)
@click.option(
    "--edit/--no-edit",
    default=True,
    show_default=True,
    help="Open the changelog in $EDITOR before staging it.",
)
@click.option(
    "--debug",
    "-d",
    is_flag=True,
    help="Enable debug logging.",
)
@click.version_option(__version__, "--version", "-V")
def cli(
    root: Path,
    changes_file: Optional[Path],
    tag_format: Optional[str],
    commits: Optional[bool],
    commit_url: Optional[str],
    footer: Optional[bool],
    workspace: Optional[bool],
    directory: Optional[str],
    edit: bool,
    debug: bool,
) -> None:
    """Add the commits since the last release to the changelog.

    The new section is opened in your editor. Saving stages the file with git;
    a failing editor, or deleting the new version heading, restores the
    previous content and exits with status 1.
    """
    configure_logging(debug)
    project_root = root.resolve()
    log_debug(f"resolved project root: {project_root}")
    config = build_config(
        project_root,
        changes_file=changes_file,
        tag_format=tag_format,
        commits=commits,
        commit_url=commit_url,
        footer=footer,
        workspace=workspace,
        directory=directory,
    )
    state = asyncio.run(write_changes(config, project_root=project_root))
    status = _review(state, project_root, edit=edit)
    if status != 0:
        raise click.exceptions.Exit(status)


def main(argv: list[str] | None = None) -> int:
    """Entry point for console_scripts."""
    args = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        result = cli.main(args=args, prog_name="git-changes", standalone_mode=False)
    except click.ClickException as exc:
        exc.show(file=sys.stderr)
        return exc.exit_code
    except (KeyboardInterrupt, click.Abort) as exc:
        try:
            abort_on_user_interrupt(exc)
        except click.exceptions.Exit as exit_exc:
            return exit_exc.exit_code
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 0
    return result if isinstance(result, int) else 0
