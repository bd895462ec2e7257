"""Tag templates and commit range resolution."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Mapping, Optional

from .config import Config, ProjectMetadata
from .errors import UnresolvedPlaceholderError

PLACEHOLDER_PATTERN = re.compile(r"\$\{([^}]+)\}")
VERSION_HEADER_PATTERN = re.compile(r"^## ([0-9a-z.\-]+)\r?$", re.MULTILINE)


def find_previous_version(content: str) -> Optional[str]:
    """Return the newest version recorded in a changelog document."""
    match = VERSION_HEADER_PATTERN.search(content)
    return match.group(1) if match else None


def _lookup(fields: Mapping[str, object], key: str, template: str) -> str:
    value = fields.get(key)
    if value is None or isinstance(value, (Mapping, list)):
        raise UnresolvedPlaceholderError(key, template)
    return str(value)


def expand_template(
    template: str,
    metadata: ProjectMetadata,
    version: Optional[str] = None,
) -> str:
    """Substitute `${name}` placeholders from project metadata.

    `${version}` expands to `version` when given, else to the metadata version.
    Unknown fields raise UnresolvedPlaceholderError.
    """

    def substitute(match: re.Match[str]) -> str:
        key = match.group(1).strip()
        if key == "version":
            return version if version is not None else metadata.version
        return _lookup(metadata.fields, key, template)

    return PLACEHOLDER_PATTERN.sub(substitute, template)


def workspace_tag_format(directory: Path) -> str:
    """Return the tag template for a package inside a monorepo workspace."""
    return f"{directory.resolve().name}@${{version}}"


def effective_tag_format(config: Config, project_root: Path) -> str:
    if config.workspace:
        return workspace_tag_format(project_root)
    return config.tag_format


def log_range(
    content: str,
    config: Config,
    metadata: ProjectMetadata,
    *,
    project_root: Path,
) -> Optional[str]:
    """Return the `<tag>..HEAD` range since the last release, or None for all history."""
    previous = find_previous_version(content)
    if previous is None:
        return None
    tag = expand_template(effective_tag_format(config, project_root), metadata, previous)
    return f"{tag}..HEAD"
