"""Configuration and project metadata helpers for git-changes."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional, Union

import yaml

from .errors import ConfigError, MetadataError

CONFIG_FILENAME = ".changes.yaml"
DEFAULT_CHANGES_FILE = Path("CHANGES.md")
DEFAULT_TAG_FORMAT = "v${version}"
METADATA_FILENAMES: tuple[str, ...] = ("package.json", "package.yaml")

CommitsOption = Union[bool, str, None]


@dataclass(frozen=True)
class Config:
    """Options for one changelog run.

    `commits` is None to omit commit links, True to derive the link base from
    project metadata, or an explicit base URL template such as
    `${homepage}/commit`. `directory` limits the log query to a path.
    """

    changes_file: Path = DEFAULT_CHANGES_FILE
    tag_format: str = DEFAULT_TAG_FORMAT
    commits: CommitsOption = None
    footer: bool = False
    workspace: bool = False
    directory: Optional[str] = None

    def merged(self, **overrides: Any) -> "Config":
        """Return a copy with every non-None override applied."""
        values = {key: value for key, value in overrides.items() if value is not None}
        if "changes_file" in values:
            values["changes_file"] = Path(values["changes_file"])
        return replace(self, **values)


@dataclass(frozen=True)
class ProjectMetadata:
    """The fields of a package manifest that drive a changelog run."""

    version: str
    fields: Mapping[str, Any] = field(default_factory=dict)
    source: str = "package.json"

    @property
    def author(self) -> Any:
        return self.fields.get("author")

    @property
    def homepage(self) -> Optional[str]:
        value = self.fields.get("homepage")
        return str(value).rstrip("/") if value else None

    @property
    def repository(self) -> Any:
        return self.fields.get("repository")

    def owner_name(self) -> Optional[str]:
        """Return the display name of the project author, if any."""
        return parse_author(self.author)


def parse_author(author: object) -> Optional[str]:
    """Return the name part of an npm-style author field.

    Accepts a mapping with a `name` key or a string such as
    `Name <mail@example.com> (https://example.com)`.
    """
    if not author:
        return None
    if isinstance(author, Mapping):
        name = author.get("name")
        if not name:
            return None
        return str(name).strip() or None
    text = str(author)
    cut = [index for index in (text.find("<"), text.find("(")) if index != -1]
    if cut:
        text = text[: min(cut)]
    return text.strip() or None


def default_config_path(project_root: Path) -> Path:
    """Return the default config path for a project root."""
    return project_root / CONFIG_FILENAME


def load_config(path: Path) -> Config:
    """Load the configuration from disk."""
    with path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, MutableMapping):
        raise ConfigError(f"Config root in {path} must be a mapping")

    config = Config()

    file_raw = raw.get("file", raw.get("changes_file"))
    if file_raw is not None:
        if not isinstance(file_raw, str) or not file_raw.strip():
            raise ConfigError("Config option 'file' must be a non-empty string.")
        config = replace(config, changes_file=Path(file_raw.strip()))

    tag_format_raw = raw.get("tag_format")
    if tag_format_raw is not None:
        if not isinstance(tag_format_raw, str) or "${version}" not in tag_format_raw:
            raise ConfigError("Config option 'tag_format' must be a string containing ${version}.")
        config = replace(config, tag_format=tag_format_raw)

    commits_raw = raw.get("commits")
    if commits_raw is not None:
        if isinstance(commits_raw, bool):
            commits: CommitsOption = True if commits_raw else None
        elif isinstance(commits_raw, str) and commits_raw.strip():
            commits = commits_raw.strip()
        else:
            raise ConfigError("Config option 'commits' must be a boolean or a URL template.")
        config = replace(config, commits=commits)

    for key in ("footer", "workspace"):
        value = raw.get(key)
        if value is None:
            continue
        if not isinstance(value, bool):
            raise ConfigError(f"Config option '{key}' must be a boolean.")
        config = replace(config, **{key: value})

    directory_raw = raw.get("dir", raw.get("directory"))
    if directory_raw is not None:
        directory = str(directory_raw).strip()
        config = replace(config, directory=directory or None)

    return config


def load_project_config(project_root: Path) -> Config:
    """Load `.changes.yaml` from the project root, or return the defaults."""
    config_path = default_config_path(project_root)
    if config_path.exists():
        return load_config(config_path)
    return Config()


def _read_metadata_file(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise MetadataError(f"Cannot parse JSON in {path}: {exc.msg}") from exc
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise MetadataError(f"Cannot parse YAML in {path}: {exc}") from exc


def load_metadata(path: Path) -> ProjectMetadata:
    """Load project metadata from a package.json or package.yaml file."""
    raw = _read_metadata_file(path)
    if not isinstance(raw, MutableMapping):
        raise MetadataError(f"Expected a mapping in {path}.")
    version = raw.get("version")
    if not isinstance(version, str) or not version.strip():
        raise MetadataError(f"Package metadata at {path} missing required 'version'")
    return ProjectMetadata(version=version.strip(), fields=dict(raw), source=path.name)


def find_metadata_path(project_root: Path) -> Path:
    """Return the first metadata file present in the project root."""
    for filename in METADATA_FILENAMES:
        candidate = project_root / filename
        if candidate.is_file():
            return candidate
    expected = " or ".join(METADATA_FILENAMES)
    raise MetadataError(f"No {expected} found in {project_root}.")


def load_project_metadata(project_root: Path) -> ProjectMetadata:
    """Locate and load the project metadata for a project root."""
    return load_metadata(find_metadata_path(project_root))
