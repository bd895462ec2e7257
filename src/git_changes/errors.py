"""Error types raised while drafting a changelog section."""

from __future__ import annotations

from pathlib import Path

import click


class ChangesError(click.ClickException):
    """Base class for fatal git-changes errors.

    Every subclass is raised before the changelog file is written, so a failed
    run never leaves a partial document behind.
    """


class ConfigError(ChangesError):
    """The `.changes.yaml` file is invalid."""


class MetadataError(ChangesError):
    """Project metadata is missing or unusable."""


class MalformedDocumentError(ChangesError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Unexpected {path.name} file header")
        self.path = path


class DuplicateVersionError(ChangesError):
    """The version already has a section; `pending` holds unreleased entries."""

    def __init__(self, version: str, path: Path, pending: str = "") -> None:
        super().__init__(f"Version {version} is already in {path.name}")
        self.version = version
        self.path = path
        self.pending = pending


class UnresolvedPlaceholderError(ChangesError):
    def __init__(self, field: str, template: str) -> None:
        super().__init__(f"Unknown placeholder ${{{field}}} in template '{template}'")
        self.field = field
        self.template = template


class RepositoryParseError(ChangesError):
    def __init__(self, source: str) -> None:
        super().__init__(f'Failed to parse "repository" from {source}')


class MissingBaseError(ChangesError):
    def __init__(self, source: str) -> None:
        super().__init__(
            f'--commits option requires base URL, "repository" or "homepage" in {source}'
        )


class UpstreamQueryError(ChangesError):
    """Running git failed."""


class ProfileLookupError(ChangesError):
    """The remote profile lookup for the release footer failed."""


class ProfileLookupTimeout(ProfileLookupError):
    def __init__(self, timeout: float) -> None:
        super().__init__(f"profile lookup timed out after {timeout:g} seconds")
        self.timeout = timeout
