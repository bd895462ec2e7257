"""Core package exports for git-changes."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as metadata_version
from typing import TYPE_CHECKING, Any

__all__ = ["__version__", "ReleaseState", "abort_changes", "add_changes", "write_changes"]

try:
    __version__ = metadata_version("git-changes")
except PackageNotFoundError:  # pragma: no cover - fallback for editable installs
    __version__ = "0.0.0"

if TYPE_CHECKING:  # pragma: no cover
    from .changes import ReleaseState, abort_changes, add_changes, write_changes


def __getattr__(name: str) -> Any:  # pragma: no cover - simple delegation
    if name in {"ReleaseState", "abort_changes", "add_changes", "write_changes"}:
        from . import changes

        return getattr(changes, name)
    raise AttributeError(f"module 'git_changes' has no attribute {name!r}")
