"""Shared fixtures: a scripted stand-in for git and package metadata helpers."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

import pytest

from git_changes.errors import UpstreamQueryError

DEFAULT_PACKAGE: dict[str, Any] = {
    "name": "@studio/changes",
    "version": "1.0.0",
    "author": "Studio <support@javascript.studio>",
    "homepage": "https://github.com/javascript-studio/studio-changes",
}


@dataclass
class FakeGit:
    """Answers git commands the way a repository with a scripted history would."""

    log: str = ""
    config: dict[str, str] = field(default_factory=dict)
    remote: Optional[str] = None
    fail_log: bool = False
    calls: list[list[str]] = field(default_factory=list)

    def __call__(self, args: Sequence[str], *, cwd: Path) -> str:
        command = list(args)
        self.calls.append(command)
        if command[0] == "log":
            if self.fail_log:
                raise UpstreamQueryError("git log failed (exit status 128)")
            return self.log
        if command[0] == "config":
            value = self.config.get(command[-1])
            if value is None:
                raise UpstreamQueryError("git config failed (exit status 1)")
            return f"{value}\n"
        if command[0] == "remote":
            if self.remote is None:
                raise UpstreamQueryError("git remote failed (exit status 2)")
            return f"{self.remote}\n"
        if command[0] == "add":
            return ""
        raise AssertionError(f"unexpected git command: {command}")

    @property
    def log_calls(self) -> list[list[str]]:
        return [call for call in self.calls if call[0] == "log"]

    @property
    def add_calls(self) -> list[list[str]]:
        return [call for call in self.calls if call[0] == "add"]


@pytest.fixture
def git(monkeypatch: pytest.MonkeyPatch) -> FakeGit:
    fake = FakeGit()
    monkeypatch.setattr("git_changes.utils.run_git", fake)
    monkeypatch.setattr("git_changes.formatter.run_git", fake)
    return fake


def write_package(root: Path, data: Optional[dict[str, Any]] = None) -> Path:
    path = root / "package.json"
    path.write_text(json.dumps(data or DEFAULT_PACKAGE, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A project root holding the default package.json."""
    root = tmp_path / "project"
    root.mkdir()
    write_package(root)
    return root


@pytest.fixture(autouse=True)
def _reset_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("git_changes")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
