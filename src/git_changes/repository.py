"""Resolve the base URL used for per-commit links."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .config import CommitsOption, ProjectMetadata
from .errors import MissingBaseError, RepositoryParseError
from .tags import expand_template
from .utils import guess_git_remote, log_debug

HOSTS: dict[str, str] = {
    "github": "github.com",
    "gitlab": "gitlab.com",
    "bitbucket": "bitbucket.org",
}
_COMMIT_PATHS = {
    "github.com": "commit",
    "gitlab.com": "commit",
    "bitbucket.org": "commits",
}
_SHORTHAND_PATTERN = re.compile(
    r"^(?:(?P<provider>github|gitlab|bitbucket):)?(?P<owner>[\w.\-]+)/(?P<repo>[\w.\-]+)$"
)
_URL_PATTERN = re.compile(
    r"^(?:git\+)?(?:https?|ssh|git)://(?:[^@/]+@)?(?P<host>[^/:]+)(?::\d+)?/"
    r"(?P<owner>[\w.\-]+)/(?P<repo>[\w.\-]+?)(?:\.git)?/?(?:#.*)?$"
)
_SCP_PATTERN = re.compile(
    r"^(?:[^@]+@)?(?P<host>[^/:]+):(?P<owner>[\w.\-]+)/(?P<repo>[\w.\-]+?)(?:\.git)?/?$"
)


@dataclass(frozen=True)
class HostedRepository:
    """A repository on one of the supported hosting services."""

    host: str
    owner: str
    name: str

    def browse_url(self) -> str:
        return f"https://{self.host}/{self.owner}/{self.name}"

    def commit_base_url(self) -> str:
        return f"{self.browse_url()}/{_COMMIT_PATHS[self.host]}"


def parse_hosted_repository(url: str) -> Optional[HostedRepository]:
    """Normalize a repository URL or shorthand, or return None if unsupported."""
    text = url.strip()
    shorthand = _SHORTHAND_PATTERN.match(text)
    if shorthand:
        host = HOSTS[shorthand.group("provider") or "github"]
        repo = shorthand.group("repo")
        if repo.endswith(".git"):
            repo = repo[: -len(".git")]
        return HostedRepository(host, shorthand.group("owner"), repo)
    match = _URL_PATTERN.match(text) or _SCP_PATTERN.match(text)
    if not match:
        return None
    host = match.group("host").lower()
    if host.startswith("www."):
        host = host[len("www.") :]
    if host not in _COMMIT_PATHS:
        return None
    return HostedRepository(host, match.group("owner"), match.group("repo"))


def _repository_url(repository: object) -> Optional[str]:
    """Return the URL of a git `repository` field, or None when it does not apply."""
    if isinstance(repository, str):
        return repository
    if isinstance(repository, Mapping):
        if repository.get("type", "git") != "git":
            return None
        url = repository.get("url")
        return str(url) if url else None
    return None


def resolve_commit_base(
    commits: CommitsOption,
    metadata: ProjectMetadata,
    *,
    project_root: Path,
) -> Optional[str]:
    """Return the base URL for commit links, or None when links are disabled.

    An explicit template is expanded from metadata. Otherwise the homepage is
    used, then the `repository` field, then the `origin` remote.
    """
    if commits is None or commits is False:
        return None
    if isinstance(commits, str):
        return expand_template(commits, metadata).rstrip("/")
    if metadata.homepage:
        return f"{metadata.homepage}/commit"
    repository_url = _repository_url(metadata.repository)
    if repository_url is not None:
        hosted = parse_hosted_repository(repository_url)
        if hosted is None:
            raise RepositoryParseError(metadata.source)
        return hosted.commit_base_url()
    remote_url = guess_git_remote(project_root)
    if remote_url:
        hosted = parse_hosted_repository(remote_url)
        if hosted is not None:
            log_debug(f"using commit links for {hosted.browse_url()} from git remote.")
            return hosted.commit_base_url()
    raise MissingBaseError(metadata.source)
