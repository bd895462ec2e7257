"""Release footer: `_Released by <author> on <date>._`."""

from __future__ import annotations

import os
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Awaitable, Callable, Mapping, Optional

from . import github
from .utils import log_debug, read_git_config

HomepageLookup = Callable[[str], Awaitable[Optional[str]]]


def build_footer(
    author: Optional[str] = None,
    homepage: Optional[str] = None,
    *,
    today: Optional[date] = None,
) -> str:
    footer = "_Released"
    if author:
        footer += f" by [{author}]({homepage})" if homepage else f" by {author}"
    released = today or datetime.now(timezone.utc).date()
    return f"{footer} on {released.isoformat()}._"


def resolve_identity(
    *,
    cwd: Path,
    env: Mapping[str, str] | None = None,
) -> tuple[Optional[str], Optional[str]]:
    """Return the (name, email) of the releasing user.

    Git config wins over the GIT_AUTHOR_NAME and GIT_AUTHOR_EMAIL variables.
    The email is only looked up when a name was found.
    """
    env_mapping = env if env is not None else os.environ
    name = read_git_config("user.name", cwd=cwd) or env_mapping.get("GIT_AUTHOR_NAME") or None
    if not name:
        return None, None
    email = read_git_config("user.email", cwd=cwd) or env_mapping.get("GIT_AUTHOR_EMAIL") or None
    return name, email


async def generate_footer(
    *,
    cwd: Path,
    env: Mapping[str, str] | None = None,
    today: Optional[date] = None,
    fetch_homepage: HomepageLookup | None = None,
) -> str:
    """Build the footer line, linking the author to their GitHub profile if found.

    Lookup failures propagate so that a run never silently drops attribution.
    """
    name, email = resolve_identity(cwd=cwd, env=env)
    if not name:
        log_debug("no git user configured, releasing without attribution.")
        return build_footer(today=today)
    if not email:
        return build_footer(name, today=today)
    lookup = fetch_homepage or github.fetch_user_homepage
    homepage = await lookup(email)
    return build_footer(name, homepage, today=today)
