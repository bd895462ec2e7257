"""GitHub profile lookup used to link the release footer."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx

from .errors import ProfileLookupError, ProfileLookupTimeout
from .utils import log_debug

API_BASE_URL = "https://api.github.com"
SEARCH_PATH = "/search/users"
USER_AGENT = "git-changes"
LOOKUP_TIMEOUT = 5.0


def _single_homepage(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    items = payload.get("items")
    if not isinstance(items, list) or len(items) != 1:
        return None
    item = items[0]
    if not isinstance(item, dict):
        return None
    url = item.get("html_url")
    return str(url) if url else None


async def _search(client: httpx.AsyncClient, email: str) -> Optional[str]:
    response = await client.get(
        f"{API_BASE_URL}{SEARCH_PATH}",
        params={"q": email, "in": "email"},
        headers={"User-Agent": USER_AGENT, "Accept": "application/vnd.github+json"},
    )
    response.raise_for_status()
    return _single_homepage(response.json())


async def fetch_user_homepage(
    email: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = LOOKUP_TIMEOUT,
) -> Optional[str]:
    """Return the GitHub profile URL of the only user with this email.

    Zero or several matches return None. The request is cancelled once
    `timeout` seconds have passed, raising ProfileLookupTimeout; any other
    failure raises ProfileLookupError.
    """
    log_debug(f"searching GitHub users for {email}.")
    try:
        if client is not None:
            return await asyncio.wait_for(_search(client, email), timeout)
        async with httpx.AsyncClient() as own_client:
            return await asyncio.wait_for(_search(own_client, email), timeout)
    except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
        raise ProfileLookupTimeout(timeout) from exc
    except httpx.HTTPStatusError as exc:
        raise ProfileLookupError(
            f"GitHub user search failed with status {exc.response.status_code}"
        ) from exc
    except (httpx.HTTPError, ValueError) as exc:
        raise ProfileLookupError(f"GitHub user search failed: {exc}") from exc
