"""HTTP lookups used to resolve contributor handles.

Two remote services are consulted:

- the public ungh user directory, which maps an email address to a GitHub
  username, and
- the GitHub REST API, which reports the author of a pull request.

Both are single-shot: there are no retries, and callers treat a failure as
"not found".
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Final, Optional
from urllib.parse import quote

import httpx

from .config import Config
from .repo import RepoConfig
from .utils import log_debug

USER_DIRECTORY_URL: Final[str] = "https://ungh.cc/users/find/{email}"
GITHUB_API_URL: Final[str] = "https://api.github.com"
GITHUB_API_VERSION: Final[str] = "2022-11-28"

DEFAULT_POOL_SIZE: Final[int] = 10
DEFAULT_TIMEOUT: Final[float] = 30.0


@asynccontextmanager
async def http_client(
    *,
    pool_size: int = DEFAULT_POOL_SIZE,
    timeout: float = DEFAULT_TIMEOUT,
    headers: dict[str, str] | None = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Create a managed async HTTP client with connection pooling."""
    limits = httpx.Limits(
        max_connections=pool_size,
        max_keepalive_connections=pool_size,
    )
    async with httpx.AsyncClient(
        limits=limits,
        timeout=httpx.Timeout(timeout),
        headers=headers or {},
        follow_redirects=True,
    ) as client:
        yield client


def github_api_base(repo: RepoConfig) -> str:
    """Return the REST API root for github.com or a GitHub Enterprise host."""
    if repo.domain == "github.com":
        return GITHUB_API_URL
    return f"https://{repo.domain}/api/v3"


def github_headers(token: Optional[str]) -> dict[str, str]:
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


async def get_pull_request_author_login(
    client: httpx.AsyncClient, config: Config, pr_number: int
) -> str:
    """Return the login of the user who opened pull request ``pr_number``.

    Raises:
        LookupError: If no repository is configured or the response carries no login.
        httpx.HTTPError: On transport failures or non-2xx responses.
    """
    if config.repo is None:
        raise LookupError("no repository configured for pull request lookup")
    url = f"{github_api_base(config.repo)}/repos/{config.repo.repo}/pulls/{pr_number}"
    response = await client.get(url, headers=github_headers(config.github_token))
    response.raise_for_status()
    data = response.json()
    user = data.get("user") if isinstance(data, dict) else None
    login = user.get("login") if isinstance(user, dict) else None
    if not login:
        raise LookupError(f"pull request #{pr_number} has no author login")
    return str(login)


async def find_username_by_email(client: httpx.AsyncClient, email: str) -> Optional[str]:
    """Look up a GitHub username in the user directory; ``None`` when not found."""
    url = USER_DIRECTORY_URL.format(email=quote(email, safe="@+"))
    try:
        response = await client.get(url)
        response.raise_for_status()
        payload = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        log_debug(f"user directory lookup failed for {email}: {exc}")
        return None
    user = payload.get("user") if isinstance(payload, dict) else None
    username = user.get("username") if isinstance(user, dict) else None
    return str(username) if username else None
