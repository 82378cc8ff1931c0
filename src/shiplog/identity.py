"""Resolve commit authors to public GitHub handles.

Each author record runs an ordered chain of strategies and keeps the first
handle found:

1. extract the login from a GitHub no-reply address,
2. ask the user directory for each real email address,
3. ask GitHub who opened one of the author's pull requests (GitHub repos only).

Records resolve concurrently; within one record the strategies run strictly
one after another. A lookup that raises is logged at debug level
and treated as a miss.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, Optional

import httpx

from .github import find_username_by_email, get_pull_request_author_login, http_client
from .utils import log_debug

if TYPE_CHECKING:
    from .authors import AuthorRecord
    from .config import Config

NOREPLY_DOMAIN = "noreply.github.com"

# `username@users.noreply.github.com` or `12345+username@users.noreply.github.com`
_NOREPLY_RE = re.compile(r"^(?:\d+\+)?([a-z0-9-]+)@users\.noreply\.github\.com$", re.IGNORECASE)

EmailLookup = Callable[[str], Awaitable[Optional[str]]]
PullRequestAuthorLookup = Callable[[int], Awaitable[str]]


@dataclass(frozen=True)
class LookupServices:
    """Remote collaborators consulted by the resolution chain.

    ``pull_request_author`` is ``None`` when the repository is not hosted on
    GitHub; the pull-request strategy is skipped in that case.
    """

    find_username_by_email: EmailLookup
    pull_request_author: Optional[PullRequestAuthorLookup] = None


Strategy = Callable[["AuthorRecord", LookupServices], Awaitable[Optional[str]]]


def login_from_noreply(email: Optional[str]) -> Optional[str]:
    """Return the login encoded in a GitHub no-reply address, lower-cased."""
    if not email:
        return None
    match = _NOREPLY_RE.match(email.lower())
    return match.group(1) if match else None


def is_noreply(email: str) -> bool:
    return NOREPLY_DOMAIN in email.lower()


async def _from_noreply_email(record: AuthorRecord, services: LookupServices) -> Optional[str]:
    for email in record.emails:
        login = login_from_noreply(email)
        if login:
            return login
    return None


async def _from_user_directory(record: AuthorRecord, services: LookupServices) -> Optional[str]:
    for email in record.emails:
        if not email or is_noreply(email):
            continue
        try:
            username = await services.find_username_by_email(email)
        except Exception as exc:
            log_debug(f"user directory lookup for {email} failed: {exc}")
            continue
        if username:
            return username
    return None


async def _from_pull_request_author(
    record: AuthorRecord, services: LookupServices
) -> Optional[str]:
    lookup = services.pull_request_author
    if lookup is None:
        return None
    for pr_number in record.pr_numbers:
        try:
            login = await lookup(pr_number)
        except Exception as exc:
            log_debug(f"pull request #{pr_number} author lookup failed: {exc}")
            continue
        if login:
            return login
    return None


RESOLUTION_STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("no-reply email", _from_noreply_email),
    ("user directory", _from_user_directory),
    ("pull request author", _from_pull_request_author),
)


async def resolve_author(record: AuthorRecord, services: LookupServices) -> Optional[str]:
    """Run the strategy chain for one record and store the first handle found."""
    for name, strategy in RESOLUTION_STRATEGIES:
        handle = await strategy(record, services)
        if handle:
            log_debug(f"resolved {record.display_name} to @{handle} via {name}")
            record.resolved_handle = handle
            return handle
    log_debug(f"no GitHub handle found for {record.display_name}")
    return None


def create_lookup_services(client: httpx.AsyncClient, config: Config) -> LookupServices:
    """Bind the HTTP lookups to a client, enabling PR lookups for GitHub repos."""
    pull_request_author: Optional[PullRequestAuthorLookup] = None
    if config.repo is not None and config.repo.provider == "github":
        pull_request_author = partial(get_pull_request_author_login, client, config)
    return LookupServices(
        find_username_by_email=partial(find_username_by_email, client),
        pull_request_author=pull_request_author,
    )


async def resolve_identities(
    records: Iterable[AuthorRecord],
    config: Config,
    *,
    services: Optional[LookupServices] = None,
) -> None:
    """Resolve all records concurrently and return once every chain has settled."""
    pending = list(records)
    if not pending:
        return
    if services is not None:
        await asyncio.gather(*(resolve_author(record, services) for record in pending))
        return

    async with http_client() as client:
        bound = create_lookup_services(client, config)
        await asyncio.gather(*(resolve_author(record, bound) for record in pending))
