"""Collect commit authors and render the contributors section."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from .commits import REFERENCE_PULL_REQUEST, Commit
from .identity import is_noreply
from .utils import upper_first

BOT_MARKER = "[bot]"
CONTRIBUTORS_HEADING = "### ❤️ Contributors"

_PR_NUMBER_RE = re.compile(r"^#?(\d+)")


@dataclass
class AuthorRecord:
    """One distinct contributor, keyed by normalized display name.

    ``emails`` and ``pr_numbers`` keep first-seen order and hold no duplicates.
    """

    display_name: str
    emails: list[str] = field(default_factory=list)
    pr_numbers: list[int] = field(default_factory=list)
    resolved_handle: Optional[str] = None

    def add_email(self, email: str) -> None:
        if email and email not in self.emails:
            self.emails.append(email)

    def add_pr_number(self, number: int) -> None:
        if number not in self.pr_numbers:
            self.pr_numbers.append(number)

    @property
    def public_email(self) -> Optional[str]:
        """Return the first email that is not a GitHub no-reply address."""
        return next((email for email in self.emails if not is_noreply(email)), None)


def format_name(name: str) -> str:
    """Capitalize every whitespace-separated word and join with single spaces."""
    return " ".join(upper_first(part) for part in name.split())


def parse_pr_number(value: str) -> Optional[int]:
    """Parse ``#123`` or ``123`` into an integer, ``None`` when there are no digits."""
    match = _PR_NUMBER_RE.match(value.strip())
    return int(match.group(1)) if match else None


def _is_excluded(name: str, email: str, exclude_authors: Sequence[str]) -> bool:
    return any(term in name or (email and term in email) for term in exclude_authors)


def aggregate_authors(
    commits: Iterable[Commit], exclude_authors: Sequence[str] = ()
) -> list[AuthorRecord]:
    """Merge commit authors into one record per normalized name, in first-seen order.

    Bots (names containing ``[bot]``) and authors matching an exclusion term
    by name or email are skipped.
    """
    records: dict[str, AuthorRecord] = {}
    for commit in commits:
        author = commit.author
        if author is None:
            continue
        name = format_name(author.name or "")
        if not name or BOT_MARKER in name.lower():
            continue
        email = author.email or ""
        if _is_excluded(name, email, exclude_authors):
            continue

        record = records.get(name)
        if record is None:
            record = records[name] = AuthorRecord(display_name=name)
        record.add_email(email)

        for ref in commit.references:
            if ref.type != REFERENCE_PULL_REQUEST or not isinstance(ref.value, str):
                continue
            number = parse_pr_number(ref.value)
            if number is not None:
                record.add_pr_number(number)
    return list(records.values())


def format_contributor(record: AuthorRecord, *, hide_email: bool = False) -> str:
    """Render one contributor line, preferring a handle link over an email."""
    suffix = ""
    if record.resolved_handle:
        handle = record.resolved_handle
        suffix = f" ([@{handle}](https://github.com/{handle}))"
    elif not hide_email and record.public_email:
        suffix = f" <{record.public_email}>"
    return f"- {record.display_name}{suffix}"


def render_contributors(
    records: Sequence[AuthorRecord], *, no_authors: bool = False, hide_email: bool = False
) -> list[str]:
    """Return the contributors block as Markdown lines, empty when disabled."""
    if not records or no_authors:
        return []
    lines = ["", CONTRIBUTORS_HEADING, ""]
    lines.extend(format_contributor(record, hide_email=hide_email) for record in records)
    return lines
