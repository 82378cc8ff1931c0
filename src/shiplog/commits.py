"""Commit model and conventional-commit parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

REFERENCE_PULL_REQUEST = "pull-request"
REFERENCE_ISSUE = "issue"
REFERENCE_HASH = "hash"

# Optional leading gitmoji (shortcode or glyph), then `type(scope)!: description`.
CONVENTIONAL_COMMIT_RE = re.compile(
    r"(?P<emoji>:.+:|[\U0001F300-\U0001FAFF]|[☀-⭕])?( *)?"
    r"(?P<type>[a-z]+)(\((?P<scope>.+)\))?(?P<breaking>!)?: (?P<description>.+)",
    re.IGNORECASE,
)
PULL_REQUEST_RE = re.compile(r"\([ a-z]*(#\d+)\s*\)", re.IGNORECASE)
ISSUE_RE = re.compile(r"(#\d+)")
BREAKING_BODY_RE = re.compile(r"breaking change:", re.IGNORECASE)


@dataclass(frozen=True)
class Reference:
    """Pointer from a commit to an issue, pull request, or commit hash."""

    type: str
    value: str


@dataclass(frozen=True)
class CommitAuthor:
    name: str
    email: str = ""


@dataclass(frozen=True)
class RawCommit:
    """One record as read from ``git log`` before parsing."""

    message: str
    short_hash: str
    author: CommitAuthor
    body: str = ""


@dataclass(frozen=True)
class Commit:
    """A parsed conventional commit."""

    type: str
    description: str
    scope: Optional[str] = None
    is_breaking: bool = False
    author: Optional[CommitAuthor] = None
    references: tuple[Reference, ...] = ()
    short_hash: str = ""
    message: str = ""
    body: str = ""


def parse_git_commit(raw: RawCommit, scope_map: Mapping[str, str] | None = None) -> Optional[Commit]:
    """Parse a raw git record as a conventional commit.

    Returns ``None`` when the subject line does not follow the
    ``type(scope)!: description`` shape.
    """
    match = CONVENTIONAL_COMMIT_RE.search(raw.message)
    if match is None:
        return None

    scope = match.group("scope") or ""
    if scope_map:
        scope = scope_map.get(scope, scope)
    is_breaking = bool(match.group("breaking")) or bool(BREAKING_BODY_RE.search(raw.body))

    description = match.group("description")
    references: list[Reference] = []
    for pr_match in PULL_REQUEST_RE.finditer(description):
        references.append(Reference(REFERENCE_PULL_REQUEST, pr_match.group(1)))
    for issue_match in ISSUE_RE.finditer(description):
        value = issue_match.group(1)
        if not any(ref.value == value for ref in references):
            references.append(Reference(REFERENCE_ISSUE, value))
    if raw.short_hash:
        references.append(Reference(REFERENCE_HASH, raw.short_hash))
    description = PULL_REQUEST_RE.sub("", description).strip()

    return Commit(
        type=match.group("type").lower(),
        description=description,
        scope=scope or None,
        is_breaking=is_breaking,
        author=raw.author,
        references=tuple(references),
        short_hash=raw.short_hash,
        message=raw.message,
        body=raw.body,
    )


def parse_commits(
    raw_commits: Iterable[RawCommit], scope_map: Mapping[str, str] | None = None
) -> list[Commit]:
    """Parse raw records, dropping those that are not conventional commits."""
    parsed = (parse_git_commit(raw, scope_map) for raw in raw_commits)
    return [commit for commit in parsed if commit is not None]


def filter_commits(commits: Iterable[Commit], types: Mapping[str, object]) -> list[Commit]:
    """Keep commits of configured types, dropping non-breaking dependency chores."""
    return [
        commit
        for commit in commits
        if commit.type in types
        and not (commit.type == "chore" and commit.scope == "deps" and not commit.is_breaking)
    ]
