"""Render commits as a Markdown release section."""

from __future__ import annotations

import asyncio
from typing import Iterable, Optional, Sequence

from .authors import aggregate_authors, render_contributors
from .commits import REFERENCE_ISSUE, REFERENCE_PULL_REQUEST, Commit, Reference
from .config import Config
from .gitmoji import convert
from .identity import LookupServices, resolve_identities
from .repo import RepoConfig, format_compare_changes, format_reference
from .utils import upper_first

BREAKING_MARKER = "⚠️  "
BREAKING_HEADING = "#### ⚠️ Breaking Changes"


def format_references(references: Sequence[Reference], repo: Optional[RepoConfig]) -> str:
    """Return the ``(refs)`` suffix: PRs then issues, else the first other reference."""
    pull_requests = [ref for ref in references if ref.type == REFERENCE_PULL_REQUEST]
    issues = [ref for ref in references if ref.type == REFERENCE_ISSUE]
    if pull_requests or issues:
        rendered = ", ".join(format_reference(ref, repo) for ref in [*pull_requests, *issues])
        return f" ({rendered})"
    if references:
        return f" ({format_reference(references[0], repo)})"
    return ""


def format_commit(commit: Commit, config: Config) -> str:
    """Render one commit as a Markdown list item."""
    scope = f"**{commit.scope.strip()}:** " if commit.scope else ""
    breaking = BREAKING_MARKER if commit.is_breaking else ""
    return (
        f"- {scope}{breaking}{upper_first(commit.description)}"
        f"{format_references(commit.references, config.repo)}"
    )


def group_by_type(commits: Iterable[Commit]) -> dict[str, list[Commit]]:
    groups: dict[str, list[Commit]] = {}
    for commit in commits:
        groups.setdefault(commit.type, []).append(commit)
    return groups


def render_sections(commits: Sequence[Commit], config: Config) -> list[str]:
    """Render one section per configured type, then the breaking-changes block.

    Types follow configuration order; each section lists its commits in
    reverse of the input order. Unconfigured or empty types produce nothing.
    """
    groups = group_by_type(commits)
    lines: list[str] = []
    breaking_changes: list[str] = []
    for type_key, type_config in config.types.items():
        group = groups.get(type_key)
        if not group:
            continue
        lines.extend(["", f"### {type_config.title}", ""])
        for commit in reversed(group):
            line = format_commit(commit, config)
            lines.append(line)
            if commit.is_breaking:
                breaking_changes.append(line)

    if breaking_changes:
        lines.extend(["", BREAKING_HEADING, "", *breaking_changes])
    return lines


def render_version_heading(config: Config) -> list[str]:
    """Return the release heading and, when possible, the compare link."""
    version = config.tag_body()
    title = version or f"{config.from_ref}...{config.to_ref}"
    lines = ["", f"## {title}"]
    if config.repo is not None and config.from_ref:
        lines.extend(["", format_compare_changes(version, config)])
    return lines


async def generate_markdown(
    commits: Sequence[Commit],
    config: Config,
    *,
    services: Optional[LookupServices] = None,
) -> str:
    """Assemble the full release document for ``commits``.

    Contributor handles are resolved before the contributors block is
    rendered; lookup failures only degrade that block, never the document.
    """
    lines = render_version_heading(config)
    lines.extend(render_sections(commits, config))

    records = aggregate_authors(commits, config.exclude_authors)
    if records and not config.no_authors:
        await resolve_identities(records, config, services=services)
    lines.extend(
        render_contributors(
            records,
            no_authors=config.no_authors,
            hide_email=config.hide_author_email,
        )
    )

    return convert("\n".join(lines).strip(), True)


def render_changelog(
    commits: Sequence[Commit],
    config: Config,
    *,
    services: Optional[LookupServices] = None,
) -> str:
    """Synchronous wrapper around :func:`generate_markdown`.

    Code that already runs an event loop must ``await generate_markdown(...)``
    instead; calling this from inside a loop raises ``RuntimeError``.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(generate_markdown(commits, config, services=services))
    raise RuntimeError(
        "render_changelog() cannot run inside an event loop; await generate_markdown() instead."
    )
