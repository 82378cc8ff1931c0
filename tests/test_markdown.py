"""Tests for release section rendering."""

from __future__ import annotations

from typing import Optional

import pytest

from shiplog.authors import CONTRIBUTORS_HEADING
from shiplog.commits import Commit, CommitAuthor, Reference
from shiplog.config import Config, TypeConfig
from shiplog.identity import LookupServices
from shiplog.markdown import (
    BREAKING_HEADING,
    BREAKING_MARKER,
    format_commit,
    generate_markdown,
    render_changelog,
    render_sections,
)
from shiplog.repo import RepoConfig

REPO = RepoConfig("owner/repo")
TYPES = {"feat": TypeConfig("Features"), "fix": TypeConfig("Fixes")}


async def _no_username(_email: str) -> Optional[str]:
    return None


NO_LOOKUPS = LookupServices(find_username_by_email=_no_username)


def test_format_commit_variants() -> None:
    config = Config(repo=REPO)

    plain = Commit("fix", "handle empty input")
    scoped = Commit(
        "feat",
        "add parser",
        scope="core",
        references=(Reference("pull-request", "#10"), Reference("hash", "aaa1111")),
    )
    breaking = Commit("feat", "drop api", is_breaking=True)

    assert format_commit(plain, config) == "- Handle empty input"
    assert (
        format_commit(scoped, config)
        == "- **core:** Add parser ([#10](https://github.com/owner/repo/pull/10))"
    )
    assert format_commit(breaking, config) == f"- {BREAKING_MARKER}Drop api"


def test_format_commit_reference_suffix() -> None:
    config = Config(repo=REPO)
    mixed = Commit(
        "fix",
        "thing",
        references=(
            Reference("issue", "#3"),
            Reference("hash", "abc1234"),
            Reference("pull-request", "#4"),
        ),
    )
    hash_only = Commit("fix", "thing", references=(Reference("hash", "abc1234"),))

    assert format_commit(mixed, config) == (
        "- Thing ([#4](https://github.com/owner/repo/pull/4), "
        "[#3](https://github.com/owner/repo/issues/3))"
    )
    assert format_commit(hash_only, config) == (
        "- Thing ([abc1234](https://github.com/owner/repo/commit/abc1234))"
    )
    assert format_commit(hash_only, Config()) == "- Thing (abc1234)"


def test_render_sections_follows_type_order_and_reverses_commits() -> None:
    config = Config(types=TYPES)
    commits = [
        Commit("fix", "first fix"),
        Commit("feat", "first feature"),
        Commit("docs", "unconfigured"),
        Commit("feat", "second feature"),
    ]

    assert render_sections(commits, config) == [
        "",
        "### Features",
        "",
        "- Second feature",
        "- First feature",
        "",
        "### Fixes",
        "",
        "- First fix",
    ]


def test_render_sections_repeats_breaking_commits() -> None:
    config = Config(types=TYPES)
    commits = [Commit("feat", "new api", is_breaking=True), Commit("fix", "bug")]

    lines = render_sections(commits, config)

    breaking_line = f"- {BREAKING_MARKER}New api"
    assert lines.count(breaking_line) == 2
    assert lines[-4:] == ["", BREAKING_HEADING, "", breaking_line]


def test_render_sections_without_matching_commits() -> None:
    assert render_sections([Commit("docs", "readme")], Config(types=TYPES)) == []


@pytest.mark.asyncio()
async def test_generate_markdown_full_document() -> None:
    config = Config(
        types=TYPES,
        repo=REPO,
        from_ref="v1.0.0",
        to_ref="main",
        new_version="1.1.0",
    )
    commits = [
        Commit(
            "feat",
            "add parser",
            scope="core",
            author=CommitAuthor("alice smith", "7+alice@users.noreply.github.com"),
            references=(Reference("pull-request", "#10"), Reference("hash", "aaa1111")),
        ),
        Commit(
            "fix",
            "handle empty input",
            author=CommitAuthor("Bob", "bob@example.com"),
            references=(Reference("hash", "bbb2222"),),
        ),
        Commit(
            "feat",
            "drop legacy api",
            is_breaking=True,
            author=CommitAuthor("Alice Smith", "alice@example.com"),
            references=(Reference("hash", "ccc3333"),),
        ),
        Commit("fix", "bump deps", author=CommitAuthor("renovate[bot]", "bot@example.com")),
    ]

    markdown = await generate_markdown(commits, config, services=NO_LOOKUPS)

    breaking = (
        f"- {BREAKING_MARKER}Drop legacy api "
        "([ccc3333](https://github.com/owner/repo/commit/ccc3333))"
    )
    assert markdown == "\n".join(
        [
            "## v1.1.0",
            "",
            "[compare changes](https://github.com/owner/repo/compare/v1.0.0...v1.1.0)",
            "",
            "### Features",
            "",
            breaking,
            "- **core:** Add parser ([#10](https://github.com/owner/repo/pull/10))",
            "",
            "### Fixes",
            "",
            "- Bump deps",
            "- Handle empty input ([bbb2222](https://github.com/owner/repo/commit/bbb2222))",
            "",
            BREAKING_HEADING,
            "",
            breaking,
            "",
            CONTRIBUTORS_HEADING,
            "",
            "- Alice Smith ([@alice](https://github.com/alice))",
            "- Bob <bob@example.com>",
        ]
    )


@pytest.mark.asyncio()
async def test_generate_markdown_without_version_or_authors() -> None:
    async def fail(_email: str) -> Optional[str]:
        raise AssertionError("lookups must not run when authors are disabled")

    config = Config(types=TYPES, from_ref="v1.0.0", to_ref="main", no_authors=True)
    commits = [Commit("feat", ":sparkles:shiny", author=CommitAuthor("Bob", "bob@example.com"))]

    markdown = await generate_markdown(
        commits, config, services=LookupServices(find_username_by_email=fail)
    )

    assert markdown == "## v1.0.0...main\n\n### Features\n\n- ✨ shiny"


def test_render_changelog_runs_event_loop() -> None:
    config = Config(types=TYPES, new_version="2.0.0", hide_author_email=True)
    commits = [Commit("fix", "bug", author=CommitAuthor("Bob", "bob@example.com"))]

    markdown = render_changelog(commits, config, services=NO_LOOKUPS)

    assert markdown.startswith("## v2.0.0\n")
    assert markdown.endswith(f"{CONTRIBUTORS_HEADING}\n\n- Bob")


@pytest.mark.asyncio()
@pytest.mark.parametrize("error", [OSError("socket closed"), RuntimeError("boom")])
async def test_generate_markdown_survives_failing_lookups(error: Exception) -> None:
    async def directory(_email: str) -> Optional[str]:
        raise error

    async def pull_request_author(_number: int) -> str:
        raise error

    config = Config(types=TYPES, repo=REPO, new_version="1.0.0")
    commits = [
        Commit(
            "fix",
            "bug",
            author=CommitAuthor("Ann", "ann@example.com"),
            references=(Reference("pull-request", "#4"),),
        )
    ]
    services = LookupServices(
        find_username_by_email=directory, pull_request_author=pull_request_author
    )

    markdown = await generate_markdown(commits, config, services=services)

    assert markdown.endswith(f"{CONTRIBUTORS_HEADING}\n\n- Ann <ann@example.com>")


@pytest.mark.asyncio()
async def test_render_changelog_refuses_running_loop() -> None:
    with pytest.raises(RuntimeError, match="await generate_markdown"):
        render_changelog([Commit("fix", "bug")], Config(types=TYPES), services=NO_LOOKUPS)
