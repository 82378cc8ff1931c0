"""Tests for the Python API facade."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest

from shiplog import Changelog
from shiplog.commits import CommitAuthor, RawCommit
from shiplog.identity import LookupServices


async def _directory(email: str) -> Optional[str]:
    return {"bob@example.com": "bob-gh"}.get(email)


@pytest.fixture()
def project(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    def fake_git_diff(_root: Path, from_ref: Optional[str], to_ref: str = "HEAD") -> list[RawCommit]:
        return [RawCommit("fix: handle empty input", "bbb2222", CommitAuthor("bob", "bob@example.com"))]

    monkeypatch.setattr("shiplog.cli._generate.get_git_diff", fake_git_diff)
    monkeypatch.setattr("shiplog.cli._generate.get_last_git_tag", lambda _root: None)
    monkeypatch.setattr("shiplog.cli._generate.get_current_git_ref", lambda _root: "HEAD")
    monkeypatch.setattr("shiplog.config.get_remote_url", lambda _root: None)
    return tmp_path


def test_generate_returns_markdown_without_printing(
    project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    changelog = Changelog(root=project)

    markdown = changelog.generate(
        new_version="v2.0.0",
        services=LookupServices(find_username_by_email=_directory),
    )

    assert markdown.startswith("## v2.0.0\n\n### 🩹 Fixes\n\n- Handle empty input (bbb2222)")
    assert markdown.endswith("- Bob ([@bob-gh](https://github.com/bob-gh))")
    assert capsys.readouterr().out == ""


def test_generate_output_and_read_back(project: Path) -> None:
    changelog = Changelog(root=project)

    changelog.generate(
        new_version="2.0.0",
        output=True,
        services=LookupServices(find_username_by_email=_directory),
    )

    releases = changelog.releases()
    assert [release.version for release in releases] == ["2.0.0"]
    release = changelog.release("v2.0.0")
    assert release is not None
    assert "Handle empty input" in release.body
    assert changelog.release("1.0.0") is None
