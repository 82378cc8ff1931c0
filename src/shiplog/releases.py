"""Parse changelog documents into release sections and update them in place."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional

from packaging.version import InvalidVersion, Version

from .utils import log_debug

DEFAULT_CHANGELOG_TITLE = "# Changelog"

# Level-2+ heading whose text contains a semantic version anywhere.
RELEASE_HEADING_RE = re.compile(
    r"^#{2,}\s+(?P<title>.*?v?\d+\.\d+\.\d+(?:-[a-zA-Z0-9.]+)?.*)$",
    re.MULTILINE,
)
# Heading text that is nothing but a version.
VERSION_RE = re.compile(r"^v?(\d+\.\d+\.\d+(?:-[a-zA-Z0-9.]+)?)$")
# First version token anywhere in heading text, e.g. `Release 1.2.3`.
VERSION_TOKEN_RE = re.compile(r"\bv?(\d+\.\d+\.\d+(?:-[a-zA-Z0-9.]+)?)")


@dataclass(frozen=True)
class ReleaseSection:
    """One release in a changelog document."""

    body: str
    version: Optional[str] = None
    title: str = ""


@dataclass(frozen=True)
class ParsedChangelog:
    releases: tuple[ReleaseSection, ...] = ()


@dataclass(frozen=True)
class _HeadingSpan:
    start: int
    end: int
    next_start: int
    title: str


def _iter_heading_spans(contents: str) -> Iterator[_HeadingSpan]:
    headings = list(RELEASE_HEADING_RE.finditer(contents))
    for index, heading in enumerate(headings):
        next_start = headings[index + 1].start() if index + 1 < len(headings) else len(contents)
        yield _HeadingSpan(
            start=heading.start(),
            end=heading.end(),
            next_start=next_start,
            title=heading.group("title").strip(),
        )


def version_from_title(title: str) -> Optional[str]:
    """Return the version when the heading text is exactly a version token."""
    match = VERSION_RE.match(title.strip())
    return match.group(1) if match else None


def version_in_title(title: str) -> Optional[str]:
    """Return the first version token in the heading, e.g. ``1.2.3`` in ``Release 1.2.3``."""
    match = VERSION_TOKEN_RE.search(title)
    return match.group(1) if match else None


def parse_changelog_markdown(contents: str) -> ParsedChangelog:
    """Split a changelog document into release sections, in document order."""
    releases = tuple(
        ReleaseSection(
            body=contents[span.end : span.next_start].strip(),
            version=version_from_title(span.title),
            title=span.title,
        )
        for span in _iter_heading_spans(contents)
    )
    return ParsedChangelog(releases=releases)


def _version_key(value: str) -> Version | str:
    text = value.strip().removeprefix("v")
    try:
        return Version(text)
    except InvalidVersion:
        return text


def versions_match(left: str, right: str) -> bool:
    """Compare versions semantically where possible, ignoring a leading ``v``."""
    left_key = _version_key(left)
    right_key = _version_key(right)
    if isinstance(left_key, Version) and isinstance(right_key, Version):
        return left_key == right_key
    return str(left_key) == str(right_key)


def find_release(releases: Iterable[ReleaseSection], version: str) -> Optional[ReleaseSection]:
    """Return the first release whose version matches ``version``."""
    for release in releases:
        if release.version and versions_match(release.version, version):
            return release
    return None


def update_changelog_text(contents: str, markdown: str, version: Optional[str]) -> str:
    """Return ``contents`` with ``markdown`` replacing or preceding existing releases.

    A release whose heading names the same version (``v1.2.0``,
    ``Release 1.2.0``) is replaced in place. Otherwise the new
    release goes above the first release heading, or at the end of the
    document when there are no releases yet.
    """
    block = markdown.strip() + "\n\n"
    spans = list(_iter_heading_spans(contents))

    if version:
        for span in spans:
            existing = version_in_title(span.title)
            if existing and versions_match(existing, version):
                log_debug(f"replacing existing release {existing}")
                return contents[: span.start] + block + contents[span.next_start :].lstrip("\n")

    if spans:
        first = spans[0]
        return contents[: first.start] + block + contents[first.start :]

    if not contents.strip():
        return f"{DEFAULT_CHANGELOG_TITLE}\n\n{block}"
    return f"{contents.rstrip()}\n\n{block}"


def update_changelog(path: Path, markdown: str, version: Optional[str]) -> Path:
    """Write a generated release into the changelog file at ``path``."""
    contents = path.read_text(encoding="utf-8") if path.exists() else ""
    updated = update_changelog_text(contents, markdown, version)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(updated.rstrip("\n") + "\n", encoding="utf-8")
    return path
