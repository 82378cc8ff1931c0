"""Repository resolution and provider-specific link formatting."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from .commits import REFERENCE_HASH, REFERENCE_ISSUE, REFERENCE_PULL_REQUEST, Reference

if TYPE_CHECKING:
    from .config import Config

PROVIDER_DOMAINS: dict[str, str] = {
    "github": "github.com",
    "gitlab": "gitlab.com",
    "bitbucket": "bitbucket.org",
}

# Providers recognized on their own hosts, e.g. `github.example.com`.
SELF_HOSTED_PROVIDERS: tuple[str, ...] = ("github", "gitlab")

PROVIDER_SHORTHANDS: dict[str, str] = {
    "gh": "github",
    "github": "github",
    "gitlab": "gitlab",
    "bitbucket": "bitbucket",
}

PROVIDER_REF_SEGMENTS: dict[str, dict[str, str]] = {
    "github": {
        REFERENCE_ISSUE: "issues",
        REFERENCE_PULL_REQUEST: "pull",
        REFERENCE_HASH: "commit",
    },
    "gitlab": {
        REFERENCE_ISSUE: "issues",
        REFERENCE_PULL_REQUEST: "merge_requests",
        REFERENCE_HASH: "commit",
    },
    "bitbucket": {
        REFERENCE_ISSUE: "issues",
        REFERENCE_PULL_REQUEST: "pull-requests",
        REFERENCE_HASH: "commit",
    },
}

_SHORTHAND_RE = re.compile(r"^(?:(?P<provider>[a-z]+):)?(?P<repo>[\w.-]+/[\w./-]+)$")
_URL_RE = re.compile(
    r"^(?:https?://|ssh://)?(?:[\w.-]+@)?(?P<domain>[\w.-]+)[:/](?P<repo>[\w.-]+/[\w./-]+?)(?:\.git)?/?$"
)


@dataclass(frozen=True)
class RepoConfig:
    """Hosting location of a repository."""

    repo: str
    domain: str = "github.com"
    provider: Optional[str] = "github"

    @property
    def base_url(self) -> str:
        return f"https://{self.domain}/{self.repo}"


def _provider_for_domain(domain: str) -> Optional[str]:
    """Map a host to a provider, including self-hosted `github.*`/`gitlab.*` hosts."""
    for provider, provider_domain in PROVIDER_DOMAINS.items():
        if domain == provider_domain:
            return provider
    labels = domain.lower().split(".")
    for provider in SELF_HOSTED_PROVIDERS:
        if provider in labels:
            return provider
    return None


def resolve_repo_config(value: Optional[str]) -> Optional[RepoConfig]:
    """Resolve ``owner/name``, ``gh:owner/name``, or a clone URL into a RepoConfig."""
    if not value:
        return None
    text = value.strip()

    shorthand = _SHORTHAND_RE.match(text)
    if shorthand and "://" not in text and "@" not in text:
        provider_key = shorthand.group("provider") or "gh"
        provider = PROVIDER_SHORTHANDS.get(provider_key)
        if provider is None:
            return None
        return RepoConfig(
            repo=shorthand.group("repo").removesuffix(".git"),
            domain=PROVIDER_DOMAINS[provider],
            provider=provider,
        )

    url = _URL_RE.match(text)
    if url is None:
        return None
    domain = url.group("domain")
    return RepoConfig(
        repo=url.group("repo"),
        domain=domain,
        provider=_provider_for_domain(domain),
    )


def format_reference(ref: Reference, repo: Optional[RepoConfig]) -> str:
    """Render one reference as a Markdown link, or its raw value without a provider."""
    if repo is None or repo.provider not in PROVIDER_REF_SEGMENTS:
        return ref.value
    segments = PROVIDER_REF_SEGMENTS[repo.provider]
    segment = segments.get(ref.type)
    if segment is None:
        return ref.value
    return f"[{ref.value}]({repo.base_url}/{segment}/{ref.value.lstrip('#')})"


def format_compare_changes(version: Optional[str], config: Config) -> str:
    """Render the link comparing the previous ref with the new release."""
    repo = config.repo
    if repo is None:
        return ""
    part = "branches/compare" if repo.provider == "bitbucket" else "compare"
    return f"[compare changes]({repo.base_url}/{part}/{config.from_ref}...{version or config.to_ref})"
