"""Configuration helpers for shiplog."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

import yaml

from .git import get_remote_url
from .repo import RepoConfig, resolve_repo_config
from .utils import log_debug, normalize_string_choices

CONFIG_RELATIVE_PATH = Path("shiplog.yaml")
DEFAULT_OUTPUT = "CHANGELOG.md"
DEFAULT_TAG_BODY = "v{{newVersion}}"
NEW_VERSION_PLACEHOLDER = "{{newVersion}}"
TOKEN_ENV_KEYS = ("GITHUB_TOKEN", "GH_TOKEN")


@dataclass(frozen=True)
class TypeConfig:
    """Display settings for one commit type."""

    title: str
    semver: Optional[str] = None


DEFAULT_TYPES: dict[str, TypeConfig] = {
    "feat": TypeConfig("🚀 Enhancements", "minor"),
    "perf": TypeConfig("🔥 Performance", "patch"),
    "fix": TypeConfig("🩹 Fixes", "patch"),
    "refactor": TypeConfig("💅 Refactors", "patch"),
    "docs": TypeConfig("📖 Documentation", "patch"),
    "build": TypeConfig("📦 Build", "patch"),
    "types": TypeConfig("🌊 Types", "patch"),
    "chore": TypeConfig("🏡 Chore"),
    "examples": TypeConfig("🏀 Examples"),
    "test": TypeConfig("✅ Tests"),
    "style": TypeConfig("🎨 Styles"),
    "ci": TypeConfig("🤖 CI"),
}


@dataclass
class TemplatesConfig:
    tag_body: str = DEFAULT_TAG_BODY


@dataclass
class Config:
    """Structured representation of the changelog config."""

    types: dict[str, TypeConfig] = field(default_factory=lambda: dict(DEFAULT_TYPES))
    scope_map: dict[str, str] = field(default_factory=dict)
    repo: Optional[RepoConfig] = None
    output: str = DEFAULT_OUTPUT
    templates: TemplatesConfig = field(default_factory=TemplatesConfig)
    exclude_authors: tuple[str, ...] = ()
    no_authors: bool = False
    hide_author_email: bool = False
    github_token: Optional[str] = None
    # Run-scoped values, filled from CLI options or API arguments.
    from_ref: str = ""
    to_ref: str = ""
    new_version: Optional[str] = None

    def tag_body(self, version: Optional[str] = None) -> Optional[str]:
        """Return the version heading text for ``version`` (or ``new_version``)."""
        value = version or self.new_version
        if not value:
            return None
        return self.templates.tag_body.replace(NEW_VERSION_PLACEHOLDER, value)


def default_config_path(project_root: Path) -> Path:
    """Return the default config path for a project root."""
    return project_root / CONFIG_RELATIVE_PATH


def _parse_bool(raw: Mapping[str, Any], key: str) -> bool:
    value = raw.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"Config option '{key}' must be a boolean.")
    return value


def _parse_types(raw_types: object) -> dict[str, TypeConfig]:
    types = dict(DEFAULT_TYPES)
    if raw_types is None:
        return types
    if not isinstance(raw_types, Mapping):
        raise ValueError("Config option 'types' must be a mapping.")
    for key, value in raw_types.items():
        type_key = str(key).strip()
        if not type_key:
            continue
        if value is False:
            types.pop(type_key, None)
            continue
        if isinstance(value, str):
            types[type_key] = TypeConfig(title=value)
            continue
        if not isinstance(value, Mapping):
            raise ValueError(f"Config option 'types.{type_key}' must be a mapping or false.")
        base = types.get(type_key)
        title = value.get("title", base.title if base else type_key.capitalize())
        semver = value.get("semver", base.semver if base else None)
        types[type_key] = TypeConfig(
            title=str(title),
            semver=str(semver) if semver is not None else None,
        )
    return types


def _parse_string_mapping(raw: Mapping[str, Any], key: str) -> dict[str, str]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Config option '{key}' must be a mapping.")
    return {str(k): str(v) for k, v in value.items()}


def parse_config(raw: Mapping[str, Any]) -> Config:
    """Build a Config from an already-parsed mapping."""
    repo_raw = raw.get("repo")
    repo: Optional[RepoConfig] = None
    if repo_raw is not None:
        if not isinstance(repo_raw, str):
            raise ValueError("Config option 'repo' must be a string.")
        repo = resolve_repo_config(repo_raw)
        if repo is None:
            raise ValueError(f"Config option 'repo' is not a recognized repository: {repo_raw}")

    templates = TemplatesConfig()
    templates_raw = raw.get("templates")
    if templates_raw is not None:
        if not isinstance(templates_raw, Mapping):
            raise ValueError("Config option 'templates' must be a mapping.")
        tag_body = templates_raw.get("tag_body")
        if tag_body is not None:
            templates = TemplatesConfig(tag_body=str(tag_body))

    tokens_raw = raw.get("tokens")
    github_token: Optional[str] = None
    if tokens_raw is not None:
        if not isinstance(tokens_raw, Mapping):
            raise ValueError("Config option 'tokens' must be a mapping.")
        token_value = tokens_raw.get("github")
        if token_value:
            github_token = str(token_value).strip() or None

    output_raw = raw.get("output")
    return Config(
        types=_parse_types(raw.get("types")),
        scope_map=_parse_string_mapping(raw, "scope_map"),
        repo=repo,
        output=str(output_raw).strip() if output_raw else DEFAULT_OUTPUT,
        templates=templates,
        exclude_authors=normalize_string_choices(raw.get("exclude_authors")),
        no_authors=_parse_bool(raw, "no_authors"),
        hide_author_email=_parse_bool(raw, "hide_author_email"),
        github_token=github_token,
    )


def load_config(path: Path) -> Config:
    """Load the configuration from disk."""
    with path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, MutableMapping):
        raise ValueError("Config root must be a mapping")
    return parse_config(raw)


def load_project_config(
    project_root: Path,
    *,
    config_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
) -> Config:
    """Load a project config, filling repository and token defaults from the environment.

    A missing config file yields the defaults.
    """
    path = config_path or default_config_path(project_root)
    if path.exists():
        config = load_config(path)
    else:
        log_debug(f"no config at {path}, using defaults")
        config = Config()

    if config.repo is None:
        remote = get_remote_url(project_root)
        if remote:
            config = replace(config, repo=resolve_repo_config(remote))

    if config.github_token is None:
        env_mapping = env if env is not None else os.environ
        for key in TOKEN_ENV_KEYS:
            value = env_mapping.get(key, "").strip()
            if value:
                config = replace(config, github_token=value)
                break
    return config


def dump_config(config: Config) -> dict[str, Any]:
    """Convert a Config into a plain dictionary suitable for YAML output."""
    data: dict[str, Any] = {}
    if config.types != DEFAULT_TYPES:
        types: dict[str, Any] = {}
        for key, type_config in config.types.items():
            if DEFAULT_TYPES.get(key) == type_config:
                continue
            entry: dict[str, Any] = {"title": type_config.title}
            if type_config.semver:
                entry["semver"] = type_config.semver
            types[key] = entry
        for key in DEFAULT_TYPES:
            if key not in config.types:
                types[key] = False
        data["types"] = types
    if config.scope_map:
        data["scope_map"] = dict(config.scope_map)
    if config.repo is not None:
        data["repo"] = config.repo.base_url
    if config.output != DEFAULT_OUTPUT:
        data["output"] = config.output
    if config.templates.tag_body != DEFAULT_TAG_BODY:
        data["templates"] = {"tag_body": config.templates.tag_body}
    if config.exclude_authors:
        data["exclude_authors"] = list(config.exclude_authors)
    if config.no_authors:
        data["no_authors"] = True
    if config.hide_author_email:
        data["hide_author_email"] = True
    return data


def save_config(config: Config, path: Path) -> None:
    """Write the configuration to disk."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(dump_config(config), handle, sort_keys=False, allow_unicode=True)
