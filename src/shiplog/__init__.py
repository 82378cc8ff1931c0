"""Core package exports for shiplog."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as metadata_version
from typing import TYPE_CHECKING, Any

__all__ = ["__version__", "Changelog", "generate_markdown", "parse_changelog_markdown"]

try:
    __version__ = metadata_version("shiplog")
except PackageNotFoundError:  # pragma: no cover - fallback for editable installs
    __version__ = "0.0.0"

if TYPE_CHECKING:  # pragma: no cover
    from .api import Changelog
    from .markdown import generate_markdown
    from .releases import parse_changelog_markdown


def __getattr__(name: str) -> Any:  # pragma: no cover - simple delegation
    if name == "Changelog":
        from .api import Changelog as _Changelog

        return _Changelog
    if name == "generate_markdown":
        from .markdown import generate_markdown as _generate_markdown

        return _generate_markdown
    if name == "parse_changelog_markdown":
        from .releases import parse_changelog_markdown as _parse_changelog_markdown

        return _parse_changelog_markdown
    raise AttributeError(f"module 'shiplog' has no attribute {name!r}")
