"""Python-friendly facade for invoking shiplog functionality."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .cli import CLIContext, create_cli_context, load_releases, run_generate
from .identity import LookupServices
from .releases import ReleaseSection, find_release


class Changelog:
    """High-level helper that mirrors the CLI commands for Python callers."""

    def __init__(
        self,
        *,
        root: Path | str | None = None,
        config: Path | str | None = None,
        debug: bool = False,
    ) -> None:
        self._ctx = create_cli_context(
            root=Path(root) if root is not None else None,
            config=Path(config) if config is not None else None,
            debug=debug,
        )

    @property
    def context(self) -> CLIContext:
        """Expose the underlying CLIContext for advanced scenarios."""

        return self._ctx

    def generate(
        self,
        *,
        from_ref: Optional[str] = None,
        to_ref: Optional[str] = None,
        new_version: Optional[str] = None,
        output: bool = False,
        no_authors: bool = False,
        hide_author_email: bool = False,
        services: Optional[LookupServices] = None,
    ) -> str:
        """Return the Markdown for the given range, optionally writing it to the changelog.

        Runs its own event loop; from async code, await
        :func:`shiplog.markdown.generate_markdown` instead.
        """

        return run_generate(
            self._ctx,
            from_ref=from_ref,
            to_ref=to_ref,
            new_version=new_version,
            output=output,
            no_authors=no_authors,
            hide_author_email=hide_author_email,
            services=services,
            echo=False,
        )

    def releases(self, *, file_path: Path | str | None = None) -> list[ReleaseSection]:
        """Return the release sections of the changelog file."""

        _, releases = load_releases(self._ctx, Path(file_path) if file_path else None)
        return releases

    def release(self, version: str, *, file_path: Path | str | None = None) -> Optional[ReleaseSection]:
        """Return the release section for ``version``, if present."""

        return find_release(self.releases(file_path=file_path), version)
