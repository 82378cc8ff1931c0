"""Releases command: inspect release sections of an existing changelog."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import click
from rich.table import Table

from ..releases import ReleaseSection, find_release, parse_changelog_markdown
from ..utils import console, emit_output, log_info, normalize_markdown
from ._core import CLIContext

__all__ = ["load_releases", "releases_cmd", "run_releases"]


def _release_to_dict(release: ReleaseSection) -> dict[str, object]:
    return {
        "version": release.version,
        "title": release.title,
        "body": release.body,
    }


def load_releases(ctx: CLIContext, file_path: Optional[Path] = None) -> tuple[Path, list[ReleaseSection]]:
    """Parse the changelog at ``file_path`` or the configured output file."""
    path = file_path or ctx.project_root / ctx.ensure_config().output
    if not path.exists():
        raise click.ClickException(f"Changelog not found: {path}")
    parsed = parse_changelog_markdown(path.read_text(encoding="utf-8"))
    return path, list(parsed.releases)


def _render_table(releases: list[ReleaseSection]) -> Table:
    table = Table(title="Releases")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Version", style="cyan")
    table.add_column("Heading")
    table.add_column("Lines", justify="right")
    for index, release in enumerate(releases, start=1):
        line_count = len(release.body.splitlines()) if release.body else 0
        table.add_row(str(index), release.version or "-", release.title, str(line_count))
    return table


def run_releases(
    ctx: CLIContext,
    *,
    version: Optional[str] = None,
    file_path: Optional[Path] = None,
    as_json: bool = False,
) -> None:
    path, releases = load_releases(ctx, file_path)

    if version:
        release = find_release(releases, version)
        if release is None:
            raise click.ClickException(f"No release {version} found in {path}")
        if as_json:
            emit_output(json.dumps(_release_to_dict(release), indent=2, ensure_ascii=False))
        else:
            emit_output(normalize_markdown(release.body))
        return

    if as_json:
        payload = {"releases": [_release_to_dict(release) for release in releases]}
        emit_output(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    if not releases:
        log_info(f"no release headings found in {path}.")
        return
    console.print(_render_table(releases))


@click.command("releases")
@click.argument("version", required=False)
@click.option(
    "--file",
    "file_path",
    type=click.Path(path_type=Path, dir_okay=False),
    help="Changelog to read instead of the configured output file.",
)
@click.option("--json", "as_json", is_flag=True, help="Emit releases as JSON.")
@click.pass_obj
def releases_cmd(
    ctx: CLIContext,
    version: Optional[str],
    file_path: Optional[Path],
    as_json: bool,
) -> None:
    """List releases in the changelog, or print the notes of VERSION."""

    run_releases(ctx, version=version, file_path=file_path, as_json=as_json)
