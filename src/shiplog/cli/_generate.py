"""Generate command: render commits between two refs as Markdown."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

import click

from ..commits import filter_commits, parse_commits
from ..config import Config
from ..git import get_current_git_ref, get_git_diff, get_last_git_tag
from ..identity import LookupServices
from ..markdown import render_changelog
from ..releases import update_changelog
from ..utils import emit_output, format_bold, log_info, log_success, log_warning
from ._core import CLIContext

__all__ = ["generate_cmd", "prepare_config", "run_generate"]


def prepare_config(
    ctx: CLIContext,
    *,
    from_ref: Optional[str] = None,
    to_ref: Optional[str] = None,
    new_version: Optional[str] = None,
    no_authors: bool = False,
    hide_author_email: bool = False,
) -> Config:
    """Merge run-scoped options into the project config, defaulting refs from git."""
    config = ctx.ensure_config()
    root = ctx.project_root
    resolved_from = from_ref if from_ref is not None else (get_last_git_tag(root) or "")
    resolved_to = to_ref or get_current_git_ref(root)
    version = new_version.strip().removeprefix("v") if new_version else None
    return replace(
        config,
        from_ref=resolved_from,
        to_ref=resolved_to,
        new_version=version or None,
        no_authors=config.no_authors or no_authors,
        hide_author_email=config.hide_author_email or hide_author_email,
    )


def run_generate(
    ctx: CLIContext,
    *,
    from_ref: Optional[str] = None,
    to_ref: Optional[str] = None,
    new_version: Optional[str] = None,
    output: bool = False,
    no_authors: bool = False,
    hide_author_email: bool = False,
    services: Optional[LookupServices] = None,
    echo: bool = True,
) -> str:
    """Render the changelog for the configured range and optionally write it."""
    config = prepare_config(
        ctx,
        from_ref=from_ref,
        to_ref=to_ref,
        new_version=new_version,
        no_authors=no_authors,
        hide_author_email=hide_author_email,
    )
    try:
        raw_commits = get_git_diff(ctx.project_root, config.from_ref or None, config.to_ref)
    except RuntimeError as exc:
        raise click.ClickException(str(exc)) from exc

    commits = filter_commits(parse_commits(raw_commits, config.scope_map), config.types)
    range_label = f"{config.from_ref or '(start)'}...{config.to_ref}"
    log_info(f"found {len(commits)} commits in {format_bold(range_label)}.")
    if not commits:
        log_warning("no conventional commits to include; the release will be empty.")

    markdown = render_changelog(commits, config, services=services)
    if echo:
        emit_output(markdown)

    if output:
        path = ctx.project_root / config.output
        update_changelog(path, markdown, config.new_version)
        log_success(f"updated {path}")
    return markdown


@click.command("generate")
@click.option("--from", "from_ref", help="Start ref (defaults to the latest tag).")
@click.option("--to", "to_ref", help="End ref (defaults to the current branch).")
@click.option("-r", "--release", "new_version", help="Version used for the release heading.")
@click.option(
    "--output/--no-output",
    default=False,
    help="Also write the release into the configured changelog file.",
)
@click.option("--no-authors", is_flag=True, help="Omit the contributors section.")
@click.option("--hide-author-email", is_flag=True, help="Never show contributor emails.")
@click.pass_obj
def generate_cmd(
    ctx: CLIContext,
    from_ref: Optional[str] = None,
    to_ref: Optional[str] = None,
    new_version: Optional[str] = None,
    output: bool = False,
    no_authors: bool = False,
    hide_author_email: bool = False,
) -> None:
    """Render commits since the last release as Markdown."""

    run_generate(
        ctx,
        from_ref=from_ref,
        to_ref=to_ref,
        new_version=new_version,
        output=output,
        no_authors=no_authors,
        hide_author_email=hide_author_email,
    )
