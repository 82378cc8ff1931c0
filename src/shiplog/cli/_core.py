"""Shared CLI plumbing: the command context, the root group, and ``main``."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError, version as metadata_version
from pathlib import Path
from typing import Iterator, Optional

import click

from .. import __version__ as package_version
from ..config import CONFIG_RELATIVE_PATH, Config, default_config_path, load_project_config
from ..utils import abort_on_user_interrupt, configure_logging, log_debug


def _resolve_cli_version() -> str:
    try:
        return metadata_version("shiplog")
    except PackageNotFoundError:
        return package_version


@dataclass
class CLIContext:
    """State handed to every subcommand through ``ctx.obj``.

    The config is loaded lazily so that commands which never need it, and
    ``--help``, work in directories with a broken config file.
    """

    project_root: Path
    config_path: Path
    _config: Optional[Config] = field(default=None, repr=False)

    def ensure_config(self) -> Config:
        """Load the project config on first use, reporting bad values as usage errors."""
        if self._config is not None:
            return self._config
        try:
            config = load_project_config(self.project_root, config_path=self.config_path)
        except ValueError as error:
            raise click.ClickException(str(error)) from error
        self._config = config
        return config


def _root_candidates(start: Path) -> Iterator[Path]:
    resolved = start.resolve()
    yield resolved
    yield from resolved.parents


def _resolve_project_root(start: Path) -> Path:
    """Return the closest directory holding a shiplog config or a ``.git`` entry."""
    markers = (CONFIG_RELATIVE_PATH, Path(".git"))
    found = next(
        (
            candidate
            for candidate in _root_candidates(start)
            if any((candidate / marker).exists() for marker in markers)
        ),
        None,
    )
    return found or start.resolve()


def create_cli_context(
    *,
    root: Path | None = None,
    config: Optional[Path] = None,
    debug: bool = False,
) -> CLIContext:
    """Configure logging and build the context exactly as the ``shiplog`` group does."""
    configure_logging(debug)
    project_root = root.resolve() if root is not None else _resolve_project_root(Path.cwd())
    config_path = config.resolve() if config is not None else default_config_path(project_root)
    log_debug(f"project root: {project_root}")
    log_debug(f"config file: {config_path}")
    return CLIContext(project_root=project_root, config_path=config_path)


def _create_cli_group() -> click.Group:
    """Build the root ``shiplog`` group; subcommands are attached by the package."""

    @click.group(
        invoke_without_command=True,
        context_settings={"help_option_names": ["-h", "--help"]},
    )
    @click.version_option(
        _resolve_cli_version(), "--version", "-V", message="%(version)s"
    )
    @click.option(
        "--root",
        type=click.Path(path_type=Path, exists=True, file_okay=False),
        help="Git checkout to read commits from (defaults to the enclosing repository).",
    )
    @click.option(
        "--config",
        type=click.Path(path_type=Path, dir_okay=False),
        help="Config file to use instead of shiplog.yaml in the project root.",
    )
    @click.option("--debug", "-d", is_flag=True, help="Enable debug logging.")
    @click.pass_context
    def shiplog(
        ctx: click.Context,
        root: Path | None,
        config: Optional[Path],
        debug: bool,
    ) -> None:
        """Generate Markdown changelogs from conventional commits."""
        ctx.obj = create_cli_context(root=root, config=config, debug=debug)
        if ctx.invoked_subcommand is None:
            from ._generate import generate_cmd

            ctx.invoke(generate_cmd)

    return shiplog


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return its exit status instead of exiting."""
    from . import cli

    args = list(sys.argv[1:] if argv is None else argv)
    try:
        result = cli.main(args=args, prog_name="shiplog", standalone_mode=False)
    except click.ClickException as exc:
        exc.show(file=sys.stderr)
        return exc.exit_code
    except (click.exceptions.Abort, KeyboardInterrupt) as exc:
        try:
            abort_on_user_interrupt(exc)
        except click.exceptions.Exit as interrupted:
            return interrupted.exit_code
    return result if isinstance(result, int) else 0
