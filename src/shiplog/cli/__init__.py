"""Command-line interface for shiplog.

- ``_core``: command context, root group, ``main``
- ``_generate``: ``shiplog generate``
- ``_releases``: ``shiplog releases``
"""

from __future__ import annotations

from ._core import CLIContext, _create_cli_group, create_cli_context, main
from ._generate import generate_cmd, prepare_config, run_generate
from ._releases import load_releases, releases_cmd, run_releases

cli = _create_cli_group()
cli.add_command(generate_cmd)
cli.add_command(releases_cmd)

__all__ = [
    "CLIContext",
    "cli",
    "create_cli_context",
    "generate_cmd",
    "load_releases",
    "main",
    "prepare_config",
    "releases_cmd",
    "run_generate",
    "run_releases",
]
