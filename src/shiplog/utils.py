"""Console output, logging, and small text helpers shared by shiplog modules."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from typing import NoReturn

import click
import mdformat
from rich.console import Console

BOLD = "\033[1m"
RESET = "\033[0m"

# Glyph printed in front of every log line, per level. Success messages log at
# INFO but carry their own glyph.
SUCCESS_PREFIX = "\033[92;1m✔\033[0m "
LEVEL_PREFIXES = {
    logging.DEBUG: "\033[95m◆\033[0m ",
    logging.INFO: "\033[94;1mi\033[0m ",
    logging.WARNING: "○ ",
    logging.ERROR: "\033[31m✘\033[0m ",
}
INFO_PREFIX = LEVEL_PREFIXES[logging.INFO]

logger = logging.getLogger("shiplog")

# Tables and other rich renderables; stdout stays reserved for command output.
console = Console(stderr=True)


class GlyphFormatter(logging.Formatter):
    """Prefix each line of a record with the glyph for its level."""

    def format(self, record: logging.LogRecord) -> str:
        prefix = getattr(record, "prefix", None) or LEVEL_PREFIXES.get(record.levelno, "")
        lines = record.getMessage().splitlines() or [""]
        return "\n".join(f"{prefix}{line}" if line else prefix.rstrip() for line in lines)


def configure_logging(debug: bool = False) -> logging.Logger:
    """(Re)attach a single stderr handler to the package logger."""
    level = logging.DEBUG if debug else logging.INFO
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(GlyphFormatter())
    handler.setLevel(level)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


def log_debug(message: str) -> None:
    logger.debug(message)


def log_info(message: str) -> None:
    logger.info(message)


def log_success(message: str) -> None:
    logger.info(message, extra={"prefix": SUCCESS_PREFIX})


def log_warning(message: str) -> None:
    logger.warning(message)


def log_error(message: str) -> None:
    logger.error(message)


def abort_on_user_interrupt(exc: BaseException | None = None) -> NoReturn:
    """Report a Ctrl+C and leave with the conventional exit status 130."""
    log_error("cancelled by user (Ctrl+C).")
    raise click.exceptions.Exit(130) from exc


def format_bold(text: str) -> str:
    return f"{BOLD}{text}{RESET}"


def emit_output(content: str, *, newline: bool = True) -> None:
    """Write command output (Markdown, JSON) to stdout."""
    click.echo(content, nl=newline)


def normalize_string_choices(values: object | None) -> tuple[str, ...]:
    """Turn a scalar or list config value into distinct, non-empty, stripped strings."""
    if values is None:
        return ()
    items: Iterable[object] = (
        [values] if isinstance(values, str) or not isinstance(values, Iterable) else values
    )
    seen: dict[str, None] = {}
    for item in items:
        text = str(item).strip()
        if text:
            seen.setdefault(text)
    return tuple(seen)


def upper_first(text: str) -> str:
    """Upper-case the first character, leaving the rest untouched."""
    return text[:1].upper() + text[1:]


def normalize_markdown(text: str) -> str:
    """Reformat Markdown with mdformat, keeping each paragraph on one line."""
    if not text.strip():
        return ""
    return mdformat.text(text, options={"wrap": "no"}).rstrip("\n")
