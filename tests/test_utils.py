"""Unit tests for shared utilities."""

from __future__ import annotations

import logging

import click
import pytest

from shiplog.utils import (
    INFO_PREFIX,
    abort_on_user_interrupt,
    configure_logging,
    log_debug,
    log_info,
    normalize_markdown,
    normalize_string_choices,
    upper_first,
)


def test_upper_first_only_touches_first_character() -> None:
    assert upper_first("add API client") == "Add API client"
    assert upper_first("") == ""


def test_normalize_string_choices() -> None:
    assert normalize_string_choices(None) == ()
    assert normalize_string_choices(" bot ") == ("bot",)
    assert normalize_string_choices(["a", " a", "", "b"]) == ("a", "b")
    assert normalize_string_choices(42) == ("42",)


def test_normalize_markdown_joins_wrapped_paragraphs() -> None:
    text = "First line\nwrapped here.\n\n- item"
    assert normalize_markdown(text) == "First line wrapped here.\n\n- item"


def test_log_helpers_respect_debug_flag(capsys: pytest.CaptureFixture[str]) -> None:
    logger = configure_logging(debug=False)
    log_info("visible")
    log_debug("hidden")
    captured = capsys.readouterr()
    assert f"{INFO_PREFIX}visible" in captured.err
    assert "hidden" not in captured.err
    assert logger.level == logging.INFO

    configure_logging(debug=True)
    log_debug("now shown")
    assert "now shown" in capsys.readouterr().err
    configure_logging(debug=False)


def test_abort_on_user_interrupt_exits_130() -> None:
    with pytest.raises(click.exceptions.Exit) as excinfo:
        abort_on_user_interrupt(KeyboardInterrupt())
    assert excinfo.value.exit_code == 130
