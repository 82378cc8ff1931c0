"""Tests for emoji shortcode conversion."""

from __future__ import annotations

from shiplog.gitmoji import convert


def test_convert_known_shortcodes() -> None:
    assert convert(":sparkles: New parser") == "✨ New parser"
    assert convert(":bug: fix") == "🐛 fix"


def test_convert_leaves_unknown_shortcodes_and_urls() -> None:
    text = "see https://example.com and :not_an_emoji_code: at 12:30:45"
    assert convert(text) == text


def test_convert_with_space_separates_glyph() -> None:
    assert convert(":rocket:Launch", True) == "🚀 Launch"
    assert convert(":rocket: Launch", True) == "🚀 Launch"
