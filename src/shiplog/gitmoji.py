"""Convert ``:shortcode:`` emoji into unicode glyphs."""

from __future__ import annotations

import re

import emoji

SHORTCODE_RE = re.compile(r":[a-z0-9_+\-]+:", re.IGNORECASE)


def convert(text: str, with_space: bool = False) -> str:
    """Replace known emoji shortcodes in text with their glyphs.

    Unknown shortcodes are left as-is. With ``with_space``, a converted glyph
    that is directly followed by a non-space character gets a trailing space.
    """

    def _replace(match: re.Match[str]) -> str:
        code = match.group(0)
        glyph = emoji.emojize(code, language="alias")
        if glyph == code:
            return code
        following = match.string[match.end() : match.end() + 1]
        if with_space and following and not following.isspace():
            return f"{glyph} "
        return glyph

    return SHORTCODE_RE.sub(_replace, text)
