"""Decoding of HTML entities found in upstream question text.

Only well-formed entities terminated by ``;`` are decoded. Anything else,
including unknown names and out-of-range code points, is left untouched so
that text such as ``AT&T`` or ``&unknown;`` survives unchanged.
"""

from __future__ import annotations

from html.entities import html5
import re

_ENTITY_PATTERN = re.compile(r"&(#[0-9]+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);")

_MAX_CODE_POINT = 0x10FFFF
_SURROGATES = range(0xD800, 0xE000)


def decode_html_entities(text: str) -> str:
    """Decode named, decimal and hexadecimal HTML entities in ``text``."""
    if "&" not in text:
        return text
    return _ENTITY_PATTERN.sub(_replace_entity, text)


def _replace_entity(match: re.Match[str]) -> str:
    body = match.group(1)
    if body.startswith("#"):
        if body[1:2] in ("x", "X"):
            code_point = int(body[2:], 16)
        else:
            code_point = int(body[1:])
        if code_point == 0 or code_point > _MAX_CODE_POINT or code_point in _SURROGATES:
            return match.group(0)
        return chr(code_point)
    return html5.get(f"{body};", match.group(0))
