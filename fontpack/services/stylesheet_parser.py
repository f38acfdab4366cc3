"""
Stylesheet Parser — turn a provider stylesheet into ``@font-face`` descriptors.

This is deliberately not a CSS grammar. The text is cut into logical lines
(one per declaration or block delimiter) and a two-state machine walks them,
filling a local accumulator while inside an ``@font-face`` block.
"""

from __future__ import annotations

import enum
import re
from collections.abc import Iterator

from fontpack.schemas.fonts import FontFaceDescriptor

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.S)
_QUOTED_RE = re.compile(r"""(['"])(.*?)\1""")
_URL_RE = re.compile(r"""url\(\s*(['"]?)(.*?)\1\s*\)""", re.S)

FONT_FACE_MARKER = "@font-face"
BLOCK_END = "}"


class ParserState(enum.Enum):
    outside = "outside"
    inside = "inside"


# property name -> descriptor field
_TAGS = {
    "font-family": "family",
    "font-style": "style",
    "font-weight": "weight",
    "src": "source_url",
    "font-display": "display",
}


def logical_lines(css: str) -> Iterator[str]:
    """Split ``css`` at ``{``, ``;``, ``}`` and before ``@`` outside quotes and parentheses.

    ``}`` always ends a line, and parentheses left open at a newline are
    dropped, so one broken ``url(`` cannot swallow the following blocks.

    Block ends are yielded as a bare ``"}"`` so callers can see them.
    Comments are dropped and whitespace runs collapse to a single space.
    """
    text = _COMMENT_RE.sub("", css)
    buf: list[str] = []
    quote: str | None = None
    depth = 0
    for ch in text:
        if quote:
            buf.append(ch)
            # An unescaped newline ends a CSS string.
            if ch == quote or ch == "\n":
                quote = None
            continue
        if ch in "'\"":
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")" and depth:
            depth -= 1
        elif ch == "\n":
            depth = 0
        elif depth == 0 and ch == "@":
            # At-rules always start a fresh line.
            line = " ".join("".join(buf).split())
            if line:
                yield line
            buf = []
        elif ch == BLOCK_END or (depth == 0 and ch in "{;"):
            line = " ".join("".join(buf).split())
            if line:
                yield line
            if ch == BLOCK_END:
                yield BLOCK_END
            buf = []
            depth = 0
            continue
        buf.append(ch)
    line = " ".join("".join(buf).split())
    if line:
        yield line


def _family(value: str) -> str:
    match = _QUOTED_RE.search(value)
    if match:
        return match.group(2)
    return value.strip()


def _source_url(value: str) -> str:
    match = _URL_RE.search(value)
    if match is None:
        return ""
    return match.group(2).strip()


def tag_line(line: str) -> tuple[str, str] | None:
    """Classify a declaration as ``(field, value)``; ``None`` when it is not one we keep."""
    name, sep, value = line.partition(":")
    if not sep:
        return None
    field = _TAGS.get(name.strip().lower())
    if field is None:
        return None
    if field == "family":
        return field, _family(value)
    if field == "source_url":
        return field, _source_url(value)
    return field, value.strip()


def advance(
    state: ParserState, accumulator: dict[str, str] | None, line: str
) -> tuple[ParserState, dict[str, str] | None, FontFaceDescriptor | None]:
    """Feed one logical line; returns the next state, accumulator and any finished descriptor."""
    if FONT_FACE_MARKER in line:
        finished = FontFaceDescriptor(**accumulator) if accumulator is not None else None
        return ParserState.inside, {}, finished

    if state is ParserState.outside or accumulator is None:
        return state, accumulator, None

    if line == BLOCK_END:
        return ParserState.outside, None, FontFaceDescriptor(**accumulator)

    tagged = tag_line(line)
    if tagged is None:
        return state, accumulator, None
    field, value = tagged
    return state, {**accumulator, field: value}, None


def parse_font_faces(css: str) -> Iterator[FontFaceDescriptor]:
    """Yield one descriptor per ``@font-face`` block in source order.

    Missing or reordered declarations leave fields empty; nothing here raises
    on bad CSS.
    """
    state = ParserState.outside
    accumulator: dict[str, str] | None = None
    for line in logical_lines(css):
        state, accumulator, finished = advance(state, accumulator, line)
        if finished is not None:
            yield finished
    if accumulator is not None:
        yield FontFaceDescriptor(**accumulator)
