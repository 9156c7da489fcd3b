"""Code-point string utilities: length, slicing and width measurement.

Every cursor position in the buffer is expressed in code points. Python
strings are already indexed by code point, except when text arrives from a
UTF-16 source decoded with ``surrogatepass``: such strings carry surrogate
pairs as two separate characters. The helpers here treat a well-formed
surrogate pair as a single unit so that no cursor position can split one.
"""

from __future__ import annotations

import re

import wcwidth as _wcwidth

# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

_SURROGATE_RE = re.compile(r"[\ud800-\udfff]")
_PAIR_RE = re.compile(r"[\ud800-\udbff][\udc00-\udfff]|.", re.DOTALL)

# CSI sequences and the OSC/APC forms used by renderers
_STRIP_RE = re.compile(
    r"\x1b\[[0-9;]*[a-zA-Z]"
    r"|\x1b\]8;;[^\x07]*\x07"
    r"|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)"
)

_WHITESPACE = frozenset((" ", "\t", "\n", "\r", "\f", "\v"))


# ---------------------------------------------------------------------------
# Code points
# ---------------------------------------------------------------------------


def to_code_points(text: str) -> list[str]:
    """Split *text* into addressable units, one per code point."""
    if not _SURROGATE_RE.search(text):
        return list(text)
    return _PAIR_RE.findall(text)


def cp_len(text: str) -> int:
    """Return the number of code points in *text*."""
    if not _SURROGATE_RE.search(text):
        return len(text)
    return len(_PAIR_RE.findall(text))


def _clamp(index: int, length: int) -> int:
    return max(0, min(index, length))


def cp_slice(text: str, start: int, end: int | None = None) -> str:
    """Return the code points of *text* in ``[start, end)``.

    Indices are clamped to ``[0, cp_len(text)]``; negative indices do not
    count from the end. An *end* before *start* yields an empty string.
    """
    if not _SURROGATE_RE.search(text):
        length = len(text)
        lo = _clamp(start, length)
        hi = length if end is None else _clamp(end, length)
        return text[lo:hi] if hi > lo else ""

    units = _PAIR_RE.findall(text)
    length = len(units)
    lo = _clamp(start, length)
    hi = length if end is None else _clamp(end, length)
    return "".join(units[lo:hi]) if hi > lo else ""


# ---------------------------------------------------------------------------
# Character classification
# ---------------------------------------------------------------------------


def is_whitespace_char(char: str) -> bool:
    """Return ``True`` if *char* is a whitespace character."""
    return char in _WHITESPACE or (len(char) == 1 and char.isspace())


def has_control_chars(text: str) -> bool:
    """Return ``True`` if *text* contains a C0 control character or DEL."""
    return any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in text)


def strip_control_chars(text: str, *, keep_newlines: bool = False) -> str:
    """Remove C0 control characters and DEL from *text*."""
    return "".join(
        ch
        for ch in text
        if (keep_newlines and ch == "\n") or not (ord(ch) < 0x20 or ord(ch) == 0x7F)
    )


# ---------------------------------------------------------------------------
# Width
# ---------------------------------------------------------------------------


def visible_width(text: str) -> int:
    """Return the number of terminal cells *text* occupies.

    ANSI escape sequences are ignored. Characters wcwidth cannot measure
    (controls, lone surrogates) count as zero cells.
    """
    if not text:
        return 0

    stripped = _STRIP_RE.sub("", text)
    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    total = 0
    for ch in stripped:
        width = _wcwidth.wcwidth(ch)
        if width > 0:
            total += width
    return total
