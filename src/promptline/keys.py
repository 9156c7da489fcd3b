"""Raw terminal input decoding.

Turns one complete terminal sequence (as emitted by ``StdinBuffer``) into a
``RawKeyEvent``: the flag-bag shape terminal libraries hand to applications.
Recognizes legacy VT/xterm escape sequences, xterm modified forms
(``ESC [ 1 ; <mod> X`` / ``ESC [ <n> ; <mod> ~``), the kitty CSI-u form and
the xterm ``modifyOtherKeys`` form. Anything unrecognized is passed through
as literal text with no flags; deciding what it means is left to
``normalize_key``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ESC = "\x1b"
DEL = "\x7f"
BS = "\x08"

MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
}

LOCK_MASK = 64 + 128

# Legacy escape sequences -> key names
LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[4~": "end",
    "\x1b[7~": "home",
    "\x1b[8~": "end",
    "\x1b[2~": "insert",
    "\x1b[3~": "delete",
    "\x1b[5~": "pageup",
    "\x1b[6~": "pagedown",
    "\x1b[[5~": "pageup",
    "\x1b[[6~": "pagedown",
}

# Sequences terminals send for Shift+Enter when they have no dedicated code
SHIFT_ENTER_SEQUENCES: frozenset[str] = frozenset(
    {
        "\n",
        "\x1b\r",
        "\x1b[13;2~",
        "\x1b[27;2;13~",
        "\x1b[13;2u",
    }
)

_LETTER_TO_KEY: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
}

_NUMBER_TO_KEY: dict[int, str] = {
    1: "home",
    2: "insert",
    3: "delete",
    4: "end",
    5: "pageup",
    6: "pagedown",
    7: "home",
    8: "end",
}

_CODEPOINT_TO_KEY: dict[int, str] = {
    9: "tab",
    13: "return",
    27: "escape",
    32: "space",
    127: "backspace",
    57414: "return",
}

# ESC [ 1 ; <mod>(:<event>)? X
_MODIFIED_LETTER_RE = re.compile(r"^\x1b\[1;(\d+)(?::\d+)?([ABCDHF])$")
# ESC [ <n> ; <mod>(:<event>)? ~
_MODIFIED_TILDE_RE = re.compile(r"^\x1b\[(\d+);(\d+)(?::\d+)?~$")
# ESC [ <codepoint>(:<shifted>(:<base>)?)? (; <mod>(:<event>)?)? u
_KITTY_CSI_U_RE = re.compile(r"^\x1b\[(\d+)(?::\d*(?::\d+)?)?(?:;(\d+)(?::\d+)?)?u$")
# ESC [ 27 ; <mod> ; <keycode> ~
_MODIFY_OTHER_KEYS_RE = re.compile(r"^\x1b\[27;(\d+);(\d+)~$")


# ---------------------------------------------------------------------------
# RawKeyEvent
# ---------------------------------------------------------------------------


@dataclass
class RawKeyEvent:
    """One input event as a terminal library reports it.

    ``name``, ``backspace`` and ``delete`` are hints only: emulators disagree
    about how erase keys are signalled, so ``normalize_key`` re-derives them.
    """

    sequence: str = ""
    name: str | None = None
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
    escape: bool = False
    return_: bool = False
    tab: bool = False
    up_arrow: bool = False
    down_arrow: bool = False
    left_arrow: bool = False
    right_arrow: bool = False
    home: bool = False
    end: bool = False
    page_up: bool = False
    page_down: bool = False
    backspace: bool = False
    delete: bool = False
    paste: bool = False


def _modifier_flags(modifier: int) -> dict[str, bool]:
    mod = (modifier - 1) & ~LOCK_MASK
    return {
        "shift": bool(mod & MODIFIERS["shift"]),
        "meta": bool(mod & MODIFIERS["alt"]),
        "ctrl": bool(mod & MODIFIERS["ctrl"]),
    }


def _named_event(data: str, name: str, **flags: bool) -> RawKeyEvent:
    """Build an event for a named key, setting its motion/edit flag."""
    event = RawKeyEvent(sequence=data, name=name, **flags)
    if name == "up":
        event.up_arrow = True
    elif name == "down":
        event.down_arrow = True
    elif name == "left":
        event.left_arrow = True
    elif name == "right":
        event.right_arrow = True
    elif name == "home":
        event.home = True
    elif name == "end":
        event.end = True
    elif name == "pageup":
        event.page_up = True
    elif name == "pagedown":
        event.page_down = True
    elif name == "return":
        event.return_ = True
    elif name == "escape":
        event.escape = True
    elif name == "tab":
        event.tab = True
    elif name == "delete":
        event.delete = True
    elif name == "backspace":
        event.backspace = True
    return event


def _decode_codepoint(data: str, codepoint: int, modifier: int) -> RawKeyEvent:
    flags = _modifier_flags(modifier)
    name = _CODEPOINT_TO_KEY.get(codepoint)
    if name is not None:
        return _named_event(data, name, **flags)
    try:
        ch = chr(codepoint)
    except (ValueError, OverflowError):
        return RawKeyEvent(sequence=data)
    if not ch.isprintable():
        return RawKeyEvent(sequence=data)
    if flags["ctrl"] or flags["meta"]:
        return RawKeyEvent(sequence=data, name=ch.lower(), **flags)
    # A plain printable key: deliver the character itself as the text
    return RawKeyEvent(sequence=ch, name=ch.lower(), shift=flags["shift"])


def _decode_escape(data: str) -> RawKeyEvent:  # noqa: C901
    if data == ESC:
        return _named_event(data, "escape")

    key = LEGACY_KEY_SEQUENCES.get(data)
    if key is not None:
        return _named_event(data, key)

    if data == "\x1b[Z":
        return _named_event(data, "tab", shift=True)

    m = _MODIFIED_LETTER_RE.match(data)
    if m:
        return _named_event(data, _LETTER_TO_KEY[m.group(2)], **_modifier_flags(int(m.group(1))))

    m = _MODIFY_OTHER_KEYS_RE.match(data)
    if m:
        return _decode_codepoint(data, int(m.group(2)), int(m.group(1)))

    m = _MODIFIED_TILDE_RE.match(data)
    if m:
        key = _NUMBER_TO_KEY.get(int(m.group(1)))
        if key is not None:
            return _named_event(data, key, **_modifier_flags(int(m.group(2))))

    m = _KITTY_CSI_U_RE.match(data)
    if m:
        modifier = int(m.group(2)) if m.group(2) else 1
        return _decode_codepoint(data, int(m.group(1)), modifier)

    # Alt + key: ESC prefix before a single character
    if len(data) == 2:
        ch = data[1]
        if ch in (DEL, BS):
            return _named_event(data, "backspace", meta=True)
        if ch == "\t":
            return _named_event(data, "tab", meta=True)
        if ch == ESC:
            return _named_event(data, "escape", meta=True)
        if 1 <= ord(ch) <= 26:
            return RawKeyEvent(sequence=data, name=chr(ord(ch) + 96), ctrl=True, meta=True)
        if ch.isprintable():
            return RawKeyEvent(sequence=data, name=ch.lower(), meta=True, shift=ch.isupper())

    logger.debug("Unrecognized escape sequence %r passed through as text", data)
    return RawKeyEvent(sequence=data)


def decode_key(data: str, *, paste: bool = False) -> RawKeyEvent:
    """Decode one complete raw terminal sequence into a ``RawKeyEvent``.

    With ``paste=True`` the data is a bracketed-paste payload and is passed
    through verbatim with only the ``paste`` flag set.
    """
    if paste:
        return RawKeyEvent(sequence=data, paste=True)

    if not data:
        return RawKeyEvent()

    if data in SHIFT_ENTER_SEQUENCES:
        return _named_event(data, "return", shift=True)

    # Erase bytes, possibly coalesced; normalize_key derives the count
    if all(ch in (DEL, BS) for ch in data):
        return RawKeyEvent(sequence=data)

    if data.startswith(ESC):
        return _decode_escape(data)

    if data == "\r":
        return _named_event(data, "return")
    if data == "\t":
        return _named_event(data, "tab")
    if data == "\x00":
        return RawKeyEvent(sequence=data, name="space", ctrl=True)

    # Ctrl + letter (0x01 - 0x1a)
    if len(data) == 1 and 1 <= ord(data) <= 26:
        return RawKeyEvent(sequence=data, name=chr(ord(data) + 96), ctrl=True)

    if len(data) == 1:
        if data == " ":
            return RawKeyEvent(sequence=data, name="space")
        if data.isprintable():
            return RawKeyEvent(sequence=data, name=data.lower(), shift=data.isupper())

    return RawKeyEvent(sequence=data)
