"""Key normalization: raw terminal events to canonical ``NormalizedKey``.

Terminal emulators disagree on how the erase keys are reported. Some send
DEL (0x7f) for Backspace, some BS (0x08); terminal libraries then flag them
inconsistently, sometimes reporting Backspace as ``delete`` with an empty
sequence. ``normalize_key`` resolves this with a fixed cascade, first match
wins:

1. a ``name`` hint of ``"backspace"`` or ``"delete"`` is trusted;
2. a raw backspace flag means backspace, but only with a non-empty sequence
   (empty-sequence events are dropped);
3. a raw delete flag means backspace when the sequence is empty, delete
   otherwise;
4. with no flags, a sequence starting with 0x7f/0x08 is backspace and a CSI
   delete (``ESC [ 3 ~`` or anything starting ``ESC [ 3``) is delete.

Anything else passes through with no edit flags as literal text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from promptline.keys import RawKeyEvent

logger = logging.getLogger(__name__)

_ERASE_CODES = (127, 8)
_CSI_DELETE = "\x1b[3~"
_CSI_DELETE_PREFIX = "\x1b[3"


@dataclass(frozen=True)
class NormalizedKey:
    """Canonical, terminal-independent representation of one input event."""

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
    repeat_count: int = 1
    paste: bool = False


def _resolve_erase(raw: RawKeyEvent) -> tuple[bool, bool] | None:
    """Return ``(backspace, delete)`` for *raw*, or ``None`` to drop it."""
    seq = raw.sequence

    if raw.name == "backspace":
        return True, False
    if raw.name == "delete":
        return False, True

    if raw.backspace:
        if seq:
            return True, False
        return None

    if raw.delete:
        if not seq:
            return True, False
        return False, True

    if seq:
        if ord(seq[0]) in _ERASE_CODES:
            return True, False
        if seq == _CSI_DELETE or seq.startswith(_CSI_DELETE_PREFIX):
            return False, True

    return False, False


def _recover_ctrl_name(raw: RawKeyEvent) -> str | None:
    """Recover Ctrl+C / Ctrl+D when the terminal library left ``name`` unset."""
    seq = raw.sequence
    if not (raw.ctrl and raw.name is None and seq):
        return raw.name

    lowered = seq.lower()
    if lowered == "c":
        return "c"
    if lowered == "d":
        return "d"

    code = ord(seq[0])
    if code == 3:
        return "c"
    if code == 4:
        return "d"
    return None


def normalize_key(raw: RawKeyEvent) -> NormalizedKey | None:
    """Build the ``NormalizedKey`` for *raw*.

    Returns ``None`` when the event must not be dispatched at all (a raw
    backspace flag with an empty sequence). Never raises.
    """
    if raw.paste:
        return NormalizedKey(sequence=raw.sequence, paste=True)

    erase = _resolve_erase(raw)
    if erase is None:
        logger.debug("Dropped empty backspace event")
        return None
    backspace, delete = erase

    # Coalesced keystrokes arrive as one sequence; delete is never coalesced
    repeat_count = 1
    if backspace and len(raw.sequence) > 1:
        repeat_count = sum(1 for ch in raw.sequence if ord(ch) in _ERASE_CODES) or 1

    name = "return" if raw.return_ else _recover_ctrl_name(raw)

    return NormalizedKey(
        sequence=raw.sequence,
        name=name,
        ctrl=raw.ctrl,
        meta=raw.meta,
        shift=raw.shift,
        escape=raw.escape,
        return_=raw.return_,
        tab=raw.tab,
        up_arrow=raw.up_arrow,
        down_arrow=raw.down_arrow,
        left_arrow=raw.left_arrow,
        right_arrow=raw.right_arrow,
        home=raw.home,
        end=raw.end,
        page_up=raw.page_up,
        page_down=raw.page_down,
        backspace=backspace,
        delete=delete,
        repeat_count=repeat_count,
        paste=False,
    )
