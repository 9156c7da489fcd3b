"""Splits raw stdin chunks into complete input sequences.

Stdin delivers data in arbitrary chunks: an escape sequence can be cut in
half, and a bracketed paste can span many reads. ``StdinBuffer`` holds
partial escape sequences until they complete and extracts everything
between the paste markers as a single paste payload.

Plain text and erase bytes are grouped into runs, so several characters
read at once reach the normalizer as one sequence, as a terminal library
reports a fast burst of keystrokes.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Callable, Literal

logger = logging.getLogger(__name__)

ESC = "\x1b"
BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"

SequenceStatus = Literal["complete", "incomplete", "not-escape"]

_ERASE = ("\x7f", "\x08")
_SGR_MOUSE_RE = re.compile(r"^<\d+;\d+;\d+[Mm]$")


def _csi_status(data: str) -> SequenceStatus:
    if len(data) < 3:
        return "incomplete"
    payload = data[2:]
    if payload.startswith("M"):
        # X10 mouse: ESC [ M plus three bytes
        return "complete" if len(data) >= 6 else "incomplete"
    if not 0x40 <= ord(payload[-1]) <= 0x7E:
        return "incomplete"
    if payload.startswith("<") and not _SGR_MOUSE_RE.match(payload):
        return "incomplete"
    return "complete"


def sequence_status(data: str) -> SequenceStatus:
    """Classify *data* as a complete or incomplete escape sequence."""
    if not data.startswith(ESC):
        return "not-escape"
    if len(data) == 1:
        return "incomplete"

    introducer = data[1]
    if introducer == "[":
        return _csi_status(data)
    if introducer == "]":
        # OSC ends with BEL or ST
        return "complete" if data.endswith(("\x07", f"{ESC}\\")) else "incomplete"
    if introducer in ("P", "_"):
        # DCS / APC end with ST
        return "complete" if data.endswith(f"{ESC}\\") else "incomplete"
    if introducer == "O":
        return "complete" if len(data) >= 3 else "incomplete"
    # Meta key: ESC followed by one character
    return "complete"


def _run_length(data: str, start: int, predicate: Callable[[str], bool]) -> int:
    end = start
    while end < len(data) and predicate(data[end]):
        end += 1
    return end - start


def _is_text(ch: str) -> bool:
    return ch != ESC and ord(ch) >= 0x20 and ch != "\x7f"


def split_sequences(data: str) -> tuple[list[str], str]:
    """Split *data* into complete sequences.

    Returns ``(sequences, remainder)`` where *remainder* is a trailing
    escape sequence that still needs more data.
    """
    sequences: list[str] = []
    pos = 0

    while pos < len(data):
        ch = data[pos]

        if ch == ESC:
            end = pos + 1
            while end <= len(data):
                if sequence_status(data[pos:end]) != "incomplete":
                    break
                end += 1
            else:
                return sequences, data[pos:]
            sequences.append(data[pos:end])
            pos = end
        elif _is_text(ch):
            length = _run_length(data, pos, _is_text)
            sequences.append(data[pos : pos + length])
            pos += length
        elif ch in _ERASE:
            length = _run_length(data, pos, lambda c: c in _ERASE)
            sequences.append(data[pos : pos + length])
            pos += length
        else:
            sequences.append(ch)
            pos += 1

    return sequences, ""


class StdinBuffer:
    """Buffers stdin input and emits complete sequences and pastes."""

    def __init__(self, *, timeout: float = 0.01) -> None:
        self._buffer: str = ""
        self._timeout: float = timeout
        self._timeout_handle: asyncio.TimerHandle | None = None
        self._paste_mode: bool = False
        self._paste_buffer: str = ""

        self._on_data: Callable[[str], None] | None = None
        self._on_paste: Callable[[str], None] | None = None

    def on_data(self, callback: Callable[[str], None]) -> None:
        """Set callback for complete sequences."""
        self._on_data = callback

    def on_paste(self, callback: Callable[[str], None]) -> None:
        """Set callback for bracketed-paste payloads."""
        self._on_paste = callback

    def _emit_data(self, data: str) -> None:
        if self._on_data:
            self._on_data(data)

    def _emit_paste(self, data: str) -> None:
        logger.debug("Bracketed paste of %d characters", len(data))
        if self._on_paste:
            self._on_paste(data)

    def _cancel_timeout(self) -> None:
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None

    def _finish_paste(self) -> bool:
        """Emit the paste if its end marker has arrived; feed what follows."""
        end_index = self._paste_buffer.find(BRACKETED_PASTE_END)
        if end_index == -1:
            return False

        content = self._paste_buffer[:end_index]
        remaining = self._paste_buffer[end_index + len(BRACKETED_PASTE_END) :]
        self._paste_mode = False
        self._paste_buffer = ""

        self._emit_paste(content)
        if remaining:
            self.process(remaining)
        return True

    def process(self, data: str) -> None:
        """Feed a chunk of raw input."""
        self._cancel_timeout()
        self._buffer += data

        if self._paste_mode:
            self._paste_buffer += self._buffer
            self._buffer = ""
            self._finish_paste()
            return

        start_index = self._buffer.find(BRACKETED_PASTE_START)
        if start_index != -1:
            sequences, _ = split_sequences(self._buffer[:start_index])
            for sequence in sequences:
                self._emit_data(sequence)

            self._paste_mode = True
            self._paste_buffer = self._buffer[start_index + len(BRACKETED_PASTE_START) :]
            self._buffer = ""
            self._finish_paste()
            return

        sequences, self._buffer = split_sequences(self._buffer)
        for sequence in sequences:
            self._emit_data(sequence)

        if self._buffer:
            self._schedule_flush()

    def _schedule_flush(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running loop - nothing would fire the timer
            for sequence in self.flush():
                self._emit_data(sequence)
            return
        self._timeout_handle = loop.call_later(self._timeout, self._flush_timeout)

    def _flush_timeout(self) -> None:
        self._timeout_handle = None
        pending = self.flush()
        if pending:
            logger.debug("Flushing incomplete sequence %r after timeout", pending[0])
        for sequence in pending:
            self._emit_data(sequence)

    def flush(self) -> list[str]:
        """Return and clear whatever partial input is being held."""
        self._cancel_timeout()
        if not self._buffer:
            return []
        pending = [self._buffer]
        self._buffer = ""
        return pending

    def clear(self) -> None:
        """Drop all buffered input, including an unfinished paste."""
        self._cancel_timeout()
        self._buffer = ""
        self._paste_mode = False
        self._paste_buffer = ""

    def get_buffer(self) -> str:
        return self._buffer

    def destroy(self) -> None:
        self.clear()
