"""Headless multi-line prompt input.

``PromptInput`` routes normalized keys to a ``TextBuffer`` in a fixed
priority order, hands committed text off on submit and renders the visible
window as plain strings with an inline reverse-video cursor.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable

from promptline.codepoints import (
    cp_len,
    cp_slice,
    strip_control_chars,
    visible_width,
)
from promptline.keymatchers import KeyMatchers
from promptline.keys import ESC, decode_key
from promptline.layout import Viewport
from promptline.normalize import NormalizedKey, normalize_key
from promptline.stdin_buffer import StdinBuffer
from promptline.text_buffer import TextBuffer

logger = logging.getLogger(__name__)

PLACEHOLDER_MESSAGES: tuple[str, ...] = (
    "  Ask me about file operations...",
    "  What would you like me to help with?",
    "  Type your question or command...",
    "  How can I assist you today?",
    "  What files should I work with?",
)

CURSOR_ON = "\x1b[7m"
CURSOR_OFF = "\x1b[27m"


def random_placeholder() -> str:
    return random.choice(PLACEHOLDER_MESSAGES)


@dataclass
class PromptInputOptions:
    terminal_width: int = 80
    # Columns taken by the border, padding and the "> " prompt
    width_margin: int = 6
    height: int = 10
    placeholder: str | None = None
    focus: bool = True
    key_matchers: KeyMatchers | None = None
    paste_timeout: float = 0.01

    def viewport(self) -> Viewport:
        return Viewport(
            width=max(1, self.terminal_width - self.width_margin),
            height=max(1, self.height),
        )


class PromptInput:
    """Multi-line input for a chat panel.

    Enter submits, Shift+Enter (or a trailing backslash before Enter) inserts
    a newline, Escape clears the text or, when already empty, exits.
    """

    def __init__(
        self,
        on_submit: Callable[[str], None],
        on_exit: Callable[[], None] | None = None,
        options: PromptInputOptions | None = None,
    ) -> None:
        if options is None:
            options = PromptInputOptions()

        self._options = options
        self.buffer = TextBuffer(viewport=options.viewport())
        self.key_matchers = options.key_matchers or KeyMatchers()
        self.placeholder: str = (
            options.placeholder if options.placeholder is not None else random_placeholder()
        )

        self.on_submit = on_submit
        self.on_exit = on_exit
        self.focus: bool = options.focus
        self.processing: bool = False

        self._stdin = StdinBuffer(timeout=options.paste_timeout)
        self._stdin.on_data(self._handle_sequence)
        self._stdin.on_paste(lambda data: self._handle_sequence(data, paste=True))

    # -- Accessors -----------------------------------------------------------

    @property
    def active(self) -> bool:
        return self.focus and not self.processing

    def get_text(self) -> str:
        return self.buffer.text

    def resize(self, terminal_width: int) -> None:
        """Follow a terminal resize; the height is unchanged."""
        self._options.terminal_width = terminal_width
        viewport = self._options.viewport()
        self.buffer.set_viewport(viewport.width, viewport.height)

    # -- Raw input -----------------------------------------------------------

    def feed(self, data: str) -> None:
        """Feed raw terminal input: chunks are split, decoded and dispatched."""
        self._stdin.process(data)

    def _handle_sequence(self, data: str, paste: bool = False) -> None:
        key = normalize_key(decode_key(data, paste=paste))
        if key is None:
            logger.debug("Ignoring undispatchable key event %r", data)
            return
        self.handle_key(key)

    # -- Dispatch ------------------------------------------------------------

    def handle_key(self, key: NormalizedKey) -> None:  # noqa: C901
        """Dispatch one normalized key."""
        if not self.active:
            return

        buffer = self.buffer
        km = self.key_matchers

        # Paste: one atomic insertion
        if key.paste:
            buffer.handle_input(key)
            return

        if km.matches(key, "ESCAPE"):
            if buffer.text:
                buffer.set_text("")
            elif self.on_exit:
                self.on_exit()
            return

        if km.matches(key, "SUBMIT"):
            if buffer.text.strip():
                row, col = buffer.cursor
                char_before = cp_slice(buffer.lines[row], col - 1, col) if col > 0 else ""
                # Terminals without Shift+Enter: backslash-Enter inserts a newline
                if char_before == "\\":
                    buffer.backspace()
                    buffer.newline()
                else:
                    self._submit()
            return

        if km.matches(key, "NEWLINE"):
            buffer.newline()
            return

        if km.matches(key, "HOME"):
            buffer.move("home")
            return
        if km.matches(key, "END"):
            buffer.move("end")
            return
        if km.matches(key, "KILL_LINE_LEFT"):
            buffer.kill_line_left()
            return
        if km.matches(key, "KILL_LINE_RIGHT"):
            buffer.kill_line_right()
            return
        if km.matches(key, "DELETE_WORD_BACKWARD"):
            buffer.delete_word_left()
            return

        if key.up_arrow:
            buffer.move("up")
            return
        if key.down_arrow:
            buffer.move("down")
            return
        if key.left_arrow:
            buffer.move("left")
            return
        if key.right_arrow:
            buffer.move("right")
            return

        if key.backspace:
            for _ in range(key.repeat_count or 1):
                buffer.backspace()
            return
        if key.delete:
            for _ in range(key.repeat_count or 1):
                buffer.delete()
            return

        self._insert_literal(key)

    def _insert_literal(self, key: NormalizedKey) -> None:
        # Unbound shortcuts and unknown escape sequences are not text
        if key.ctrl or key.meta or key.sequence.startswith(ESC):
            logger.debug("Unhandled key %r", key.sequence)
            return
        text = strip_control_chars(key.sequence)
        if text:
            self.buffer.handle_input(NormalizedKey(sequence=text))

    def _submit(self) -> None:
        value = self.buffer.text
        self.buffer.set_text("")
        logger.debug("Submitting %d characters", len(value))
        self.on_submit(value)

    # -- Rendering -----------------------------------------------------------

    def render(self) -> list[str]:
        """Render the visible window, one string per visual line.

        Lines are padded to the viewport width. The cursor cell is drawn in
        reverse video while the input is active.
        """
        buffer = self.buffer
        width = buffer.viewport.width

        if not buffer.text and self.placeholder:
            placeholder = self.placeholder
            if self.active:
                placeholder = (
                    f"{CURSOR_ON}{cp_slice(placeholder, 0, 1)}{CURSOR_OFF}{cp_slice(placeholder, 1)}"
                )
            return [self._pad(placeholder, width)]

        cursor_row = buffer.visual_cursor[0] - buffer.visual_scroll_row
        cursor_col = buffer.visual_cursor[1]

        result: list[str] = []
        for index, line in enumerate(buffer.viewport_visual_lines):
            display = line
            if self.active and index == cursor_row:
                if cursor_col < cp_len(line):
                    display = (
                        cp_slice(line, 0, cursor_col)
                        + CURSOR_ON
                        + cp_slice(line, cursor_col, cursor_col + 1)
                        + CURSOR_OFF
                        + cp_slice(line, cursor_col + 1)
                    )
                else:
                    display = f"{line}{CURSOR_ON} {CURSOR_OFF}"
            result.append(self._pad(display, width))
        return result

    @staticmethod
    def _pad(line: str, width: int) -> str:
        return line + " " * max(0, width - visible_width(line))
