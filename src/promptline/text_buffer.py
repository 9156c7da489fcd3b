"""Multi-line text buffer with code-point cursor arithmetic.

The buffer owns the logical lines, the cursor and the viewport. After every
change it re-runs the visual layout, so ``all_visual_lines``,
``visual_cursor``, ``visual_scroll_row`` and ``viewport_visual_lines`` always
describe the current state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from promptline.codepoints import cp_len, cp_slice, is_whitespace_char, to_code_points
from promptline.layout import Viewport, VisualLayout, compute_layout

if TYPE_CHECKING:
    from promptline.normalize import NormalizedKey

Direction = Literal["left", "right", "up", "down", "home", "end"]


@dataclass
class BufferState:
    """Mutable state of the buffer."""

    lines: list[str] = field(default_factory=lambda: [""])
    cursor_row: int = 0
    cursor_col: int = 0


def _split_lines(text: str) -> list[str]:
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = normalized.split("\n")
    return lines if lines else [""]


class TextBuffer:
    """Editable multi-line buffer.

    Every operation is total: out-of-range requests clamp, impossible edits
    are no-ops, and ``lines`` never becomes empty.
    """

    def __init__(self, initial_text: str | None = None, viewport: Viewport | None = None) -> None:
        self._state = BufferState()
        self._viewport = (viewport or Viewport()).clamped()
        self._scroll_row = 0
        self._layout: VisualLayout
        if initial_text:
            self._state.lines = _split_lines(initial_text)
        self._relayout()

    # -- Read-only views -----------------------------------------------------

    @property
    def lines(self) -> list[str]:
        return list(self._state.lines)

    @property
    def cursor(self) -> tuple[int, int]:
        return (self._state.cursor_row, self._state.cursor_col)

    @property
    def text(self) -> str:
        return "\n".join(self._state.lines)

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def all_visual_lines(self) -> list[str]:
        return list(self._layout.all_visual_lines)

    @property
    def viewport_visual_lines(self) -> list[str]:
        return list(self._layout.viewport_visual_lines)

    @property
    def visual_cursor(self) -> tuple[int, int]:
        return self._layout.visual_cursor

    @property
    def visual_scroll_row(self) -> int:
        return self._layout.visual_scroll_row

    @property
    def layout(self) -> VisualLayout:
        return self._layout

    # -- Internal helpers ----------------------------------------------------

    def _current_line(self) -> str:
        return self._state.lines[self._state.cursor_row]

    def _relayout(self) -> None:
        self._layout = compute_layout(
            self._state.lines,
            self.cursor,
            self._viewport,
            self._scroll_row,
        )
        self._scroll_row = self._layout.visual_scroll_row

    # -- Whole-buffer operations ---------------------------------------------

    def set_text(self, text: str) -> None:
        """Replace the contents; the cursor returns to the top-left."""
        self._state = BufferState(lines=_split_lines(text) if text else [""])
        self._scroll_row = 0
        self._relayout()

    def set_viewport(self, width: int, height: int) -> None:
        """Resize the viewport; scrolling is re-clamped to the cursor."""
        self._viewport = Viewport(width=width, height=height).clamped()
        self._relayout()

    def set_cursor(self, row: int, col: int) -> None:
        """Place the cursor, clamping both coordinates into range."""
        row = max(0, min(row, len(self._state.lines) - 1))
        self._state.cursor_row = row
        self._state.cursor_col = max(0, min(col, cp_len(self._state.lines[row])))
        self._relayout()

    # -- Insertion -----------------------------------------------------------

    def insert_text(self, text: str) -> None:
        """Insert *text* at the cursor, splitting lines on newlines.

        The cursor ends after the last inserted segment.
        """
        if not text:
            return

        inserted = _split_lines(text)
        line = self._current_line()
        col = self._state.cursor_col
        before = cp_slice(line, 0, col)
        after = cp_slice(line, col)
        row = self._state.cursor_row

        if len(inserted) == 1:
            self._state.lines[row] = before + inserted[0] + after
            self._state.cursor_col = col + cp_len(inserted[0])
        else:
            new_lines = [before + inserted[0], *inserted[1:-1], inserted[-1] + after]
            self._state.lines[row : row + 1] = new_lines
            self._state.cursor_row = row + len(inserted) - 1
            self._state.cursor_col = cp_len(inserted[-1])

        self._relayout()

    def newline(self) -> None:
        """Split the current line at the cursor."""
        self.insert_text("\n")

    def handle_input(self, key: NormalizedKey) -> None:
        """Insert the key's sequence as literal text.

        Lowest-priority path for printable input and paste bursts. A paste is
        one ``insert_text`` call however many lines it spans.
        """
        if key.sequence:
            self.insert_text(key.sequence)

    # -- Deletion ------------------------------------------------------------

    def backspace(self) -> None:
        """Delete the code point before the cursor, joining lines at column 0."""
        row, col = self.cursor
        if col > 0:
            line = self._current_line()
            self._state.lines[row] = cp_slice(line, 0, col - 1) + cp_slice(line, col)
            self._state.cursor_col = col - 1
        elif row > 0:
            previous = self._state.lines[row - 1]
            self._state.lines[row - 1] = previous + self._state.lines[row]
            del self._state.lines[row]
            self._state.cursor_row = row - 1
            self._state.cursor_col = cp_len(previous)
        else:
            return
        self._relayout()

    def delete(self) -> None:
        """Delete the code point at the cursor, joining lines at line end."""
        row, col = self.cursor
        line = self._current_line()
        if col < cp_len(line):
            self._state.lines[row] = cp_slice(line, 0, col) + cp_slice(line, col + 1)
        elif row < len(self._state.lines) - 1:
            self._state.lines[row] = line + self._state.lines[row + 1]
            del self._state.lines[row + 1]
        else:
            return
        self._relayout()

    def kill_line_left(self) -> None:
        """Delete from the start of the line up to the cursor."""
        row, col = self.cursor
        if col == 0:
            return
        self._state.lines[row] = cp_slice(self._current_line(), col)
        self._state.cursor_col = 0
        self._relayout()

    def kill_line_right(self) -> None:
        """Delete from the cursor to the end of the line."""
        row, col = self.cursor
        line = self._current_line()
        if col >= cp_len(line):
            return
        self._state.lines[row] = cp_slice(line, 0, col)
        self._relayout()

    def delete_word_left(self) -> None:
        """Delete the word before the cursor, unix-word-rubout style.

        Whitespace between the cursor and the word goes first, then the
        maximal run of non-whitespace. Never crosses the line start.
        """
        row, col = self.cursor
        if col == 0:
            return

        chars = to_code_points(self._current_line())
        start = col
        while start > 0 and is_whitespace_char(chars[start - 1]):
            start -= 1
        while start > 0 and not is_whitespace_char(chars[start - 1]):
            start -= 1

        self._state.lines[row] = "".join(chars[:start] + chars[col:])
        self._state.cursor_col = start
        self._relayout()

    # -- Cursor movement -----------------------------------------------------

    def move(self, direction: Direction | str) -> None:
        """Move the cursor by one step.

        Left/right wrap across line boundaries. Up/down keep the column
        (clamped) on the adjacent logical line; wrapped visual lines are not
        navigated separately. Unknown directions are ignored.
        """
        row, col = self.cursor
        lines = self._state.lines
        line_len = cp_len(lines[row])

        if direction == "left":
            if col > 0:
                col -= 1
            elif row > 0:
                row -= 1
                col = cp_len(lines[row])
        elif direction == "right":
            if col < line_len:
                col += 1
            elif row < len(lines) - 1:
                row += 1
                col = 0
        elif direction == "up":
            if row > 0:
                row -= 1
                col = min(col, cp_len(lines[row]))
        elif direction == "down":
            if row < len(lines) - 1:
                row += 1
                col = min(col, cp_len(lines[row]))
        elif direction == "home":
            col = 0
        elif direction == "end":
            col = line_len
        else:
            return

        self._state.cursor_row = row
        self._state.cursor_col = col
        self._relayout()


def create_buffer(initial_text: str | None = None, viewport: Viewport | None = None) -> TextBuffer:
    """Create a ``TextBuffer`` with the cursor at the top-left."""
    return TextBuffer(initial_text=initial_text, viewport=viewport)
