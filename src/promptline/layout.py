"""Visual layout: hard-wrapping logical lines into a bounded viewport.

Everything here is a pure function of its arguments. The buffer calls
``compute_layout`` after every change and stores the result; nothing is
cached between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from promptline.codepoints import cp_len, cp_slice


@dataclass(frozen=True)
class Viewport:
    """Size of the rendered window, in terminal cells."""

    width: int = 80
    height: int = 10

    def clamped(self) -> Viewport:
        """Return a copy with both dimensions at least 1."""
        return Viewport(width=max(1, int(self.width)), height=max(1, int(self.height)))


@dataclass(frozen=True)
class VisualLayout:
    """Result of one layout pass.

    ``visual_cursor`` is ``(row, col)`` in ``all_visual_lines``, before
    scrolling is applied.
    """

    all_visual_lines: tuple[str, ...]
    visual_cursor: tuple[int, int]
    visual_scroll_row: int
    viewport_visual_lines: tuple[str, ...]


def wrap_line(line: str, width: int) -> list[str]:
    """Hard-wrap *line* into chunks of at most *width* code points.

    An empty line yields exactly one empty chunk.
    """
    width = max(1, width)
    length = cp_len(line)
    if length == 0:
        return [""]
    return [cp_slice(line, start, start + width) for start in range(0, length, width)]


def visual_line_count(line: str, width: int) -> int:
    """Number of visual lines *line* occupies: ``max(1, ceil(len / width))``."""
    width = max(1, width)
    return max(1, -(-cp_len(line) // width))


def clamp_scroll(cursor_row: int, scroll_row: int, height: int) -> int:
    """Scroll the least amount that keeps *cursor_row* inside the window."""
    if cursor_row < scroll_row:
        return cursor_row
    if cursor_row >= scroll_row + height:
        return cursor_row - height + 1
    return scroll_row


def compute_layout(
    lines: Sequence[str],
    cursor: tuple[int, int],
    viewport: Viewport,
    scroll_row: int = 0,
) -> VisualLayout:
    """Lay out *lines* for *viewport* with the cursor at *cursor*.

    *scroll_row* is the previous scroll position; the returned one is that
    position clamped so the cursor's visual row stays visible.
    """
    viewport = viewport.clamped()
    width = viewport.width
    row, col = cursor

    all_visual_lines: list[str] = []
    cursor_visual = (0, 0)

    for index, line in enumerate(lines):
        chunks = wrap_line(line, width)
        if index == row:
            # col == len at an exact multiple of width stays on the last chunk
            chunk_index = min(col // width, len(chunks) - 1)
            cursor_visual = (len(all_visual_lines) + chunk_index, col - chunk_index * width)
        all_visual_lines.extend(chunks)

    scroll = clamp_scroll(cursor_visual[0], max(0, scroll_row), viewport.height)
    visible = all_visual_lines[scroll : scroll + viewport.height]

    return VisualLayout(
        all_visual_lines=tuple(all_visual_lines),
        visual_cursor=cursor_visual,
        visual_scroll_row=scroll,
        viewport_visual_lines=tuple(visible),
    )
