"""Conversation history for the chat panel hosting the prompt input."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Literal

HistoryItemType = Literal["user", "assistant", "error", "system"]

CLEAR_COMMAND = "/clear"


@dataclass(frozen=True)
class HistoryItem:
    type: HistoryItemType
    content: str
    id: int


@dataclass
class IdCounter:
    """Monotonic id source, owned by one history and passed explicitly."""

    next_id: int = 0

    def next(self) -> int:
        value = self.next_id
        self.next_id += 1
        return value

    def reset(self, start: int = 0) -> None:
        self.next_id = start


def is_clear_command(text: str) -> bool:
    """Return ``True`` if *text* is the session-reset command."""
    return text.strip().lower() == CLEAR_COMMAND


@dataclass
class ConversationHistory:
    """Ordered messages of one chat session.

    Restored sessions keep their ids; new items continue after the largest
    existing id.
    """

    items: list[HistoryItem] = field(default_factory=list)
    counter: IdCounter = field(default_factory=IdCounter)

    def __post_init__(self) -> None:
        if self.items:
            self.counter.reset(max(item.id for item in self.items) + 1)

    @classmethod
    def restore(cls, items: Iterable[HistoryItem]) -> ConversationHistory:
        return cls(items=list(items))

    def add(self, type: HistoryItemType, content: str) -> HistoryItem:
        item = HistoryItem(type=type, content=content, id=self.counter.next())
        self.items.append(item)
        return item

    def add_user(self, content: str) -> HistoryItem:
        return self.add("user", content)

    def add_assistant(self, content: str) -> HistoryItem:
        return self.add("assistant", content)

    def add_error(self, content: str) -> HistoryItem:
        return self.add("error", content)

    def add_system(self, content: str) -> HistoryItem:
        return self.add("system", content)

    def clear(self) -> None:
        """Forget every item and restart ids at 0."""
        self.items.clear()
        self.counter.reset()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[HistoryItem]:
        return iter(self.items)
