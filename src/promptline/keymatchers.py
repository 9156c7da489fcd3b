"""Key matchers: pure predicates classifying a ``NormalizedKey``."""

from __future__ import annotations

from typing import Callable, Iterable, Literal, Mapping

from promptline.normalize import NormalizedKey

Command = Literal[
    "SUBMIT",
    "NEWLINE",
    "ESCAPE",
    "NAVIGATION_UP",
    "NAVIGATION_DOWN",
    "ACCEPT_SUGGESTION",
    "HOME",
    "END",
    "CLEAR_INPUT",
    "CLEAR_SCREEN",
    "KILL_LINE_RIGHT",
    "KILL_LINE_LEFT",
    "DELETE_WORD_BACKWARD",
    "QUIT",
    "EXIT",
]

KeyMatcher = Callable[[NormalizedKey], bool]

DEFAULT_KEY_MATCHERS: dict[Command, KeyMatcher] = {
    "SUBMIT": lambda key: key.return_ and not key.shift and not key.ctrl and not key.meta,
    "NEWLINE": lambda key: key.return_ and key.shift,
    "ESCAPE": lambda key: key.escape,
    "NAVIGATION_UP": lambda key: key.up_arrow and not key.ctrl,
    "NAVIGATION_DOWN": lambda key: key.down_arrow and not key.ctrl,
    "ACCEPT_SUGGESTION": lambda key: key.tab,
    "HOME": lambda key: (key.name == "a" and key.ctrl) or key.home,
    "END": lambda key: (key.name == "e" and key.ctrl) or key.end,
    "CLEAR_INPUT": lambda key: key.name == "c" and key.ctrl and not key.meta,
    "CLEAR_SCREEN": lambda key: key.name == "l" and key.ctrl,
    "KILL_LINE_RIGHT": lambda key: key.name == "k" and key.ctrl,
    "KILL_LINE_LEFT": lambda key: key.name == "u" and key.ctrl,
    "DELETE_WORD_BACKWARD": lambda key: key.name == "w" and key.ctrl,
    "QUIT": lambda key: key.name == "c" and key.ctrl,
    "EXIT": lambda key: key.name == "d" and key.ctrl,
}


class KeyMatchers:
    """The matcher table for one input, defaults merged with overrides."""

    def __init__(self, overrides: Mapping[Command, KeyMatcher] | None = None) -> None:
        self._matchers: dict[Command, KeyMatcher] = {}
        self._build(overrides or {})

    def _build(self, overrides: Mapping[Command, KeyMatcher]) -> None:
        self._matchers.clear()
        self._matchers.update(DEFAULT_KEY_MATCHERS)
        self._matchers.update(overrides)

    def matches(self, key: NormalizedKey, command: Command) -> bool:
        """Check if *key* triggers *command*."""
        matcher = self._matchers.get(command)
        if matcher is None:
            return False
        return bool(matcher(key))

    def classify(self, key: NormalizedKey, commands: Iterable[Command]) -> Command | None:
        """Return the first of *commands* that *key* triggers, in order."""
        for command in commands:
            if self.matches(key, command):
                return command
        return None

    def set_overrides(self, overrides: Mapping[Command, KeyMatcher]) -> None:
        """Replace the overrides, keeping the defaults underneath."""
        self._build(overrides)
