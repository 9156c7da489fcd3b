"""promptline: multi-line prompt buffer and terminal key normalization."""

# Code-point utilities
from promptline.codepoints import cp_len, cp_slice, to_code_points, visible_width

# Conversation history
from promptline.history import (
    ConversationHistory,
    HistoryItem,
    IdCounter,
    is_clear_command,
)

# Key matchers
from promptline.keymatchers import (
    DEFAULT_KEY_MATCHERS,
    Command,
    KeyMatcher,
    KeyMatchers,
)

# Raw key decoding
from promptline.keys import RawKeyEvent, decode_key

# Visual layout
from promptline.layout import (
    Viewport,
    VisualLayout,
    compute_layout,
    wrap_line,
)

# Key normalization
from promptline.normalize import NormalizedKey, normalize_key

# Prompt input
from promptline.prompt_input import PromptInput, PromptInputOptions

# Input buffering
from promptline.stdin_buffer import StdinBuffer

# Text buffer
from promptline.text_buffer import TextBuffer, create_buffer

__all__ = [
    # Code points
    "cp_len",
    "cp_slice",
    "to_code_points",
    "visible_width",
    # History
    "ConversationHistory",
    "HistoryItem",
    "IdCounter",
    "is_clear_command",
    # Key matchers
    "DEFAULT_KEY_MATCHERS",
    "Command",
    "KeyMatcher",
    "KeyMatchers",
    # Keys
    "RawKeyEvent",
    "decode_key",
    # Layout
    "Viewport",
    "VisualLayout",
    "compute_layout",
    "wrap_line",
    # Normalization
    "NormalizedKey",
    "normalize_key",
    # Prompt input
    "PromptInput",
    "PromptInputOptions",
    # Stdin buffer
    "StdinBuffer",
    # Text buffer
    "TextBuffer",
    "create_buffer",
]
