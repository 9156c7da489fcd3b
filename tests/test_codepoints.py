"""Tests for promptline.codepoints: code-point length, slicing and width."""

from __future__ import annotations

import pytest

from promptline.codepoints import (
    cp_len,
    cp_slice,
    has_control_chars,
    is_whitespace_char,
    strip_control_chars,
    to_code_points,
    visible_width,
)

# "a😀b" as a UTF-16 decoder with surrogatepass would hand it over
SURROGATE_TEXT = "a\ud83d\ude00b"


class TestCpLen:
    """cp_len counts code points, not UTF-16 units."""

    def test_ascii(self) -> None:
        assert cp_len("hello") == 5

    def test_empty(self) -> None:
        assert cp_len("") == 0

    def test_emoji_is_one_unit(self) -> None:
        assert cp_len("a😀b") == 3

    def test_surrogate_pair_is_one_unit(self) -> None:
        assert len(SURROGATE_TEXT) == 4
        assert cp_len(SURROGATE_TEXT) == 3

    def test_lone_surrogate_counts_as_one(self) -> None:
        assert cp_len("a\ud83db") == 3

    def test_cjk(self) -> None:
        assert cp_len("日本語") == 3


class TestCpSlice:
    """cp_slice addresses code points and clamps its indices."""

    def test_basic_range(self) -> None:
        assert cp_slice("abcdef", 1, 4) == "bcd"

    def test_end_defaults_to_length(self) -> None:
        assert cp_slice("abcdef", 2) == "cdef"

    def test_start_clamped_at_zero(self) -> None:
        assert cp_slice("abc", -5, 2) == "ab"

    def test_end_clamped_at_length(self) -> None:
        assert cp_slice("abc", 1, 99) == "bc"

    def test_end_before_start_is_empty(self) -> None:
        assert cp_slice("abc", 2, 1) == ""

    def test_emoji_not_split(self) -> None:
        assert cp_slice("a😀b", 1, 2) == "😀"

    def test_surrogate_pair_not_split(self) -> None:
        assert cp_slice(SURROGATE_TEXT, 1, 2) == "\ud83d\ude00"
        assert cp_slice(SURROGATE_TEXT, 2) == "b"
        assert cp_slice(SURROGATE_TEXT, 0, 1) == "a"

    @pytest.mark.parametrize("text", ["", "abc", "a😀b", SURROGATE_TEXT, "日本語\n"])
    def test_full_slice_preserves_length(self, text: str) -> None:
        assert cp_len(cp_slice(text, 0, cp_len(text))) == cp_len(text)


class TestToCodePoints:
    def test_plain(self) -> None:
        assert to_code_points("ab") == ["a", "b"]

    def test_pairs_grouped(self) -> None:
        assert to_code_points(SURROGATE_TEXT) == ["a", "\ud83d\ude00", "b"]


class TestClassification:
    def test_whitespace(self) -> None:
        for ch in (" ", "\t", "\n", "　"):
            assert is_whitespace_char(ch)
        assert not is_whitespace_char("a")
        assert not is_whitespace_char("-")

    def test_control_chars(self) -> None:
        assert has_control_chars("a\x01")
        assert has_control_chars("\x7f")
        assert not has_control_chars("plain text")

    def test_strip_control_chars(self) -> None:
        assert strip_control_chars("a\tb\x7fc") == "abc"
        assert strip_control_chars("a\nb", keep_newlines=True) == "a\nb"


class TestVisibleWidth:
    def test_ascii(self) -> None:
        assert visible_width("hello") == 5

    def test_ansi_codes_ignored(self) -> None:
        assert visible_width("\x1b[7mab\x1b[27m") == 2

    def test_wide_characters(self) -> None:
        assert visible_width("日本") == 4

    def test_empty(self) -> None:
        assert visible_width("") == 0
