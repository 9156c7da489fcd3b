"""Tests for promptline.normalize: backspace/delete disambiguation."""

from __future__ import annotations

import dataclasses

import pytest

from promptline.keys import RawKeyEvent, decode_key
from promptline.normalize import NormalizedKey, normalize_key


def norm(**kwargs: object) -> NormalizedKey:
    key = normalize_key(RawKeyEvent(**kwargs))  # type: ignore[arg-type]
    assert key is not None
    return key


# ---------------------------------------------------------------------------
# Cascade
# ---------------------------------------------------------------------------


class TestNameHint:
    """Rule 1: a name hint wins over the raw flags."""

    def test_backspace_name_overrides_delete_flag(self) -> None:
        key = norm(sequence="\x1b[3~", name="backspace", delete=True)
        assert key.backspace is True
        assert key.delete is False

    def test_delete_name_overrides_backspace_flag(self) -> None:
        key = norm(sequence="\x7f", name="delete", backspace=True)
        assert key.delete is True
        assert key.backspace is False


class TestRawBackspaceFlag:
    """Rule 2: raw backspace flag needs a non-empty sequence."""

    def test_non_empty_sequence(self) -> None:
        key = norm(sequence="\x08", backspace=True)
        assert key.backspace is True

    def test_empty_sequence_is_dropped(self) -> None:
        assert normalize_key(RawKeyEvent(sequence="", backspace=True)) is None


class TestRawDeleteFlag:
    """Rule 3: raw delete flag with an empty sequence is really backspace."""

    def test_empty_sequence_is_backspace(self) -> None:
        key = norm(sequence="", delete=True)
        assert key.backspace is True
        assert key.delete is False

    def test_non_empty_sequence_is_delete(self) -> None:
        key = norm(sequence="\x1b[3~", delete=True)
        assert key.delete is True
        assert key.backspace is False


class TestSequenceFallback:
    """Rule 4: no flags, classify from the bytes."""

    def test_del_byte(self) -> None:
        key = norm(sequence="\x7f")
        assert key.backspace is True
        assert key.repeat_count == 1

    def test_bs_byte(self) -> None:
        assert norm(sequence="\x08").backspace is True

    def test_csi_delete(self) -> None:
        key = norm(sequence="\x1b[3~")
        assert key.delete is True
        assert key.repeat_count == 1

    def test_csi_delete_prefix(self) -> None:
        assert norm(sequence="\x1b[3;5~").delete is True

    def test_plain_text_has_no_edit_flags(self) -> None:
        key = norm(sequence="x")
        assert key.backspace is False
        assert key.delete is False

    def test_unknown_sequence_degrades_to_literal(self) -> None:
        key = norm(sequence="\x1b[99;9z")
        assert key.sequence == "\x1b[99;9z"
        assert not key.backspace and not key.delete


# ---------------------------------------------------------------------------
# Repeat count
# ---------------------------------------------------------------------------


class TestRepeatCount:
    def test_coalesced_backspaces(self) -> None:
        key = norm(sequence="\x7f\x7f\x7f")
        assert key.backspace is True
        assert key.repeat_count == 3

    def test_mixed_erase_bytes(self) -> None:
        assert norm(sequence="\x7f\x08").repeat_count == 2

    def test_only_erase_bytes_are_counted(self) -> None:
        assert norm(sequence="\x7fx\x7f", backspace=True).repeat_count == 2

    def test_delete_is_never_repeated(self) -> None:
        assert norm(sequence="\x1b[3~\x1b[3~").repeat_count == 1

    def test_hint_without_erase_bytes_counts_once(self) -> None:
        assert norm(sequence="\x1b\x7f", name="backspace").repeat_count == 1
        assert norm(sequence="ab", name="backspace").repeat_count == 1


# ---------------------------------------------------------------------------
# Names and pass-through flags
# ---------------------------------------------------------------------------


class TestCtrlRecovery:
    @pytest.mark.parametrize(("seq", "name"), [("c", "c"), ("C", "c"), ("d", "d"), ("\x03", "c"), ("\x04", "d")])
    def test_recovers_c_and_d(self, seq: str, name: str) -> None:
        assert norm(sequence=seq, ctrl=True).name == name

    def test_other_letters_not_recovered(self) -> None:
        assert norm(sequence="x", ctrl=True).name is None

    def test_existing_name_kept(self) -> None:
        assert norm(sequence="\x15", ctrl=True, name="u").name == "u"

    def test_no_recovery_without_ctrl(self) -> None:
        assert norm(sequence="c").name is None


class TestNamesAndFlags:
    def test_return_name(self) -> None:
        key = norm(sequence="\r", return_=True, name="enter")
        assert key.name == "return"
        assert key.return_ is True

    def test_flags_pass_through(self) -> None:
        key = norm(sequence="\x1b[1;2A", up_arrow=True, shift=True)
        assert key.up_arrow is True
        assert key.shift is True
        assert key.down_arrow is False

    def test_paste_flag(self) -> None:
        key = norm(sequence="a\nb", paste=True)
        assert key.paste is True
        assert key.sequence == "a\nb"
        assert key.backspace is False

    def test_paste_of_erase_bytes_is_not_backspace(self) -> None:
        key = norm(sequence="\x7f\x7f", paste=True)
        assert key.paste is True
        assert key.backspace is False

    def test_key_is_immutable(self) -> None:
        key = norm(sequence="a")
        with pytest.raises(dataclasses.FrozenInstanceError):
            key.sequence = "b"  # type: ignore[misc]


class TestWithDecoder:
    """decode_key output flows through the cascade as expected."""

    def test_single_backspace(self) -> None:
        key = normalize_key(decode_key("\x7f"))
        assert key is not None
        assert key.backspace is True
        assert key.repeat_count == 1

    def test_three_backspaces(self) -> None:
        key = normalize_key(decode_key("\x7f\x7f\x7f"))
        assert key is not None
        assert key.backspace is True
        assert key.repeat_count == 3

    def test_delete_key(self) -> None:
        key = normalize_key(decode_key("\x1b[3~"))
        assert key is not None
        assert key.delete is True
