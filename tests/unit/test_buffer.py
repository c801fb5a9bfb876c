"""Tests for the formula editing buffer.

Covers:
- Parsing and serializing canonical strings
- Normalization (merge, trailing text slot)
- Reference insertion and removal
- Function-name completion
- Caret navigation and backspace
"""

from __future__ import annotations

from deal_logic.core.expression_lang.buffer import (
    absolute_offset,
    backspace,
    clamp_caret,
    home_caret,
    insert_reference,
    insert_text,
    move_left,
    move_right,
    normalize,
    parse,
    referenced_fields,
    remove_reference,
    replace_trailing_word,
    serialize,
    set_text,
)
from deal_logic.core.ir.segments import Caret, ReferenceSegment, TextSegment


def text(value: str = "") -> TextSegment:
    return TextSegment(value=value)


def ref(field_id: str) -> ReferenceSegment:
    return ReferenceSegment(field_id=field_id)


# ============================================================================
# Parse / serialize
# ============================================================================


class TestParse:
    """Canonical string to segments."""

    def test_empty_string_gives_single_empty_text(self) -> None:
        assert parse("") == [text("")]

    def test_plain_text(self) -> None:
        assert parse("1 + 2") == [text("1 + 2")]

    def test_mixed(self) -> None:
        assert parse("{f_loan_amount} * 0.01 + ROUND({f_rate}, 2)") == [
            ref("f_loan_amount"),
            text(" * 0.01 + ROUND("),
            ref("f_rate"),
            text(", 2)"),
        ]

    def test_reference_only_gets_text_slot(self) -> None:
        assert parse("{f_rate}") == [ref("f_rate"), text("")]

    def test_adjacent_references(self) -> None:
        assert parse("{a}{b}") == [ref("a"), ref("b"), text("")]

    def test_empty_braces_stay_text(self) -> None:
        assert parse("{}+1") == [text("{}+1")]

    def test_unclosed_brace_stays_text(self) -> None:
        assert parse("1 + {f_rate") == [text("1 + {f_rate")]


class TestSerialize:
    def test_round_trip(self) -> None:
        source = "{f_loan_amount} * 0.01 + ROUND({f_rate}, 2)"
        assert serialize(parse(source)) == source

    def test_reference_written_with_braces(self) -> None:
        assert serialize([ref("f_rate"), text(" / 100")]) == "{f_rate} / 100"

    def test_referenced_fields_in_order(self) -> None:
        assert referenced_fields(parse("{b} + {a} + {b}")) == ["b", "a", "b"]


class TestNormalize:
    def test_merges_adjacent_text(self) -> None:
        assert normalize([text("1"), text("+"), text("2")]) == [text("1+2")]

    def test_empty_input_gets_text(self) -> None:
        assert normalize([]) == [text("")]

    def test_all_references_get_trailing_text(self) -> None:
        assert normalize([ref("a"), ref("b")]) == [ref("a"), ref("b"), text("")]

    def test_keeps_existing_empty_text(self) -> None:
        segments = [text(""), ref("a"), text("")]
        assert normalize(segments) == segments


# ============================================================================
# Editing
# ============================================================================


class TestInsertReference:
    def test_splits_text_at_offset(self) -> None:
        buffer, caret = insert_reference([text("ab")], 0, 1, "f_rate")
        assert buffer == [text("a"), ref("f_rate"), text("b")]
        assert caret == Caret(segment=2, offset=0)

    def test_at_start_omits_empty_before(self) -> None:
        buffer, caret = insert_reference([text("+1")], 0, 0, "f_rate")
        assert buffer == [ref("f_rate"), text("+1")]
        assert caret == Caret(segment=1, offset=0)

    def test_at_end_adds_trailing_text(self) -> None:
        buffer, caret = insert_reference([text("1+")], 0, 2, "f_rate")
        assert buffer == [text("1+"), ref("f_rate"), text("")]
        assert caret == Caret(segment=2, offset=0)

    def test_after_existing_reference(self) -> None:
        start = [text(""), ref("a"), text("xy")]
        buffer, caret = insert_reference(start, 2, 0, "b")
        assert serialize(buffer) == "{a}{b}xy"
        assert caret == Caret(segment=3, offset=0)

    def test_non_text_index_is_noop(self) -> None:
        start = [ref("a"), text("")]
        buffer, _ = insert_reference(start, 0, 0, "b")
        assert buffer == start


class TestRemoveReference:
    def test_merges_neighbours(self) -> None:
        buffer, caret = remove_reference(parse("1+{a}*2"), 1)
        assert buffer == [text("1+*2")]
        assert caret == Caret(segment=0, offset=2)

    def test_last_reference_leaves_text_slot(self) -> None:
        buffer, _ = remove_reference([ref("a")], 0)
        assert buffer == [text("")]

    def test_out_of_range_is_noop(self) -> None:
        start = parse("1+{a}")
        buffer, _ = remove_reference(start, 7)
        assert buffer == start

    def test_text_index_is_noop(self) -> None:
        start = parse("1+{a}")
        buffer, _ = remove_reference(start, 0)
        assert buffer == start


class TestInsertText:
    def test_types_at_caret(self) -> None:
        buffer, caret = insert_text([text("12")], Caret(segment=0, offset=1), "+")
        assert buffer == [text("1+2")]
        assert caret == Caret(segment=0, offset=2)

    def test_stale_caret_goes_home(self) -> None:
        buffer, caret = insert_text(parse("{a}+"), Caret(segment=5, offset=9), "1")
        assert serialize(buffer) == "{a}+1"
        assert caret == Caret(segment=1, offset=2)

    def test_set_text_on_reference_is_noop(self) -> None:
        start = parse("{a}+")
        assert set_text(start, 0, "x") == start


class TestReplaceTrailingWord:
    def test_completes_function_and_caret_inside_parens(self) -> None:
        buffer, caret = replace_trailing_word([text("1+RO")], Caret(segment=0, offset=4), "RO", "ROUND()")
        assert buffer == [text("1+ROUND()")]
        assert caret == Caret(segment=0, offset=8)

    def test_keeps_text_after_caret(self) -> None:
        buffer, caret = replace_trailing_word(
            [text("ma + 1")], Caret(segment=0, offset=2), "ma", "MAX()"
        )
        assert buffer == [text("MAX() + 1")]
        assert caret == Caret(segment=0, offset=4)


# ============================================================================
# Caret movement and deletion
# ============================================================================


class TestCaret:
    def test_home_is_end_of_last_text(self) -> None:
        assert home_caret(parse("1+{a}*2")) == Caret(segment=2, offset=2)

    def test_clamp_offset(self) -> None:
        assert clamp_caret([text("ab")], Caret(segment=0, offset=10)) == Caret(segment=0, offset=2)

    def test_absolute_offset_counts_references(self) -> None:
        assert absolute_offset(parse("1+{a}*2"), Caret(segment=2, offset=1)) == 6


class TestNavigation:
    def test_left_skips_reference(self) -> None:
        buffer = parse("1+{a}*2")
        assert move_left(buffer, Caret(segment=2, offset=0)) == Caret(segment=0, offset=2)

    def test_right_skips_reference(self) -> None:
        buffer = parse("1+{a}*2")
        assert move_right(buffer, Caret(segment=0, offset=2)) == Caret(segment=2, offset=0)

    def test_left_within_text(self) -> None:
        assert move_left([text("ab")], Caret(segment=0, offset=2)) == Caret(segment=0, offset=1)

    def test_left_at_start_stays(self) -> None:
        buffer = parse("{a}+")
        assert move_left(buffer, Caret(segment=1, offset=0)) == Caret(segment=1, offset=0)

    def test_right_at_end_stays(self) -> None:
        buffer = parse("1+{a}")
        assert move_right(buffer, Caret(segment=2, offset=0)) == Caret(segment=2, offset=0)


class TestBackspace:
    def test_deletes_character(self) -> None:
        buffer, caret = backspace([text("12")], Caret(segment=0, offset=2))
        assert buffer == [text("1")]
        assert caret == Caret(segment=0, offset=1)

    def test_removes_reference_before_caret(self) -> None:
        buffer, caret = backspace(parse("1+{a}*2"), Caret(segment=2, offset=0))
        assert buffer == [text("1+*2")]
        assert caret == Caret(segment=0, offset=2)

    def test_reference_between_empty_texts(self) -> None:
        buffer, caret = backspace([text(""), ref("F"), text("")], Caret(segment=2, offset=0))
        assert buffer == [text("")]
        assert caret == Caret(segment=0, offset=0)

    def test_empty_text_removes_following_reference(self) -> None:
        buffer, caret = backspace([text(""), ref("a"), text("x")], Caret(segment=0, offset=0))
        assert buffer == [text("x")]
        assert caret == Caret(segment=0, offset=0)

    def test_start_of_buffer_is_noop(self) -> None:
        buffer, caret = backspace([text("ab")], Caret(segment=0, offset=0))
        assert buffer == [text("ab")]
        assert caret == Caret(segment=0, offset=0)

    def test_out_of_range_caret_does_not_raise(self) -> None:
        buffer, _ = backspace([text(""), ref("F"), text("")], Caret(segment=42, offset=3))
        assert buffer == [text("")]
