"""Tests for formula autocomplete: mentions, function menu, signature hints."""

from __future__ import annotations

from deal_logic.core.expression_lang.buffer import home_caret, parse, serialize
from deal_logic.core.expression_lang.completion import (
    FunctionMenu,
    MentionMenu,
    SignatureHint,
    detect_active_function,
    detect_function_prefix,
    detect_mention,
    resolve_overlay,
    select_function,
    select_mention,
)
from deal_logic.core.ir import FieldCatalog, get_function
from deal_logic.core.ir.segments import Caret


class TestDetectMention:
    def test_query_after_at(self) -> None:
        assert detect_mention("1 + @lo", 7) == "lo"

    def test_bare_at(self) -> None:
        assert detect_mention("1 + @", 5) == ""

    def test_space_ends_mention(self) -> None:
        assert detect_mention("1 + @lo ", 8) is None

    def test_operator_ends_mention(self) -> None:
        assert detect_mention("@lo+", 4) is None

    def test_no_at(self) -> None:
        assert detect_mention("ROUND(1, 2)", 5) is None

    def test_only_text_before_caret_counts(self) -> None:
        assert detect_mention("@lo + 2", 3) == "lo"


class TestDetectFunctionPrefix:
    def test_prefix(self) -> None:
        assert detect_function_prefix("1 + RO", 6) == "RO"

    def test_lowercase_prefix(self) -> None:
        assert detect_function_prefix("1 + ro", 6) == "ro"

    def test_no_matching_function(self) -> None:
        assert detect_function_prefix("1 + xyz", 7) is None

    def test_suppressed_by_mention(self) -> None:
        assert detect_function_prefix("@RO", 3) is None

    def test_needs_trailing_letters(self) -> None:
        assert detect_function_prefix("ROUND(", 6) is None


class TestDetectActiveFunction:
    def test_variadic_index_is_clamped(self) -> None:
        fn, index = detect_active_function("SUM(1, 2, 3)", 11)
        assert fn.name == "SUM"
        assert index == len(fn.params) - 1

    def test_first_parameter(self) -> None:
        fn, index = detect_active_function("ROUND(", 6)
        assert (fn.name, index) == ("ROUND", 0)

    def test_second_parameter(self) -> None:
        fn, index = detect_active_function("ROUND({f_rate}, ", 16)
        assert (fn.name, index) == ("ROUND", 1)

    def test_nested_call_is_skipped(self) -> None:
        fn, index = detect_active_function("ROUND(MAX(1, 2), ", 17)
        assert (fn.name, index) == ("ROUND", 1)

    def test_innermost_open_call_wins(self) -> None:
        fn, index = detect_active_function("ROUND(MAX(1, ", 13)
        assert (fn.name, index) == ("MAX", 1)

    def test_punctuation_inside_reference_ignored(self) -> None:
        fn, index = detect_active_function("ROUND({a,b}", 11)
        assert (fn.name, index) == ("ROUND", 0)

    def test_zero_param_function_has_no_hint(self) -> None:
        assert detect_active_function("TODAY(", 6) is None

    def test_closed_call(self) -> None:
        assert detect_active_function("ROUND(1, 2) + ", 14) is None

    def test_bare_group(self) -> None:
        assert detect_active_function("(1, 2", 5) is None

    def test_unknown_function(self) -> None:
        assert detect_active_function("FOO(1, ", 7) is None

    def test_caret_out_of_range(self) -> None:
        fn, index = detect_active_function("ABS(", 99)
        assert (fn.name, index) == ("ABS", 0)


class TestResolveOverlay:
    def _resolve(self, text: str, catalog: FieldCatalog, **kwargs):
        buffer = parse(text)
        return resolve_overlay(buffer, home_caret(buffer), catalog, **kwargs)

    def test_mention_menu(self, catalog: FieldCatalog) -> None:
        overlay = self._resolve("1 + @loan", catalog)
        assert isinstance(overlay, MentionMenu)
        assert overlay.query == "loan"
        assert [f.id for f in overlay.candidates] == ["f_loan_amount"]

    def test_mention_matches_label_and_id(self, catalog: FieldCatalog) -> None:
        overlay = self._resolve("@lo", catalog)
        assert [f.id for f in overlay.candidates] == ["f_loan_amount", "f_close_date"]

    def test_bare_at_lists_everything_up_to_limit(self, catalog: FieldCatalog) -> None:
        assert len(self._resolve("@", catalog).candidates) == len(catalog)
        assert len(self._resolve("@", catalog, max_results=2).candidates) == 2

    def test_mention_without_matches_still_wins(self, catalog: FieldCatalog) -> None:
        overlay = self._resolve("ROUND(@zzz", catalog)
        assert isinstance(overlay, MentionMenu)
        assert overlay.candidates == []

    def test_function_menu(self, catalog: FieldCatalog) -> None:
        overlay = self._resolve("1 + RO", catalog)
        assert isinstance(overlay, FunctionMenu)
        assert [f.name for f in overlay.candidates] == ["ROUND", "ROUNDUP", "ROUNDDOWN"]

    def test_function_menu_beats_signature(self, catalog: FieldCatalog) -> None:
        overlay = self._resolve("ROUND(A", catalog)
        assert isinstance(overlay, FunctionMenu)
        assert [f.name for f in overlay.candidates] == ["AVG", "ABS"]

    def test_signature_hint(self, catalog: FieldCatalog) -> None:
        overlay = self._resolve("ROUND({f_rate}, ", catalog)
        assert isinstance(overlay, SignatureHint)
        assert overlay.function.name == "ROUND"
        assert overlay.param_index == 1
        assert overlay.markdown == "ROUND(value, **decimals**)"

    def test_nothing(self, catalog: FieldCatalog) -> None:
        assert self._resolve("1 + 2", catalog) is None


class TestSignatureHint:
    def test_parts(self) -> None:
        hint = SignatureHint(function=get_function("MAX"), param_index=1)
        assert hint.parts == [
            ("MAX(", False),
            ("value1", False),
            (", ", False),
            ("...", True),
            (")", False),
        ]


class TestSelection:
    def test_select_mention(self) -> None:
        buffer = parse("1 + @lo")
        buffer, caret = select_mention(buffer, home_caret(buffer), "f_loan_amount")
        assert serialize(buffer) == "1 + {f_loan_amount}"
        assert caret == Caret(segment=2, offset=0)

    def test_select_mention_keeps_text_after_query(self) -> None:
        buffer, caret = select_mention(parse("@lo + 2"), Caret(segment=0, offset=3), "f_rate")
        assert serialize(buffer) == "{f_rate} + 2"
        assert caret == Caret(segment=1, offset=0)

    def test_select_mention_without_active_mention(self) -> None:
        buffer = parse("1 + 2")
        assert select_mention(buffer, home_caret(buffer), "f_rate")[0] == buffer

    def test_select_function(self) -> None:
        buffer = parse("1 + ro")
        buffer, caret = select_function(buffer, home_caret(buffer), "ROUND")
        assert serialize(buffer) == "1 + ROUND()"
        assert caret == Caret(segment=0, offset=10)

    def test_select_unknown_function(self) -> None:
        buffer = parse("1 + ro")
        assert select_function(buffer, home_caret(buffer), "NOPE")[0] == buffer
