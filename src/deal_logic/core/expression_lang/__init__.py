"""
Deal formula language.

Segment buffer, tokenizer, validator and autocomplete for formulas such
as ``{f_loan_amount} * 0.01 + ROUND({f_rate}, 2)``.

Usage:
    from deal_logic.core.expression_lang import parse, serialize, validate

    segments = parse("ROUND({f_rate}, 2)")
    assert serialize(segments) == "ROUND({f_rate}, 2)"
    validate("ROUND(5)").error
    # 'ROUND() requires 2 arguments, got 1'
"""

from deal_logic.core.expression_lang.buffer import normalize, parse, serialize
from deal_logic.core.expression_lang.completion import (
    FunctionMenu,
    MentionMenu,
    SignatureHint,
    detect_active_function,
    resolve_overlay,
)
from deal_logic.core.expression_lang.editor import ExpressionEditor
from deal_logic.core.expression_lang.validator import ValidationResult, validate

__all__ = [
    "ExpressionEditor",
    "FunctionMenu",
    "MentionMenu",
    "SignatureHint",
    "ValidationResult",
    "detect_active_function",
    "normalize",
    "parse",
    "resolve_overlay",
    "serialize",
    "validate",
]
