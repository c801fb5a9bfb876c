"""
Syntax validation for the deal formula language.

``validate`` checks a canonical expression string in a fixed order and
stops at the first problem:

    1. field references are replaced by ``0`` (opaque values)
    2. empty text is valid (an unused formula is not an error)
    3. parentheses balance
    4. every ``name(`` is a registered function
    5. every call has at least as many arguments as declared params
    6. no stray words remain once calls are collapsed
    7. no unresolved ``@`` remains
    8. the formula does not end in an operator or comma

Step 6 also collapses word-free bare groups, so a call wrapping a
parenthesised argument such as ``ROUND((1 + 2) * 3, 2)`` is accepted.

Messages are user-facing and compared verbatim by callers.
"""

from __future__ import annotations

import re
from functools import lru_cache

from pydantic import BaseModel, ConfigDict

from deal_logic.core.expression_lang.buffer import REFERENCE_RE
from deal_logic.core.expression_lang.tokenizer import (
    Token,
    TokenKind,
    count_arguments,
    find_matching_paren,
    tokenize,
)
from deal_logic.core.ir.functions import get_function

# Innermost call: name(...) with no parens inside
_INNER_CALL_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*\([^()]*\)")
# Innermost bare group holding nothing that could hide a word or mention
_INNER_GROUP_RE = re.compile(r"(?<![A-Za-z0-9_])\([^()A-Za-z@]*\)")
_ALPHA_RE = re.compile(r"[^\W\d_]+")

_TRAILING_OPERATORS = ("+", "-", "*", "/", ",")


class ValidationResult(BaseModel):
    """Verdict for one expression; ``error`` is set when invalid."""

    valid: bool
    error: str | None = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(valid=True)

    @classmethod
    def fail(cls, error: str) -> ValidationResult:
        return cls(valid=False, error=error)

    def __bool__(self) -> bool:
        return self.valid


def substitute_references(text: str) -> str:
    """Replace every ``{field_id}`` with ``0``."""
    return REFERENCE_RE.sub("0", text)


@lru_cache(maxsize=1024)
def validate(expression: str) -> ValidationResult:
    """Validate a canonical expression string. Never raises."""
    text = substitute_references(expression or "")
    if not text.strip():
        return ValidationResult.ok()

    tokens = tokenize(text)

    for check in (_check_parens, _check_functions, _check_arity):
        error = check(tokens)
        if error:
            return ValidationResult.fail(error)

    stripped = collapse_calls(text)
    word = _ALPHA_RE.search(stripped)
    if word:
        return ValidationResult.fail(
            f'Unexpected text: "{word.group(0)}" — use functions, @inputs, numbers, and operators only'
        )
    if "@" in stripped:
        return ValidationResult.fail("Unresolved @ mention — select an input from the dropdown")

    if text.strip().endswith(_TRAILING_OPERATORS):
        return ValidationResult.fail("Expression ends with an operator")

    return ValidationResult.ok()


def _check_parens(tokens: list[Token]) -> str | None:
    depth = 0
    for tok in tokens:
        if tok.kind == TokenKind.LPAREN:
            depth += 1
        elif tok.kind == TokenKind.RPAREN:
            depth -= 1
            if depth < 0:
                return "Unexpected closing parenthesis"
    if depth != 0:
        return "Unclosed parenthesis"
    return None


def _calls(tokens: list[Token]) -> list[int]:
    """Indexes of IDENT tokens written directly before an opening paren."""
    return [
        i
        for i, tok in enumerate(tokens[:-1])
        if tok.kind == TokenKind.IDENT
        and tokens[i + 1].kind == TokenKind.LPAREN
        and tokens[i + 1].pos == tok.end
    ]


def _check_functions(tokens: list[Token]) -> str | None:
    for i in _calls(tokens):
        name = tokens[i].value.upper()
        if get_function(name) is None:
            return f"Unknown function: {name}"
    return None


def _check_arity(tokens: list[Token]) -> str | None:
    for i in _calls(tokens):
        fn = get_function(tokens[i].value)
        if fn is None:
            continue
        close = find_matching_paren(tokens, i + 1)
        if close is None:
            continue
        got = count_arguments(tokens, i + 1, close)
        if got < fn.arity:
            noun = "argument" if fn.arity == 1 else "arguments"
            return f"{fn.name}() requires {fn.arity} {noun}, got {got}"
    return None


def collapse_calls(text: str) -> str:
    """Collapse calls (and word-free groups) to ``0``, innermost first."""
    previous = None
    while previous != text:
        previous = text
        text = _INNER_CALL_RE.sub("0", text)
        text = _INNER_GROUP_RE.sub("0", text)
    return text
