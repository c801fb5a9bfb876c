"""
Tokenizer for the deal formula language.

Converts a canonical expression string into a sequence of typed tokens.
The tokenizer is lenient: it never raises, and characters outside the
grammar come back as OTHER tokens so callers can report them.
"""

from __future__ import annotations

import re
from enum import StrEnum, auto


class TokenKind(StrEnum):
    """Token types for the formula language."""

    # Literals and references
    NUMBER = auto()
    IDENT = auto()
    REFERENCE = auto()  # {field_id}
    AT = auto()  # unresolved @ mention

    # Operators
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    COMMA = auto()

    # Anything else, one character at a time
    OTHER = auto()

    # End of input
    EOF = auto()


OPERATOR_KINDS = frozenset({TokenKind.PLUS, TokenKind.MINUS, TokenKind.STAR, TokenKind.SLASH})


class Token:
    """A single token from the formula tokenizer."""

    __slots__ = ("kind", "value", "pos")

    def __init__(self, kind: TokenKind, value: str, pos: int) -> None:
        self.kind = kind
        self.value = value
        self.pos = pos

    @property
    def end(self) -> int:
        return self.pos + len(self.value)

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, pos={self.pos})"


_DIGITS = "0123456789"

# Number pattern: int or decimal, leading dot allowed (.5)
_NUMBER_RE = re.compile(r"[0-9]+(\.[0-9]*)?|\.[0-9]+")
# Identifier: letter or underscore followed by alphanumerics/underscores
_IDENT_RE = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")
# Field reference placeholder
_REFERENCE_RE = re.compile(r"\{[^}]+\}")

_SINGLE_MAP: dict[str, TokenKind] = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    ",": TokenKind.COMMA,
    "@": TokenKind.AT,
}


def tokenize(source: str) -> list[Token]:
    """Tokenize a formula string into a list of tokens ending with EOF."""
    tokens: list[Token] = []
    i = 0
    n = len(source)

    while i < n:
        c = source[i]

        # Skip whitespace
        if c.isspace():
            i += 1
            continue

        # Field references
        if c == "{":
            m = _REFERENCE_RE.match(source, i)
            if m:
                tokens.append(Token(TokenKind.REFERENCE, m.group(0), i))
                i = m.end()
                continue

        # Numbers
        if c in _DIGITS or (c == "." and i + 1 < n and source[i + 1] in _DIGITS):
            m = _NUMBER_RE.match(source, i)
            assert m is not None
            tokens.append(Token(TokenKind.NUMBER, m.group(0), i))
            i = m.end()
            continue

        # Identifiers (function names, stray words)
        if c.isascii() and (c.isalpha() or c == "_"):
            m = _IDENT_RE.match(source, i)
            assert m is not None
            tokens.append(Token(TokenKind.IDENT, m.group(0), i))
            i = m.end()
            continue

        tokens.append(Token(_SINGLE_MAP.get(c, TokenKind.OTHER), c, i))
        i += 1

    tokens.append(Token(TokenKind.EOF, "", n))
    return tokens


def find_matching_paren(tokens: list[Token], open_index: int) -> int | None:
    """Index of the RPAREN closing the LPAREN at ``open_index``, or None."""
    depth = 0
    for idx in range(open_index, len(tokens)):
        kind = tokens[idx].kind
        if kind == TokenKind.LPAREN:
            depth += 1
        elif kind == TokenKind.RPAREN:
            depth -= 1
            if depth == 0:
                return idx
    return None


def count_arguments(tokens: list[Token], open_index: int, close_index: int) -> int:
    """Top-level argument count between a matched pair of parens.

    An empty interior is zero arguments; commas nested in inner parens do
    not separate arguments of this call.
    """
    if close_index == open_index + 1:
        return 0
    depth = 0
    commas = 0
    for tok in tokens[open_index + 1 : close_index]:
        if tok.kind == TokenKind.LPAREN:
            depth += 1
        elif tok.kind == TokenKind.RPAREN:
            depth -= 1
        elif tok.kind == TokenKind.COMMA and depth == 0:
            commas += 1
    return commas + 1
