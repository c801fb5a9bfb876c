"""
Context-sensitive autocomplete for the formula editor.

On every edit or caret move the host asks ``resolve_overlay`` what to
show. Exactly one overlay (or none) comes back, by priority:

    1. MentionMenu    - caret is inside an ``@query`` (fields to reference)
    2. FunctionMenu   - caret ends an alphabetic run that prefixes a function
    3. SignatureHint  - caret sits inside ``NAME(...)`` of a known function

The helpers are pure and never raise.
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field as PydanticField

from deal_logic.core.expression_lang.buffer import (
    REFERENCE_RE,
    absolute_offset,
    clamp_caret,
    insert_reference,
    replace_trailing_word,
    serialize,
    set_text,
)
from deal_logic.core.ir.fields import Field, FieldCatalog
from deal_logic.core.ir.functions import FunctionDescriptor, get_function, search_functions
from deal_logic.core.ir.segments import Buffer, Caret

_MENTION_QUERY_RE = re.compile(r"\w*")
_TRAILING_ALPHA_RE = re.compile(r"[A-Za-z]+$")
_TRAILING_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*$")

DEFAULT_MAX_RESULTS = 50


# ---------------------------------------------------------------------------
# Overlay states
# ---------------------------------------------------------------------------


class MentionMenu(BaseModel):
    """Field picker opened by ``@``."""

    kind: Literal["mention"] = "mention"
    query: str
    candidates: list[Field] = PydanticField(default_factory=list)

    model_config = ConfigDict(frozen=True)


class FunctionMenu(BaseModel):
    """Function picker for a partially typed name."""

    kind: Literal["function"] = "function"
    query: str
    candidates: list[FunctionDescriptor] = PydanticField(default_factory=list)

    model_config = ConfigDict(frozen=True)


class SignatureHint(BaseModel):
    """Signature of the call enclosing the caret, one parameter emphasized."""

    kind: Literal["signature"] = "signature"
    function: FunctionDescriptor
    param_index: int

    model_config = ConfigDict(frozen=True)

    @property
    def parts(self) -> list[tuple[str, bool]]:
        """``(text, emphasized)`` pieces of the rendered signature."""
        parts: list[tuple[str, bool]] = [(f"{self.function.name}(", False)]
        for i, param in enumerate(self.function.params):
            if i:
                parts.append((", ", False))
            parts.append((param, i == self.param_index))
        parts.append((")", False))
        return parts

    @property
    def markdown(self) -> str:
        return "".join(f"**{text}**" if bold else text for text, bold in self.parts)


Overlay = MentionMenu | FunctionMenu | SignatureHint


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


def detect_mention(text: str, offset: int) -> str | None:
    """Query of the ``@`` mention ending at ``offset``, or None if inactive."""
    head = text[: max(offset, 0)]
    at = head.rfind("@")
    if at == -1:
        return None
    query = head[at + 1 :]
    if _MENTION_QUERY_RE.fullmatch(query) is None:
        return None
    return query


def detect_function_prefix(text: str, offset: int) -> str | None:
    """Alphabetic run ending at ``offset`` that starts some function name."""
    head = text[: max(offset, 0)]
    if detect_mention(text, offset) is not None:
        return None
    m = _TRAILING_ALPHA_RE.search(head)
    if not m:
        return None
    if not search_functions(m.group(0)):
        return None
    return m.group(0)


def _mask_references(text: str) -> str:
    # Keep offsets stable while hiding parens and commas inside field ids
    return REFERENCE_RE.sub(lambda m: "0" * len(m.group(0)), text)


def detect_active_function(text: str, caret: int) -> tuple[FunctionDescriptor, int] | None:
    """Function call enclosing ``caret`` and the parameter index being typed.

    The index counts top-level commas between the call's ``(`` and the
    caret, clamped to the last declared parameter so extra arguments of a
    variadic function keep highlighting it.
    """
    text = _mask_references(text)
    caret = min(max(caret, 0), len(text))

    depth = 0
    open_pos = -1
    for i in range(caret - 1, -1, -1):
        ch = text[i]
        if ch == ")":
            depth += 1
        elif ch == "(":
            if depth == 0:
                open_pos = i
                break
            depth -= 1
    if open_pos == -1:
        return None

    m = _TRAILING_IDENT_RE.search(text[:open_pos])
    if not m:
        return None
    fn = get_function(m.group(0))
    if fn is None or not fn.params:
        return None

    commas = 0
    depth = 0
    for ch in text[open_pos + 1 : caret]:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif ch == "," and depth == 0:
            commas += 1
    return fn, min(commas, len(fn.params) - 1)


def resolve_overlay(
    buffer: Buffer,
    caret: Caret,
    catalog: FieldCatalog,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> Overlay | None:
    """The single overlay to show for this buffer and caret."""
    caret = clamp_caret(buffer, caret)
    text = buffer[caret.segment].value

    query = detect_mention(text, caret.offset)
    if query is not None:
        return MentionMenu(query=query, candidates=catalog.search(query)[:max_results])

    prefix = detect_function_prefix(text, caret.offset)
    if prefix is not None:
        return FunctionMenu(query=prefix, candidates=search_functions(prefix))

    active = detect_active_function(serialize(buffer), absolute_offset(buffer, caret))
    if active is not None:
        fn, index = active
        return SignatureHint(function=fn, param_index=index)

    return None


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


def select_mention(buffer: Buffer, caret: Caret, field_id: str) -> tuple[Buffer, Caret]:
    """Replace the active ``@query`` with a reference to ``field_id``."""
    caret = clamp_caret(buffer, caret)
    text = buffer[caret.segment].value
    query = detect_mention(text, caret.offset)
    if query is None:
        return list(buffer), caret
    at = text[: caret.offset].rfind("@")
    before = text[:at]
    after = text[at + 1 + len(query) :]
    stripped = set_text(buffer, caret.segment, before + after)
    return insert_reference(stripped, caret.segment, len(before), field_id)


def select_function(buffer: Buffer, caret: Caret, name: str) -> tuple[Buffer, Caret]:
    """Complete the trailing word at the caret to ``NAME()``."""
    fn = get_function(name)
    if fn is None:
        return list(buffer), clamp_caret(buffer, caret)
    caret = clamp_caret(buffer, caret)
    word = detect_function_prefix(buffer[caret.segment].value, caret.offset) or ""
    return replace_trailing_word(buffer, caret, word, fn.insert_text)
