"""
Formula editing buffer.

A buffer is the editing-time form of one formula: an ordered list of
text and field-reference segments. It converts to and from the canonical
string, where each reference is written ``{field_id}``.

Buffer invariants (kept by ``normalize``):
    - no two adjacent text segments
    - never empty, never all references: a trailing empty text segment
      is appended when needed so the caret always has somewhere to go

Every function here is pure: it returns a new buffer (and caret) and
never raises on out-of-range indexes.
"""

from __future__ import annotations

import re

from deal_logic.core.ir.segments import Buffer, Caret, ReferenceSegment, Segment, TextSegment

REFERENCE_RE = re.compile(r"\{([^}]+)\}")
_TRAILING_ALPHA_RE = re.compile(r"[A-Za-z]+$")


# ---------------------------------------------------------------------------
# Canonical string <-> buffer
# ---------------------------------------------------------------------------


def parse(text: str) -> Buffer:
    """Split a canonical expression string into segments."""
    segments: list[Segment] = []
    last = 0
    for m in REFERENCE_RE.finditer(text or ""):
        if m.start() > last:
            segments.append(TextSegment(value=text[last : m.start()]))
        segments.append(ReferenceSegment(field_id=m.group(1)))
        last = m.end()
    if text and last < len(text):
        segments.append(TextSegment(value=text[last:]))
    return normalize(segments)


def serialize(buffer: Buffer) -> str:
    """Join segments back into the canonical string."""
    return "".join(str(seg) for seg in buffer)


def normalize(segments: list[Segment]) -> Buffer:
    """Merge adjacent text segments and guarantee a text slot exists."""
    result: list[Segment] = []
    for seg in segments:
        if isinstance(seg, TextSegment) and result and isinstance(result[-1], TextSegment):
            result[-1] = TextSegment(value=result[-1].value + seg.value)
        else:
            result.append(seg)
    if not any(isinstance(seg, TextSegment) for seg in result):
        result.append(TextSegment())
    return result


def referenced_fields(buffer: Buffer) -> list[str]:
    """Field ids referenced by the buffer, in order of appearance."""
    return [seg.field_id for seg in buffer if isinstance(seg, ReferenceSegment)]


# ---------------------------------------------------------------------------
# Caret helpers
# ---------------------------------------------------------------------------


def _is_text(buffer: Buffer, index: int) -> bool:
    return 0 <= index < len(buffer) and isinstance(buffer[index], TextSegment)


def home_caret(buffer: Buffer) -> Caret:
    """End of the last text segment."""
    for i in range(len(buffer) - 1, -1, -1):
        seg = buffer[i]
        if isinstance(seg, TextSegment):
            return Caret(segment=i, offset=len(seg.value))
    return Caret()


def clamp_caret(buffer: Buffer, caret: Caret) -> Caret:
    """Pull a caret back onto a text segment of ``buffer``."""
    if not _is_text(buffer, caret.segment):
        return home_caret(buffer)
    length = len(buffer[caret.segment].value)
    offset = min(max(caret.offset, 0), length)
    if offset == caret.offset:
        return caret
    return Caret(segment=caret.segment, offset=offset)


def absolute_offset(buffer: Buffer, caret: Caret) -> int:
    """Caret position within the serialized string."""
    caret = clamp_caret(buffer, caret)
    return sum(len(str(seg)) for seg in buffer[: caret.segment]) + caret.offset


def locate(buffer: Buffer, position: int) -> Caret:
    """Caret in the first text segment covering an absolute position."""
    start = 0
    for i, seg in enumerate(buffer):
        end = start + len(str(seg))
        if isinstance(seg, TextSegment) and start <= position <= end:
            return Caret(segment=i, offset=position - start)
        start = end
    return home_caret(buffer)


# ---------------------------------------------------------------------------
# Editing operations
# ---------------------------------------------------------------------------


def set_text(buffer: Buffer, index: int, value: str) -> Buffer:
    """Replace the value of the text segment at ``index``."""
    if not _is_text(buffer, index):
        return list(buffer)
    segments = list(buffer)
    segments[index] = TextSegment(value=value)
    return normalize(segments)


def insert_text(buffer: Buffer, caret: Caret, text: str) -> tuple[Buffer, Caret]:
    """Type ``text`` at the caret."""
    caret = clamp_caret(buffer, caret)
    current = buffer[caret.segment].value
    value = current[: caret.offset] + text + current[caret.offset :]
    return set_text(buffer, caret.segment, value), Caret(
        segment=caret.segment, offset=caret.offset + len(text)
    )


def insert_reference(
    buffer: Buffer, segment_index: int, offset: int, field_id: str
) -> tuple[Buffer, Caret]:
    """Split a text segment at ``offset`` and drop a reference in between.

    The caret lands at the start of the text following the new reference.
    """
    if not _is_text(buffer, segment_index):
        return list(buffer), home_caret(buffer)
    value = buffer[segment_index].value
    offset = min(max(offset, 0), len(value))
    before, after = value[:offset], value[offset:]

    replacement: list[Segment] = []
    if before:
        replacement.append(TextSegment(value=before))
    reference = ReferenceSegment(field_id=field_id)
    replacement.extend([reference, TextSegment(value=after)])

    position = sum(len(str(seg)) for seg in buffer[:segment_index]) + offset + len(str(reference))
    segments = normalize(list(buffer[:segment_index]) + replacement + list(buffer[segment_index + 1 :]))
    return segments, locate(segments, position)


def remove_reference(buffer: Buffer, index: int) -> tuple[Buffer, Caret]:
    """Delete the reference at ``index``; the caret goes to the join point."""
    if not (0 <= index < len(buffer)) or not isinstance(buffer[index], ReferenceSegment):
        return list(buffer), home_caret(buffer)
    position = sum(len(str(seg)) for seg in buffer[:index])
    segments = normalize(list(buffer[:index]) + list(buffer[index + 1 :]))
    return segments, locate(segments, position)


def replace_trailing_word(
    buffer: Buffer, caret: Caret, word: str, replacement: str
) -> tuple[Buffer, Caret]:
    """Swap the alphabetic run ending at the caret for ``replacement``.

    Used to complete a function name: ``RO|`` becomes ``ROUND(|)`` with the
    caret just inside the parentheses.
    """
    caret = clamp_caret(buffer, caret)
    value = buffer[caret.segment].value
    head, tail = value[: caret.offset], value[caret.offset :]

    if word and head.upper().endswith(word.upper()):
        stem = head[: len(head) - len(word)]
    else:
        m = _TRAILING_ALPHA_RE.search(head)
        stem = head[: m.start()] if m else head

    paren = replacement.find("(")
    new_offset = len(stem) + (paren + 1 if paren >= 0 else len(replacement))
    return set_text(buffer, caret.segment, stem + replacement + tail), Caret(
        segment=caret.segment, offset=new_offset
    )


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


def move_left(buffer: Buffer, caret: Caret) -> Caret:
    """One step left, hopping over references to the end of the prior text."""
    caret = clamp_caret(buffer, caret)
    if caret.offset > 0:
        return Caret(segment=caret.segment, offset=caret.offset - 1)
    for i in range(caret.segment - 1, -1, -1):
        seg = buffer[i]
        if isinstance(seg, TextSegment):
            return Caret(segment=i, offset=len(seg.value))
    return caret


def move_right(buffer: Buffer, caret: Caret) -> Caret:
    """One step right, hopping over references to the start of the next text."""
    caret = clamp_caret(buffer, caret)
    if caret.offset < len(buffer[caret.segment].value):
        return Caret(segment=caret.segment, offset=caret.offset + 1)
    for i in range(caret.segment + 1, len(buffer)):
        if isinstance(buffer[i], TextSegment):
            return Caret(segment=i, offset=0)
    return caret


def backspace(buffer: Buffer, caret: Caret) -> tuple[Buffer, Caret]:
    """Delete backwards from the caret.

    Inside text this removes one character. At offset 0 a reference right
    before the caret is removed as a whole. On an empty text segment with
    no reference before it, the reference after it goes instead.
    """
    caret = clamp_caret(buffer, caret)
    index, offset = caret.segment, caret.offset
    value = buffer[index].value

    if offset > 0:
        return set_text(buffer, index, value[: offset - 1] + value[offset:]), Caret(
            segment=index, offset=offset - 1
        )
    if index > 0 and isinstance(buffer[index - 1], ReferenceSegment):
        return remove_reference(buffer, index - 1)
    if not value and index + 1 < len(buffer) and isinstance(buffer[index + 1], ReferenceSegment):
        return remove_reference(buffer, index + 1)
    return list(buffer), caret
