"""
Segment types for the formula editing buffer.

A buffer is an ordered, non-empty list of segments: literal text or a
reference to a field. It only exists while editing; the canonical
``{field_id}`` string is what gets stored.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class TextSegment(BaseModel):
    """Literal formula text."""

    kind: Literal["text"] = "text"
    value: str = ""

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.value


class ReferenceSegment(BaseModel):
    """A field reference, serialized as ``{field_id}``."""

    kind: Literal["reference"] = "reference"
    field_id: str

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return "{" + self.field_id + "}"


Segment = Annotated[TextSegment | ReferenceSegment, Field(discriminator="kind")]

Buffer = list[Segment]


class Caret(BaseModel):
    """Caret position: a text segment index and an offset inside it."""

    segment: int = 0
    offset: int = 0

    model_config = ConfigDict(frozen=True)
