"""
Field catalog types for deal logic IR.

Fields are supplied by the host (deal inputs) and are read-only here.
Document types and task templates are addressed by integer ids and only
need a name lookup, which ``TargetCatalog`` provides.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field as PydanticField


class FieldType(StrEnum):
    """Type tag of a deal input."""

    TEXT = "text"
    DROPDOWN = "dropdown"
    NUMBER = "number"
    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    DATE = "date"
    BOOLEAN = "boolean"


class Field(BaseModel):
    """
    A named, typed deal input that conditions and formulas can reference.

    ``id`` is the identity used in stored expressions; ``label`` is for
    display only and may change without touching stored rules.
    """

    id: str
    label: str = PydanticField(alias="input_label")
    type: str = PydanticField(alias="input_type")
    options: list[str] | None = PydanticField(default=None, alias="dropdown_options")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def field_type(self) -> FieldType | None:
        """The recognised type tag, or None for an unknown one."""
        try:
            return FieldType(self.type)
        except ValueError:
            return None


class FieldCatalog:
    """Ordered, read-only view over the host's fields."""

    def __init__(self, fields: list[Field] | None = None) -> None:
        self._fields: list[Field] = list(fields or [])
        self._by_id: dict[str, Field] = {f.id: f for f in self._fields}

    @classmethod
    def from_records(cls, records: list[dict]) -> FieldCatalog:
        """Build a catalog from raw host records (``/api/inputs`` shape)."""
        return cls([Field.model_validate(r) for r in records])

    def __iter__(self):
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._by_id

    def get(self, field_id: str) -> Field | None:
        return self._by_id.get(field_id)

    def type_of(self, field_id: str) -> FieldType | None:
        field = self._by_id.get(field_id)
        return field.field_type if field else None

    def label_for(self, field_id: str) -> str:
        """Display label, degrading to the raw id for stale references."""
        field = self._by_id.get(field_id)
        return field.label if field else str(field_id)

    def search(self, query: str) -> list[Field]:
        """Fields whose id or label contains ``query`` (case-insensitive)."""
        if not query:
            return list(self._fields)
        needle = query.lower()
        return [f for f in self._fields if needle in f.id.lower() or needle in f.label.lower()]


class TargetCatalog:
    """Name lookup for document types or task templates, keyed by id."""

    def __init__(self, names: dict[int, str] | None = None) -> None:
        self._names = dict(names or {})

    @classmethod
    def from_records(cls, records: list[dict], name_key: str = "name") -> TargetCatalog:
        return cls({int(r["id"]): str(r.get(name_key, r["id"])) for r in records})

    def label_for(self, target_id: int | str) -> str:
        try:
            key = int(target_id)
        except (TypeError, ValueError):
            return str(target_id)
        return self._names.get(key, str(target_id))
