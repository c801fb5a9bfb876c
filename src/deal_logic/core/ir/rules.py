"""
Conditional logic rule types for deal logic IR.

A rule joins its conditions with a combinator and applies its actions
when they hold. Three rule families exist, differing only in what their
actions target:

- input rules act on deal inputs (toggle or assign a value)
- document rules toggle document types
- task rules toggle task templates, optionally tying "required" to a
  status and a deal stage

Python attribute names follow the domain (``combinator``, ``value_mode``,
``target``, ``effect``); aliases carry the persisted column names.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Combinator(StrEnum):
    """Joiner applied across a rule's conditions."""

    AND = "AND"
    OR = "OR"


class ValueMode(StrEnum):
    """Which value slot of a condition or input action is active."""

    VALUE = "value"
    FIELD = "field"
    EXPRESSION = "expression"


class Operator(StrEnum):
    """Condition comparison operators."""

    EXISTS = "exists"
    DOES_NOT_EXIST = "does_not_exist"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    # text / dropdown
    CONTAINS = "contains"
    DOES_NOT_CONTAIN = "does_not_contain"
    STARTS_WITH = "starts_with"
    DOES_NOT_START_WITH = "does_not_start_with"
    ENDS_WITH = "ends_with"
    DOES_NOT_END_WITH = "does_not_end_with"
    # number / currency / percentage
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    # date
    IS_AFTER = "is_after"
    IS_BEFORE = "is_before"
    IS_AFTER_OR_EQUAL = "is_after_or_equal"
    IS_BEFORE_OR_EQUAL = "is_before_or_equal"
    # boolean
    IS_TRUE = "is_true"
    IS_FALSE = "is_false"


class Effect(StrEnum):
    """What an action does to its target."""

    VISIBLE = "visible"
    NOT_VISIBLE = "not_visible"
    REQUIRED = "required"
    NOT_REQUIRED = "not_required"
    VALUE = "value"
    FIELD = "field"
    EXPRESSION = "expression"


TOGGLE_EFFECTS = frozenset(
    {Effect.VISIBLE, Effect.NOT_VISIBLE, Effect.REQUIRED, Effect.NOT_REQUIRED}
)
VALUE_EFFECTS = frozenset({Effect.VALUE, Effect.FIELD, Effect.EXPRESSION})

EFFECT_LABELS: dict[Effect, str] = {
    Effect.VISIBLE: "Visible",
    Effect.NOT_VISIBLE: "Not Visible",
    Effect.REQUIRED: "Required",
    Effect.NOT_REQUIRED: "Not Required",
    Effect.VALUE: "Value",
    Effect.FIELD: "Field",
    Effect.EXPRESSION: "Expression",
}


class Condition(BaseModel):
    """
    One comparison of a rule.

    ``operator`` is kept as a plain string so rules saved with an operator
    that is no longer offered stay loadable and editable.
    """

    field: str = ""
    operator: str = ""
    value_mode: ValueMode = Field(default=ValueMode.VALUE, alias="value_type")
    value: str = ""
    value_field: str | None = None
    value_expression: str | None = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("value", mode="before")
    @classmethod
    def _none_value_is_empty(cls, v: object) -> object:
        return "" if v is None else v

    @property
    def active_value(self) -> str | None:
        """The slot selected by ``value_mode``."""
        if self.value_mode == ValueMode.FIELD:
            return self.value_field
        if self.value_mode == ValueMode.EXPRESSION:
            return self.value_expression
        return self.value


class TargetType(StrEnum):
    """What an input action points at: one input, or a whole input category."""

    INPUT = "input"
    CATEGORY = "category"


class InputAction(BaseModel):
    """
    Action on a deal input: toggle it or assign it a value.

    Category actions toggle every input of a category; they carry
    ``category_id`` and leave ``target`` empty.
    """

    target: str = Field(default="", alias="input_id")
    category_id: int | None = None
    target_type: TargetType = TargetType.INPUT
    effect: Effect = Field(default=Effect.VISIBLE, alias="value_type")
    value_text: str | None = None
    value_visible: bool | None = None
    value_required: bool | None = None
    value_field: str | None = None
    value_expression: str | None = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def is_category(self) -> bool:
        return self.target_type == TargetType.CATEGORY or (not self.target and bool(self.category_id))

    @property
    def target_id(self) -> str | int | None:
        """The category id for category actions, else the input id."""
        return self.category_id if self.is_category else self.target

    @property
    def active_value(self) -> str | None:
        if self.effect == Effect.VALUE:
            return self.value_text
        if self.effect == Effect.FIELD:
            return self.value_field
        if self.effect == Effect.EXPRESSION:
            return self.value_expression
        return None


def _toggle_only(v: Effect) -> Effect:
    if v not in TOGGLE_EFFECTS:
        raise ValueError(f"effect {v.value!r} cannot assign a value to this target")
    return v


class DocumentAction(BaseModel):
    """Action on a document type; documents are toggled, never assigned."""

    target: int = Field(default=0, alias="document_type_id")
    effect: Effect = Field(default=Effect.VISIBLE, alias="value_type")
    value_visible: bool | None = None
    value_required: bool | None = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("effect")
    @classmethod
    def _check_effect(cls, v: Effect) -> Effect:
        return _toggle_only(v)


class TaskAction(BaseModel):
    """Action on a task template, optionally scoped to a status and stage."""

    target: int = Field(default=0, alias="target_task_template_id")
    effect: Effect = Field(default=Effect.VISIBLE, alias="action_type")
    value_visible: bool | None = None
    value_required: bool | None = None
    required_status_id: int | None = None
    required_for_stage_id: int | None = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("effect")
    @classmethod
    def _check_effect(cls, v: Effect) -> Effect:
        return _toggle_only(v)


Action = InputAction | DocumentAction | TaskAction

ActionT = TypeVar("ActionT", InputAction, DocumentAction, TaskAction)


class LogicRule(BaseModel, Generic[ActionT]):
    """If the conditions hold (joined by ``combinator``), apply the actions."""

    combinator: Combinator = Field(default=Combinator.AND, alias="type")
    conditions: list[Condition] = Field(default_factory=list)
    actions: list[ActionT] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RuleKind(StrEnum):
    """Rule family, selecting the action model and the save scope key."""

    INPUT = "input"
    DOCUMENT = "document"
    TASK = "task"

    @property
    def action_model(self) -> type[InputAction] | type[DocumentAction] | type[TaskAction]:
        return _ACTION_MODELS[self]

    @property
    def scope_key(self) -> str:
        """Payload key naming the single target a rule set is scoped to."""
        return _SCOPE_KEYS[self]


_ACTION_MODELS: dict[RuleKind, type[InputAction] | type[DocumentAction] | type[TaskAction]] = {
    RuleKind.INPUT: InputAction,
    RuleKind.DOCUMENT: DocumentAction,
    RuleKind.TASK: TaskAction,
}

_SCOPE_KEYS: dict[RuleKind, str] = {
    RuleKind.INPUT: "input_id",
    RuleKind.DOCUMENT: "document_type_id",
    RuleKind.TASK: "task_template_id",
}


class RuleSet(BaseModel):
    """
    The ordered rules of one settings screen.

    When ``scope`` is set, saving replaces only the rules scoped to that
    target; otherwise the whole set is replaced.
    """

    kind: RuleKind
    rules: list[LogicRule] = Field(default_factory=list)
    scope: str | int | None = None
