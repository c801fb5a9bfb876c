"""
Operator catalog: which comparison operators a condition may use,
depending on the type of the field it tests.
"""

from __future__ import annotations

from deal_logic.core.ir.fields import FieldType
from deal_logic.core.ir.rules import Operator

OPERATOR_LABELS: dict[Operator, str] = {
    Operator.EXISTS: "Exists",
    Operator.DOES_NOT_EXIST: "Does Not Exist",
    Operator.IS_EMPTY: "Is Empty",
    Operator.IS_NOT_EMPTY: "Is Not Empty",
    Operator.EQUALS: "Is Equal To",
    Operator.NOT_EQUALS: "Is Not Equal To",
    Operator.CONTAINS: "Contains",
    Operator.DOES_NOT_CONTAIN: "Does Not Contain",
    Operator.STARTS_WITH: "Starts With",
    Operator.DOES_NOT_START_WITH: "Does Not Start With",
    Operator.ENDS_WITH: "Ends With",
    Operator.DOES_NOT_END_WITH: "Does Not End With",
    Operator.GREATER_THAN: "Is Greater Than",
    Operator.LESS_THAN: "Is Less Than",
    Operator.GREATER_THAN_OR_EQUAL: "Is Greater Than or Equal To",
    Operator.LESS_THAN_OR_EQUAL: "Is Less Than or Equal To",
    Operator.IS_AFTER: "Is After",
    Operator.IS_BEFORE: "Is Before",
    Operator.IS_AFTER_OR_EQUAL: "Is After or Equal To",
    Operator.IS_BEFORE_OR_EQUAL: "Is Before or Equal To",
    Operator.IS_TRUE: "Is True",
    Operator.IS_FALSE: "Is False",
}

COMMON_OPERATORS: tuple[Operator, ...] = (
    Operator.EXISTS,
    Operator.DOES_NOT_EXIST,
    Operator.IS_EMPTY,
    Operator.IS_NOT_EMPTY,
    Operator.EQUALS,
    Operator.NOT_EQUALS,
)

TEXT_OPERATORS = COMMON_OPERATORS + (
    Operator.CONTAINS,
    Operator.DOES_NOT_CONTAIN,
    Operator.STARTS_WITH,
    Operator.DOES_NOT_START_WITH,
    Operator.ENDS_WITH,
    Operator.DOES_NOT_END_WITH,
)

NUMERIC_OPERATORS = COMMON_OPERATORS + (
    Operator.GREATER_THAN,
    Operator.LESS_THAN,
    Operator.GREATER_THAN_OR_EQUAL,
    Operator.LESS_THAN_OR_EQUAL,
)

DATE_OPERATORS = COMMON_OPERATORS + (
    Operator.IS_AFTER,
    Operator.IS_BEFORE,
    Operator.IS_AFTER_OR_EQUAL,
    Operator.IS_BEFORE_OR_EQUAL,
)

BOOLEAN_OPERATORS = COMMON_OPERATORS + (Operator.IS_TRUE, Operator.IS_FALSE)

VALUELESS_OPERATORS = frozenset(
    {
        Operator.EXISTS,
        Operator.DOES_NOT_EXIST,
        Operator.IS_EMPTY,
        Operator.IS_NOT_EMPTY,
        Operator.IS_TRUE,
        Operator.IS_FALSE,
    }
)

_BY_TYPE: dict[FieldType, tuple[Operator, ...]] = {
    FieldType.TEXT: TEXT_OPERATORS,
    FieldType.DROPDOWN: TEXT_OPERATORS,
    FieldType.NUMBER: NUMERIC_OPERATORS,
    FieldType.CURRENCY: NUMERIC_OPERATORS,
    FieldType.PERCENTAGE: NUMERIC_OPERATORS,
    FieldType.DATE: DATE_OPERATORS,
    FieldType.BOOLEAN: BOOLEAN_OPERATORS,
}


def operators_for_type(field_type: FieldType | str | None) -> tuple[Operator, ...]:
    """Legal operators for a field type; unknown or missing types get the common set."""
    if field_type is None:
        return COMMON_OPERATORS
    try:
        return _BY_TYPE.get(FieldType(field_type), COMMON_OPERATORS)
    except ValueError:
        return COMMON_OPERATORS


def is_valueless(operator: Operator | str) -> bool:
    """True when the operator takes no comparison value."""
    return operator in VALUELESS_OPERATORS


def operator_label(operator: Operator | str) -> str:
    """Display label, falling back to the raw code for unknown operators."""
    try:
        return OPERATOR_LABELS[Operator(operator)]
    except ValueError:
        return str(operator)
