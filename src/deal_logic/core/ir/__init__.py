"""
Deal logic intermediate representation (IR) types.

Fields, the formula function registry, formula editing segments and
conditional logic rules. All types are re-exported from this package.
"""

# Fields
from .fields import Field, FieldCatalog, FieldType, TargetCatalog

# Functions
from .functions import (
    FUNCTIONS,
    VARIADIC_MARKER,
    FunctionDescriptor,
    get_function,
    is_known_function,
    search_functions,
)

# Rules
from .rules import (
    EFFECT_LABELS,
    TOGGLE_EFFECTS,
    VALUE_EFFECTS,
    Action,
    Combinator,
    Condition,
    DocumentAction,
    Effect,
    InputAction,
    LogicRule,
    Operator,
    RuleKind,
    RuleSet,
    TargetType,
    TaskAction,
    ValueMode,
)

# Segments
from .segments import Buffer, Caret, ReferenceSegment, Segment, TextSegment

__all__ = [
    # Fields
    "Field",
    "FieldCatalog",
    "FieldType",
    "TargetCatalog",
    # Functions
    "FUNCTIONS",
    "VARIADIC_MARKER",
    "FunctionDescriptor",
    "get_function",
    "is_known_function",
    "search_functions",
    # Rules
    "EFFECT_LABELS",
    "TOGGLE_EFFECTS",
    "VALUE_EFFECTS",
    "Action",
    "Combinator",
    "Condition",
    "DocumentAction",
    "Effect",
    "InputAction",
    "LogicRule",
    "Operator",
    "RuleKind",
    "RuleSet",
    "TargetType",
    "TaskAction",
    "ValueMode",
    # Segments
    "Buffer",
    "Caret",
    "ReferenceSegment",
    "Segment",
    "TextSegment",
]
