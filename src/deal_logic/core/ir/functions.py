"""
Function registry for the deal formula language.

The registry is fixed: it lists the functions the downstream evaluator
understands. A trailing ``"..."`` in ``params`` marks a variadic function
(one or more extra arguments of the same role as the last named one).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

VARIADIC_MARKER = "..."


class FunctionDescriptor(BaseModel):
    """A named formula function with its display signature."""

    name: str = Field(description="Uppercase function name")
    display_signature: str = Field(description="Signature shown in menus")
    description: str
    params: list[str] = Field(default_factory=list, description="Parameter names")

    model_config = ConfigDict(frozen=True)

    @property
    def arity(self) -> int:
        """Minimum argument count accepted by the validator."""
        return len(self.params)

    @property
    def is_variadic(self) -> bool:
        return bool(self.params) and self.params[-1] == VARIADIC_MARKER

    @property
    def insert_text(self) -> str:
        """Text inserted when the function is picked from the menu."""
        return f"{self.name}()"

    def __str__(self) -> str:
        return self.display_signature


def _fn(name: str, params: list[str], description: str, display: str | None = None) -> FunctionDescriptor:
    return FunctionDescriptor(
        name=name,
        display_signature=display or f"{name}({', '.join(params)})",
        description=description,
        params=params,
    )


_VALUES = ["value1", VARIADIC_MARKER]

FUNCTIONS: tuple[FunctionDescriptor, ...] = (
    _fn("TODAY", [], "Current date"),
    _fn("MAX", _VALUES, "Largest of the values", "MAX(value1, value2, ...)"),
    _fn("MIN", _VALUES, "Smallest of the values", "MIN(value1, value2, ...)"),
    _fn("SUM", _VALUES, "Sum of the values", "SUM(value1, value2, ...)"),
    _fn("AVG", _VALUES, "Average of the values", "AVG(value1, value2, ...)"),
    _fn("ROUND", ["value", "decimals"], "Round to a number of decimals"),
    _fn("ROUNDUP", ["value", "decimals"], "Round up to a number of decimals"),
    _fn("ROUNDDOWN", ["value", "decimals"], "Round down to a number of decimals"),
    _fn("ABS", ["value"], "Absolute value"),
    _fn(
        "IF",
        ["condition", "true_value", "false_value"],
        "true_value when condition is non-zero, otherwise false_value",
    ),
    _fn("DATEDIFF", ["date1", "date2"], "Days between two dates"),
    _fn("YEAR", ["date"], "Year of a date"),
    _fn("MONTH", ["date"], "Month of a date (1-12)"),
    _fn("DAY", ["date"], "Day of the month of a date"),
    _fn("POWER", ["base", "exponent"], "base raised to exponent"),
    _fn(
        "PMT",
        ["rate", "periods", "present_value"],
        "Periodic payment for a loan with constant payments and rate",
    ),
)

_BY_NAME: dict[str, FunctionDescriptor] = {f.name: f for f in FUNCTIONS}


def get_function(name: str) -> FunctionDescriptor | None:
    """Case-insensitive registry lookup."""
    return _BY_NAME.get(name.upper())


def is_known_function(name: str) -> bool:
    return name.upper() in _BY_NAME


def search_functions(prefix: str) -> list[FunctionDescriptor]:
    """Functions whose name starts with ``prefix`` (case-insensitive), in registry order."""
    if not prefix:
        return []
    upper = prefix.upper()
    return [f for f in FUNCTIONS if f.name.startswith(upper)]
