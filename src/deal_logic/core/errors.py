"""
Error types for deal logic configuration, rule payloads and save gating.

Validators, contradiction detectors and autocomplete never raise; the
exceptions here are only used at the load/save/config boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class DealLogicError(Exception):
    """Base exception for all deal logic errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ConfigError(DealLogicError):
    """
    Raised when deal_logic.toml cannot be loaded.

    Examples:
    - Invalid TOML syntax
    - Wrong value type for a known setting
    """

    pass


class RulePayloadError(DealLogicError):
    """
    Raised when a stored rule payload is structurally invalid.

    Examples:
    - Payload is not a mapping
    - ``rules`` is not a list
    - A condition or action fails model validation
    """

    pass


class RuleConflictError(DealLogicError):
    """
    Raised when a rule set with contradiction warnings is submitted.

    ``warnings`` maps the rule index to every warning for that rule.
    """

    def __init__(self, warnings: dict[int, list[str]]):
        self.warnings = warnings
        count = sum(len(w) for w in warnings.values())
        rules = ", ".join(f"#{i + 1}" for i in sorted(warnings))
        super().__init__(f"{count} contradiction(s) in rule(s) {rules}")


class ExpressionValidationError(DealLogicError):
    """
    Raised on save when formulas are required to be valid and some are not.

    ``errors`` maps ``(rule_index, section, item_index)`` to the
    validator message.
    """

    def __init__(self, errors: dict[tuple[int, str, int], str]):
        self.errors = errors
        first = next(iter(errors.values()), "")
        super().__init__(f"{len(errors)} invalid expression(s): {first}")


@dataclass
class ErrorContext:
    """
    Context information for an error.

    Attributes:
        file: Path to the file being loaded
    """

    file: Path

    def format(self) -> str:
        return str(self.file)


def make_config_error(message: str, file: Path) -> ConfigError:
    """
    Helper to create a ConfigError with file context.

    Args:
        message: Error description
        file: Config file path

    Returns:
        ConfigError with context attached
    """
    return ConfigError(message, ErrorContext(file=file))
