"""Core deal logic: IR, formula language, rule analysis, configuration."""

from . import ir
from .config import Settings, load_settings
from .errors import (
    ConfigError,
    DealLogicError,
    ErrorContext,
    ExpressionValidationError,
    RuleConflictError,
    RulePayloadError,
)

__all__ = [
    "ir",
    "Settings",
    "load_settings",
    "ConfigError",
    "DealLogicError",
    "ErrorContext",
    "ExpressionValidationError",
    "RuleConflictError",
    "RulePayloadError",
]
