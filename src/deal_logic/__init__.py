"""
deal-logic - formula language and conditional-logic rules for deal pricing.

Authoring-time support for the settings screens: the ``{field_id}``
formula buffer, its validator and autocomplete, the operator catalog,
and contradiction checks on logic rules before they are saved.
"""

from __future__ import annotations

from ._version import __version__
from .core import ir
from .core.errors import (
    ConfigError,
    DealLogicError,
    ExpressionValidationError,
    RuleConflictError,
    RulePayloadError,
)

__all__ = [
    "__version__",
    "ir",
    "ConfigError",
    "DealLogicError",
    "ExpressionValidationError",
    "RuleConflictError",
    "RulePayloadError",
]
