"""
Settings loaded from ``deal_logic.toml``.

Example::

    [expressions]
    require_valid = false        # block saving rules with invalid formulas
    max_mention_results = 50     # entries shown in the @ field picker

    [rules]
    cross_rule_conflicts = false # also compare actions across rules
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from deal_logic.core.errors import make_config_error

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "deal_logic.toml"


@dataclass
class ExpressionSettings:
    """Formula editing and validation settings."""

    require_valid: bool = False
    max_mention_results: int = 50


@dataclass
class RuleSettings:
    """Rule analysis settings."""

    cross_rule_conflicts: bool = False


@dataclass
class Settings:
    """All deal logic settings."""

    expressions: ExpressionSettings = field(default_factory=ExpressionSettings)
    rules: RuleSettings = field(default_factory=RuleSettings)


def _typed(section: dict[str, Any], key: str, expected: type, default: Any, path: Path) -> Any:
    value = section.get(key, default)
    # bool is an int subclass; keep them apart
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise make_config_error(
            f"'{key}' must be {expected.__name__}, got {type(value).__name__}", path
        )
    return value


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from ``path`` (default ``./deal_logic.toml``).

    A missing file gives the defaults.

    Raises:
        ConfigError: If the file is not valid TOML or a value has the wrong type.
    """
    path = path or Path.cwd() / CONFIG_FILENAME
    if not path.exists():
        logger.debug(f"No {path.name} found, using default settings")
        return Settings()

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise make_config_error(f"Invalid TOML: {e}", path) from e

    expr_data = data.get("expressions", {})
    rules_data = data.get("rules", {})
    for name, section in (("expressions", expr_data), ("rules", rules_data)):
        if not isinstance(section, dict):
            raise make_config_error(f"[{name}] must be a table", path)

    settings = Settings(
        expressions=ExpressionSettings(
            require_valid=_typed(expr_data, "require_valid", bool, False, path),
            max_mention_results=_typed(expr_data, "max_mention_results", int, 50, path),
        ),
        rules=RuleSettings(
            cross_rule_conflicts=_typed(rules_data, "cross_rule_conflicts", bool, False, path),
        ),
    )
    logger.info(f"Loaded settings from {path}")
    return settings
