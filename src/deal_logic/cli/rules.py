"""
Rule commands: operator lookup and offline checks of saved rule sets.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console

from deal_logic.core.config import load_settings
from deal_logic.core.errors import DealLogicError
from deal_logic.core.ir.fields import FieldCatalog, TargetCatalog
from deal_logic.core.ir.rules import RuleKind
from deal_logic.core.logic import (
    check_expressions,
    detect_rule_conflicts,
    load_rule_set,
    operator_label,
    operators_for_type,
)
from deal_logic.core.logic.operators import is_valueless

logger = logging.getLogger(__name__)
console = Console()


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Cannot read {path}:[/red] {e}")
        raise typer.Exit(code=2) from e


def operators_command(
    field_type: Annotated[str, typer.Argument(help="text, dropdown, number, currency, percentage, date or boolean")],
) -> None:
    """Show the condition operators offered for a field type."""
    for op in operators_for_type(field_type):
        suffix = " [dim](no value)[/dim]" if is_valueless(op) else ""
        console.print(f"{op.value:<24} {operator_label(op)}{suffix}")


def check_rules_command(
    payload_path: Annotated[Path, typer.Argument(help="JSON file with {\"rules\": [...]}")],
    kind: Annotated[RuleKind, typer.Option("--kind", "-k", help="Rule family")] = RuleKind.INPUT,
    fields_path: Annotated[
        Path | None, typer.Option("--fields", help="JSON list of inputs for labels")
    ] = None,
    targets_path: Annotated[
        Path | None,
        typer.Option("--targets", help="JSON list of document types / task templates for labels"),
    ] = None,
    config_path: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to deal_logic.toml")
    ] = None,
) -> None:
    """Report contradictions and formula errors in a saved rule set."""
    try:
        settings = load_settings(config_path)
        rule_set = load_rule_set(_read_json(payload_path), kind)
    except DealLogicError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=2) from e

    if kind == RuleKind.INPUT:
        catalog = FieldCatalog.from_records(_read_json(fields_path)) if fields_path else FieldCatalog()
        label_for = catalog.label_for
    else:
        targets = TargetCatalog.from_records(_read_json(targets_path)) if targets_path else TargetCatalog()
        label_for = targets.label_for

    logger.debug(f"Checking {len(rule_set.rules)} {kind.value} rule(s) from {payload_path}")
    warnings = detect_rule_conflicts(
        rule_set.rules, label_for, cross_rule=settings.rules.cross_rule_conflicts
    )
    errors = check_expressions(rule_set.rules)

    for index in sorted(warnings):
        for message in warnings[index]:
            console.print(f"[yellow]Rule #{index + 1}:[/yellow] {message}")
    for (ri, section, item), message in errors.items():
        console.print(f"[red]Rule #{ri + 1} {section}[{item}]:[/red] {message}")

    blocking = bool(warnings) or (bool(errors) and settings.expressions.require_valid)
    if blocking:
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] {len(rule_set.rules)} rule(s) can be saved")
