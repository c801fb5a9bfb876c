"""
Formula commands: check an expression, list the function registry.
"""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from deal_logic.core.expression_lang import validate
from deal_logic.core.ir.functions import FUNCTIONS

console = Console()


def validate_command(
    expression: Annotated[str, typer.Argument(help="Canonical expression, e.g. 'ROUND({f_rate}, 2)'")],
) -> None:
    """Check the syntax of a formula."""
    result = validate(expression)
    if result.valid:
        console.print("[green]✓[/green] Valid expression")
        return
    console.print(f"[red]✗[/red] {result.error}")
    raise typer.Exit(code=1)


def functions_command() -> None:
    """List the functions formulas may call."""
    table = Table(title="Formula functions")
    table.add_column("Signature", style="cyan")
    table.add_column("Min args", justify="right")
    table.add_column("Description")
    for fn in FUNCTIONS:
        table.add_row(fn.display_signature, str(fn.arity), fn.description)
    console.print(table)
