"""
deal-logic CLI.

- expressions.py: validate, functions
- rules.py: operators, check-rules
"""

from __future__ import annotations

import logging
import sys

import typer

from deal_logic._version import __version__


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"deal-logic {__version__}")
        raise typer.Exit()


app = typer.Typer(
    help="Formula and logic rule tooling for deal pricing settings",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Global options."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


from deal_logic.cli.expressions import functions_command, validate_command  # noqa: E402
from deal_logic.cli.rules import check_rules_command, operators_command  # noqa: E402

app.command(name="validate")(validate_command)
app.command(name="functions")(functions_command)
app.command(name="operators")(operators_command)
app.command(name="check-rules")(check_rules_command)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


__all__ = ["app", "main"]


if __name__ == "__main__":
    main(sys.argv[1:])
