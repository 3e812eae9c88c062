"""Liquidity subcommand: add, remove."""

from __future__ import annotations

import typer
from pydantic import ValidationError

from predamm.cli.output import echo_json
from predamm.errors import PricingError
from predamm.models import Pool
from predamm.pricing.liquidity import add_liquidity, remove_liquidity

app = typer.Typer(help="Liquidity provision against a binary pool")


@app.command("add")
def add(
    yes: float = typer.Option(..., "--yes", help="YES reserve"),
    no: float = typer.Option(..., "--no", help="NO reserve"),
    amount: float = typer.Option(..., "--amount", "-a", help="Amount contributed"),
) -> None:
    """New pool, liquidity delta and synthetic ante bet for an add."""
    try:
        echo_json(add_liquidity(Pool(YES=yes, NO=no), amount))
    except (PricingError, ValidationError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("remove")
def remove(
    yes: float = typer.Option(..., "--yes", help="YES reserve"),
    no: float = typer.Option(..., "--no", help="NO reserve"),
    liquidity: float = typer.Option(..., "--liquidity", "-l", help="Liquidity to withdraw"),
) -> None:
    """Payouts and new pool for a withdrawal."""
    try:
        echo_json(remove_liquidity(Pool(YES=yes, NO=no), liquidity))
    except (PricingError, ValidationError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
