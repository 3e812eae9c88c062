"""Profit subcommand: ranked profit for one user from a JSON snapshot."""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import TypeAdapter, ValidationError

from predamm.cli.output import echo_json, read_snapshot
from predamm.models import Bet, Contract
from predamm.settlement.league import user_profit

app = typer.Typer(help="Profit and settlement")

_contracts = TypeAdapter(list[Contract])
_bets = TypeAdapter(list[Bet])


@app.command("user")
def user(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="User id"),
    snapshot: Path = typer.Option(..., "--snapshot", "-f", help='JSON file with "contracts" and "bets"'),
) -> None:
    """Total profit over rankable contracts; degenerate contracts are listed as skipped."""
    settings = ctx.obj["settings"]
    raw = read_snapshot(snapshot)
    try:
        contracts = _contracts.validate_python(raw.get("contracts", []))
        bets = _bets.validate_python(raw.get("bets", []))
    except ValidationError as e:
        typer.echo(f"Invalid snapshot: {e}", err=True)
        raise typer.Exit(1)
    result = user_profit(user_id, bets, {c.id: c for c in contracts}, settings.ranking_policy)
    echo_json(result)
