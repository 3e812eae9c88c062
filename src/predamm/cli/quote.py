"""Quote subcommand: preview binary purchases and sales."""

from __future__ import annotations

import typer
from pydantic import ValidationError

from predamm.cli.output import echo_json
from predamm.errors import PricingError
from predamm.models import Bet, Pool
from predamm.pricing.invariant import check_outcome, probability
from predamm.pricing.trade import purchase, sell

app = typer.Typer(help="Preview trades against a binary pool")


@app.command("buy")
def buy(
    ctx: typer.Context,
    yes: float = typer.Option(..., "--yes", help="YES reserve"),
    no: float = typer.Option(..., "--no", help="NO reserve"),
    amount: float = typer.Option(..., "--amount", "-a", help="Stake"),
    outcome: str = typer.Option("YES", "--outcome", "-o", help="YES or NO"),
) -> None:
    """Shares and new pool for buying OUTCOME with AMOUNT."""
    settings = ctx.obj["settings"]
    try:
        pool = Pool(YES=yes, NO=no)
        result = purchase(pool, amount, check_outcome(outcome.upper()), settings.fee_schedule)
        echo_json(
            {
                "shares": result.shares,
                "fee": result.fee,
                "new_pool": result.new_pool,
                "prob_before": probability(pool),
                "prob_after": result.prob_after,
            }
        )
    except (PricingError, ValidationError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("sell")
def sell_cmd(
    ctx: typer.Context,
    yes: float = typer.Option(..., "--yes", help="YES reserve"),
    no: float = typer.Option(..., "--no", help="NO reserve"),
    shares: float = typer.Option(..., "--shares", "-s", help="Shares held by the bet"),
    stake: float = typer.Option(..., "--stake", help="Amount originally staked"),
    outcome: str = typer.Option("YES", "--outcome", "-o", help="YES or NO"),
    sell_shares: float | None = typer.Option(None, "--sell", help="Sell only this many shares"),
) -> None:
    """Sale value, fees and net payout for selling a held bet."""
    settings = ctx.obj["settings"]
    try:
        bet = Bet(
            id="cli",
            contract_id="cli",
            outcome=check_outcome(outcome.upper()),
            amount=stake,
            shares=shares,
        )
        echo_json(sell(Pool(YES=yes, NO=no), bet, sell_shares, settings.fee_schedule))
    except (PricingError, ValidationError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
