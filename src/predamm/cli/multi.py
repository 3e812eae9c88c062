"""Multi subcommand: solve a multi-outcome buy from a JSON snapshot.

Snapshot format: {"answers": [...], "orders": [...], "balances": {user: amount}},
with answers and orders in the model schema. Numeric contracts may also carry
"min" and "max" for selection by mode.
"""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import TypeAdapter, ValidationError

from predamm.cli.output import echo_json, read_snapshot
from predamm.errors import InsufficientLiquidityError, PricingError
from predamm.models import Answer, RestingOrder
from predamm.multi.arbitrage import solve_multi_outcome_buy
from predamm.multi.numeric import SelectionMode, about_right_range, select_answers
from predamm.multi.orders import RestingBook

app = typer.Typer(help="Multi-outcome buys")

_answers = TypeAdapter(list[Answer])
_orders = TypeAdapter(list[RestingOrder])


@app.command("buy")
def buy(
    ctx: typer.Context,
    snapshot: Path = typer.Option(..., "--snapshot", "-f", help="JSON snapshot file"),
    amount: float = typer.Option(..., "--amount", "-a", help="Total stake"),
    answer: list[str] = typer.Option([], "--answer", help="Answer id to buy (repeatable)"),
    mode: SelectionMode | None = typer.Option(None, "--mode", help="Numeric selection mode"),
    value: float | None = typer.Option(None, "--value", help="Value for less/more than/about right"),
    user: str | None = typer.Option(None, "--user", help="Taker user id (own orders are skipped)"),
) -> None:
    """Fills per answer and updated probabilities."""
    settings = ctx.obj["settings"]
    raw = read_snapshot(snapshot)
    try:
        answers = _answers.validate_python(raw.get("answers", []))
        orders = _orders.validate_python(raw.get("orders", []))
    except ValidationError as e:
        typer.echo(f"Invalid snapshot: {e}", err=True)
        raise typer.Exit(1)

    try:
        chosen = list(answer)
        if mode is not None:
            if value is None:
                typer.echo("--value is required with --mode", err=True)
                raise typer.Exit(1)
            value_range = None
            if mode == SelectionMode.ABOUT_RIGHT:
                value_range = about_right_range(
                    float(raw["min"]), float(raw["max"]), settings.numeric_bucket_count, value
                )
            chosen += [a.id for a in select_answers(answers, mode, value, value_range)]
        result = solve_multi_outcome_buy(
            answers,
            chosen,
            amount,
            RestingBook.of(orders, raw.get("balances", {})),
            settings.amm_limits,
            user_id=user,
        )
    except InsufficientLiquidityError as e:
        typer.echo(f"Error: {e}. Try a stake of at most {e.available:.2f}.", err=True)
        raise typer.Exit(1)
    except (PricingError, KeyError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    echo_json(
        {
            "shares": result.shares,
            "total_spent": result.total_spent,
            "redeemed": result.redeemed,
            "fills": result.fills,
            "probabilities": {a.id: a.prob for a in result.updated_answers},
            "probability_sum": result.probability_sum,
            "unfunded_orders": result.unfunded_orders,
        }
    )
