"""Profit/settlement evaluator: value a user's bets on one contract."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from typing import assert_never

from predamm.errors import InvalidInputError
from predamm.models.bet import Bet
from predamm.models.contract import (
    AnswerResolution,
    BinaryMarket,
    BinaryResolution,
    CancelResolution,
    Contract,
    FreeResponseMarket,
    NumericMarket,
    WeightedResolution,
)
from predamm.pricing.invariant import ensure_finite, probability


@dataclass(frozen=True)
class ContractProfit:
    contract_id: str
    invested: float
    payout: float
    profit: float


def _binary_yes_value(contract: Contract, market: BinaryMarket) -> float:
    res = contract.resolution
    match res:
        case None:
            return probability(market.pool)
        case BinaryResolution(outcome="YES"):
            return 1.0
        case BinaryResolution(outcome="NO"):
            return 0.0
        case BinaryResolution(outcome="MKT"):
            return res.probability if res.probability is not None else probability(market.pool)
        case _:
            raise InvalidInputError(f"contract {contract.id}: {res.kind} resolution on a binary market")


def _answer_yes_value(contract: Contract, answer_id: str | None) -> float:
    answer = contract.answer(answer_id) if answer_id else None
    if answer is None:
        raise InvalidInputError(f"contract {contract.id}: bet on unknown answer {answer_id!r}")
    res = contract.resolution
    match res:
        case None:
            return probability(answer.pool)
        case AnswerResolution():
            return 1.0 if res.answer_id == answer_id else 0.0
        case WeightedResolution():
            return res.weights.get(answer_id, 0.0)
        case _:
            raise InvalidInputError(f"contract {contract.id}: {res.kind} resolution on a multi-outcome market")


def share_value_at_resolution(contract: Contract, bet: Bet) -> float:
    """Value of one share of the bet's outcome: resolution payoff, else current probability."""
    market = contract.market
    match market:
        case BinaryMarket():
            yes_value = _binary_yes_value(contract, market)
        case NumericMarket() | FreeResponseMarket():
            yes_value = _answer_yes_value(contract, bet.answer_id)
        case _:
            assert_never(market)
    return yes_value if bet.outcome == "YES" else 1 - yes_value


def contract_profit(contract: Contract, bets: Iterable[Bet]) -> ContractProfit:
    """Realized (or marked-to-market) profit of `bets` on `contract`.

    Sales are bets with negative amount and shares, so they net out of both
    sides. A cancelled contract refunds every stake. Raises
    NumericDegeneracyError when the result is not finite.
    """
    bets = list(bets)
    invested = sum(b.amount for b in bets)
    if isinstance(contract.resolution, CancelResolution):
        payout = invested
    else:
        payout = sum(b.shares * share_value_at_resolution(contract, b) for b in bets)
    profit = ensure_finite(payout - invested, f"profit on contract {contract.id}")
    return ContractProfit(contract_id=contract.id, invested=invested, payout=payout, profit=profit)


def answer_profits(contract: Contract, bets: Iterable[Bet]) -> dict[str, ContractProfit]:
    """contract_profit per answer sub-market of a multi-outcome contract."""
    by_answer: dict[str, list[Bet]] = defaultdict(list)
    for b in bets:
        by_answer[b.answer_id or ""].append(b)
    return {answer_id: contract_profit(contract, group) for answer_id, group in by_answer.items()}
