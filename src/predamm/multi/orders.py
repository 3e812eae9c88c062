"""Resting-order matching: fill a buy against unfilled limit orders on the other side."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

import structlog

from predamm.models.order import RestingOrder, Taker
from predamm.models.pool import Outcome, opposite

log = structlog.get_logger(__name__)

# Below this a maker balance or share remainder is treated as exhausted.
_EPS = 1e-12


@dataclass(frozen=True)
class RestingBook:
    """Consistent snapshot of resting orders and their owners' balances."""

    orders: tuple[RestingOrder, ...] = ()
    balances: Mapping[str, float] = field(default_factory=dict)

    @classmethod
    def of(cls, orders: Iterable[RestingOrder], balances: Mapping[str, float]) -> RestingBook:
        return cls(orders=tuple(orders), balances=dict(balances))

    def counter_orders(
        self, answer_id: str, taker_id: str | None = None, outcome: Outcome = "YES"
    ) -> list[RestingOrder]:
        """Open orders on `answer_id` that a buy of `outcome` can take, in creation order.

        The taker's own orders are excluded.
        """
        side = opposite(outcome)
        return [
            o
            for o in self.orders
            if o.answer_id == answer_id
            and o.outcome == side
            and not o.is_cancelled
            and not o.is_filled
            and o.user_id != taker_id
        ]


@dataclass
class MatchResult:
    takers: list[Taker]
    shares: float
    amount: float
    unfunded: list[str]


def match_orders(
    orders: Iterable[RestingOrder],
    shares_wanted: float,
    balances: dict[str, float],
) -> MatchResult:
    """Take up to `shares_wanted` shares from `orders`, in order.

    Each order fills at its limit price, which is a YES probability: against
    a NO order the taker pays `limit_price` per share and the maker
    `1 - limit_price`; against a YES order the two prices swap. A maker's
    spend is bounded by the order's remaining amount and by their balance;
    `balances` is debited in place. Orders whose maker has no balance left
    are skipped and reported.
    """
    takers: list[Taker] = []
    unfunded: list[str] = []
    filled = 0.0
    spent = 0.0
    for order in orders:
        needed = shares_wanted - filled
        if needed <= _EPS * max(1.0, shares_wanted):
            break
        balance = balances.get(order.user_id, 0.0)
        if balance <= _EPS:
            unfunded.append(order.id)
            log.debug("resting_order_unfunded", order_id=order.id, user_id=order.user_id)
            continue
        if order.outcome == "NO":
            taker_price = order.limit_price
        else:
            taker_price = 1 - order.limit_price
        maker_price = 1 - taker_price
        capacity = min(order.remaining, balance)
        shares = min(needed, capacity / maker_price)
        amount = shares * taker_price
        balances[order.user_id] = balance - shares * maker_price
        takers.append(
            Taker(
                order_id=order.id,
                user_id=order.user_id,
                amount=amount,
                shares=shares,
                price=order.limit_price,
            )
        )
        filled += shares
        spent += amount
    return MatchResult(takers=takers, shares=filled, amount=spent, unfunded=unfunded)
