"""Single-outcome trade calculator: purchases and sales against one CPMM pool."""

from __future__ import annotations

import math
from dataclasses import dataclass

from predamm.errors import InvalidInputError, NumericDegeneracyError
from predamm.models.bet import Bet
from predamm.models.pool import Outcome, Pool
from predamm.pricing.fees import ZERO_FEES, FeeSchedule, deduct_fixed_fees
from predamm.pricing.invariant import (
    check_amount,
    check_outcome,
    ensure_finite,
    outcome_probability,
    probability,
    require_open,
)
from predamm.pricing.liquidity import liquidity_contribution

# Relative slack for float noise at the [0, shares] bounds of a share value.
_BOUND_TOL = 1e-9


@dataclass(frozen=True)
class Purchase:
    shares: float
    new_pool: Pool
    fee: float = 0.0

    @property
    def prob_after(self) -> float:
        return probability(self.new_pool)


@dataclass(frozen=True)
class Sale:
    shares: float
    sale_value: float
    new_pool: Pool
    profit: float
    creator_fee: float
    platform_fee: float
    net_payout: float


def purchase_shares(pool: Pool, amount: float, outcome: Outcome) -> float:
    """Shares issued for `amount` on `outcome` under YES * NO = k."""
    amount = check_amount(amount)
    outcome = check_outcome(outcome)
    require_open(pool)
    y, n = pool.YES, pool.NO
    k = y * n
    numerator = amount**2 + amount * (y + n) - k + y * n
    denominator = amount + (n if outcome == "YES" else y)
    return ensure_finite(numerator / denominator, "shares")


def purchase(
    pool: Pool, amount: float, outcome: Outcome, fees: FeeSchedule = ZERO_FEES
) -> Purchase:
    """Buy `outcome` with `amount`. A purchase fee, if any, is added back as liquidity."""
    amount = check_amount(amount)
    fee = amount * fees.purchase_fee
    bet = amount - fee
    shares = purchase_shares(pool, bet, outcome)
    y, n = pool.YES, pool.NO
    if outcome == "YES":
        new_y, new_n = y - shares + bet, n + bet
    else:
        new_y, new_n = y + bet, n - shares + bet
    new_pool = Pool(YES=ensure_finite(new_y, "pool YES"), NO=ensure_finite(new_n, "pool NO"))
    if fee > 0:
        add_y, add_n = liquidity_contribution(new_pool, fee)
        new_pool = Pool(YES=new_pool.YES + add_y, NO=new_pool.NO + add_n)
    return Purchase(shares=shares, new_pool=new_pool, fee=fee)


def probability_after_bet(pool: Pool, outcome: Outcome, amount: float) -> float:
    """Probability of `outcome` once `amount` has been bought on it."""
    return outcome_probability(purchase(pool, amount, outcome).new_pool, outcome)


def share_value(pool: Pool, shares: float, outcome: Outcome) -> float:
    """Redeemable value of `shares` of `outcome`: 0.5 (s + Y + N - sqrt(4k + d^2)).

    Evaluated in the equivalent form 2 * other * s / (s + Y + N + sqrt(4k + d^2)),
    which avoids cancellation when shares are small against the pool.
    """
    shares = check_amount(shares, "shares")
    outcome = check_outcome(outcome)
    require_open(pool)
    y, n = pool.YES, pool.NO
    k = y * n
    if outcome == "YES":
        change, other = shares + y - n, n
    else:
        change, other = shares + n - y, y
    root = math.sqrt(4 * k + change**2)
    value = ensure_finite(2 * other * shares / (shares + y + n + root), "share value")
    slack = _BOUND_TOL * max(1.0, shares)
    if value < 0:
        if value < -slack:
            raise NumericDegeneracyError(f"share value {value} below zero")
        value = 0.0
    if value > shares:
        if value > shares + slack:
            raise NumericDegeneracyError(f"share value {value} exceeds shares {shares}")
        value = shares
    return value


def amount_for_shares(pool: Pool, shares: float, outcome: Outcome) -> float:
    """Stake that buys exactly `shares` of `outcome` (inverse of purchase_shares).

    Solves b^2 + b (Y + N - s) - s * other = 0 for the positive root.
    """
    shares = check_amount(shares, "shares")
    outcome = check_outcome(outcome)
    require_open(pool)
    if shares == 0:
        return 0.0
    y, n = pool.YES, pool.NO
    other = n if outcome == "YES" else y
    c = y + n - shares
    root = math.sqrt(c * c + 4 * shares * other)
    if c >= 0:
        amount = 2 * shares * other / (c + root)
    else:
        amount = (root - c) / 2
    return ensure_finite(amount, "amount for shares")


def probability_cap_amount(pool: Pool, outcome: Outcome, max_prob: float) -> float:
    """Largest fee-free stake on `outcome` that keeps its probability <= max_prob."""
    outcome = check_outcome(outcome)
    require_open(pool)
    if not 0 < max_prob < 1:
        raise InvalidInputError(f"max_prob must be in (0, 1), got {max_prob}")
    if outcome_probability(pool, outcome) >= max_prob:
        return 0.0
    # After a fee-free buy the product is unchanged, so the bought side's
    # counter-reserve must reach sqrt(k * p / (1 - p)).
    target = math.sqrt(pool.k * max_prob / (1 - max_prob))
    current = pool.NO if outcome == "YES" else pool.YES
    return max(0.0, ensure_finite(target - current, "cap amount"))


def sell(
    pool: Pool,
    bet: Bet,
    shares: float | None = None,
    fees: FeeSchedule = ZERO_FEES,
) -> Sale:
    """Sell all (or `shares` of) a bet's holding back to the pool.

    Profit is measured against the bet's stake pro-rated to the shares sold;
    creator and platform fees are charged on positive profit only.
    """
    if bet.is_sale or not bet.shares > 0:
        raise InvalidInputError(f"bet {bet.id} holds no shares to sell")
    to_sell = bet.shares if shares is None else check_amount(shares, "shares")
    if to_sell <= 0:
        raise InvalidInputError("shares to sell must be positive")
    if to_sell > bet.shares * (1 + 1e-12):
        raise InvalidInputError(
            f"cannot sell {to_sell} shares; bet {bet.id} holds {bet.shares}"
        )
    to_sell = min(to_sell, bet.shares)
    value = share_value(pool, to_sell, bet.outcome)
    y, n = pool.YES, pool.NO
    if bet.outcome == "YES":
        new_y, new_n = y + to_sell - value, n - value
    else:
        new_y, new_n = y - value, n + to_sell - value
    new_pool = Pool(YES=ensure_finite(new_y, "pool YES"), NO=ensure_finite(new_n, "pool NO"))

    cost_basis = bet.amount * to_sell / bet.shares
    profit = ensure_finite(value - cost_basis, "sale profit")
    gain = max(0.0, profit)
    return Sale(
        shares=to_sell,
        sale_value=value,
        new_pool=new_pool,
        profit=profit,
        creator_fee=fees.creator_fee * gain,
        platform_fee=fees.platform_fee * gain,
        net_payout=deduct_fixed_fees(cost_basis, value, fees),
    )
