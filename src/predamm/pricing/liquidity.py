"""Liquidity manager: add and remove reserves at the pool's implied probability."""

from __future__ import annotations

from dataclasses import dataclass

from predamm.errors import InvalidInputError
from predamm.models.bet import LiquidityProvision
from predamm.models.pool import Outcome, Pool
from predamm.pricing.invariant import (
    check_amount,
    ensure_finite,
    liquidity,
    probability,
    require_open,
)

# Withdrawal fractions this close above 1 are float noise from liquidity() round trips.
_FRACTION_TOL = 1e-9


@dataclass(frozen=True)
class LiquidityAdd:
    new_pool: Pool
    liquidity_delta: float
    bet_amount: float
    bet_outcome: Outcome


@dataclass(frozen=True)
class LiquidityRemoval:
    new_pool: Pool
    payout: float
    payout_yes: float
    payout_no: float
    bet_amount: float
    bet_outcome: Outcome
    closes_pool: bool = False


def liquidity_contribution(pool: Pool, amount: float) -> tuple[float, float]:
    """(YES, NO) reserves that `amount` adds without moving the probability."""
    p = probability(require_open(pool))
    if p >= 0.5:
        return amount * (1 / p - 1), amount
    return amount, amount * (1 / (1 - p) - 1)


def add_liquidity(pool: Pool, amount: float) -> LiquidityAdd:
    """Add `amount` of liquidity; the larger side receives exactly `amount`.

    The skew between the two contributions is reported as a synthetic bet so
    the caller can attribute it to the provider alongside the provision.
    """
    amount = check_amount(amount)
    p = probability(require_open(pool))
    add_yes, add_no = liquidity_contribution(pool, amount)
    new_pool = Pool(
        YES=ensure_finite(pool.YES + add_yes, "pool YES"),
        NO=ensure_finite(pool.NO + add_no, "pool NO"),
    )
    return LiquidityAdd(
        new_pool=new_pool,
        liquidity_delta=liquidity(new_pool) - liquidity(pool),
        bet_amount=abs(add_yes - add_no),
        bet_outcome="YES" if p >= 0.5 else "NO",
    )


def remove_liquidity(pool: Pool, amount: float) -> LiquidityRemoval:
    """Withdraw `amount` of liquidity as a proportional slice of both reserves.

    Only the smaller side is paid out; the difference stays behind as a
    directional position, reported as a synthetic bet on the side opposite
    to what adding liquidity would produce.

    Withdrawing the whole pool empties both reserves. An empty pool cannot
    price a trade, so the result sets `closes_pool` and the caller must mark
    the market closed when it persists the new pool.
    """
    amount = check_amount(amount, "liquidity")
    require_open(pool)
    total = liquidity(pool)
    p = probability(pool)
    f = amount / total
    if f > 1 + _FRACTION_TOL:
        raise InvalidInputError(f"cannot withdraw {amount} liquidity; pool holds {total}")
    f = min(f, 1.0)
    payout_yes, payout_no = f * pool.YES, f * pool.NO
    new_pool = Pool(YES=max(0.0, pool.YES - payout_yes), NO=max(0.0, pool.NO - payout_no))
    return LiquidityRemoval(
        new_pool=new_pool,
        payout=min(payout_yes, payout_no),
        payout_yes=payout_yes,
        payout_no=payout_no,
        bet_amount=abs(payout_yes - payout_no),
        bet_outcome="NO" if p >= 0.5 else "YES",
        closes_pool=not new_pool.is_open,
    )


def provision_from_add(
    id: str,
    contract_id: str,
    user_id: str,
    amount: float,
    result: LiquidityAdd,
    created_time: int = 0,
) -> LiquidityProvision:
    """LiquidityProvision record for the external store after an add."""
    return LiquidityProvision(
        id=id,
        contract_id=contract_id,
        user_id=user_id,
        amount=amount,
        liquidity=result.liquidity_delta,
        pool_after=result.new_pool,
        created_time=created_time,
    )


def close_provision(provision: LiquidityProvision, amount: float) -> LiquidityProvision:
    """Close `amount` of a provision's remaining liquidity (fully or partially)."""
    amount = check_amount(amount, "liquidity")
    if amount > provision.remaining_liquidity * (1 + _FRACTION_TOL):
        raise InvalidInputError(
            f"provision {provision.id} has {provision.remaining_liquidity} liquidity left, "
            f"cannot close {amount}"
        )
    removed = min(provision.liquidity, provision.removed_liquidity + amount)
    return provision.model_copy(update={"removed_liquidity": removed})
