"""Pool invariant primitives: implied probability, liquidity, initial pools.

Helpers here also hold the numeric guards shared by the rest of the engine:
inputs are validated up front and every derived quantity is checked for
NaN/infinity before it leaves a function.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from predamm.errors import InvalidInputError, NumericDegeneracyError
from predamm.models.pool import Outcome, Pool


def check_amount(value: float, name: str = "amount") -> float:
    """Reject NaN, infinite and negative inputs."""
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidInputError(f"{name} must be finite, got {value}")
    if value < 0:
        raise InvalidInputError(f"{name} must be non-negative, got {value}")
    return float(value)


def check_outcome(outcome: str) -> Outcome:
    if outcome not in ("YES", "NO"):
        raise InvalidInputError(f"outcome must be YES or NO, got {outcome!r}")
    return outcome  # type: ignore[return-value]


def require_open(pool: Pool) -> Pool:
    if not pool.is_open:
        raise InvalidInputError(f"pool is not open: YES={pool.YES} NO={pool.NO}")
    return pool


def ensure_finite(value: float, name: str) -> float:
    if not math.isfinite(value):
        raise NumericDegeneracyError(f"{name} is not finite ({value})")
    return value


def probability(pool: Pool) -> float:
    """Implied probability of YES: NO / (YES + NO)."""
    total = pool.YES + pool.NO
    if total <= 0:
        raise NumericDegeneracyError("probability of an empty pool")
    return ensure_finite(pool.NO / total, "probability")


def outcome_probability(pool: Pool, outcome: Outcome) -> float:
    p = probability(pool)
    return p if check_outcome(outcome) == "YES" else 1 - p


def liquidity(pool: Pool) -> float:
    """Constant-product measure sqrt(YES * NO). Bookkeeping only."""
    return ensure_finite(math.sqrt(pool.YES * pool.NO), "liquidity")


@dataclass(frozen=True)
class InitialPool:
    """Seed state of a new binary market."""

    pool: Pool
    liquidity: float
    ante_bet_amount: float
    ante_bet_outcome: Outcome


def initial_pool(initial_prob: float, ante: float) -> InitialPool:
    """Seed a pool at initial_prob with the creator's ante on the larger side.

    The uneven reserves are attributed to an ante bet: |YES - NO| on NO when
    the pool holds more YES (probability leans NO), otherwise on YES.
    """
    if not (math.isfinite(initial_prob) and 0 < initial_prob < 1):
        raise InvalidInputError(f"initial probability must be in (0, 1), got {initial_prob}")
    ante = check_amount(ante, "ante")
    if ante <= 0:
        raise InvalidInputError("ante must be positive")
    p = initial_prob
    if p >= 0.5:
        pool_yes, pool_no = ante * (1 / p - 1), ante
    else:
        pool_yes, pool_no = ante, ante * (1 / (1 - p) - 1)
    pool = Pool(YES=ensure_finite(pool_yes, "pool YES"), NO=ensure_finite(pool_no, "pool NO"))
    return InitialPool(
        pool=pool,
        liquidity=liquidity(pool),
        ante_bet_amount=abs(pool_yes - pool_no),
        ante_bet_outcome="NO" if pool_yes > pool_no else "YES",
    )
