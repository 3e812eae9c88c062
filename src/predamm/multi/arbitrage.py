"""Multi-outcome buy solver over mutually exclusive answers.

A buy of YES on a set of answers pays the same number of shares whichever
chosen answer wins. For a payout of `s` shares the solver buys `s - m` YES
on every chosen answer and `m` NO on every other answer. Holding `m` NO on
each of `r` other answers pays `m * (r - 1)` whatever happens, plus `m` more
if a chosen answer wins; the certain part is redeemed to the bettor at once.
`m` is found by bisection so the answer probabilities sum to what they
summed to before the trade, so no set of answers is left cheaper than its
guaranteed payout. `s` is found by bisection on net cost.

Every purchase fills against the answer's resting orders on the other side
in creation order, then against the answer's own constant-product pool.
Chosen answers are filled cheapest first (ties by insertion order); each
fill only reprices its own answer, so the order decides which fills draw on
a shared maker balance first.

When every answer is chosen the payout is certain: the stake mints that many
shares on each answer and no pool moves.

AMM depth is bounded by a maximum probability on each chosen answer. A stake
the chosen answers cannot absorb within that bound is reported, never
clipped.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import structlog
from pydantic import BaseModel, ConfigDict, Field

from predamm.errors import InsufficientLiquidityError, NumericDegeneracyError
from predamm.models.contract import Answer
from predamm.models.order import Taker
from predamm.models.pool import Outcome, Pool
from predamm.multi.orders import RestingBook, match_orders
from predamm.pricing.invariant import check_amount, probability, require_open
from predamm.pricing.trade import amount_for_shares, purchase

log = structlog.get_logger(__name__)

_MAX_ITERATIONS = 200
_REL_TOL = 1e-12
# Probability sums this close to the target count as restored.
_SUM_TOL = 1e-12


class AmmLimits(BaseModel):
    """Bounds on how far a multi-outcome fill may push any chosen answer."""

    model_config = ConfigDict(frozen=True)

    max_probability: float = Field(0.99, gt=0, lt=1)


DEFAULT_LIMITS = AmmLimits()


@dataclass(frozen=True)
class AnswerFill:
    """Shares bought on one answer: resting-order takers first, then the AMM."""

    answer_id: str
    outcome: Outcome
    amount: float
    shares: float
    takers: list[Taker]
    amm_amount: float
    amm_shares: float
    prob_before: float
    prob_after: float
    new_pool: Pool


@dataclass(frozen=True)
class MultiBuyResult:
    """Outcome of one multi-outcome buy.

    `shares` is the payout if any chosen answer wins. `total_spent` is net
    of `redeemed`, the certain part of the NO positions paid straight back.
    """

    fills: list[AnswerFill] = field(default_factory=list)
    updated_answers: list[Answer] = field(default_factory=list)
    total_spent: float = 0.0
    shares: float = 0.0
    redeemed: float = 0.0
    unfunded_orders: list[str] = field(default_factory=list)
    balances: dict[str, float] = field(default_factory=dict)

    @property
    def probability_sum(self) -> float:
        return sum(probability(a.pool) for a in self.updated_answers)


class _Exhausted(Exception):
    """A candidate payout pushes a chosen answer past the probability bound."""


@dataclass
class _Plan:
    fills: list[AnswerFill]
    pools: dict[str, Pool]
    cost: float
    redeemed: float
    balances: dict[str, float]
    unfunded: list[str]

    @property
    def net_cost(self) -> float:
        return self.cost - self.redeemed


def _fill(
    answer: Answer,
    outcome: Outcome,
    shares: float,
    book: RestingBook,
    balances: dict[str, float],
    taker_id: str | None,
) -> tuple[AnswerFill, list[str]]:
    pool = answer.pool
    matched = match_orders(book.counter_orders(answer.id, taker_id, outcome), shares, balances)
    remaining = shares - matched.shares
    amm_amount = 0.0
    amm_shares = 0.0
    new_pool = pool
    if remaining > _REL_TOL * max(1.0, shares):
        amm_amount = amount_for_shares(pool, remaining, outcome)
        bought = purchase(pool, amm_amount, outcome)
        amm_shares = bought.shares
        new_pool = bought.new_pool
    fill = AnswerFill(
        answer_id=answer.id,
        outcome=outcome,
        amount=matched.amount + amm_amount,
        shares=matched.shares + amm_shares,
        takers=matched.takers,
        amm_amount=amm_amount,
        amm_shares=amm_shares,
        prob_before=probability(pool),
        prob_after=probability(new_pool),
        new_pool=new_pool,
    )
    return fill, matched.unfunded


def _build(
    chosen: Sequence[Answer],
    others: Sequence[Answer],
    yes_shares: float,
    no_shares: float,
    book: RestingBook,
    taker_id: str | None,
) -> _Plan:
    """Buy `yes_shares` YES on each chosen answer and `no_shares` NO on each other one."""
    balances = dict(book.balances)
    fills: list[AnswerFill] = []
    unfunded: list[str] = []
    legs = [(a, "YES", yes_shares) for a in chosen] + [(a, "NO", no_shares) for a in others]
    for answer, outcome, shares in legs:
        if shares <= 0:
            continue
        fill, skipped = _fill(answer, outcome, shares, book, balances, taker_id)
        fills.append(fill)
        unfunded.extend(skipped)
    return _Plan(
        fills=fills,
        pools={f.answer_id: f.new_pool for f in fills},
        cost=sum(f.amount for f in fills),
        redeemed=no_shares * max(0, len(others) - 1),
        balances=balances,
        unfunded=unfunded,
    )


def _probability_sum(answers: Sequence[Answer], pools: dict[str, Pool]) -> float:
    return sum(probability(pools.get(a.id, a.pool)) for a in answers)


def _plan_payout(
    answers: Sequence[Answer],
    chosen: Sequence[Answer],
    others: Sequence[Answer],
    payout: float,
    target: float,
    book: RestingBook,
    limits: AmmLimits,
    taker_id: str | None,
) -> _Plan:
    """Split `payout` into YES and NO legs that restore the probability sum.

    Raises _Exhausted when a chosen answer ends past the probability bound.
    """
    def build(no_shares: float) -> _Plan:
        return _build(chosen, others, payout - no_shares, no_shares, book, taker_id)

    plan = build(0.0)
    if _probability_sum(answers, plan.pools) > target + _SUM_TOL:
        # More NO lowers every probability involved: YES legs shrink, NO legs grow.
        lo, hi = 0.0, payout
        for _ in range(_MAX_ITERATIONS):
            if hi - lo <= _REL_TOL * max(1.0, payout):
                break
            mid = (lo + hi) / 2
            if _probability_sum(answers, build(mid).pools) > target:
                lo = mid
            else:
                hi = mid
        plan = build(hi)

    for f in plan.fills:
        if f.outcome == "YES" and f.prob_after > limits.max_probability + _SUM_TOL:
            raise _Exhausted(f.answer_id)
    return plan


def _bisect(lo: float, hi: float, ok) -> float:
    """Largest x in [lo, hi] with ok(x), given ok(lo) and monotone ok."""
    for _ in range(_MAX_ITERATIONS):
        if hi - lo <= _REL_TOL * max(1.0, hi):
            break
        mid = (lo + hi) / 2
        if ok(mid):
            lo = mid
        else:
            hi = mid
    return lo


def _mint(
    answers: Sequence[Answer], amount: float, book: RestingBook
) -> MultiBuyResult:
    """Every answer chosen: `amount` buys `amount` shares of each, priced at par."""
    total = sum(probability(a.pool) for a in answers)
    fills = [
        AnswerFill(
            answer_id=a.id,
            outcome="YES",
            amount=amount * probability(a.pool) / total,
            shares=amount,
            takers=[],
            amm_amount=0.0,
            amm_shares=0.0,
            prob_before=probability(a.pool),
            prob_after=probability(a.pool),
            new_pool=a.pool,
        )
        for a in sorted(answers, key=lambda a: (probability(a.pool), a.index))
    ]
    return MultiBuyResult(
        fills=fills,
        updated_answers=list(answers),
        total_spent=amount,
        shares=amount,
        balances=dict(book.balances),
    )


def solve_multi_outcome_buy(
    answers: Sequence[Answer],
    chosen_answer_ids: Iterable[str],
    amount: float,
    book: RestingBook | None = None,
    limits: AmmLimits = DEFAULT_LIMITS,
    user_id: str | None = None,
) -> MultiBuyResult:
    """Spend `amount` on an equal YES payout across the chosen answers.

    Returns the fills in execution order (chosen answers cheapest first,
    then the NO legs on the other answers), the full answer list with
    repriced pools, and the makers' balances after matching. The caller
    persists the result atomically.
    """
    amount = check_amount(amount)
    book = book or RestingBook()
    wanted = set(chosen_answer_ids)
    chosen = sorted(
        (a for a in answers if a.id in wanted),
        key=lambda a: (probability(a.pool), a.index),
    )
    if not chosen or amount == 0:
        return MultiBuyResult(updated_answers=list(answers), balances=dict(book.balances))
    for a in answers:
        require_open(a.pool)
    others = [a for a in answers if a.id not in wanted]
    if not others:
        return _mint(answers, amount, book)

    target = _probability_sum(answers, {})

    def run(payout: float) -> _Plan | None:
        try:
            return _plan_payout(answers, chosen, others, payout, target, book, limits, user_id)
        except _Exhausted:
            return None

    def affordable(payout: float) -> bool:
        plan = run(payout)
        return plan is not None and plan.net_cost <= amount

    # Prices only move against the buyer, so the fair-value payout already costs
    # at least the stake; doubling is a guard against rounding.
    ceiling = amount / sum(probability(a.pool) for a in chosen)
    for _ in range(_MAX_ITERATIONS):
        if not affordable(ceiling):
            break
        ceiling *= 2
    else:
        raise NumericDegeneracyError("multi-outcome cost does not grow with the payout")

    if run(ceiling) is None:
        ceiling = _bisect(0.0, ceiling, lambda s: run(s) is not None)
        top = run(ceiling)
        available = top.net_cost if top is not None else 0.0
        if amount > available * (1 + 1e-9):
            log.warning(
                "multi_buy_insufficient_liquidity",
                requested=amount,
                available=available,
                answers=[a.id for a in chosen],
            )
            raise InsufficientLiquidityError(requested=amount, available=available)

    shares = _bisect(0.0, ceiling, affordable)
    plan = run(shares)
    updated = [
        a.model_copy(update={"pool": plan.pools[a.id]}) if a.id in plan.pools else a
        for a in answers
    ]
    if plan.unfunded:
        log.info("resting_orders_unfunded", order_ids=sorted(set(plan.unfunded)))
    return MultiBuyResult(
        fills=plan.fills,
        updated_answers=updated,
        total_spent=plan.net_cost,
        shares=shares,
        redeemed=plan.redeemed,
        unfunded_orders=sorted(set(plan.unfunded)),
        balances=plan.balances,
    )
