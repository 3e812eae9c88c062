"""Ranked profit aggregation across contracts, with a policy filter.

The policy (visibility, ranking flag, excluded contracts, season window) is
chosen by the caller; it is not a pricing rule. A contract whose profit is
degenerate, or whose bets do not fit the contract, is logged and skipped so
one bad record cannot abort the run.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

import structlog
from pydantic import BaseModel, ConfigDict, Field

from predamm.errors import NumericDegeneracyError, PricingError
from predamm.models.bet import Bet
from predamm.models.contract import Contract
from predamm.settlement.profit import contract_profit

log = structlog.get_logger(__name__)


class SeasonWindow(BaseModel):
    """Open interval (start, end) in ms epoch."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int

    def contains(self, ts: int) -> bool:
        return self.start < ts < self.end


class RankingPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    excluded_slugs: frozenset[str] = Field(default_factory=frozenset)
    excluded_ids: frozenset[str] = Field(default_factory=frozenset)
    season: SeasonWindow | None = None


def is_rankable(contract: Contract, policy: RankingPolicy) -> bool:
    return (
        contract.visibility == "public"
        and contract.is_ranked
        and contract.slug not in policy.excluded_slugs
        and contract.id not in policy.excluded_ids
    )


@dataclass(frozen=True)
class SkippedContract:
    contract_id: str
    reason: str


@dataclass
class UserProfit:
    user_id: str
    total: float = 0.0
    by_contract: dict[str, float] = field(default_factory=dict)
    skipped: list[SkippedContract] = field(default_factory=list)


def user_profit(
    user_id: str,
    bets: Iterable[Bet],
    contracts: Mapping[str, Contract],
    policy: RankingPolicy,
) -> UserProfit:
    """Sum the user's profit over rankable contracts within the season."""
    result = UserProfit(user_id=user_id)
    by_contract: dict[str, list[Bet]] = defaultdict(list)
    for b in bets:
        if b.user_id != user_id:
            continue
        if policy.season is not None and not policy.season.contains(b.created_time):
            continue
        by_contract[b.contract_id].append(b)

    for contract_id, contract_bets in by_contract.items():
        contract = contracts.get(contract_id)
        if contract is None:
            result.skipped.append(SkippedContract(contract_id, "missing"))
            continue
        if not is_rankable(contract, policy):
            continue
        try:
            profit = contract_profit(contract, contract_bets).profit
        except PricingError as e:
            reason = "degenerate" if isinstance(e, NumericDegeneracyError) else "invalid"
            log.error(
                "profit_skipped",
                reason=reason,
                contract_id=contract_id,
                slug=contract.slug,
                user_id=user_id,
                error=str(e),
            )
            result.skipped.append(SkippedContract(contract_id, reason))
            continue
        result.by_contract[contract_id] = profit
        result.total += profit
    return result


def profits_by_user(
    bets: Iterable[Bet],
    contracts: Mapping[str, Contract],
    policy: RankingPolicy,
    user_ids: Iterable[str] | None = None,
) -> dict[str, UserProfit]:
    """user_profit for every user (or the given users), keyed by user id."""
    bets = list(bets)
    ids = list(user_ids) if user_ids is not None else sorted({b.user_id for b in bets})
    bets_by_user: dict[str, list[Bet]] = defaultdict(list)
    for b in bets:
        bets_by_user[b.user_id].append(b)
    return {uid: user_profit(uid, bets_by_user.get(uid, []), contracts, policy) for uid in ids}
