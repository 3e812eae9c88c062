"""Bet, LiquidityProvision - immutable trade and liquidity records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from predamm.models.order import Taker
from predamm.models.pool import Outcome, Pool


class Bet(BaseModel):
    """One filled trade. Sales are separate records with negative amount and shares."""

    model_config = ConfigDict(frozen=True)

    id: str
    contract_id: str
    user_id: str = ""
    answer_id: str | None = None
    outcome: Outcome
    amount: float
    shares: float
    prob_before: float | None = None
    prob_after: float | None = None
    pool_after: Pool | None = None
    takers: list[Taker] = Field(default_factory=list)
    is_sale: bool = False
    is_ante: bool = False
    created_time: int = 0  # ms epoch


class LiquidityProvision(BaseModel):
    """Reserves contributed by a provider. Closed proportionally on removal."""

    model_config = ConfigDict(frozen=True)

    id: str
    contract_id: str
    user_id: str
    amount: float = Field(..., ge=0)
    liquidity: float = Field(..., ge=0)
    removed_liquidity: float = Field(0.0, ge=0)
    pool_after: Pool
    created_time: int = 0

    @property
    def remaining_liquidity(self) -> float:
        return max(0.0, self.liquidity - self.removed_liquidity)

    @property
    def is_closed(self) -> bool:
        return self.remaining_liquidity <= 0
