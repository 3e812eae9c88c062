"""RestingOrder, Taker - unfilled limit orders and the fills they produce."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from predamm.models.pool import Outcome


class RestingOrder(BaseModel):
    """Unfilled limit order on one answer of a multi-outcome contract."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    answer_id: str
    outcome: Outcome
    limit_price: float = Field(..., gt=0, lt=1)
    order_amount: float = Field(..., ge=0)
    amount_filled: float = Field(0.0, ge=0)
    is_cancelled: bool = False
    created_time: int | None = None  # ms epoch

    @property
    def remaining(self) -> float:
        return max(0.0, self.order_amount - self.amount_filled)

    @property
    def is_filled(self) -> bool:
        return self.remaining <= 0


class Taker(BaseModel):
    """Counterparty credit: a resting order's owner filled against a new trade."""

    model_config = ConfigDict(frozen=True)

    order_id: str
    user_id: str
    amount: float  # taker spend
    shares: float
    price: float

    @property
    def maker_amount(self) -> float:
        return self.shares - self.amount
