"""Fee schedule passed explicitly into every fee-bearing calculation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FeeSchedule(BaseModel):
    """Profit-based sale fees plus an optional creator take on purchases."""

    model_config = ConfigDict(frozen=True)

    creator_fee: float = Field(0.04, ge=0, lt=1, description="Share of sale profit to the creator")
    platform_fee: float = Field(0.01, ge=0, lt=1, description="Share of sale profit to the platform")
    purchase_fee: float = Field(0.0, ge=0, lt=1, description="Share of a purchase added to the pool")

    @property
    def profit_fee(self) -> float:
        return self.creator_fee + self.platform_fee


ZERO_FEES = FeeSchedule(creator_fee=0.0, platform_fee=0.0, purchase_fee=0.0)


def deduct_fixed_fees(amount: float, winnings: float, fees: FeeSchedule) -> float:
    """Winnings net of profit fees. Fees apply only to the part above the stake."""
    if winnings <= amount:
        return winnings
    return winnings - (winnings - amount) * fees.profit_fee
