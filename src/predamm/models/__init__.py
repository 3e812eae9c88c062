"""Canonical schema (Pydantic) - Pool, Contract, Answer, Bet, RestingOrder."""

from predamm.models.bet import Bet, LiquidityProvision
from predamm.models.contract import (
    Answer,
    AnswerResolution,
    BinaryMarket,
    BinaryResolution,
    CancelResolution,
    Contract,
    FreeResponseMarket,
    Market,
    NumericMarket,
    Resolution,
    WeightedResolution,
)
from predamm.models.order import RestingOrder, Taker
from predamm.models.pool import Outcome, Pool, opposite

__all__ = [
    "Pool",
    "Outcome",
    "opposite",
    "Answer",
    "Contract",
    "Market",
    "BinaryMarket",
    "NumericMarket",
    "FreeResponseMarket",
    "Resolution",
    "BinaryResolution",
    "AnswerResolution",
    "WeightedResolution",
    "CancelResolution",
    "Bet",
    "LiquidityProvision",
    "RestingOrder",
    "Taker",
]
