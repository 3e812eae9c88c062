"""Contract, Answer and the closed market / resolution variants."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from predamm.models.pool import Pool


class Answer(BaseModel):
    """One mutually exclusive outcome, backed by its own YES/NO sub-pool."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str = ""
    index: int = 0  # insertion order
    pool: Pool
    bucket: tuple[float, float] | None = None  # numeric markets only

    @property
    def prob(self) -> float:
        return self.pool.NO / (self.pool.YES + self.pool.NO)


class BinaryMarket(BaseModel):
    model_config = ConfigDict(frozen=True)

    outcome_type: Literal["BINARY"] = "BINARY"
    pool: Pool


class NumericMarket(BaseModel):
    """Bucketed numeric market: each answer covers a [lo, hi] range."""

    model_config = ConfigDict(frozen=True)

    outcome_type: Literal["NUMERIC"] = "NUMERIC"
    answers: list[Answer]
    min: float
    max: float


class FreeResponseMarket(BaseModel):
    model_config = ConfigDict(frozen=True)

    outcome_type: Literal["FREE_RESPONSE"] = "FREE_RESPONSE"
    answers: list[Answer]


Market = Annotated[
    Union[BinaryMarket, NumericMarket, FreeResponseMarket],
    Field(discriminator="outcome_type"),
]


class BinaryResolution(BaseModel):
    """YES / NO, or MKT at a fixed probability."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["BINARY"] = "BINARY"
    outcome: Literal["YES", "NO", "MKT"]
    probability: float | None = Field(None, ge=0, le=1)


class AnswerResolution(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["ANSWER"] = "ANSWER"
    answer_id: str


class WeightedResolution(BaseModel):
    """Split resolution across answers; weights are YES payouts per share."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["WEIGHTED"] = "WEIGHTED"
    weights: dict[str, float]


class CancelResolution(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["CANCEL"] = "CANCEL"


Resolution = Annotated[
    Union[BinaryResolution, AnswerResolution, WeightedResolution, CancelResolution],
    Field(discriminator="kind"),
]


class Contract(BaseModel):
    """A market as seen by the engine. Persistence belongs to the caller."""

    model_config = ConfigDict(frozen=True)

    id: str
    slug: str = ""
    question: str = ""
    creator_id: str = ""
    visibility: Literal["public", "unlisted", "private"] = "public"
    is_ranked: bool = True
    market: Market
    resolution: Resolution | None = None

    @property
    def is_resolved(self) -> bool:
        return self.resolution is not None

    def answer(self, answer_id: str) -> Answer | None:
        answers = getattr(self.market, "answers", [])
        for a in answers:
            if a.id == answer_id:
                return a
        return None
