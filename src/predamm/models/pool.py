"""Pool - paired YES/NO reserves backing one constant-product curve."""

from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Outcome = Literal["YES", "NO"]


def opposite(outcome: Outcome) -> Outcome:
    return "NO" if outcome == "YES" else "YES"


class Pool(BaseModel):
    """Binary reserves. Immutable; every operation returns a new Pool."""

    model_config = ConfigDict(frozen=True)

    YES: float = Field(..., ge=0)
    NO: float = Field(..., ge=0)

    @field_validator("YES", "NO")
    @classmethod
    def _finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("reserve must be finite")
        return v

    @property
    def is_open(self) -> bool:
        return self.YES > 0 and self.NO > 0

    @property
    def k(self) -> float:
        return self.YES * self.NO

    def reserve(self, outcome: Outcome) -> float:
        return self.YES if outcome == "YES" else self.NO
