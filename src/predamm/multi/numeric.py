"""Numeric bucket markets: bucket ranges, answer selection, expected value."""

from __future__ import annotations

import re
from collections.abc import Sequence
from enum import Enum
from typing import assert_never

from predamm.errors import InvalidInputError
from predamm.models.contract import Answer, AnswerResolution, NumericMarket
from predamm.pricing.invariant import initial_pool

_RANGE_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*-\s*(-?\d+(?:\.\d+)?)\s*$")


class SelectionMode(str, Enum):
    LESS_THAN = "less than"
    MORE_THAN = "more than"
    ABOUT_RIGHT = "about right"


def bucket_size(min_value: float, max_value: float, count: int) -> float:
    if count <= 0:
        raise InvalidInputError("bucket count must be positive")
    if not max_value > min_value:
        raise InvalidInputError(f"empty numeric range [{min_value}, {max_value}]")
    return (max_value - min_value) / count


def bucket_ranges(min_value: float, max_value: float, count: int) -> list[tuple[float, float]]:
    """Contiguous [lo, hi] buckets covering [min, max]; the last ends exactly at max."""
    step = bucket_size(min_value, max_value, count)
    ranges = [(min_value + i * step, min_value + (i + 1) * step) for i in range(count)]
    ranges[-1] = (ranges[-1][0], max_value)
    return ranges


def bucket_label(lo: float, hi: float) -> str:
    return f"{lo:g}-{hi:g}"


def answer_range(answer: Answer) -> tuple[float, float]:
    """Numeric range of an answer: its bucket, else parsed from a 'lo-hi' label."""
    if answer.bucket is not None:
        return answer.bucket
    m = _RANGE_RE.match(answer.text)
    if not m:
        raise InvalidInputError(f"answer {answer.id} has no numeric range: {answer.text!r}")
    return float(m.group(1)), float(m.group(2))


def numeric_answers(
    min_value: float, max_value: float, count: int, ante: float, id_prefix: str = "a"
) -> list[Answer]:
    """Equal-probability answers for a new numeric market, ante split evenly."""
    if count < 2:
        raise InvalidInputError("a numeric market needs at least two buckets")
    seed = initial_pool(1 / count, ante / count)
    return [
        Answer(id=f"{id_prefix}{i}", text=bucket_label(lo, hi), index=i, pool=seed.pool, bucket=(lo, hi))
        for i, (lo, hi) in enumerate(bucket_ranges(min_value, max_value, count))
    ]


def expected_value(answers: Sequence[Answer]) -> float:
    """Probability-weighted bucket midpoint, normalized by the probability sum."""
    total = sum(a.prob for a in answers)
    if total <= 0:
        raise InvalidInputError("answers carry no probability")
    weighted = 0.0
    for a in answers:
        lo, hi = answer_range(a)
        weighted += a.prob * (lo + hi) / 2
    return weighted / total


def about_right_range(
    min_value: float, max_value: float, count: int, value: float
) -> tuple[float, float]:
    """The bucket containing `value`, else the span between its neighbouring buckets."""
    buckets = bucket_ranges(min_value, max_value, count)
    for lo, hi in buckets:
        if lo <= value <= hi:
            return (lo, hi)
    below = [b for b in buckets if value > b[1]]
    above = [b for b in buckets if value < b[0]]
    return (below[-1][0] if below else min_value, above[0][1] if above else max_value)


def select_answers(
    answers: Sequence[Answer],
    mode: SelectionMode,
    value: float | None = None,
    value_range: tuple[float, float] | None = None,
) -> list[Answer]:
    """Answers a 'lower' / 'higher' / 'about right' bet should buy YES on."""
    def include(a: Answer) -> bool:
        lo, hi = answer_range(a)
        match mode:
            case SelectionMode.LESS_THAN:
                if value is None:
                    raise InvalidInputError("'less than' needs a value")
                return lo <= value
            case SelectionMode.MORE_THAN:
                if value is None:
                    raise InvalidInputError("'more than' needs a value")
                return hi >= value
            case SelectionMode.ABOUT_RIGHT:
                if value_range is None:
                    raise InvalidInputError("'about right' needs a range")
                return lo >= value_range[0] and hi <= value_range[1]
            case _:
                assert_never(mode)

    return [a for a in answers if include(a)]


def resolve_by_value(market: NumericMarket, value: float) -> AnswerResolution:
    """Resolution naming the bucket that contains `value` (clamped to the ends)."""
    if not market.answers:
        raise InvalidInputError("numeric market has no answers")
    ordered = sorted(market.answers, key=lambda a: answer_range(a)[0])
    for a in ordered:
        lo, hi = answer_range(a)
        if lo <= value < hi:
            return AnswerResolution(answer_id=a.id)
    if value < answer_range(ordered[0])[0]:
        return AnswerResolution(answer_id=ordered[0].id)
    return AnswerResolution(answer_id=ordered[-1].id)
