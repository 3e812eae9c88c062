"""Typed failures raised by the pricing engine."""

from __future__ import annotations


class PricingError(Exception):
    """Base for every failure the engine reports to its caller."""


class InvalidInputError(PricingError, ValueError):
    """Rejected before any computation: bad amount, outcome, or share count."""


class NumericDegeneracyError(PricingError, ArithmeticError):
    """A computed quantity came out NaN or infinite."""


class InsufficientLiquidityError(PricingError):
    """The chosen answers cannot absorb the requested stake."""

    def __init__(self, requested: float, available: float) -> None:
        super().__init__(
            f"stake {requested:.6g} exceeds absorbable liquidity {available:.6g}"
        )
        self.requested = requested
        self.available = available
