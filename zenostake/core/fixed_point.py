"""Pure fixed-point arithmetic for the staking kernels.

Every helper is stateless and operates on plain Python ints. Amounts are
bounded to ``[0, MAX_UINT]``; any result outside that domain raises
``ArithmeticOverflow`` instead of wrapping or going negative.

Rounding is explicit: all operands are non-negative, so ``//`` truncates toward
zero. Rewards always round down, in favour of the pool.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ArithmeticOverflow

PRECISION_EXPONENT: int = 18
PRECISION: int = 10**PRECISION_EXPONENT  # 1e18
MAX_UINT: int = 2**256 - 1


# -- Checked integer helpers -------------------------------------------------

def _require_domain(value: int, what: str) -> int:
    if value < 0 or value > MAX_UINT:
        raise ArithmeticOverflow(f"{what} out of range: {value}")
    return value


def checked_add(a: int, b: int) -> int:
    return _require_domain(a + b, "addition")


def checked_sub(a: int, b: int) -> int:
    """``a - b``; underflow below zero is an error, never a clamp."""
    return _require_domain(a - b, "subtraction")


def checked_mul(a: int, b: int) -> int:
    return _require_domain(a * b, "multiplication")


def mul_div(a: int, b: int, denominator: int) -> int:
    """``floor(a * b / denominator)`` with a checked intermediate product."""
    if denominator <= 0:
        raise ArithmeticOverflow(f"mul_div denominator must be positive: {denominator}")
    return checked_mul(a, b) // denominator


# -- FixedPoint --------------------------------------------------------------

@dataclass(frozen=True, order=True)
class FixedPoint:
    """Non-negative value scaled by ``PRECISION`` (``raw / 1e18``)."""

    raw: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.raw, int) or isinstance(self.raw, bool):
            raise TypeError("raw must be an int")
        _require_domain(self.raw, "fixed-point raw value")

    @classmethod
    def zero(cls) -> FixedPoint:
        return cls(0)

    @classmethod
    def from_ratio(cls, numerator: int, denominator: int) -> FixedPoint:
        """``numerator / denominator`` truncated to ``PRECISION_EXPONENT`` digits."""
        return cls(mul_div(numerator, PRECISION, denominator))

    def scale(self, amount: int) -> int:
        """Apply this per-unit value to ``amount`` units: ``amount * raw // PRECISION``."""
        return mul_div(amount, self.raw, PRECISION)

    def __add__(self, other: FixedPoint) -> FixedPoint:
        if not isinstance(other, FixedPoint):
            return NotImplemented
        return FixedPoint(checked_add(self.raw, other.raw))

    def __sub__(self, other: FixedPoint) -> FixedPoint:
        if not isinstance(other, FixedPoint):
            return NotImplemented
        return FixedPoint(checked_sub(self.raw, other.raw))

    def __repr__(self) -> str:
        whole, frac = divmod(self.raw, PRECISION)
        return f"FixedPoint({whole}.{frac:0{PRECISION_EXPONENT}d})"
