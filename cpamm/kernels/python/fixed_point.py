"""
Checked 64.64 signed fixed-point arithmetic.

`I64F64` stores a value as a raw Python int scaled by 2**64. The raw value is
confined to the signed 128-bit range, so every result is checked instead of
wrapping:
- results outside the range raise `ArithmeticOverflow`,
- a zero divisor raises `DivisionByZero`.

Multiplication and division floor the raw result (Python `//` and `>>`),
which is the only rounding rule used by the pricing kernels.

Usable range: the integer part holds 63 bits plus sign, and every
intermediate product is held in I64F64 too. A product `a * b` of two amounts
must therefore stay below 2**63 (about 9.2e18), which caps balanced
deposits and swap legs at roughly 3e9 base units per side. Larger inputs
raise `ArithmeticOverflow`; they are never wrapped or truncated.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from ...errors import ArithmeticOverflow, DivisionByZero


FRAC_BITS = 64
ONE_RAW = 1 << FRAC_BITS
RAW_MIN = -(1 << 127)
RAW_MAX = (1 << 127) - 1
INT_MIN = RAW_MIN >> FRAC_BITS
INT_MAX = RAW_MAX >> FRAC_BITS
U64_MAX = (1 << 64) - 1


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _checked_raw(raw: int, op: str) -> int:
    if raw < RAW_MIN or raw > RAW_MAX:
        raise ArithmeticOverflow(f"I64F64 overflow in {op}")
    return raw


@dataclass(frozen=True, order=True)
class I64F64:
    raw: int

    def __post_init__(self) -> None:
        _require_int("raw", self.raw)
        _checked_raw(self.raw, "construction")

    @classmethod
    def from_raw(cls, raw: int) -> "I64F64":
        return cls(raw)

    @classmethod
    def from_int(cls, value: int) -> "I64F64":
        _require_int("value", value)
        if value < INT_MIN or value > INT_MAX:
            raise ArithmeticOverflow(f"{value} does not fit in I64F64")
        return cls(value << FRAC_BITS)

    def checked_add(self, other: "I64F64") -> "I64F64":
        return I64F64(_checked_raw(self.raw + other.raw, "add"))

    def checked_sub(self, other: "I64F64") -> "I64F64":
        return I64F64(_checked_raw(self.raw - other.raw, "sub"))

    def checked_mul(self, other: "I64F64") -> "I64F64":
        return I64F64(_checked_raw((self.raw * other.raw) >> FRAC_BITS, "mul"))

    def checked_div(self, other: "I64F64") -> "I64F64":
        if other.raw == 0:
            raise DivisionByZero()
        return I64F64(_checked_raw((self.raw << FRAC_BITS) // other.raw, "div"))

    def sqrt(self) -> "I64F64":
        """
        Floor of the exact square root.

        sqrt(raw / 2**64) * 2**64 == sqrt(raw * 2**64), so the integer square
        root of the shifted raw value is already the floored fixed-point result.
        """
        if self.raw < 0:
            raise ArithmeticOverflow("square root of a negative value")
        return I64F64(math.isqrt(self.raw << FRAC_BITS))

    def floor(self) -> "I64F64":
        return I64F64((self.raw >> FRAC_BITS) << FRAC_BITS)

    def to_int(self) -> int:
        """Floor to a Python int."""
        return self.raw >> FRAC_BITS

    def to_u64(self) -> int:
        value = self.to_int()
        if value < 0 or value > U64_MAX:
            raise ArithmeticOverflow(f"{value} does not fit in u64")
        return value

    def __repr__(self) -> str:
        whole = self.raw >> FRAC_BITS
        frac = self.raw & (ONE_RAW - 1)
        return f"I64F64({whole} + {frac}/2^64)"


def mul_div_floor(a: int, b: int, c: int) -> int:
    """`floor(a * b / c)` for u64 operands, computed through checked I64F64."""
    return (
        I64F64.from_int(a)
        .checked_mul(I64F64.from_int(b))
        .checked_div(I64F64.from_int(c))
        .to_u64()
    )
