"""
Fee-adjusted constant-product swap kernel.

Semantics:
- The fee is taken off the top of the gross input with floor rounding:
      taxed_in = amount_in - floor(amount_in * fee_bps / 10_000)
- Pricing uses the taxed input against the pre-trade reserves:
      amount_out = floor(taxed_in * reserve_out / (reserve_in + taxed_in))
- The whole gross input lands in the pool, so the fee accrues to LPs.

This kernel only quotes; moving funds and re-checking the invariant against
the ledger happens in `cpamm.core.cpmm`.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...errors import InvalidAmount, InvalidFee, OutputTooSmall
from .fixed_point import I64F64, U64_MAX


BPS_DENOM = 10_000


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


@dataclass(frozen=True)
class SwapQuote:
    amount_in: int
    fee: int
    taxed_in: int
    amount_out: int
    reserve_in: int
    reserve_out: int

    @property
    def new_reserve_in(self) -> int:
        return self.reserve_in + self.amount_in

    @property
    def new_reserve_out(self) -> int:
        return self.reserve_out - self.amount_out


def compute_fee(*, amount_in: int, fee_bps: int, fee_denominator: int = BPS_DENOM) -> int:
    """`floor(amount_in * fee_bps / fee_denominator)`."""
    _require_int("amount_in", amount_in)
    _require_int("fee_bps", fee_bps)
    if amount_in < 0:
        raise InvalidAmount(f"amount_in must be non-negative: {amount_in}")
    if not (0 <= fee_bps < fee_denominator):
        raise InvalidFee(f"fee_bps must be in [0, {fee_denominator}): {fee_bps}")
    return (amount_in * fee_bps) // fee_denominator


def quote_exact_in(
    *,
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    fee_bps: int,
    fee_denominator: int = BPS_DENOM,
) -> SwapQuote:
    """
    Quote an exact-in swap against (reserve_in, reserve_out).

    Raises OutputTooSmall when either reserve is empty, InvalidAmount when
    amount_in is zero, and ArithmeticOverflow when the product leaves the
    I64F64 range.
    """
    for name, v in (
        ("reserve_in", reserve_in),
        ("reserve_out", reserve_out),
        ("amount_in", amount_in),
    ):
        _require_int(name, v)
        if v < 0 or v > U64_MAX:
            raise InvalidAmount(f"{name} must be in [0, 2**64 - 1]: {v}")

    if reserve_in == 0 or reserve_out == 0:
        raise OutputTooSmall("cannot swap against an empty reserve")
    if amount_in == 0:
        raise InvalidAmount("amount_in must be positive")

    fee = compute_fee(amount_in=amount_in, fee_bps=fee_bps, fee_denominator=fee_denominator)
    taxed_in = amount_in - fee

    taxed = I64F64.from_int(taxed_in)
    amount_out = (
        taxed.checked_mul(I64F64.from_int(reserve_out))
        .checked_div(I64F64.from_int(reserve_in).checked_add(taxed))
        .to_u64()
    )
    if amount_out > reserve_out:
        raise AssertionError("amount_out exceeds reserve_out")

    return SwapQuote(
        amount_in=amount_in,
        fee=fee,
        taxed_in=taxed_in,
        amount_out=amount_out,
        reserve_in=reserve_in,
        reserve_out=reserve_out,
    )
