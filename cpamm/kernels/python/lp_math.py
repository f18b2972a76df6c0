"""
Liquidity math kernel.

Pure functions for the three liquidity computations:
- ratio-preserving rebalancing of a deposit against existing reserves,
- liquidity-share issuance (geometric mean, floor-locked on the first deposit),
- proportional withdrawal that excludes the locked floor from any payout.

All ratio math goes through checked `I64F64`, so out-of-range inputs raise
`ArithmeticOverflow` / `DivisionByZero` instead of wrapping.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...errors import DepositTooSmall, InvalidAmount
from .fixed_point import I64F64, U64_MAX, mul_div_floor


MINIMUM_LIQUIDITY = 100


def _require_amount(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0 or value > U64_MAX:
        raise InvalidAmount(f"{name} must be in [0, 2**64 - 1]: {value}")


@dataclass(frozen=True)
class DepositQuote:
    accepted_a: int
    accepted_b: int
    issued_shares: int
    minted_shares: int
    locked_shares: int
    is_first_deposit: bool


@dataclass(frozen=True)
class WithdrawQuote:
    burned_shares: int
    paid_a: int
    paid_b: int


def clamp_to_balance(requested: int, balance: int) -> int:
    """Never move more than the caller owns."""
    return requested if requested <= balance else balance


def rebalance_to_ratio(*, reserve_a: int, reserve_b: int, amount_a: int, amount_b: int) -> tuple[int, int]:
    """
    Shrink one leg so that amount_a / amount_b matches reserve_a / reserve_b.

    Neither returned amount exceeds its input, so clamped deposits stay clamped.
    """
    b_optimal = mul_div_floor(amount_a, reserve_b, reserve_a)
    if b_optimal <= amount_b:
        return amount_a, b_optimal
    return mul_div_floor(amount_b, reserve_a, reserve_b), amount_b


def geometric_mean_shares(amount_a: int, amount_b: int) -> int:
    """`floor(sqrt(amount_a * amount_b))` in fixed point."""
    return I64F64.from_int(amount_a).checked_mul(I64F64.from_int(amount_b)).sqrt().floor().to_u64()


def quote_deposit(
    *,
    reserve_a: int,
    reserve_b: int,
    share_supply: int,
    amount_a: int,
    amount_b: int,
    minimum_liquidity: int = MINIMUM_LIQUIDITY,
) -> DepositQuote:
    """
    Compute accepted amounts and issued shares for an already-clamped deposit.

    `share_supply` is the minted supply; the locked floor is never minted, so
    the pool's total claim base is `share_supply + minimum_liquidity`.

    Raises DepositTooSmall when the first deposit does not cover the floor, or
    when a later deposit would issue no shares.
    """
    for name, v in (
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("share_supply", share_supply),
        ("amount_a", amount_a),
        ("amount_b", amount_b),
    ):
        _require_amount(name, v)

    is_first_deposit = reserve_a == 0 and reserve_b == 0
    if is_first_deposit:
        accepted_a, accepted_b = amount_a, amount_b
    else:
        accepted_a, accepted_b = rebalance_to_ratio(
            reserve_a=reserve_a,
            reserve_b=reserve_b,
            amount_a=amount_a,
            amount_b=amount_b,
        )

    issued = geometric_mean_shares(accepted_a, accepted_b)

    if is_first_deposit:
        if issued < minimum_liquidity:
            raise DepositTooSmall(
                f"sqrt({accepted_a} * {accepted_b}) = {issued} < MINIMUM_LIQUIDITY ({minimum_liquidity})"
            )
        return DepositQuote(
            accepted_a=accepted_a,
            accepted_b=accepted_b,
            issued_shares=issued,
            minted_shares=issued - minimum_liquidity,
            locked_shares=minimum_liquidity,
            is_first_deposit=True,
        )

    # Cap at the proportional claim: after fees accrue, sqrt(reserve_a * reserve_b)
    # outgrows the share base and an uncapped geometric mean would dilute LPs.
    total = share_supply + minimum_liquidity
    proportional = min(
        mul_div_floor(accepted_a, total, reserve_a),
        mul_div_floor(accepted_b, total, reserve_b),
    )
    issued = min(issued, proportional)
    if issued <= 0:
        raise DepositTooSmall(f"deposit ({accepted_a}, {accepted_b}) issues no liquidity shares")

    return DepositQuote(
        accepted_a=accepted_a,
        accepted_b=accepted_b,
        issued_shares=issued,
        minted_shares=issued,
        locked_shares=0,
        is_first_deposit=False,
    )


def quote_withdraw(
    *,
    reserve_a: int,
    reserve_b: int,
    share_supply: int,
    burn_shares: int,
    minimum_liquidity: int = MINIMUM_LIQUIDITY,
) -> WithdrawQuote:
    """
    Proportional payout for burning `burn_shares`.

        paid_x = floor(burn_shares * reserve_x / (share_supply + MINIMUM_LIQUIDITY))

    The floor offset keeps the locked shares non-redeemable. Whether the caller
    actually holds `burn_shares` is checked by the ledger's burn.
    """
    for name, v in (
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("share_supply", share_supply),
        ("burn_shares", burn_shares),
    ):
        _require_amount(name, v)
    if burn_shares == 0:
        raise InvalidAmount("burn_shares must be positive")

    total = share_supply + minimum_liquidity
    paid_a = mul_div_floor(burn_shares, reserve_a, total)
    paid_b = mul_div_floor(burn_shares, reserve_b, total)
    return WithdrawQuote(burned_shares=burn_shares, paid_a=paid_a, paid_b=paid_b)
