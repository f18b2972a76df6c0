"""
Constant Product Market Maker (CPMM) swap execution.

Algorithm Design:
- Type: Checked 64.64 fixed point / floor rounding
- Time Complexity: O(1) per swap
- Invariant: reserve_a' * reserve_b' >= reserve_a * reserve_b, re-read from the
  ledger after the transfers land (fee and floor rounding only grow k)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from structlog import get_logger

from ..errors import InvariantViolated, OutputTooSmall
from ..kernels.python.cpmm_swap import SwapQuote, quote_exact_in
from ..kernels.python.lp_math import clamp_to_balance
from ..state.balances import Amount, Owner, require_amount
from ..state.ledger import AssetLedger
from ..state.pools import MarketConfig, PoolState
from .authority import verify_pool
from .liquidity import read_reserves

logger = get_logger()


class SwapDirection(Enum):
    """Which asset the trader sends into the pool."""
    A_TO_B = "A_TO_B"
    B_TO_A = "B_TO_A"

    @classmethod
    def from_flag(cls, swap_a: bool) -> "SwapDirection":
        return cls.A_TO_B if swap_a else cls.B_TO_A


@dataclass(frozen=True)
class SwapResult:
    direction: SwapDirection
    amount_in: int
    taxed_in: int
    fee: int
    amount_out: int
    invariant_before: int
    invariant_after: int


def preview_swap(
    ledger: AssetLedger,
    market: MarketConfig,
    pool: PoolState,
    trader: Owner,
    direction: SwapDirection,
    amount_in: Amount,
) -> SwapQuote:
    """Quote a swap (input clamped to the trader's balance) without moving funds."""
    require_amount("amount_in", amount_in)
    asset_in = pool.asset_a if direction is SwapDirection.A_TO_B else pool.asset_b
    asset_out = pool.other_asset(asset_in)
    amount_in = clamp_to_balance(amount_in, ledger.read_balance(trader, asset_in))
    return quote_exact_in(
        reserve_in=ledger.read_reserve(pool, asset_in),
        reserve_out=ledger.read_reserve(pool, asset_out),
        amount_in=amount_in,
        fee_bps=market.fee_bps,
    )


def swap(
    ledger: AssetLedger,
    market: MarketConfig,
    pool: PoolState,
    trader: Owner,
    direction: SwapDirection,
    amount_in: Amount,
    min_amount_out: Amount,
) -> SwapResult:
    """
    Swap an exact input for at least `min_amount_out` of the other asset.

    This implements:
        taxed_in = amount_in - floor(amount_in * fee_bps / 10_000)
        amount_out = floor(taxed_in * reserve_out / (reserve_in + taxed_in))

    The slippage bound is checked before any transfer. The product invariant
    is checked after both transfers, against reserves re-read from the ledger;
    a violation rolls the transfers back.

    Raises:
        OutputTooSmall: If amount_out < min_amount_out
        InvariantViolated: If the post-trade reserve product decreased
    """
    if not isinstance(direction, SwapDirection):
        raise TypeError("direction must be a SwapDirection")
    require_amount("min_amount_out", min_amount_out)
    verify_pool(market, pool)

    asset_in = pool.asset_a if direction is SwapDirection.A_TO_B else pool.asset_b
    asset_out = pool.other_asset(asset_in)

    with ledger.atomic():
        quote = preview_swap(ledger, market, pool, trader, direction, amount_in)
        if quote.amount_out < min_amount_out:
            raise OutputTooSmall(f"amount_out ({quote.amount_out}) < min_amount_out ({min_amount_out})")

        invariant_before = read_reserves(ledger, pool).constant_product()

        ledger.transfer(asset_in, trader, pool.authority, quote.amount_in)
        ledger.transfer(asset_out, pool.authority, trader, quote.amount_out)

        # Transfers went through the ledger; its balances are the only source of truth.
        invariant_after = read_reserves(ledger, pool).constant_product()
        if invariant_after < invariant_before:
            raise InvariantViolated(invariant_before, invariant_after)

    logger.info(
        'swap',
        pool=pool.pool_id,
        trader=trader,
        direction=direction.value,
        amount_in=quote.amount_in,
        taxed_in=quote.taxed_in,
        amount_out=quote.amount_out,
    )
    return SwapResult(
        direction=direction,
        amount_in=quote.amount_in,
        taxed_in=quote.taxed_in,
        fee=quote.fee,
        amount_out=quote.amount_out,
        invariant_before=invariant_before,
        invariant_after=invariant_after,
    )
