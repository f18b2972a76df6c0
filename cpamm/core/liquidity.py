"""
Liquidity management operations: create market/pool, deposit, withdraw.

Each mutating operation follows the same shape:
1. verify the pool against its market and derived authority,
2. read reserves and supply from the ledger,
3. compute amounts with the pure kernels in `cpamm.kernels.python.lp_math`,
4. apply transfers / mint / burn inside one `ledger.atomic()` scope.
"""

from __future__ import annotations

from structlog import get_logger

from ..kernels.python.lp_math import (
    MINIMUM_LIQUIDITY,
    DepositQuote,
    WithdrawQuote,
    clamp_to_balance,
    quote_deposit,
    quote_withdraw,
)
from ..state.balances import Amount, AssetId, Owner, require_amount
from ..state.ledger import AssetLedger
from ..state.pools import MarketConfig, PoolReserves, PoolState
from .authority import build_pool, verify_pool

logger = get_logger()


def create_market(market_id: str, admin: Owner, fee_bps: int) -> MarketConfig:
    """
    Create a market configuration.

    Raises:
        InvalidFee: If fee_bps is not an int in [0, 10000)
    """
    return MarketConfig(market_id=market_id, admin=admin, fee_bps=fee_bps)


def create_pool(market: MarketConfig, asset_a: AssetId, asset_b: AssetId) -> PoolState:
    """
    Create the pool record for (asset_a, asset_b) in `market`.

    The pool starts empty: reserves are the authority's (zero) balances and no
    shares exist. Nothing is written to the ledger.

    Raises:
        InvalidAsset: If the assets are equal or empty
    """
    pool = build_pool(market, asset_a, asset_b)
    logger.info('pool created', market=market.market_id, pool=pool.pool_id, asset_a=asset_a, asset_b=asset_b)
    return pool


def read_reserves(ledger: AssetLedger, pool: PoolState) -> PoolReserves:
    return PoolReserves(
        reserve_a=ledger.read_reserve(pool, pool.asset_a),
        reserve_b=ledger.read_reserve(pool, pool.asset_b),
        share_supply=ledger.read_share_supply(pool.pool_id),
    )


def preview_deposit(
    ledger: AssetLedger,
    pool: PoolState,
    depositor: Owner,
    amount_a: Amount,
    amount_b: Amount,
    *,
    minimum_liquidity: int = MINIMUM_LIQUIDITY,
) -> DepositQuote:
    """Quote a deposit (clamped to the depositor's balances) without moving funds."""
    require_amount("amount_a", amount_a)
    require_amount("amount_b", amount_b)
    amount_a = clamp_to_balance(amount_a, ledger.read_balance(depositor, pool.asset_a))
    amount_b = clamp_to_balance(amount_b, ledger.read_balance(depositor, pool.asset_b))

    reserves = read_reserves(ledger, pool)
    return quote_deposit(
        reserve_a=reserves.reserve_a,
        reserve_b=reserves.reserve_b,
        share_supply=reserves.share_supply,
        amount_a=amount_a,
        amount_b=amount_b,
        minimum_liquidity=minimum_liquidity,
    )


def deposit(
    ledger: AssetLedger,
    market: MarketConfig,
    pool: PoolState,
    depositor: Owner,
    amount_a: Amount,
    amount_b: Amount,
    *,
    minimum_liquidity: int = MINIMUM_LIQUIDITY,
) -> DepositQuote:
    """
    Deposit liquidity into `pool`.

    Requested amounts are clamped to the depositor's balances, rebalanced to
    the pool ratio (except on the first deposit), and paid for with
    `floor(sqrt(accepted_a * accepted_b))` shares. The first deposit locks
    `minimum_liquidity` of those shares forever by never minting them.

    Returns:
        DepositQuote with the accepted amounts and share counts

    Raises:
        DepositTooSmall: If the first deposit does not cover the floor, or a
            later deposit would issue no shares
        InvalidPool: If the pool does not match the market
    """
    verify_pool(market, pool)
    with ledger.atomic():
        quote = preview_deposit(ledger, pool, depositor, amount_a, amount_b, minimum_liquidity=minimum_liquidity)
        ledger.transfer(pool.asset_a, depositor, pool.authority, quote.accepted_a)
        ledger.transfer(pool.asset_b, depositor, pool.authority, quote.accepted_b)
        ledger.mint_shares(pool.pool_id, depositor, quote.minted_shares)

    logger.info(
        'deposit',
        pool=pool.pool_id,
        depositor=depositor,
        accepted_a=quote.accepted_a,
        accepted_b=quote.accepted_b,
        minted=quote.minted_shares,
        locked=quote.locked_shares,
    )
    return quote


def preview_withdraw(
    ledger: AssetLedger,
    pool: PoolState,
    burn_shares: Amount,
    *,
    minimum_liquidity: int = MINIMUM_LIQUIDITY,
) -> WithdrawQuote:
    reserves = read_reserves(ledger, pool)
    return quote_withdraw(
        reserve_a=reserves.reserve_a,
        reserve_b=reserves.reserve_b,
        share_supply=reserves.share_supply,
        burn_shares=burn_shares,
        minimum_liquidity=minimum_liquidity,
    )


def withdraw(
    ledger: AssetLedger,
    market: MarketConfig,
    pool: PoolState,
    owner: Owner,
    burn_shares: Amount,
    *,
    minimum_liquidity: int = MINIMUM_LIQUIDITY,
) -> WithdrawQuote:
    """
    Burn `burn_shares` and pay out the proportional slice of both reserves.

    Outputs:
        paid_a = floor(burn_shares * reserve_a / (share_supply + minimum_liquidity))
        paid_b = floor(burn_shares * reserve_b / (share_supply + minimum_liquidity))

    Raises:
        InsufficientShares: If `owner` holds fewer than `burn_shares` (from the ledger)
        InvalidAmount: If burn_shares is zero
    """
    verify_pool(market, pool)
    with ledger.atomic():
        quote = preview_withdraw(ledger, pool, burn_shares, minimum_liquidity=minimum_liquidity)
        ledger.burn_shares(pool.pool_id, owner, quote.burned_shares)
        ledger.transfer(pool.asset_a, pool.authority, owner, quote.paid_a)
        ledger.transfer(pool.asset_b, pool.authority, owner, quote.paid_b)

    logger.info('withdraw', pool=pool.pool_id, owner=owner, burned=burn_shares, paid_a=quote.paid_a, paid_b=quote.paid_b)
    return quote
