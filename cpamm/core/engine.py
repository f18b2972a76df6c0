"""
AMM engine: the entry point hosts call.

Keeps the market and pool registries, applies settings, and delegates to the
liquidity and swap operations. Every mutating call runs inside one ledger
transaction, so a rejected operation leaves no trace.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from structlog import get_logger

from ..config import AmmSettings
from ..errors import AlreadyExists, InvalidPool
from ..kernels.python.cpmm_swap import SwapQuote
from ..kernels.python.lp_math import DepositQuote, WithdrawQuote
from ..state.balances import Amount, AssetId, Owner
from ..state.ledger import AssetLedger
from ..state.pools import MarketConfig, PoolReserves, PoolState
from . import cpmm, liquidity
from .cpmm import SwapDirection, SwapResult

logger = get_logger()


class AmmEngine:
    def __init__(self, ledger: AssetLedger, settings: Optional[AmmSettings] = None) -> None:
        self.ledger = ledger
        self.settings = settings or AmmSettings()
        self.markets: Dict[str, MarketConfig] = {}
        self.pools: Dict[str, PoolState] = {}
        self.log = logger.new()

    def create_market(self, market_id: str, admin: Owner, fee_bps: int) -> MarketConfig:
        market = liquidity.create_market(market_id, admin, fee_bps)
        if market.market_key in self.markets:
            raise AlreadyExists(f"market {market_id} already exists")
        self.markets[market.market_key] = market
        self.log.info('market created', market=market_id, admin=admin, fee_bps=fee_bps)
        return market

    def create_pool(self, market: MarketConfig, asset_a: AssetId, asset_b: AssetId) -> PoolState:
        self._require_market(market)
        pool = liquidity.create_pool(market, asset_a, asset_b)
        if pool.pool_id in self.pools:
            raise AlreadyExists(f"pool {pool.pool_id} already exists")
        self.pools[pool.pool_id] = pool
        return pool

    def get_pool(self, pool_id: str) -> PoolState:
        try:
            return self.pools[pool_id]
        except KeyError:
            raise InvalidPool(f"unknown pool {pool_id}") from None

    def reserves(self, pool: PoolState) -> PoolReserves:
        return liquidity.read_reserves(self.ledger, pool)

    def deposit(self, pool: PoolState, depositor: Owner, amount_a: Amount, amount_b: Amount) -> DepositQuote:
        market = self._market_for(pool)
        return liquidity.deposit(
            self.ledger,
            market,
            pool,
            depositor,
            amount_a,
            amount_b,
            minimum_liquidity=self.settings.minimum_liquidity,
        )

    def withdraw(self, pool: PoolState, owner: Owner, burn_shares: Amount) -> WithdrawQuote:
        market = self._market_for(pool)
        return liquidity.withdraw(
            self.ledger,
            market,
            pool,
            owner,
            burn_shares,
            minimum_liquidity=self.settings.minimum_liquidity,
        )

    def swap(
        self,
        pool: PoolState,
        trader: Owner,
        direction: SwapDirection,
        amount_in: Amount,
        min_amount_out: Amount,
    ) -> SwapResult:
        market = self._market_for(pool)
        try:
            return cpmm.swap(self.ledger, market, pool, trader, direction, amount_in, min_amount_out)
        except Exception:
            self.log.warning('swap rejected', pool=pool.pool_id, trader=trader, direction=direction, exc_info=True)
            raise

    def quote_deposit(self, pool: PoolState, depositor: Owner, amount_a: Amount, amount_b: Amount) -> DepositQuote:
        self._market_for(pool)
        return liquidity.preview_deposit(
            self.ledger, pool, depositor, amount_a, amount_b, minimum_liquidity=self.settings.minimum_liquidity
        )

    def quote_withdraw(self, pool: PoolState, burn_shares: Amount) -> WithdrawQuote:
        self._market_for(pool)
        return liquidity.preview_withdraw(
            self.ledger, pool, burn_shares, minimum_liquidity=self.settings.minimum_liquidity
        )

    def quote_swap(self, pool: PoolState, trader: Owner, direction: SwapDirection, amount_in: Amount) -> SwapQuote:
        market = self._market_for(pool)
        return cpmm.preview_swap(self.ledger, market, pool, trader, direction, amount_in)

    def share_balance(self, pool: PoolState, owner: Owner) -> Amount:
        return self.ledger.read_share_balance(owner, pool.pool_id)

    def balances(self, owner: Owner, pool: PoolState) -> Tuple[Amount, Amount]:
        return (
            self.ledger.read_balance(owner, pool.asset_a),
            self.ledger.read_balance(owner, pool.asset_b),
        )

    def _require_market(self, market: MarketConfig) -> None:
        if self.markets.get(market.market_key) != market:
            raise InvalidPool(f"unknown market {market.market_id}")

    def _market_for(self, pool: PoolState) -> MarketConfig:
        if self.pools.get(pool.pool_id) != pool:
            raise InvalidPool(f"unknown pool {pool.pool_id}")
        try:
            return self.markets[pool.market_key]
        except KeyError:
            raise InvalidPool(f"pool {pool.pool_id} has no registered market") from None
