"""
Pool authority derivation and pool linkage checks.

A pool's vaults are the balances owned by its authority handle, and its
liquidity share token is identified by a second derived handle. Both are pure
functions of (market_key, asset_a, asset_b), so anyone can recompute them and
check a `PoolState` against its market before any formula runs.
"""

from __future__ import annotations

from ..errors import InvalidAsset, InvalidPool
from ..state.balances import AssetId
from ..state.pools import MarketConfig, PoolState, compute_pool_id, domain_hash


AUTHORITY_SEED = "authority"
LIQUIDITY_SEED = "liquidity"

AuthorityHandle = str


def derive_authority(market_key: str, asset_a: AssetId, asset_b: AssetId) -> AuthorityHandle:
    """Handle that owns both vaults of the (asset_a, asset_b) pool."""
    if asset_a == asset_b:
        raise InvalidAsset(f"pool assets must differ: {asset_a}")
    return domain_hash(b"cpamm/seed", market_key, asset_a, asset_b, AUTHORITY_SEED)


def derive_share_asset(market_key: str, asset_a: AssetId, asset_b: AssetId) -> str:
    """Identifier of the pool's liquidity share token."""
    if asset_a == asset_b:
        raise InvalidAsset(f"pool assets must differ: {asset_a}")
    return domain_hash(b"cpamm/seed", market_key, asset_a, asset_b, LIQUIDITY_SEED)


def build_pool(market: MarketConfig, asset_a: AssetId, asset_b: AssetId) -> PoolState:
    for name, v in (("asset_a", asset_a), ("asset_b", asset_b)):
        if not isinstance(v, str) or not v:
            raise InvalidAsset(f"{name} must be a non-empty string")
    return PoolState(
        pool_id=compute_pool_id(market.market_key, asset_a, asset_b),
        market_key=market.market_key,
        asset_a=asset_a,
        asset_b=asset_b,
        authority=derive_authority(market.market_key, asset_a, asset_b),
        share_asset=derive_share_asset(market.market_key, asset_a, asset_b),
    )


def verify_pool(market: MarketConfig, pool: PoolState) -> None:
    """
    Check that `pool` belongs to `market` and carries its derived handles.

    Raises:
        InvalidPool: On any identity mismatch
    """
    if pool.market_key != market.market_key:
        raise InvalidPool(f"pool {pool.pool_id} does not belong to market {market.market_id}")
    expected = build_pool(market, pool.asset_a, pool.asset_b)
    if pool.pool_id != expected.pool_id:
        raise InvalidPool(f"pool_id mismatch: {pool.pool_id} != {expected.pool_id}")
    if pool.authority != expected.authority:
        raise InvalidPool(f"authority mismatch for pool {pool.pool_id}")
    if pool.share_asset != expected.share_asset:
        raise InvalidPool(f"share asset mismatch for pool {pool.pool_id}")
