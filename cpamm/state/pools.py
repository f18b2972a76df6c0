"""
Market and pool records.

Reserves and share supply are not stored here: they are the balances held by
the pool authority and the supply tracked by the ledger. A `PoolState` only
carries identity, and `PoolReserves` is a point-in-time read of the ledger.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from ..errors import InvalidAsset, InvalidFee
from .balances import Amount, AssetId, Owner


FEE_DENOMINATOR = 10_000

MARKET_DOMAIN = b"cpamm/market"
POOL_DOMAIN = b"cpamm/pool"


def domain_hash(domain: bytes, *parts: str) -> str:
    """
    Domain-separated SHA-256 over length-prefixed UTF-8 parts, as 0x-hex.

    Length prefixes keep ("ab", "c") and ("a", "bc") from colliding.
    """
    h = hashlib.sha256()
    h.update(len(domain).to_bytes(2, "big") + domain)
    for part in parts:
        if not isinstance(part, str):
            raise TypeError("identity parts must be strings")
        data = part.encode("utf-8")
        h.update(len(data).to_bytes(4, "big") + data)
    return "0x" + h.hexdigest()


def validate_fee_bps(fee_bps: int, fee_denominator: int = FEE_DENOMINATOR) -> None:
    if not isinstance(fee_bps, int) or isinstance(fee_bps, bool):
        raise InvalidFee(f"fee_bps must be an int: {fee_bps!r}")
    if not (0 <= fee_bps < fee_denominator):
        raise InvalidFee(f"fee_bps must be in [0, {fee_denominator}): {fee_bps}")


def compute_market_key(market_id: str) -> str:
    """Stable address of a market, derived from its id."""
    return domain_hash(MARKET_DOMAIN, market_id)


def compute_pool_id(market_key: str, asset_a: AssetId, asset_b: AssetId) -> str:
    """
    Deterministic pool_id for one asset pair in one market.

    Order matters: (A, B) and (B, A) are different pools, as in the host's
    seed-derived addressing.
    """
    if asset_a == asset_b:
        raise InvalidAsset(f"pool assets must differ: {asset_a}")
    return domain_hash(POOL_DOMAIN, market_key, asset_a, asset_b)


@dataclass(frozen=True)
class MarketConfig:
    """
    Market/admin configuration shared by every pool of a market.

    Attributes:
        market_id: Stable identifier chosen by the creator
        admin: Admin identity
        fee_bps: Swap fee in basis points, [0, 10000)
        market_key: Address derived from market_id
    """
    market_id: str
    admin: Owner
    fee_bps: int
    market_key: str = ""

    def __post_init__(self) -> None:
        validate_fee_bps(self.fee_bps)
        if not isinstance(self.market_id, str) or not self.market_id:
            raise ValueError("market_id must be a non-empty string")
        if not self.market_key:
            object.__setattr__(self, "market_key", compute_market_key(self.market_id))


@dataclass(frozen=True)
class PoolState:
    """
    Identity of one trading pair.

    Attributes:
        pool_id: Pool identifier (hex string)
        market_key: Address of the parent market
        asset_a: First reserve asset
        asset_b: Second reserve asset, never equal to asset_a
        authority: Handle that owns the two vaults
        share_asset: Identifier of the liquidity share token
    """
    pool_id: str
    market_key: str
    asset_a: AssetId
    asset_b: AssetId
    authority: Owner
    share_asset: str

    def __post_init__(self) -> None:
        if self.asset_a == self.asset_b:
            raise InvalidAsset(f"pool assets must differ: {self.asset_a}")

    def other_asset(self, asset: AssetId) -> AssetId:
        if asset == self.asset_a:
            return self.asset_b
        if asset == self.asset_b:
            return self.asset_a
        raise InvalidAsset(f"Asset {asset} not in pool {self.pool_id}")

    def __repr__(self) -> str:
        return (
            f"PoolState(pool_id={self.pool_id[:16]}..., "
            f"assets=({self.asset_a[:8]}..., {self.asset_b[:8]}...))"
        )


@dataclass(frozen=True)
class PoolReserves:
    """Reserves and minted share supply read from the ledger."""

    reserve_a: Amount
    reserve_b: Amount
    share_supply: Amount

    @property
    def is_empty(self) -> bool:
        return self.reserve_a == 0 and self.reserve_b == 0

    def constant_product(self) -> int:
        """k = reserve_a * reserve_b."""
        return self.reserve_a * self.reserve_b
