"""
Core AMM operations
"""

from .authority import derive_authority, derive_share_asset
from .cpmm import SwapDirection, SwapResult, swap
from .engine import AmmEngine
from .liquidity import create_market, create_pool, deposit, read_reserves, withdraw

__all__ = [
    "AmmEngine",
    "SwapDirection",
    "SwapResult",
    "create_market",
    "create_pool",
    "deposit",
    "derive_authority",
    "derive_share_asset",
    "read_reserves",
    "swap",
    "withdraw",
]
