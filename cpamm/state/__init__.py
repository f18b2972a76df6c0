"""
State management for the AMM core
"""

from .balances import BalanceTable
from .ledger import AssetLedger, InMemoryLedger
from .lp import LPTable
from .pools import MarketConfig, PoolReserves, PoolState

__all__ = [
    "AssetLedger",
    "BalanceTable",
    "InMemoryLedger",
    "LPTable",
    "MarketConfig",
    "PoolReserves",
    "PoolState",
]
