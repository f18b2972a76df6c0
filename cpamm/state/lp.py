"""
Liquidity share tracking.

Shares are scoped per pool_id and tracked separately from asset balances. The
supply counts minted shares only: the locked liquidity floor is never minted
to anyone, so it never shows up here.
"""

from __future__ import annotations

from typing import Dict, Tuple

from ..errors import InsufficientShares
from .balances import Amount, Owner, require_amount

# Type alias
PoolId = str


class LPTable:
    """
    Share table mapping (owner, pool_id) -> share amount, plus per-pool supply.

    Notes:
    - Balances and supplies are always non-negative.
    - Zero balances are omitted to keep the table sparse.
    """

    def __init__(self) -> None:
        self._balances: Dict[Tuple[Owner, PoolId], Amount] = {}
        self._supply: Dict[PoolId, Amount] = {}

    def get(self, owner: Owner, pool_id: PoolId) -> Amount:
        """Get share balance for (owner, pool_id). Returns 0 if not found."""
        return self._balances.get((owner, pool_id), 0)

    def supply(self, pool_id: PoolId) -> Amount:
        return self._supply.get(pool_id, 0)

    def mint(self, owner: Owner, pool_id: PoolId, amount: Amount) -> None:
        require_amount("mint amount", amount)
        new_supply = self.supply(pool_id) + amount
        require_amount("share supply", new_supply)
        self._set(owner, pool_id, self.get(owner, pool_id) + amount)
        self._supply[pool_id] = new_supply

    def burn(self, owner: Owner, pool_id: PoolId, amount: Amount) -> None:
        """Burn shares; fails when the owner holds fewer than `amount`."""
        require_amount("burn amount", amount)
        current = self.get(owner, pool_id)
        if amount > current:
            raise InsufficientShares(
                f"Insufficient shares of {pool_id} for {owner}: {current} < {amount}"
            )
        self._set(owner, pool_id, current - amount)
        self._supply[pool_id] = self.supply(pool_id) - amount

    def _set(self, owner: Owner, pool_id: PoolId, amount: Amount) -> None:
        if amount == 0:
            self._balances.pop((owner, pool_id), None)
        else:
            self._balances[(owner, pool_id)] = amount

    def snapshot(self) -> Tuple[Dict[Tuple[Owner, PoolId], Amount], Dict[PoolId, Amount]]:
        return dict(self._balances), dict(self._supply)

    def restore(self, snapshot: Tuple[Dict[Tuple[Owner, PoolId], Amount], Dict[PoolId, Amount]]) -> None:
        balances, supply = snapshot
        self._balances = dict(balances)
        self._supply = dict(supply)

    def verify_supply(self) -> bool:
        """Verify each pool's supply equals the sum of its share balances."""
        totals: Dict[PoolId, Amount] = {}
        for (_, pool_id), amount in self._balances.items():
            totals[pool_id] = totals.get(pool_id, 0) + amount
        return all(totals.get(pool_id, 0) == supply for pool_id, supply in self._supply.items())

    def __repr__(self) -> str:
        return f"LPTable({len(self._balances)} entries, {len(self._supply)} pools)"
