"""
Multi-asset balance tracking.

Implements BalanceTable[Owner, AssetId] -> Amount, where every amount is an
unsigned 64-bit integer.
"""

from typing import Dict, Tuple

from ..errors import InsufficientBalance, InvalidAmount


# Type aliases
Owner = str  # account or authority handle as hex string
AssetId = str  # 32-byte hex string (0x...)
Amount = int  # Non-negative integer in [0, 2**64 - 1]

U64_MAX = (1 << 64) - 1


def require_amount(name: str, value: Amount) -> None:
    """Reject non-int values and anything outside the u64 domain."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0 or value > U64_MAX:
        raise InvalidAmount(f"{name} must be in [0, 2**64 - 1]: {value}")


class BalanceTable:
    """
    Balance table mapping (owner, asset) -> amount.

    Zero balances are omitted to keep the table sparse.
    """

    def __init__(self):
        self._balances: Dict[Tuple[Owner, AssetId], Amount] = {}

    def get(self, owner: Owner, asset: AssetId) -> Amount:
        """Get balance for (owner, asset). Returns 0 if not found."""
        return self._balances.get((owner, asset), 0)

    def set(self, owner: Owner, asset: AssetId, amount: Amount) -> None:
        """
        Set balance for (owner, asset).

        Raises:
            InvalidAmount: If amount is negative or exceeds u64
        """
        require_amount("balance", amount)
        if amount == 0:
            self._balances.pop((owner, asset), None)
        else:
            self._balances[(owner, asset)] = amount

    def add(self, owner: Owner, asset: AssetId, delta: int) -> None:
        """
        Add delta to balance (delta may be negative).

        Raises:
            InsufficientBalance: If the resulting balance would be negative
            InvalidAmount: If the resulting balance would exceed u64
        """
        current = self.get(owner, asset)
        new_balance = current + delta
        if new_balance < 0:
            raise InsufficientBalance(
                f"Insufficient balance of {asset} for {owner}: {current} < {-delta}"
            )
        self.set(owner, asset, new_balance)

    def subtract(self, owner: Owner, asset: AssetId, delta: Amount) -> None:
        """Subtract a non-negative amount from a balance."""
        require_amount("delta", delta)
        self.add(owner, asset, -delta)

    def get_all_balances(self) -> Dict[Tuple[Owner, AssetId], Amount]:
        return dict(self._balances)

    def restore(self, snapshot: Dict[Tuple[Owner, AssetId], Amount]) -> None:
        """Replace the table contents with a previous `get_all_balances()` result."""
        self._balances = dict(snapshot)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
