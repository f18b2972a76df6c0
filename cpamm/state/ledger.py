"""
Asset ledger interface and an in-memory implementation.

The accounting core never touches balances directly: it issues transfers,
mints and burns through an `AssetLedger`, and reads reserves back from it.
Hosts bring their own ledger; `InMemoryLedger` backs the tests and any host
that keeps state in-process.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import ContextManager, Iterator, Protocol

from structlog import get_logger

from ..errors import InvalidAmount
from .balances import U64_MAX, Amount, AssetId, BalanceTable, Owner, require_amount
from .lp import LPTable, PoolId
from .pools import PoolState

logger = get_logger()


class AssetLedger(Protocol):
    def transfer(self, asset: AssetId, source: Owner, dest: Owner, amount: Amount) -> None:
        ...

    def mint_shares(self, pool_id: PoolId, to: Owner, amount: Amount) -> None:
        ...

    def burn_shares(self, pool_id: PoolId, owner: Owner, amount: Amount) -> None:
        ...

    def read_balance(self, owner: Owner, asset: AssetId) -> Amount:
        ...

    def read_reserve(self, pool: PoolState, asset: AssetId) -> Amount:
        ...

    def read_share_supply(self, pool_id: PoolId) -> Amount:
        ...

    def read_share_balance(self, owner: Owner, pool_id: PoolId) -> Amount:
        ...

    def atomic(self) -> ContextManager[None]:
        """All-or-nothing scope: if the block raises, every effect inside it is undone."""
        ...


class InMemoryLedger:
    """
    Ledger backed by a `BalanceTable` (assets) and an `LPTable` (shares).

    `atomic()` snapshots both tables on entry and restores them if the block
    raises. Nested scopes join the outermost one.
    """

    def __init__(self) -> None:
        self.balances = BalanceTable()
        self.shares = LPTable()
        self._depth = 0
        self.log = logger.new()

    def credit(self, owner: Owner, asset: AssetId, amount: Amount) -> None:
        """Mint `amount` of `asset` into `owner`'s account."""
        require_amount("amount", amount)
        self.balances.add(owner, asset, amount)

    def transfer(self, asset: AssetId, source: Owner, dest: Owner, amount: Amount) -> None:
        require_amount("amount", amount)
        if amount == 0:
            return
        # Both sides are checked before either is written.
        if source != dest and self.balances.get(dest, asset) + amount > U64_MAX:
            raise InvalidAmount(f"transfer would push {dest} balance of {asset} past u64")
        self.balances.subtract(source, asset, amount)
        self.balances.add(dest, asset, amount)

    def mint_shares(self, pool_id: PoolId, to: Owner, amount: Amount) -> None:
        self.shares.mint(to, pool_id, amount)

    def burn_shares(self, pool_id: PoolId, owner: Owner, amount: Amount) -> None:
        self.shares.burn(owner, pool_id, amount)

    def read_balance(self, owner: Owner, asset: AssetId) -> Amount:
        return self.balances.get(owner, asset)

    def read_reserve(self, pool: PoolState, asset: AssetId) -> Amount:
        pool.other_asset(asset)
        return self.balances.get(pool.authority, asset)

    def read_share_supply(self, pool_id: PoolId) -> Amount:
        return self.shares.supply(pool_id)

    def read_share_balance(self, owner: Owner, pool_id: PoolId) -> Amount:
        return self.shares.get(owner, pool_id)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        if self._depth > 0:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        balances = self.balances.get_all_balances()
        shares = self.shares.snapshot()
        self._depth = 1
        try:
            yield
        except BaseException as exc:
            self.balances.restore(balances)
            self.shares.restore(shares)
            self.log.debug('transaction rolled back', exc=type(exc).__name__)
            raise
        finally:
            self._depth = 0
