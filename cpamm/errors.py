"""Exception types for the AMM accounting core.

Every error here is a synchronous, caller-visible rejection of the single
operation that raised it. The engine runs each operation inside a ledger
transaction, so nothing an operation did before raising survives.
"""

from __future__ import annotations


class AmmError(Exception):
    """Base class for all AMM rejections."""

    code: str = "AmmError"
    default_message: str = "AMM operation rejected"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidFee(AmmError):
    """Raised when a market is created with a fee outside [0, 10000)."""

    code = "InvalidFee"
    default_message = "Invalid fee value"


class InvalidAsset(AmmError):
    """Raised when an asset does not belong to the pool, or both legs are the same asset."""

    code = "InvalidAsset"
    default_message = "Invalid mint for the pool"


class InvalidPool(AmmError):
    """Raised when a pool record does not match its market or derived authority."""

    code = "InvalidPool"
    default_message = "Pool does not match its market or authority"


class AlreadyExists(AmmError):
    """Raised when a market or pool with the same derived key is created twice."""

    code = "AlreadyExists"
    default_message = "Market or pool already exists"


class InvalidAmount(AmmError):
    """Raised when an amount is negative, zero where not allowed, or outside the u64 domain."""

    code = "InvalidAmount"
    default_message = "Invalid amount"


class DepositTooSmall(AmmError):
    code = "DepositTooSmall"
    default_message = "Depositing too little liquidity"


class OutputTooSmall(AmmError):
    code = "OutputTooSmall"
    default_message = "Output is below the minimum expected"


class InvariantViolated(AmmError):
    """Raised when the post-swap reserve product is below the pre-swap product."""

    code = "InvariantViolated"
    default_message = "Invariant does not hold"

    def __init__(self, before: int, after: int) -> None:
        self.before = before
        self.after = after
        super().__init__(f"{self.default_message}: {after} < {before}")


class ArithmeticOverflow(AmmError):
    code = "ArithmeticOverflow"
    default_message = "Fixed-point result out of range"


class DivisionByZero(AmmError):
    code = "DivisionByZero"
    default_message = "Fixed-point division by zero"


class InsufficientBalance(AmmError):
    code = "InsufficientBalance"
    default_message = "Insufficient balance"


class InsufficientShares(AmmError):
    code = "InsufficientShares"
    default_message = "Insufficient liquidity share balance"
