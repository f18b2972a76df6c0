# [TESTER] v1

from __future__ import annotations

import pytest

from cpamm.core.cpmm import SwapDirection, swap
from cpamm.core.liquidity import create_market, create_pool, deposit, read_reserves
from cpamm.errors import InvalidAmount, InvariantViolated, OutputTooSmall
from cpamm.state import InMemoryLedger

ADMIN = "0x" + "ad" * 32
LP = "0x" + "11" * 32
TRADER = "0x" + "22" * 32
ASSET_A = "0x" + "01" * 32
ASSET_B = "0x" + "02" * 32


class SkimmingLedger(InMemoryLedger):
    """Ledger that moves extra funds out of one account, to exercise the invariant guard."""

    def __init__(self) -> None:
        super().__init__()
        self.skim_from = None
        self.skim = 0

    def transfer(self, asset, source, dest, amount):
        if source == self.skim_from:
            amount += self.skim
        super().transfer(asset, source, dest, amount)


def _seeded(ledger=None, fee_bps: int = 30, reserves=(10_000, 10_000)):
    ledger = ledger or InMemoryLedger()
    market = create_market("market-1", ADMIN, fee_bps)
    pool = create_pool(market, ASSET_A, ASSET_B)
    ledger.credit(LP, ASSET_A, reserves[0])
    ledger.credit(LP, ASSET_B, reserves[1])
    deposit(ledger, market, pool, LP, reserves[0], reserves[1])
    return ledger, market, pool


def test_swap_a_to_b_reference_example() -> None:
    ledger, market, pool = _seeded()
    ledger.credit(TRADER, ASSET_A, 1_000)

    res = swap(ledger, market, pool, TRADER, SwapDirection.A_TO_B, 1_000, 906)

    assert (res.amount_in, res.taxed_in, res.fee, res.amount_out) == (1_000, 997, 3, 906)
    assert ledger.read_balance(TRADER, ASSET_A) == 0
    assert ledger.read_balance(TRADER, ASSET_B) == 906
    r = read_reserves(ledger, pool)
    assert (r.reserve_a, r.reserve_b) == (11_000, 9_094)
    assert res.invariant_before == 100_000_000
    assert res.invariant_after == 11_000 * 9_094


def test_swap_b_to_a_moves_the_right_assets() -> None:
    ledger, market, pool = _seeded()
    ledger.credit(TRADER, ASSET_B, 1_000)

    res = swap(ledger, market, pool, TRADER, SwapDirection.B_TO_A, 1_000, 0)

    assert res.amount_out == 906
    assert ledger.read_balance(TRADER, ASSET_A) == 906
    assert ledger.read_balance(TRADER, ASSET_B) == 0
    r = read_reserves(ledger, pool)
    assert (r.reserve_a, r.reserve_b) == (9_094, 11_000)


def test_slippage_bound_rejects_before_any_transfer() -> None:
    ledger, market, pool = _seeded()
    ledger.credit(TRADER, ASSET_A, 1_000)

    with pytest.raises(OutputTooSmall):
        swap(ledger, market, pool, TRADER, SwapDirection.A_TO_B, 1_000, 907)

    assert ledger.read_balance(TRADER, ASSET_A) == 1_000
    r = read_reserves(ledger, pool)
    assert (r.reserve_a, r.reserve_b) == (10_000, 10_000)


def test_input_is_clamped_to_trader_balance() -> None:
    ledger, market, pool = _seeded()
    ledger.credit(TRADER, ASSET_A, 500)

    res = swap(ledger, market, pool, TRADER, SwapDirection.A_TO_B, 1_000, 0)

    assert res.amount_in == 500
    assert res.taxed_in == 499
    assert res.amount_out == (499 * 10_000) // 10_499
    assert ledger.read_balance(TRADER, ASSET_A) == 0


def test_invariant_violation_rolls_back_transfers() -> None:
    ledger, market, pool = _seeded(ledger=SkimmingLedger())
    ledger.credit(TRADER, ASSET_A, 1_000)
    ledger.skim_from = pool.authority
    ledger.skim = 500

    with pytest.raises(InvariantViolated) as excinfo:
        swap(ledger, market, pool, TRADER, SwapDirection.A_TO_B, 1_000, 0)

    assert excinfo.value.before == 100_000_000
    assert excinfo.value.after == 11_000 * (10_000 - 906 - 500)
    assert ledger.read_balance(TRADER, ASSET_A) == 1_000
    assert ledger.read_balance(TRADER, ASSET_B) == 0
    r = read_reserves(ledger, pool)
    assert (r.reserve_a, r.reserve_b) == (10_000, 10_000)


@pytest.mark.parametrize("min_amount_out", [0, 1])
def test_swap_against_empty_pool_is_rejected(min_amount_out: int) -> None:
    ledger = InMemoryLedger()
    market = create_market("market-1", ADMIN, 30)
    pool = create_pool(market, ASSET_A, ASSET_B)
    ledger.credit(TRADER, ASSET_A, 1_000)

    with pytest.raises(OutputTooSmall):
        swap(ledger, market, pool, TRADER, SwapDirection.A_TO_B, 1_000, min_amount_out)

    assert ledger.read_balance(TRADER, ASSET_A) == 1_000
    r = read_reserves(ledger, pool)
    assert (r.reserve_a, r.reserve_b) == (0, 0)

    # The pool stays usable.
    ledger.credit(LP, ASSET_A, 10**6)
    ledger.credit(LP, ASSET_B, 10**6)
    dq = deposit(ledger, market, pool, LP, 10**6, 10**6)
    assert dq.minted_shares == 10**6 - 100


def test_swap_with_nothing_to_spend_is_rejected() -> None:
    ledger, market, pool = _seeded()
    with pytest.raises(InvalidAmount):
        swap(ledger, market, pool, TRADER, SwapDirection.A_TO_B, 1_000, 0)
    r = read_reserves(ledger, pool)
    assert (r.reserve_a, r.reserve_b) == (10_000, 10_000)


def test_negative_min_output_is_rejected() -> None:
    ledger, market, pool = _seeded()
    with pytest.raises(InvalidAmount):
        swap(ledger, market, pool, TRADER, SwapDirection.A_TO_B, 1_000, -1)


@pytest.mark.parametrize("fee_bps", [0, 30, 100, 9_999])
def test_completed_swaps_never_decrease_product(fee_bps: int) -> None:
    ledger, market, pool = _seeded(fee_bps=fee_bps, reserves=(123_457, 98_765))
    ledger.credit(TRADER, ASSET_A, 1_000_000)
    ledger.credit(TRADER, ASSET_B, 1_000_000)
    for i, amount in enumerate((1, 7, 250, 4_000, 77_777, 3)):
        direction = SwapDirection.A_TO_B if i % 2 == 0 else SwapDirection.B_TO_A
        before = read_reserves(ledger, pool).constant_product()
        res = swap(ledger, market, pool, TRADER, direction, amount, 0)
        assert res.invariant_after >= res.invariant_before == before


def test_direction_from_flag() -> None:
    assert SwapDirection.from_flag(True) is SwapDirection.A_TO_B
    assert SwapDirection.from_flag(False) is SwapDirection.B_TO_A
