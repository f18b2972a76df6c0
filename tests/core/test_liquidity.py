# [TESTER] v1

from __future__ import annotations

import dataclasses

import pytest

from cpamm.core.authority import derive_authority, derive_share_asset, verify_pool
from cpamm.core.cpmm import SwapDirection, swap
from cpamm.core.liquidity import create_market, create_pool, deposit, read_reserves, withdraw
from cpamm.errors import DepositTooSmall, InsufficientShares, InvalidPool
from cpamm.state import InMemoryLedger

ADMIN = "0x" + "ad" * 32
ALICE = "0x" + "aa" * 32
BOB = "0x" + "bb" * 32
CAROL = "0x" + "cc" * 32
ASSET_A = "0x" + "01" * 32
ASSET_B = "0x" + "02" * 32


def _setup(fee_bps: int = 30):
    ledger = InMemoryLedger()
    market = create_market("market-1", ADMIN, fee_bps)
    pool = create_pool(market, ASSET_A, ASSET_B)
    return ledger, market, pool


def test_create_pool_starts_empty_with_derived_handles() -> None:
    ledger, market, pool = _setup()
    assert pool.authority == derive_authority(market.market_key, ASSET_A, ASSET_B)
    assert pool.share_asset == derive_share_asset(market.market_key, ASSET_A, ASSET_B)
    assert pool.authority != pool.share_asset
    r = read_reserves(ledger, pool)
    assert (r.reserve_a, r.reserve_b, r.share_supply) == (0, 0, 0)


def test_first_deposit_mints_geometric_mean_minus_floor() -> None:
    ledger, market, pool = _setup()
    ledger.credit(ALICE, ASSET_A, 10_000)
    ledger.credit(ALICE, ASSET_B, 10_000)

    q = deposit(ledger, market, pool, ALICE, 10_000, 10_000)

    assert q.minted_shares == 9_900
    assert ledger.read_share_balance(ALICE, pool.pool_id) == 9_900
    r = read_reserves(ledger, pool)
    assert (r.reserve_a, r.reserve_b, r.share_supply) == (10_000, 10_000, 9_900)
    assert ledger.read_balance(ALICE, ASSET_A) == 0


def test_deposit_is_clamped_to_caller_balance() -> None:
    ledger, market, pool = _setup()
    ledger.credit(ALICE, ASSET_A, 5_000)
    ledger.credit(ALICE, ASSET_B, 5_000)

    q = deposit(ledger, market, pool, ALICE, 10_000, 10_000)

    assert (q.accepted_a, q.accepted_b) == (5_000, 5_000)
    assert q.minted_shares == 4_900


def test_deposit_too_small_changes_nothing() -> None:
    ledger, market, pool = _setup()
    ledger.credit(ALICE, ASSET_A, 50)
    ledger.credit(ALICE, ASSET_B, 50)

    with pytest.raises(DepositTooSmall):
        deposit(ledger, market, pool, ALICE, 50, 50)

    assert ledger.read_balance(ALICE, ASSET_A) == 50
    assert read_reserves(ledger, pool).is_empty


def test_second_deposit_follows_pool_ratio() -> None:
    ledger, market, pool = _setup()
    ledger.credit(ALICE, ASSET_A, 10_000)
    ledger.credit(ALICE, ASSET_B, 20_000)
    deposit(ledger, market, pool, ALICE, 10_000, 20_000)
    ledger.credit(BOB, ASSET_A, 1_000)
    ledger.credit(BOB, ASSET_B, 5_000)

    q = deposit(ledger, market, pool, BOB, 1_000, 5_000)

    assert (q.accepted_a, q.accepted_b) == (1_000, 2_000)
    assert q.minted_shares == 1_414
    assert ledger.read_balance(BOB, ASSET_B) == 3_000
    r = read_reserves(ledger, pool)
    assert (r.reserve_a, r.reserve_b) == (11_000, 22_000)


def test_withdraw_pays_proportional_share_and_keeps_floor() -> None:
    ledger, market, pool = _setup()
    ledger.credit(ALICE, ASSET_A, 10_000)
    ledger.credit(ALICE, ASSET_B, 10_000)
    deposit(ledger, market, pool, ALICE, 10_000, 10_000)

    q = withdraw(ledger, market, pool, ALICE, 9_900)

    assert (q.paid_a, q.paid_b) == (9_900, 9_900)
    r = read_reserves(ledger, pool)
    assert (r.reserve_a, r.reserve_b, r.share_supply) == (100, 100, 0)


def test_withdraw_more_than_held_changes_nothing() -> None:
    ledger, market, pool = _setup()
    ledger.credit(ALICE, ASSET_A, 10_000)
    ledger.credit(ALICE, ASSET_B, 10_000)
    deposit(ledger, market, pool, ALICE, 10_000, 10_000)

    with pytest.raises(InsufficientShares):
        withdraw(ledger, market, pool, ALICE, 9_901)

    assert ledger.read_share_balance(ALICE, pool.pool_id) == 9_900
    assert ledger.read_balance(ALICE, ASSET_A) == 0


def test_deposit_then_withdraw_never_returns_more() -> None:
    for swap_in in (0, 500, 5_000, 50_000):
        ledger, market, pool = _setup()
        ledger.credit(ALICE, ASSET_A, 10_000)
        ledger.credit(ALICE, ASSET_B, 10_000)
        deposit(ledger, market, pool, ALICE, 10_000, 10_000)
        if swap_in:
            ledger.credit(CAROL, ASSET_A, swap_in)
            swap(ledger, market, pool, CAROL, SwapDirection.A_TO_B, swap_in, 0)

        ledger.credit(BOB, ASSET_A, 3_000)
        ledger.credit(BOB, ASSET_B, 3_000)
        dq = deposit(ledger, market, pool, BOB, 3_000, 3_000)
        wq = withdraw(ledger, market, pool, BOB, dq.minted_shares)

        assert wq.paid_a <= dq.accepted_a
        assert wq.paid_b <= dq.accepted_b


def test_operations_reject_pool_from_other_market() -> None:
    ledger, market, pool = _setup()
    other = create_market("market-2", ADMIN, 30)
    with pytest.raises(InvalidPool):
        deposit(ledger, other, pool, ALICE, 10_000, 10_000)


def test_operations_reject_tampered_authority() -> None:
    ledger, market, pool = _setup()
    forged = dataclasses.replace(pool, authority=ALICE)
    with pytest.raises(InvalidPool):
        verify_pool(market, forged)
    with pytest.raises(InvalidPool):
        withdraw(ledger, market, forged, ALICE, 1)
