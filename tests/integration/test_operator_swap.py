"""Tests for Operator.swap: wall fills, capacity accounting and rollback."""

from __future__ import annotations

import threading

import pytest

from src.core.range_bound.errors import (
    AmountLessThanMinimumError,
    InsufficientCapacityError,
    InvalidParamsError,
    ReentrancyError,
    WallDownError,
)
from src.core.range_bound.types import Side, SideMode
from src.integration.system import build_system

E8 = 10**8
E18 = 10**18
# 1e25 reserve of low-wall capacity at 8.00 per 9-decimal token
EXACT_LOW_IN = 1_250_000_000_000_000


def _funded(token_amount: int = 0, reserve_amount: int = 0):
    s = build_system()
    if token_amount:
        s.ledger.mint("alice", s.token.address, token_amount)
    if reserve_amount:
        s.ledger.mint("alice", s.reserve.address, reserve_amount)
    return s


class TestLowWall:
    def test_sell_token_for_reserve(self):
        s = _funded(token_amount=10**9)
        capacity = s.operator.range.low.capacity
        treasury = s.treasury.get_reserve_balance(s.reserve.address)
        out = s.operator.swap("alice", s.token.address, 10**9)
        assert out == 8 * E18
        assert s.operator.range.low.capacity == capacity - out
        assert s.ledger.balance_of("alice", s.token.address) == 0
        assert s.ledger.balance_of("alice", s.reserve.address) == out
        assert s.treasury.get_reserve_balance(s.reserve.address) == treasury - out
        assert s.ledger.total_supply(s.token.address) == 0

    def test_exact_capacity_then_one_more(self):
        s = _funded(token_amount=EXACT_LOW_IN + 1)
        assert s.operator.get_amount_out(s.token.address, EXACT_LOW_IN) == 10_000_000 * E18

        range_before = s.operator.range
        ledger_before = s.ledger.snapshot()
        with pytest.raises(InsufficientCapacityError) as exc:
            s.operator.swap("alice", s.token.address, EXACT_LOW_IN + 1)
        assert exc.value.available == 10_000_000 * E18
        assert s.operator.range == range_before
        assert s.ledger.snapshot() == ledger_before

        out = s.operator.swap("alice", s.token.address, EXACT_LOW_IN)
        assert out == 10_000_000 * E18
        assert s.operator.range.low.capacity == 0
        assert not s.operator.range.low.active
        assert s.operator.range.low.last_active == s.now()

    def test_wall_down_rejects_swaps(self):
        s = _funded(token_amount=EXACT_LOW_IN + 10**9)
        s.operator.swap("alice", s.token.address, EXACT_LOW_IN)
        with pytest.raises(WallDownError):
            s.operator.swap("alice", s.token.address, 10**9)

    def test_wall_down_closes_cushion(self):
        s = build_system()
        s.clock.set(s.heart.next_beat())
        s.publish_price(850_000_000)
        s.heart.beat("keeper")
        low = s.operator.range.low
        market = low.market
        assert s.operator.side_mode(Side.LOW) is SideMode.CUSHION_OPEN

        amount_in = low.capacity * 10**9 // low.wall_price
        s.ledger.mint("alice", s.token.address, amount_in)
        s.operator.swap("alice", s.token.address, amount_in)
        assert not s.operator.range.low.active
        assert s.operator.side_mode(Side.LOW) is SideMode.WALL_ONLY
        assert s.auctioneer.market(market).closed


class TestHighWall:
    def test_sell_reserve_for_token(self):
        s = _funded(reserve_amount=12 * E18)
        capacity = s.operator.range.high.capacity
        out = s.operator.swap("alice", s.reserve.address, 12 * E18)
        assert out == 10**9
        assert s.operator.range.high.capacity == capacity - out
        assert s.ledger.balance_of("alice", s.token.address) == 10**9
        assert s.ledger.balance_of("alice", s.reserve.address) == 0

    def test_failed_deposit_rolls_back_capacity(self):
        s = _funded(reserve_amount=E18)
        capacity = s.operator.range.high.capacity
        with pytest.raises(InvalidParamsError):
            s.operator.swap("alice", s.reserve.address, 12 * E18)
        assert s.operator.range.high.capacity == capacity
        assert s.ledger.balance_of("alice", s.token.address) == 0


class TestValidation:
    def test_min_amount_out(self):
        s = _funded(token_amount=10**9)
        with pytest.raises(AmountLessThanMinimumError):
            s.operator.swap("alice", s.token.address, 10**9, min_amount_out=8 * E18 + 1)
        assert s.operator.swap("alice", s.token.address, 10**9, min_amount_out=8 * E18) == 8 * E18

    @pytest.mark.parametrize("amount", [0, -1])
    def test_amount_must_be_positive(self, amount):
        s = _funded(token_amount=10**9)
        with pytest.raises(InvalidParamsError):
            s.operator.swap("alice", s.token.address, amount)

    def test_unknown_token(self):
        s = _funded()
        with pytest.raises(InvalidParamsError):
            s.operator.swap("alice", "OTHER", 1)


class TestReentrancy:
    def test_reentrant_swap_rolls_back(self, monkeypatch):
        s = _funded(token_amount=2 * 10**9)
        original_burn = s.minter.burn_from

        def reenter(account, amount):
            original_burn(account, amount)
            s.operator.swap(account, s.token.address, 10**9)

        monkeypatch.setattr(s.minter, "burn_from", reenter)
        range_before = s.operator.range
        ledger_before = s.ledger.snapshot()
        with pytest.raises(ReentrancyError):
            s.operator.swap("alice", s.token.address, 10**9)
        assert s.operator.range == range_before
        assert s.ledger.snapshot() == ledger_before

        monkeypatch.setattr(s.minter, "burn_from", original_burn)
        assert s.operator.swap("alice", s.token.address, 10**9) == 8 * E18

    def test_concurrent_swap_waits_for_the_lock(self, monkeypatch):
        s = _funded(token_amount=10**9)
        s.ledger.mint("bob", s.token.address, 10**9)
        original_burn = s.minter.burn_from
        alice_inside = threading.Event()
        release = threading.Event()

        def slow_burn(account, amount):
            original_burn(account, amount)
            if account == "alice":
                alice_inside.set()
                release.wait(5)

        monkeypatch.setattr(s.minter, "burn_from", slow_burn)
        results = {}
        errors = []

        def run(account):
            try:
                results[account] = s.operator.swap(account, s.token.address, 10**9)
            except Exception as exc:  # collected for the assertion below
                errors.append(type(exc).__name__)

        alice = threading.Thread(target=run, args=("alice",))
        alice.start()
        assert alice_inside.wait(5)
        bob = threading.Thread(target=run, args=("bob",))
        bob.start()
        bob.join(0.2)
        assert bob.is_alive()
        assert "bob" not in results

        release.set()
        alice.join(5)
        bob.join(5)
        assert errors == []
        assert results == {"alice": 8 * E18, "bob": 8 * E18}
        assert s.ledger.balance_of("bob", s.reserve.address) == 8 * E18
