"""Tests for src/integration/memory.py: in-memory auctioneer, treasury, minter."""

from __future__ import annotations

import pytest

from src.core.range_bound.errors import InvalidParamsError
from src.core.range_bound.types import MarketParams
from src.integration.memory import (
    InMemoryAuctioneer,
    InMemoryCallback,
    InMemoryFeed,
    InMemoryMinter,
    InMemoryTreasury,
    LedgerParticipant,
)
from src.integration.runtime import Host, ManualClock


def _params(capacity: int = 1_000, conclusion: int = 200) -> MarketParams:
    return MarketParams(
        payout_token="TOKEN",
        quote_token="RESERVE",
        callback="callback",
        capacity=capacity,
        formatted_initial_price=1,
        formatted_minimum_price=1,
        debt_buffer=100_000,
        conclusion=conclusion,
        deposit_interval=3_600,
        scale_adjustment=0,
    )


def _auctioneer():
    clock = ManualClock(100)
    host = Host(clock)
    return InMemoryAuctioneer(host), clock, host


class TestAuctioneer:
    def test_lifecycle(self):
        a, clock, _ = _auctioneer()
        m = a.create_market(_params())
        assert a.is_live(m)
        a.purchase(m, 400)
        assert a.current_capacity(m) == 600
        assert a.market(m).sold == 400
        clock.set(200)
        assert not a.is_live(m)
        assert a.current_capacity(m) == 600

    def test_sell_out_concludes(self):
        a, _, _ = _auctioneer()
        m = a.create_market(_params(capacity=10))
        a.purchase(m, 10)
        assert not a.is_live(m)

    def test_close(self):
        a, _, _ = _auctioneer()
        m = a.create_market(_params())
        a.close_market(m)
        assert not a.is_live(m)
        assert a.current_capacity(m) == 0
        assert a.unsold_capacity(m) == 1_000
        with pytest.raises(InvalidParamsError):
            a.purchase(m, 1)

    def test_invalid_markets(self):
        a, _, _ = _auctioneer()
        with pytest.raises(InvalidParamsError):
            a.create_market(_params(capacity=0))
        with pytest.raises(InvalidParamsError):
            a.create_market(_params(conclusion=100))
        with pytest.raises(InvalidParamsError):
            a.current_capacity(42)
        assert not a.is_live(42)

    def test_purchase_bounds(self):
        a, _, _ = _auctioneer()
        m = a.create_market(_params(capacity=10))
        with pytest.raises(InvalidParamsError):
            a.purchase(m, 11)
        with pytest.raises(InvalidParamsError):
            a.purchase(m, 0)

    def test_rolls_back_with_host(self):
        a, _, host = _auctioneer()
        with pytest.raises(InvalidParamsError):
            with host.atomic():
                a.create_market(_params())
                raise InvalidParamsError("abort")
        assert a.create_market(_params()) == 0


class TestCallbackTreasuryMinter:
    def test_whitelist_rolls_back(self):
        host = Host(ManualClock(0))
        cb = InMemoryCallback(host)
        with pytest.raises(InvalidParamsError):
            with host.atomic():
                cb.whitelist("teller", 1)
                raise InvalidParamsError("abort")
        assert not cb.is_whitelisted("teller", 1)
        cb.whitelist("teller", 1)
        assert cb.is_whitelisted("teller", 1)

    def test_treasury_and_minter(self):
        ledger = LedgerParticipant(Host(ManualClock(0))).ledger
        treasury = InMemoryTreasury(ledger)
        minter = InMemoryMinter(ledger, "TOKEN")
        ledger.mint("alice", "RESERVE", 50)
        treasury.deposit_reserves("alice", "RESERVE", 30)
        assert treasury.get_reserve_balance("RESERVE") == 30
        treasury.withdraw_reserves("bob", "RESERVE", 10)
        assert ledger.balance_of("bob", "RESERVE") == 10
        minter.mint_to("bob", 5)
        minter.burn_from("bob", 2)
        assert ledger.balance_of("bob", "TOKEN") == 3
        with pytest.raises(InvalidParamsError):
            treasury.withdraw_reserves("bob", "RESERVE", 21)


class TestFeed:
    def test_set_answer_advances_round(self):
        feed = InMemoryFeed("f", 8, 100)
        first = feed.latest_round_data()
        feed.set_answer(200, 5)
        second = feed.latest_round_data()
        assert second.round_id == first.round_id + 1
        assert second.answered_in_round == second.round_id
        assert (second.answer, second.updated_at) == (200, 5)
        assert feed.decimals() == 8
