"""Tests for src/state/balances.py: deterministic token ledger."""

import pytest

from src.core.range_bound.errors import InvalidParamsError
from src.state.balances import TokenLedger


class TestTokenLedger:
    def test_mint_burn_transfer(self):
        ledger = TokenLedger()
        ledger.mint("alice", "TOKEN", 100)
        ledger.transfer("alice", "bob", "TOKEN", 40)
        ledger.burn("bob", "TOKEN", 10)
        assert ledger.balance_of("alice", "TOKEN") == 60
        assert ledger.balance_of("bob", "TOKEN") == 30
        assert ledger.total_supply("TOKEN") == 90

    def test_overdraw(self):
        ledger = TokenLedger()
        ledger.mint("alice", "TOKEN", 5)
        with pytest.raises(InvalidParamsError):
            ledger.transfer("alice", "bob", "TOKEN", 6)
        assert ledger.balance_of("alice", "TOKEN") == 5
        assert ledger.balance_of("bob", "TOKEN") == 0

    def test_negative_amounts(self):
        ledger = TokenLedger()
        with pytest.raises(InvalidParamsError):
            ledger.mint("alice", "TOKEN", -1)
        with pytest.raises(InvalidParamsError):
            ledger.burn("alice", "TOKEN", -1)

    def test_snapshot_is_sorted_and_drops_zero(self):
        ledger = TokenLedger()
        ledger.mint("zed", "TOKEN", 1)
        ledger.mint("amy", "RESERVE", 2)
        ledger.mint("amy", "TOKEN", 3)
        ledger.burn("zed", "TOKEN", 1)
        assert ledger.snapshot() == ((("amy", "RESERVE"), 2), (("amy", "TOKEN"), 3))

    def test_restore(self):
        ledger = TokenLedger()
        ledger.mint("amy", "TOKEN", 3)
        snap = ledger.snapshot()
        ledger.burn("amy", "TOKEN", 3)
        ledger.restore(snap)
        assert ledger.balance_of("amy", "TOKEN") == 3
