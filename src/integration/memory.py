"""
In-memory collaborators.

Deterministic stand-ins for feeds, the auction mechanism, the payout callback,
the treasury and the mint authority. Stateful doubles register with the host so
they roll back together with the operator when a call fails.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, Optional, Set, Tuple

from ..core.oracle import FeedReading
from ..core.range_bound.errors import InvalidParamsError
from ..core.range_bound.types import MarketParams
from ..state.balances import TokenLedger
from .collaborators import AuctionCallback, Auctioneer, Minter, PriceFeed, Treasury
from .runtime import Host, Participant

logger = logging.getLogger(__name__)


class InMemoryFeed(PriceFeed):
    """A feed whose answer is set directly by tests or a simulation."""

    def __init__(self, name: str, decimals: int, answer: int, updated_at: int = 0) -> None:
        self.name = name
        self._decimals = int(decimals)
        self._reading = FeedReading(round_id=1, answer=int(answer), updated_at=int(updated_at), answered_in_round=1)

    def decimals(self) -> int:
        return self._decimals

    def latest_round_data(self) -> FeedReading:
        return self._reading

    def set_answer(self, answer: int, updated_at: int) -> None:
        """Publish a new round."""
        round_id = self._reading.round_id + 1
        self._reading = FeedReading(
            round_id=round_id, answer=int(answer), updated_at=int(updated_at), answered_in_round=round_id,
        )

    def set_reading(self, reading: FeedReading) -> None:
        """Publish an arbitrary (possibly malformed) reading."""
        self._reading = reading


@dataclass(frozen=True)
class AuctionMarket:
    params: MarketParams
    capacity: int
    conclusion: int
    sold: int = 0
    closed: bool = False


class InMemoryAuctioneer(Auctioneer, Participant):
    """Fixed-capacity markets that conclude by time, by sell-out, or by close."""

    def __init__(self, host: Host, teller: str = "teller") -> None:
        self._host = host
        self._teller = teller
        self._markets: Dict[int, AuctionMarket] = {}
        self._next_id = 0
        host.register(self)

    def snapshot(self) -> Tuple[Dict[int, AuctionMarket], int]:
        return dict(self._markets), self._next_id

    def restore(self, snapshot: Tuple[Dict[int, AuctionMarket], int]) -> None:
        markets, self._next_id = snapshot
        self._markets = dict(markets)

    def _market(self, market: int) -> AuctionMarket:
        try:
            return self._markets[market]
        except KeyError:
            raise InvalidParamsError(f"unknown market {market}") from None

    def create_market(self, params: MarketParams) -> int:
        if params.capacity <= 0:
            raise InvalidParamsError("market capacity must be positive")
        if params.conclusion <= self._host.now():
            raise InvalidParamsError("market conclusion must be in the future")
        market = self._next_id
        self._next_id += 1
        self._markets[market] = AuctionMarket(params=params, capacity=params.capacity, conclusion=params.conclusion)
        logger.debug(f"Market {market} created: capacity={params.capacity} conclusion={params.conclusion}")
        return market

    def is_live(self, market: int) -> bool:
        m = self._markets.get(market)
        if m is None:
            return False
        return not m.closed and m.capacity > 0 and self._host.now() < m.conclusion

    def close_market(self, market: int) -> None:
        m = self._market(market)
        self._markets[market] = replace(m, closed=True, capacity=0, conclusion=min(m.conclusion, self._host.now()))

    def current_capacity(self, market: int) -> int:
        return self._market(market).capacity

    def unsold_capacity(self, market: int) -> int:
        m = self._market(market)
        return m.params.capacity - m.sold

    def get_teller(self) -> str:
        return self._teller

    def market(self, market: int) -> AuctionMarket:
        return self._market(market)

    def purchase(self, market: int, payout: int) -> None:
        """Simulate bidders taking *payout* units from a live market."""
        if not self.is_live(market):
            raise InvalidParamsError(f"market {market} is not live")
        m = self._markets[market]
        if payout <= 0 or payout > m.capacity:
            raise InvalidParamsError(f"payout {payout} outside (0, {m.capacity}]")
        self._markets[market] = replace(m, capacity=m.capacity - payout, sold=m.sold + payout)


class InMemoryCallback(AuctionCallback, Participant):
    def __init__(self, host: Host, address: str = "callback") -> None:
        self.address = address
        self._whitelist: Set[Tuple[str, int]] = set()
        host.register(self)

    def snapshot(self) -> frozenset:
        return frozenset(self._whitelist)

    def restore(self, snapshot: frozenset) -> None:
        self._whitelist = set(snapshot)

    def whitelist(self, teller: str, market: int) -> None:
        self._whitelist.add((teller, market))

    def is_whitelisted(self, teller: str, market: int) -> bool:
        return (teller, market) in self._whitelist


class InMemoryTreasury(Treasury):
    """Reserves held by `address` on a shared ledger."""

    def __init__(self, ledger: TokenLedger, address: str = "treasury") -> None:
        self.address = address
        self._ledger = ledger

    def get_reserve_balance(self, asset: str) -> int:
        return self._ledger.balance_of(self.address, asset)

    def withdraw_reserves(self, to: str, asset: str, amount: int) -> None:
        self._ledger.transfer(self.address, to, asset, amount)

    def deposit_reserves(self, sender: str, asset: str, amount: int) -> None:
        self._ledger.transfer(sender, self.address, asset, amount)


class InMemoryMinter(Minter):
    def __init__(self, ledger: TokenLedger, token: str) -> None:
        self._ledger = ledger
        self._token = token

    def mint_to(self, account: str, amount: int) -> None:
        self._ledger.mint(account, self._token, amount)

    def burn_from(self, account: str, amount: int) -> None:
        self._ledger.burn(account, self._token, amount)


class LedgerParticipant(Participant):
    """Adapter registering a `TokenLedger` with a host."""

    def __init__(self, host: Host, ledger: Optional[TokenLedger] = None) -> None:
        self.ledger = ledger if ledger is not None else TokenLedger()
        host.register(self)

    def snapshot(self):
        return self.ledger.snapshot()

    def restore(self, snapshot) -> None:
        self.ledger.restore(snapshot)
