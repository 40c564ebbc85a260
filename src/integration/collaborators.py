"""
Interfaces for the external systems the operator drives.

Each interface has an in-memory implementation in `memory.py`; price feeds also
have a read-only web3 implementation in `chain.py`. Transaction submission for
the write paths (auction creation, treasury withdrawals, minting) is outside
this package: hosts plug in their own implementations of these interfaces.
"""

from __future__ import annotations

from ..core.oracle import FeedReading
from ..core.range_bound.types import MarketParams


class PriceFeed:
    """An aggregator feed quoting one asset against a shared intermediate."""

    name: str = "feed"

    def decimals(self) -> int:
        raise NotImplementedError

    def latest_round_data(self) -> FeedReading:
        raise NotImplementedError


class Auctioneer:
    """Graduated-price auction mechanism used for cushions."""

    def create_market(self, params: MarketParams) -> int:
        raise NotImplementedError

    def is_live(self, market: int) -> bool:
        raise NotImplementedError

    def close_market(self, market: int) -> None:
        raise NotImplementedError

    def current_capacity(self, market: int) -> int:
        raise NotImplementedError

    def unsold_capacity(self, market: int) -> int:
        """Payout capacity never sold, counting a closed market's remainder as unsold."""
        raise NotImplementedError

    def get_teller(self) -> str:
        raise NotImplementedError


class AuctionCallback:
    """Settles auction payouts; each market's teller must be whitelisted first."""

    address: str = "callback"

    def whitelist(self, teller: str, market: int) -> None:
        raise NotImplementedError


class Treasury:
    def get_reserve_balance(self, asset: str) -> int:
        raise NotImplementedError

    def withdraw_reserves(self, to: str, asset: str, amount: int) -> None:
        raise NotImplementedError

    def deposit_reserves(self, sender: str, asset: str, amount: int) -> None:
        raise NotImplementedError


class Minter:
    """Mint/burn authority over the protocol token."""

    def mint_to(self, account: str, amount: int) -> None:
        raise NotImplementedError

    def burn_from(self, account: str, amount: int) -> None:
        raise NotImplementedError
