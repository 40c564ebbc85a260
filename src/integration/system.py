"""
In-memory system factory.

Wires one host with in-memory feeds, auctioneer, callback, treasury and minter
around a price oracle, an operator and a heart, with governance and keeper
roles granted the way a deployment would grant them. Used by the simulation
tool and by integration tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..core.range_bound.types import Asset
from ..state.balances import TokenLedger
from .authority import (
    HEART_ADMIN,
    OPERATOR_ADMIN,
    OPERATOR_EMERGENCY,
    OPERATOR_OPERATE,
    OPERATOR_POLICY,
    PRICE_ADMIN,
    PRICE_UPDATE,
    RolePolicy,
)
from .heart import Heart
from .memory import (
    InMemoryAuctioneer,
    InMemoryCallback,
    InMemoryFeed,
    InMemoryMinter,
    InMemoryTreasury,
    LedgerParticipant,
)
from .operator import Operator
from .price_oracle import PriceOracle
from .runtime import Host, ManualClock
from .settings import Settings

logger = logging.getLogger(__name__)

GOVERNOR = "governor"
FEED_DECIMALS = 8


@dataclass
class RangeSystem:
    host: Host
    clock: ManualClock
    policy: RolePolicy
    ledger: TokenLedger
    token: Asset
    reserve: Asset
    token_feed: InMemoryFeed
    reserve_feed: InMemoryFeed
    auctioneer: InMemoryAuctioneer
    callback: InMemoryCallback
    treasury: InMemoryTreasury
    minter: InMemoryMinter
    price: PriceOracle
    operator: Operator
    heart: Heart

    def now(self) -> int:
        return self.host.now()

    def publish_price(self, token_answer: int, reserve_answer: Optional[int] = None) -> None:
        """Push fresh feed rounds stamped at the current time."""
        now = self.host.now()
        self.token_feed.set_answer(token_answer, now)
        if reserve_answer is not None:
            self.reserve_feed.set_answer(reserve_answer, now)
        else:
            self.reserve_feed.set_answer(self.reserve_feed.latest_round_data().answer, now)


def build_system(
    settings: Optional[Settings] = None,
    *,
    start: int = 1_700_000_000,
    token: Asset = Asset("TOKEN", 9),
    reserve: Asset = Asset("RESERVE", 18),
    token_answer: int = 10 * 10**FEED_DECIMALS,
    reserve_answer: int = 1 * 10**FEED_DECIMALS,
    reserve_balance: int = 100_000_000 * 10**18,
    seed: bool = True,
    initialize: bool = True,
) -> RangeSystem:
    """Build a ready-to-beat system.

    With *seed*, the moving average is seeded flat at the starting feed price;
    with *initialize* as well, the operator is initialized (walls up, active).
    """
    settings = settings if settings is not None else Settings()
    clock = ManualClock(start)
    host = Host(clock)
    heart_address = "heart"
    policy = RolePolicy(
        {
            OPERATOR_ADMIN: [GOVERNOR],
            OPERATOR_POLICY: [GOVERNOR],
            OPERATOR_EMERGENCY: [GOVERNOR],
            PRICE_ADMIN: [GOVERNOR],
            HEART_ADMIN: [GOVERNOR],
            OPERATOR_OPERATE: [heart_address],
            PRICE_UPDATE: [heart_address],
        }
    )

    ledger = LedgerParticipant(host).ledger
    token_feed = InMemoryFeed("token-feed", FEED_DECIMALS, token_answer, updated_at=start)
    reserve_feed = InMemoryFeed("reserve-feed", FEED_DECIMALS, reserve_answer, updated_at=start)
    auctioneer = InMemoryAuctioneer(host)
    callback = InMemoryCallback(host)
    treasury = InMemoryTreasury(ledger)
    minter = InMemoryMinter(ledger, token.address)
    ledger.mint(treasury.address, reserve.address, reserve_balance)

    price = PriceOracle(
        host=host, policy=policy, token_feed=token_feed, reserve_feed=reserve_feed, config=settings.price,
    )
    operator = Operator(
        host=host,
        policy=policy,
        price=price,
        auctioneer=auctioneer,
        callback=callback,
        treasury=treasury,
        minter=minter,
        token=token,
        reserve=reserve,
        config=settings.operator,
        range_config=settings.range,
    )
    heart = Heart(
        host=host, policy=policy, price=price, operator=operator, config=settings.heart, address=heart_address,
    )

    if seed:
        current = price.get_current_price()
        price.initialize(GOVERNOR, [current] * price.state.num_observations, start)
        if initialize:
            operator.initialize(GOVERNOR)
    logger.debug(f"In-memory system built at t={start}")

    return RangeSystem(
        host=host,
        clock=clock,
        policy=policy,
        ledger=ledger,
        token=token,
        reserve=reserve,
        token_feed=token_feed,
        reserve_feed=reserve_feed,
        auctioneer=auctioneer,
        callback=callback,
        treasury=treasury,
        minter=minter,
        price=price,
        operator=operator,
        heart=heart,
    )
