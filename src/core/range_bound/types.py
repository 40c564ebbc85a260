"""Data types for the range-bound operations kernels.

All state types are frozen dataclasses (immutable); transitions live in
`price.py`, `range.py` and `regen.py` and return new instances.

Units/conventions:
- prices are reserve-per-token, fixed point at the oracle's `decimals`,
- `*_spread` / `*_factor` values are basis points (1/10_000),
- low-side capacity is in reserve units, high-side capacity in token units,
- timestamps are integer seconds.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, unique

from .errors import InvalidParamsError
from .math import MAX_TOKEN_DECIMALS, NO_MARKET


@unique
class Side(Enum):
    """Which wall: LOW defends the floor (token sold in), HIGH the ceiling (reserve sold in)."""
    LOW = "low"
    HIGH = "high"

    @property
    def is_high(self) -> bool:
        return self is Side.HIGH


@unique
class SideMode(Enum):
    WALL_ONLY = "wall_only"
    CUSHION_OPEN = "cushion_open"


@dataclass(frozen=True)
class Asset:
    """A token identity as seen by the operator."""

    address: str
    decimals: int

    def __post_init__(self) -> None:
        if not isinstance(self.address, str) or not self.address:
            raise InvalidParamsError("asset address must be a non-empty string")
        if not isinstance(self.decimals, int) or isinstance(self.decimals, bool):
            raise TypeError("asset decimals must be an int")
        if not (0 <= self.decimals <= MAX_TOKEN_DECIMALS):
            raise InvalidParamsError(f"asset decimals out of range: {self.decimals}")


@dataclass(frozen=True)
class RangeSide:
    """One side of the band: its wall, its cushion and its capacity."""

    active: bool = False
    last_active: int = 0
    capacity: int = 0
    threshold: int = 0
    market: int = NO_MARKET
    last_market_capacity: int = 0
    cushion_price: int = 0
    wall_price: int = 0
    cushion_spread: int = 0
    wall_spread: int = 0

    @property
    def has_market(self) -> bool:
        return self.market != NO_MARKET


@dataclass(frozen=True)
class RangeState:
    low: RangeSide = RangeSide()
    high: RangeSide = RangeSide()
    threshold_factor: int = 0

    def side(self, side: Side) -> RangeSide:
        return self.high if side.is_high else self.low

    def with_side(self, side: Side, value: RangeSide) -> RangeState:
        if side.is_high:
            return replace(self, high=value)
        return replace(self, low=value)


@dataclass(frozen=True)
class RegenStatus:
    """Rolling window of regeneration observations for one side."""

    count: int = 0
    last_regen: int = 0
    next_observation: int = 0
    observations: tuple[bool, ...] = ()


@dataclass(frozen=True)
class PriceState:
    """Moving-average ring buffer and the parameters that shape it."""

    decimals: int = 18
    observation_frequency: int = 0
    moving_average_duration: int = 0
    observations: tuple[int, ...] = ()
    next_obs_index: int = 0
    cumulative_obs: int = 0
    last_observation_time: int = 0
    initialized: bool = False
    minimum_target_price: int = 0
    token_feed_update_threshold: int = 0
    reserve_feed_update_threshold: int = 0

    @property
    def num_observations(self) -> int:
        return len(self.observations)


@dataclass(frozen=True)
class MarketParams:
    """Parameters handed to the auctioneer when a cushion opens."""

    payout_token: str
    quote_token: str
    callback: str
    capacity: int
    formatted_initial_price: int
    formatted_minimum_price: int
    debt_buffer: int
    conclusion: int
    deposit_interval: int
    scale_adjustment: int
    capacity_in_quote: bool = False
    vesting: int = 0  # instant swaps


@dataclass(frozen=True)
class OperateReport:
    """What a single heartbeat did."""

    target_price: int
    last_price: int
    moving_average: int
    consumed: dict[Side, int] = field(default_factory=dict)
    regenerated: tuple[Side, ...] = ()
    walls_down: tuple[Side, ...] = ()
    cushions_opened: tuple[Side, ...] = ()
    cushions_closed: tuple[Side, ...] = ()
