"""`range_bound`: pure-Python kernels for range-bound market operations.

This package holds the functional core of the operator control loop:
- deterministic, integer-only transitions,
- immutable state (frozen dataclasses),
- fail-closed validation and invariant checks.

Stateful wiring (feeds, auctions, clocks, authorization) lives in
`src/integration/`.

Public API:
- price kernel: `initial_price_state`, `initialize_price`, `record_observation`,
  `moving_average`, `last_price`, `target_price`
- range kernel: `initial_range_state`, `update_prices`, `update_capacity`,
  `update_market`, `regenerate`
- regen kernel: `new_regen_status`, `observe`, `eligible_for_regen`
"""

from .config import HeartConfig, OperatorConfig, PriceConfig, RangeConfig
from .errors import (
    AlreadyInitializedError,
    AmountLessThanMinimumError,
    BadFeedError,
    BeatStoppedError,
    InactiveError,
    InsufficientCapacityError,
    InvalidParamsError,
    InvariantViolationError,
    NotInitializedError,
    OutOfCycleError,
    RangeBoundError,
    ReentrancyError,
    UnauthorizedError,
    WallDownError,
)
from .math import NO_MARKET, ONE_HUNDRED_PERCENT, ONE_PERCENT
from .price import initial_price_state, last_price, moving_average, record_observation, target_price
from .price import initialize as initialize_price
from .range import initial_range_state, regenerate, update_capacity, update_market, update_prices
from .regen import eligible_for_regen, is_favorable, new_regen_status, observe
from .types import (
    Asset,
    MarketParams,
    OperateReport,
    PriceState,
    RangeSide,
    RangeState,
    RegenStatus,
    Side,
    SideMode,
)

__all__ = [
    "HeartConfig",
    "OperatorConfig",
    "PriceConfig",
    "RangeConfig",
    "AlreadyInitializedError",
    "AmountLessThanMinimumError",
    "BadFeedError",
    "BeatStoppedError",
    "InactiveError",
    "InsufficientCapacityError",
    "InvalidParamsError",
    "InvariantViolationError",
    "NotInitializedError",
    "OutOfCycleError",
    "RangeBoundError",
    "ReentrancyError",
    "UnauthorizedError",
    "WallDownError",
    "NO_MARKET",
    "ONE_HUNDRED_PERCENT",
    "ONE_PERCENT",
    "initial_price_state",
    "initialize_price",
    "record_observation",
    "moving_average",
    "last_price",
    "target_price",
    "initial_range_state",
    "update_prices",
    "update_capacity",
    "update_market",
    "regenerate",
    "new_regen_status",
    "is_favorable",
    "observe",
    "eligible_for_regen",
    "Asset",
    "MarketParams",
    "OperateReport",
    "PriceState",
    "RangeSide",
    "RangeState",
    "RegenStatus",
    "Side",
    "SideMode",
]
