"""
Core range-bound operations kernels
"""

from .oracle import FeedReading, combine_prices, is_fresh, require_valid
from .range_bound import (
    OperatorConfig,
    PriceConfig,
    RangeConfig,
    RangeState,
    RegenStatus,
    PriceState,
    Side,
)

__all__ = [
    "FeedReading",
    "combine_prices",
    "is_fresh",
    "require_valid",
    "OperatorConfig",
    "PriceConfig",
    "RangeConfig",
    "RangeState",
    "RegenStatus",
    "PriceState",
    "Side",
]
