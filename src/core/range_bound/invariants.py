"""Invariant checkers for range-bound operations.

Each function returns True when the invariant holds; the `check_*()` helpers
return the list of violated invariant IDs (empty = all pass). The operator runs
them on every post-state before committing it.
"""

from __future__ import annotations

from typing import Callable

from .math import NO_MARKET, ONE_HUNDRED_PERCENT, ONE_PERCENT
from .types import PriceState, RangeSide, RangeState, RegenStatus, Side

# ---------------------------------------------------------------------------
# Range
# ---------------------------------------------------------------------------


def _both(check: Callable[[RangeSide], bool]) -> Callable[[RangeState], bool]:
    return lambda s: check(s.low) and check(s.high)


def inv_capacity_nonneg(side: RangeSide) -> bool:
    return side.capacity >= 0


def inv_inactive_has_no_market(side: RangeSide) -> bool:
    return side.active or side.market == NO_MARKET


def inv_no_market_zero_snapshot(side: RangeSide) -> bool:
    return side.market != NO_MARKET or side.last_market_capacity == 0


def inv_active_above_threshold(side: RangeSide) -> bool:
    return not side.active or side.capacity >= side.threshold


def inv_spreads_ordered(side: RangeSide) -> bool:
    return ONE_PERCENT <= side.cushion_spread <= side.wall_spread < ONE_HUNDRED_PERCENT


def inv_prices_ordered(s: RangeState) -> bool:
    return s.high.wall_price >= s.high.cushion_price >= s.low.cushion_price >= s.low.wall_price


RANGE_INVARIANTS: dict[str, Callable[[RangeState], bool]] = {
    "inv_capacity_nonneg": _both(inv_capacity_nonneg),
    "inv_inactive_has_no_market": _both(inv_inactive_has_no_market),
    "inv_no_market_zero_snapshot": _both(inv_no_market_zero_snapshot),
    "inv_active_above_threshold": _both(inv_active_above_threshold),
    "inv_spreads_ordered": _both(inv_spreads_ordered),
    "inv_prices_ordered": inv_prices_ordered,
}


def check_range(state: RangeState) -> list[str]:
    """Return list of violated range invariant IDs (empty = all pass)."""
    return [inv_id for inv_id, fn in RANGE_INVARIANTS.items() if not fn(state)]


# ---------------------------------------------------------------------------
# Regen
# ---------------------------------------------------------------------------


def inv_regen_count_matches(s: RegenStatus) -> bool:
    return s.count == sum(1 for o in s.observations if o)


def inv_regen_count_bounded(s: RegenStatus) -> bool:
    return 0 <= s.count <= len(s.observations)


def inv_regen_slot_in_window(s: RegenStatus) -> bool:
    return 0 <= s.next_observation < len(s.observations)


REGEN_INVARIANTS: dict[str, Callable[[RegenStatus], bool]] = {
    "inv_regen_count_matches": inv_regen_count_matches,
    "inv_regen_count_bounded": inv_regen_count_bounded,
    "inv_regen_slot_in_window": inv_regen_slot_in_window,
}


def check_regen(status: RegenStatus, side: Side | None = None) -> list[str]:
    """Return violated regen invariant IDs, suffixed with the side when given."""
    suffix = f"[{side.value}]" if side is not None else ""
    return [inv_id + suffix for inv_id, fn in REGEN_INVARIANTS.items() if not fn(status)]


# ---------------------------------------------------------------------------
# Price
# ---------------------------------------------------------------------------


def inv_price_window_shape(s: PriceState) -> bool:
    return (
        s.observation_frequency > 0
        and s.num_observations == s.moving_average_duration // s.observation_frequency
    )


def inv_price_cumulative_matches(s: PriceState) -> bool:
    return s.cumulative_obs == sum(s.observations)


def inv_price_slot_in_window(s: PriceState) -> bool:
    return 0 <= s.next_obs_index < s.num_observations


def inv_price_seeded_positive(s: PriceState) -> bool:
    if not s.initialized:
        return True
    return all(o >= 0 for o in s.observations)


PRICE_INVARIANTS: dict[str, Callable[[PriceState], bool]] = {
    "inv_price_window_shape": inv_price_window_shape,
    "inv_price_cumulative_matches": inv_price_cumulative_matches,
    "inv_price_slot_in_window": inv_price_slot_in_window,
    "inv_price_seeded_positive": inv_price_seeded_positive,
}


def check_price(state: PriceState) -> list[str]:
    """Return list of violated price invariant IDs (empty = all pass)."""
    return [inv_id for inv_id, fn in PRICE_INVARIANTS.items() if not fn(state)]
