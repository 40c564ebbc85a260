"""Range state transitions: wall/cushion prices, capacity and wall activity.

One pure function per range operation. Each returns a new `RangeState`; the
operator is the only caller and commits the result.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from .config import RangeConfig, validate_spreads, validate_threshold_factor
from .errors import InvalidParamsError
from .math import NO_MARKET, apply_spread_down, apply_spread_up, percent_of
from .types import RangeSide, RangeState, Side


def initial_range_state(config: RangeConfig) -> RangeState:
    side = RangeSide(cushion_spread=config.cushion_spread, wall_spread=config.wall_spread)
    return RangeState(low=side, high=side, threshold_factor=config.threshold_factor)


def update_prices(state: RangeState, target_price: int) -> RangeState:
    """Re-centre both sides of the band on *target_price*."""
    if target_price <= 0:
        raise InvalidParamsError(f"target price must be positive: {target_price}")
    low, high = state.low, state.high
    return replace(
        state,
        low=replace(
            low,
            wall_price=apply_spread_down(target_price, low.wall_spread),
            cushion_price=apply_spread_down(target_price, low.cushion_spread),
        ),
        high=replace(
            high,
            wall_price=apply_spread_up(target_price, high.wall_spread),
            cushion_price=apply_spread_up(target_price, high.cushion_spread),
        ),
    )


def update_capacity(
    state: RangeState,
    side: Side,
    capacity: int,
    market_capacity: Optional[int] = None,
    *,
    now: int,
) -> RangeState:
    """Set a side's capacity and, optionally, its auction-capacity snapshot.

    An active wall whose capacity drops below its threshold goes down.
    """
    if capacity < 0:
        raise InvalidParamsError(f"capacity must be non-negative: {capacity}")
    current = state.side(side)
    updated = replace(current, capacity=capacity)
    if market_capacity is not None:
        if market_capacity < 0:
            raise InvalidParamsError(f"market capacity must be non-negative: {market_capacity}")
        if not current.has_market and market_capacity != 0:
            raise InvalidParamsError("cannot snapshot auction capacity without a market")
        updated = replace(updated, last_market_capacity=market_capacity)
    if updated.active and capacity < updated.threshold:
        updated = replace(updated, active=False, last_active=now)
    return state.with_side(side, updated)


def update_market(state: RangeState, side: Side, market: int, market_capacity: int) -> RangeState:
    """Record an open cushion auction, or clear it with ``NO_MARKET``."""
    current = state.side(side)
    if market == NO_MARKET:
        if market_capacity != 0:
            raise InvalidParamsError("clearing a market requires zero market capacity")
    else:
        if market < 0:
            raise InvalidParamsError(f"invalid market id: {market}")
        if not current.active:
            raise InvalidParamsError("cannot open a cushion on an inactive wall")
        if market_capacity < 0:
            raise InvalidParamsError(f"market capacity must be non-negative: {market_capacity}")
    return state.with_side(
        side, replace(current, market=market, last_market_capacity=market_capacity),
    )


def regenerate(state: RangeState, side: Side, capacity: int, *, now: int) -> RangeState:
    """Restore a side to *capacity*, re-arm its threshold and mark the wall up."""
    if capacity < 0:
        raise InvalidParamsError(f"capacity must be non-negative: {capacity}")
    current = state.side(side)
    return state.with_side(
        side,
        replace(
            current,
            active=True,
            last_active=now,
            capacity=capacity,
            threshold=percent_of(capacity, state.threshold_factor),
            market=NO_MARKET,
            last_market_capacity=0,
        ),
    )


def set_spreads(
    state: RangeState,
    cushion_spread: int,
    wall_spread: int,
    side: Optional[Side] = None,
) -> RangeState:
    """Change spreads for one side, or both when *side* is None.

    Prices are not recomputed here; callers re-centre with `update_prices`.
    """
    validate_spreads(cushion_spread, wall_spread)
    sides = (Side.LOW, Side.HIGH) if side is None else (side,)
    for s in sides:
        state = state.with_side(
            s, replace(state.side(s), cushion_spread=cushion_spread, wall_spread=wall_spread),
        )
    return state


def set_threshold_factor(state: RangeState, threshold_factor: int) -> RangeState:
    """Takes effect on each side's next regeneration."""
    validate_threshold_factor(threshold_factor)
    return replace(state, threshold_factor=threshold_factor)
