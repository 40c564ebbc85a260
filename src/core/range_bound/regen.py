"""Regeneration tracker: a rolling window of "price favours this side" votes.

A side's wall is restored to full capacity once enough of the recent
observations put price on the opposite side of the moving average from that
wall, and enough time has passed since the side last regenerated.
"""

from __future__ import annotations

from dataclasses import replace

from .errors import InvalidParamsError
from .types import RegenStatus, Side


def new_regen_status(window: int, now: int) -> RegenStatus:
    """A cleared window of *window* slots, stamped as regenerated at *now*."""
    if window <= 0:
        raise InvalidParamsError(f"regen window must be positive: {window}")
    return RegenStatus(count=0, last_regen=now, next_observation=0, observations=(False,) * window)


def is_favorable(side: Side, price: int, moving_average: int) -> bool:
    """Low side regenerates while price sits at/above the average; high side at/below."""
    if side.is_high:
        return price <= moving_average
    return price >= moving_average


def observe(status: RegenStatus, favorable: bool) -> RegenStatus:
    """Write one observation over the oldest slot.

    `count` moves only when the slot actually flips, so overwriting a slot with
    the value it already holds is neutral.
    """
    window = len(status.observations)
    if window == 0:
        raise InvalidParamsError("regen status has no observation window")
    idx = status.next_observation
    previous = status.observations[idx]
    count = status.count
    if favorable and not previous:
        count += 1
    elif previous and not favorable:
        count -= 1
    obs = status.observations[:idx] + (favorable,) + status.observations[idx + 1:]
    return replace(status, count=count, observations=obs, next_observation=(idx + 1) % window)


def eligible_for_regen(status: RegenStatus, *, now: int, regen_wait: int, regen_threshold: int) -> bool:
    return now >= status.last_regen + regen_wait and status.count >= regen_threshold
