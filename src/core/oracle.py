"""
Price feed validation kernel.

This module is intentionally small and pure:
- The functional core validates feed readings and combines them deterministically.
- The imperative shell (`src/integration/price_oracle.py`) is responsible for
  fetching readings and timestamps.
"""

from __future__ import annotations

from dataclasses import dataclass

from .range_bound.errors import BadFeedError, InvalidParamsError


@dataclass(frozen=True)
class FeedReading:
    """One `latestRoundData()` answer from an aggregator feed."""

    round_id: int
    answer: int
    updated_at: int
    answered_in_round: int

    def __post_init__(self) -> None:
        for name in ("round_id", "answer", "updated_at", "answered_in_round"):
            val = getattr(self, name)
            if not isinstance(val, int) or isinstance(val, bool):
                raise TypeError(f"{name} must be an int")


def is_fresh(reading: FeedReading, current_timestamp: int, update_threshold: int) -> bool:
    """Return True if the reading was updated within *update_threshold* seconds."""
    if current_timestamp < 0:
        raise InvalidParamsError(f"current_timestamp must be non-negative: {current_timestamp}")
    return reading.updated_at >= current_timestamp - update_threshold


def require_valid(reading: FeedReading, *, now: int, update_threshold: int, feed: str) -> int:
    """Return the reading's answer, or raise `BadFeedError` naming *feed*."""
    if reading.answer <= 0:
        raise BadFeedError(feed, f"non-positive answer {reading.answer}")
    if not is_fresh(reading, now, update_threshold):
        raise BadFeedError(feed, f"stale: updated_at={reading.updated_at} now={now}")
    if reading.answered_in_round != reading.round_id:
        raise BadFeedError(
            feed, f"round mismatch: round_id={reading.round_id} answered_in_round={reading.answered_in_round}"
        )
    return reading.answer


def combine_prices(
    token_answer: int,
    token_feed_decimals: int,
    reserve_answer: int,
    reserve_feed_decimals: int,
    decimals: int,
) -> int:
    """Token price in reserve, at *decimals*, from two prices in a shared intermediate.

    ``(token / intermediate) / (reserve / intermediate)`` with each feed's own
    precision removed: ``token * 10**(decimals + reserve_dec) // (reserve * 10**token_dec)``.
    """
    if token_answer <= 0 or reserve_answer <= 0:
        raise InvalidParamsError("feed answers must be positive")
    return (token_answer * 10 ** (decimals + reserve_feed_decimals)) // (
        reserve_answer * 10**token_feed_decimals
    )
