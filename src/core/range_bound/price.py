"""Moving-average price kernel.

The moving average is kept as a ring buffer of ``N`` observations plus their
running sum, where ``N = moving_average_duration // observation_frequency``.
A buffer is only usable once fully seeded; changing its shape discards it.

Round-trip property (tested): after any sequence of accepted observations,
``moving_average(s) == sum(s.observations) // N``.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from .config import PriceConfig, validate_observation_window
from .errors import AlreadyInitializedError, InvalidParamsError, NotInitializedError
from .types import PriceState


def initial_price_state(config: PriceConfig) -> PriceState:
    """Return an unseeded price state shaped by *config*."""
    n = config.moving_average_duration // config.observation_frequency
    return PriceState(
        decimals=config.decimals,
        observation_frequency=config.observation_frequency,
        moving_average_duration=config.moving_average_duration,
        observations=(0,) * n,
        minimum_target_price=config.minimum_target_price,
        token_feed_update_threshold=config.token_feed_update_threshold,
        reserve_feed_update_threshold=config.reserve_feed_update_threshold,
    )


def _require_initialized(state: PriceState) -> None:
    if not state.initialized:
        raise NotInitializedError("price moving average has not been seeded")


def initialize(
    state: PriceState,
    observations: Sequence[int],
    last_observation_time: int,
    now: int,
) -> PriceState:
    """Seed the buffer with a full window of observations."""
    if state.initialized:
        raise AlreadyInitializedError("price moving average already seeded")
    if len(observations) != state.num_observations:
        raise InvalidParamsError(
            f"expected {state.num_observations} observations, got {len(observations)}"
        )
    if last_observation_time > now:
        raise InvalidParamsError("last_observation_time is in the future")
    obs = tuple(int(o) for o in observations)
    if any(o <= 0 for o in obs):
        raise InvalidParamsError("seed observations must be positive")
    return replace(
        state,
        observations=obs,
        cumulative_obs=sum(obs),
        next_obs_index=0,
        last_observation_time=last_observation_time,
        initialized=True,
    )


def record_observation(state: PriceState, price: int, now: int) -> PriceState:
    """Overwrite the oldest observation with *price* and advance the slot."""
    _require_initialized(state)
    if price < 0:
        raise InvalidParamsError(f"price must be non-negative: {price}")
    idx = state.next_obs_index
    earliest = state.observations[idx]
    obs = state.observations[:idx] + (price,) + state.observations[idx + 1:]
    return replace(
        state,
        observations=obs,
        cumulative_obs=state.cumulative_obs + price - earliest,
        next_obs_index=(idx + 1) % state.num_observations,
        last_observation_time=now,
    )


def moving_average(state: PriceState) -> int:
    _require_initialized(state)
    return state.cumulative_obs // state.num_observations


def last_price(state: PriceState) -> int:
    """Most recently *recorded* observation (not a live spot read)."""
    _require_initialized(state)
    last_idx = (state.next_obs_index - 1) % state.num_observations
    return state.observations[last_idx]


def target_price(state: PriceState) -> int:
    """Price the range is centred on: the moving average, floored at the minimum target."""
    return max(moving_average(state), state.minimum_target_price)


def _reshape(state: PriceState, moving_average_duration: int, observation_frequency: int) -> PriceState:
    validate_observation_window(moving_average_duration, observation_frequency)
    n = moving_average_duration // observation_frequency
    return replace(
        state,
        moving_average_duration=moving_average_duration,
        observation_frequency=observation_frequency,
        observations=(0,) * n,
        next_obs_index=0,
        cumulative_obs=0,
        last_observation_time=0,
        initialized=False,
    )


def change_moving_average_duration(state: PriceState, duration: int) -> PriceState:
    """Resize the window; the buffer is cleared and must be re-seeded."""
    return _reshape(state, duration, state.observation_frequency)


def change_observation_frequency(state: PriceState, frequency: int) -> PriceState:
    """Change the sampling interval; the buffer is cleared and must be re-seeded."""
    return _reshape(state, state.moving_average_duration, frequency)


def change_update_thresholds(state: PriceState, token_threshold: int, reserve_threshold: int) -> PriceState:
    if token_threshold <= 0 or reserve_threshold <= 0:
        raise InvalidParamsError("feed update thresholds must be positive")
    return replace(
        state,
        token_feed_update_threshold=token_threshold,
        reserve_feed_update_threshold=reserve_threshold,
    )


def change_minimum_target_price(state: PriceState, minimum_target_price: int) -> PriceState:
    if minimum_target_price < 0:
        raise InvalidParamsError("minimum_target_price must be non-negative")
    return replace(state, minimum_target_price=minimum_target_price)
