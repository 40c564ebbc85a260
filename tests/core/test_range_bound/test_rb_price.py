"""Tests for src/core/range_bound/price.py: moving-average ring buffer."""

import pytest

from src.core.range_bound.config import PriceConfig
from src.core.range_bound.errors import AlreadyInitializedError, InvalidParamsError, NotInitializedError
from src.core.range_bound.math import HOUR
from src.core.range_bound.price import (
    change_minimum_target_price,
    change_moving_average_duration,
    change_observation_frequency,
    change_update_thresholds,
    initial_price_state,
    initialize,
    last_price,
    moving_average,
    record_observation,
    target_price,
)

E18 = 10**18
FREQ = 8 * HOUR


def _state(n: int = 4, **kwargs):
    return initial_price_state(PriceConfig(observation_frequency=FREQ, moving_average_duration=n * FREQ, **kwargs))


def _seeded(obs=(10 * E18, 10 * E18, 10 * E18, 10 * E18), **kwargs):
    return initialize(_state(len(obs), **kwargs), obs, 100, 100)


class TestInitialize:
    def test_unseeded_state(self):
        s = _state()
        assert s.num_observations == 4
        assert not s.initialized
        with pytest.raises(NotInitializedError):
            moving_average(s)
        with pytest.raises(NotInitializedError):
            record_observation(s, E18, 1)

    def test_seed(self):
        s = _seeded((1, 2, 3, 4))
        assert s.initialized
        assert s.cumulative_obs == 10
        assert s.last_observation_time == 100
        assert moving_average(s) == 2
        assert last_price(s) == 4

    def test_seed_twice(self):
        with pytest.raises(AlreadyInitializedError):
            initialize(_seeded(), (1, 1, 1, 1), 100, 100)

    def test_seed_wrong_length(self):
        with pytest.raises(InvalidParamsError):
            initialize(_state(), (1, 2, 3), 0, 0)

    def test_seed_from_the_future(self):
        with pytest.raises(InvalidParamsError):
            initialize(_state(), (1, 1, 1, 1), 101, 100)

    def test_seed_non_positive(self):
        with pytest.raises(InvalidParamsError):
            initialize(_state(), (1, 0, 1, 1), 0, 0)


class TestRecordObservation:
    def test_replaces_oldest(self):
        s = _seeded((1, 2, 3, 4))
        s = record_observation(s, 9, 200)
        assert s.observations == (9, 2, 3, 4)
        assert s.next_obs_index == 1
        assert s.cumulative_obs == 18
        assert moving_average(s) == 4  # 18 // 4
        assert last_price(s) == 9
        assert s.last_observation_time == 200

    def test_wraps(self):
        s = _seeded((1, 1, 1, 1))
        for i, price in enumerate((5, 6, 7, 8, 9)):
            s = record_observation(s, price, i)
        assert s.observations == (9, 6, 7, 8)
        assert s.next_obs_index == 1
        assert moving_average(s) == 30 // 4

    def test_negative_price(self):
        with pytest.raises(InvalidParamsError):
            record_observation(_seeded(), -1, 0)


class TestTargetPrice:
    def test_is_moving_average(self):
        assert target_price(_seeded()) == 10 * E18

    def test_floored_at_minimum(self):
        s = change_minimum_target_price(_seeded(), 11 * E18)
        assert target_price(s) == 11 * E18
        assert moving_average(s) == 10 * E18

    def test_minimum_must_be_non_negative(self):
        with pytest.raises(InvalidParamsError):
            change_minimum_target_price(_seeded(), -1)


class TestReshape:
    def test_duration_change_clears_buffer(self):
        s = change_moving_average_duration(_seeded(), 6 * FREQ)
        assert not s.initialized
        assert s.observations == (0,) * 6
        assert s.cumulative_obs == 0
        assert s.next_obs_index == 0

    def test_frequency_change_clears_buffer(self):
        s = change_observation_frequency(_seeded(), 2 * FREQ)
        assert not s.initialized
        assert s.num_observations == 2

    def test_requires_divisibility(self):
        with pytest.raises(InvalidParamsError):
            change_observation_frequency(_seeded(), 5 * HOUR)
        with pytest.raises(InvalidParamsError):
            change_moving_average_duration(_seeded(), FREQ + 1)

    def test_thresholds(self):
        s = change_update_thresholds(_seeded(), 60, 120)
        assert (s.token_feed_update_threshold, s.reserve_feed_update_threshold) == (60, 120)
        with pytest.raises(InvalidParamsError):
            change_update_thresholds(s, 0, 120)
