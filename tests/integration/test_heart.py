"""Tests for src/integration/heart.py: beat cadence and atomicity."""

from __future__ import annotations

import pytest

from src.core.range_bound.errors import BadFeedError, BeatStoppedError, InvalidParamsError, OutOfCycleError, UnauthorizedError
from src.core.range_bound.math import DAY, HOUR
from src.core.range_bound.types import Side
from src.integration.system import GOVERNOR, build_system

E8 = 10**8
FREQ = 8 * HOUR


class TestBeat:
    def test_first_beat_after_one_period(self):
        s = build_system()
        start = s.now()
        assert s.heart.next_beat() == start + FREQ
        with pytest.raises(OutOfCycleError):
            s.heart.beat("keeper")
        s.clock.set(start + FREQ)
        s.publish_price(10 * E8)
        s.heart.beat("keeper")
        assert s.heart.last_beat == start + FREQ
        assert s.price.state.last_observation_time == start + FREQ

    def test_late_beat_keeps_cadence(self):
        s = build_system()
        start = s.now()
        s.clock.set(start + 2 * FREQ + 100)
        s.publish_price(10 * E8)
        s.heart.beat("keeper")
        assert s.heart.last_beat == start + 2 * FREQ
        assert s.heart.next_beat() == start + 3 * FREQ

    def test_anyone_may_beat(self):
        s = build_system()
        s.clock.advance(FREQ)
        s.publish_price(10 * E8)
        report = s.heart.beat("random-keeper")
        assert report.last_price == 10 * 10**18

    def test_bad_feed_rolls_back_whole_beat(self):
        s = build_system()
        start = s.now()
        s.clock.set(start + 2 * DAY)  # feeds last updated at start: stale
        observations = s.price.observations
        with pytest.raises(BadFeedError):
            s.heart.beat("keeper")
        assert s.heart.last_beat == start
        assert s.price.observations == observations
        assert s.operator.status(Side.LOW).count == 0

    def test_stopped(self):
        s = build_system()
        assert s.heart.toggle_beat(GOVERNOR) is False
        s.clock.advance(FREQ)
        s.publish_price(10 * E8)
        with pytest.raises(BeatStoppedError):
            s.heart.beat("keeper")
        assert s.heart.toggle_beat(GOVERNOR) is True
        s.heart.beat("keeper")


class TestAdmin:
    def test_reset_beat(self):
        s = build_system()
        s.heart.reset_beat(GOVERNOR)
        s.publish_price(10 * E8)
        s.heart.beat("keeper")
        assert s.heart.last_beat == s.now()

    def test_set_frequency(self):
        s = build_system()
        s.heart.set_frequency(GOVERNOR, HOUR)
        assert s.heart.next_beat() == s.now() + HOUR
        with pytest.raises(InvalidParamsError):
            s.heart.set_frequency(GOVERNOR, 0)
        assert s.heart.frequency == HOUR

    def test_requires_heart_admin(self):
        s = build_system()
        with pytest.raises(UnauthorizedError):
            s.heart.toggle_beat("mallory")
        with pytest.raises(UnauthorizedError):
            s.heart.reset_beat("mallory")
