"""Tests for src/core/range_bound/config.py: validated, versioned configs."""

import pytest

from src.core.range_bound.config import HeartConfig, OperatorConfig, PriceConfig, RangeConfig
from src.core.range_bound.errors import InvalidParamsError
from src.core.range_bound.math import DAY, HOUR


class TestOperatorConfig:
    def test_defaults_valid(self):
        cfg = OperatorConfig()
        assert cfg.version == 1
        assert cfg.regen_threshold <= cfg.regen_observe

    @pytest.mark.parametrize(
        "changes",
        [
            {"cushion_factor": 99},
            {"cushion_factor": 10_001},
            {"cushion_duration": DAY - 1},
            {"cushion_duration": 7 * DAY + 1},
            {"cushion_debt_buffer": 9_999},
            {"cushion_deposit_interval": HOUR - 1},
            {"cushion_deposit_interval": DAY + 1},
            {"reserve_factor": 0},
            {"regen_wait": HOUR - 1},
            {"regen_threshold": 22},
            {"regen_threshold": 0},
        ],
    )
    def test_rejects_out_of_bounds(self, changes):
        with pytest.raises(InvalidParamsError):
            OperatorConfig(**changes)

    def test_rejects_non_int(self):
        with pytest.raises(TypeError):
            OperatorConfig(cushion_factor=30.0)
        with pytest.raises(TypeError):
            OperatorConfig(reserve_factor=True)

    def test_evolve_bumps_version(self):
        cfg = OperatorConfig().evolve(cushion_factor=5_000)
        assert cfg.cushion_factor == 5_000
        assert cfg.version == 2
        assert cfg.evolve(reserve_factor=2_000).version == 3

    def test_evolve_revalidates(self):
        with pytest.raises(InvalidParamsError):
            OperatorConfig().evolve(regen_threshold=50)

    def test_evolve_owns_version(self):
        with pytest.raises(InvalidParamsError):
            OperatorConfig().evolve(version=9)


class TestOtherConfigs:
    def test_range_defaults(self):
        cfg = RangeConfig()
        assert (cfg.threshold_factor, cfg.cushion_spread, cfg.wall_spread) == (100, 1_000, 2_000)

    def test_range_rejects_cushion_beyond_wall(self):
        with pytest.raises(InvalidParamsError):
            RangeConfig(cushion_spread=3_000, wall_spread=2_000)

    def test_price_window_divisible(self):
        with pytest.raises(InvalidParamsError):
            PriceConfig(observation_frequency=7 * HOUR, moving_average_duration=30 * DAY)

    def test_price_decimals_bounds(self):
        with pytest.raises(InvalidParamsError):
            PriceConfig(decimals=5)

    def test_heart(self):
        assert HeartConfig().frequency == 8 * HOUR
        with pytest.raises(InvalidParamsError):
            HeartConfig(frequency=0)
        with pytest.raises(TypeError):
            HeartConfig(active=1)
