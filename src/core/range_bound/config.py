"""Validated configuration objects for range-bound operations.

Configs are frozen and checked in ``__post_init__``: a config that exists is a
config that can be operated. Admin changes go through `OperatorConfig.evolve`,
which re-validates and bumps `version`.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any

from .errors import InvalidParamsError
from .math import DAY, HOUR, MIN_DEBT_BUFFER, ONE_HUNDRED_PERCENT, ONE_PERCENT


def _require_ints(obj: Any) -> None:
    for f in fields(obj):
        val = getattr(obj, f.name)
        if f.type in ("bool", bool):
            if not isinstance(val, bool):
                raise TypeError(f"{f.name} must be a bool")
            continue
        if not isinstance(val, int) or isinstance(val, bool):
            raise TypeError(f"{f.name} must be an int")


def _require_percent(name: str, value: int) -> None:
    if not (ONE_PERCENT <= value <= ONE_HUNDRED_PERCENT):
        raise InvalidParamsError(f"{name} must be in [{ONE_PERCENT}, {ONE_HUNDRED_PERCENT}]: {value}")


def validate_spreads(cushion_spread: int, wall_spread: int) -> None:
    """1% <= cushion <= wall < 100% (a 100% wall would price the low side at zero)."""
    if not (ONE_PERCENT <= cushion_spread <= wall_spread < ONE_HUNDRED_PERCENT):
        raise InvalidParamsError(
            f"spreads must satisfy {ONE_PERCENT} <= cushion={cushion_spread} "
            f"<= wall={wall_spread} < {ONE_HUNDRED_PERCENT}"
        )


def validate_threshold_factor(threshold_factor: int) -> None:
    _require_percent("threshold_factor", threshold_factor)


def validate_regen_params(regen_wait: int, regen_threshold: int, regen_observe: int) -> None:
    if regen_wait < HOUR:
        raise InvalidParamsError(f"regen_wait must be at least one hour: {regen_wait}")
    if regen_observe <= 0 or regen_threshold <= 0:
        raise InvalidParamsError("regen_threshold and regen_observe must be positive")
    if regen_threshold > regen_observe:
        raise InvalidParamsError(
            f"regen_threshold ({regen_threshold}) cannot exceed regen_observe ({regen_observe})"
        )


@dataclass(frozen=True)
class OperatorConfig:
    """Operator parameters. Defaults are a conservative production profile."""

    cushion_factor: int = 3_000            # bps of side capacity offered per cushion
    cushion_duration: int = DAY            # seconds a cushion auction stays open
    cushion_debt_buffer: int = 100_000     # 3-decimal percent
    cushion_deposit_interval: int = 4 * HOUR
    reserve_factor: int = 1_000            # bps of treasury reserves usable as wall capacity
    regen_wait: int = 6 * DAY
    regen_threshold: int = 18
    regen_observe: int = 21
    version: int = 1

    def __post_init__(self) -> None:
        _require_ints(self)
        _require_percent("cushion_factor", self.cushion_factor)
        if not (DAY <= self.cushion_duration <= 7 * DAY):
            raise InvalidParamsError(f"cushion_duration must be in [1 day, 7 days]: {self.cushion_duration}")
        if self.cushion_debt_buffer < MIN_DEBT_BUFFER:
            raise InvalidParamsError(
                f"cushion_debt_buffer must be at least {MIN_DEBT_BUFFER}: {self.cushion_debt_buffer}"
            )
        if not (HOUR <= self.cushion_deposit_interval <= self.cushion_duration):
            raise InvalidParamsError(
                "cushion_deposit_interval must be in [1 hour, cushion_duration]: "
                f"{self.cushion_deposit_interval}"
            )
        _require_percent("reserve_factor", self.reserve_factor)
        validate_regen_params(self.regen_wait, self.regen_threshold, self.regen_observe)
        if self.version < 1:
            raise InvalidParamsError(f"version must be positive: {self.version}")

    def evolve(self, **changes: int) -> OperatorConfig:
        """Return a re-validated copy with *changes* applied and the version bumped."""
        if "version" in changes:
            raise InvalidParamsError("version is managed by evolve()")
        return replace(self, version=self.version + 1, **changes)


@dataclass(frozen=True)
class RangeConfig:
    threshold_factor: int = 100
    cushion_spread: int = 1_000
    wall_spread: int = 2_000

    def __post_init__(self) -> None:
        _require_ints(self)
        validate_threshold_factor(self.threshold_factor)
        validate_spreads(self.cushion_spread, self.wall_spread)


def validate_observation_window(moving_average_duration: int, observation_frequency: int) -> None:
    if observation_frequency <= 0 or moving_average_duration <= 0:
        raise InvalidParamsError("moving_average_duration and observation_frequency must be positive")
    if moving_average_duration % observation_frequency != 0:
        raise InvalidParamsError(
            f"moving_average_duration ({moving_average_duration}) must be divisible by "
            f"observation_frequency ({observation_frequency})"
        )


@dataclass(frozen=True)
class PriceConfig:
    decimals: int = 18
    observation_frequency: int = 8 * HOUR
    moving_average_duration: int = 30 * DAY
    token_feed_update_threshold: int = DAY
    reserve_feed_update_threshold: int = DAY
    minimum_target_price: int = 0

    def __post_init__(self) -> None:
        _require_ints(self)
        if not (6 <= self.decimals <= 38):
            raise InvalidParamsError(f"decimals must be in [6, 38]: {self.decimals}")
        validate_observation_window(self.moving_average_duration, self.observation_frequency)
        if self.token_feed_update_threshold <= 0 or self.reserve_feed_update_threshold <= 0:
            raise InvalidParamsError("feed update thresholds must be positive")
        if self.minimum_target_price < 0:
            raise InvalidParamsError("minimum_target_price must be non-negative")


@dataclass(frozen=True)
class HeartConfig:
    frequency: int = 8 * HOUR
    active: bool = True

    def __post_init__(self) -> None:
        _require_ints(self)
        if self.frequency <= 0:
            raise InvalidParamsError(f"frequency must be positive: {self.frequency}")
