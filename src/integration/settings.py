"""
Settings loading (YAML + environment overrides).

File layout (every section and key optional; omitted keys keep the dataclass
defaults):

    price:    {decimals, observation_frequency, moving_average_duration, ...}
    range:    {threshold_factor, cushion_spread, wall_spread}
    operator: {cushion_factor, cushion_duration, ..., regen_observe}
    heart:    {frequency, active}
    logging:  {level}

Environment:
    RBS_LOG_LEVEL        overrides logging.level
    RBS_HEART_FREQUENCY  overrides heart.frequency (seconds)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Type, TypeVar, Union

import yaml

from ..core.range_bound.config import HeartConfig, OperatorConfig, PriceConfig, RangeConfig
from ..core.range_bound.errors import InvalidParamsError

T = TypeVar("T")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
SECTIONS = ("price", "range", "operator", "heart", "logging")


@dataclass(frozen=True)
class Settings:
    price: PriceConfig = field(default_factory=PriceConfig)
    range: RangeConfig = field(default_factory=RangeConfig)
    operator: OperatorConfig = field(default_factory=OperatorConfig)
    heart: HeartConfig = field(default_factory=HeartConfig)
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.log_level not in LOG_LEVELS:
            raise InvalidParamsError(f"unknown log level: {self.log_level}")


def _require_mapping(obj: Any, *, name: str) -> Mapping[str, Any]:
    if obj is None:
        return {}
    if not isinstance(obj, Mapping):
        raise InvalidParamsError(f"{name} must be a mapping")
    return obj


def _build(cls: Type[T], raw: Mapping[str, Any], *, name: str) -> T:
    known = {f.name for f in fields(cls)} - {"version"}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise InvalidParamsError(f"unknown {name} keys: {unknown}")
    try:
        return cls(**raw)
    except TypeError as exc:
        raise InvalidParamsError(f"{name}: {exc}") from exc


def _int_env(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError:
        raise InvalidParamsError(f"{name} must be an integer: {raw!r}") from None


def _str_env(name: str) -> Optional[str]:
    raw = os.environ.get(name)
    if raw is None:
        return None
    v = raw.strip()
    return v or None


def settings_from_mapping(root: Mapping[str, Any]) -> Settings:
    root = _require_mapping(root, name="settings")
    unknown = sorted(set(root) - set(SECTIONS))
    if unknown:
        raise InvalidParamsError(f"unknown settings sections: {unknown}")

    log_section = _require_mapping(root.get("logging"), name="logging")
    unknown = sorted(set(log_section) - {"level"})
    if unknown:
        raise InvalidParamsError(f"unknown logging keys: {unknown}")

    return Settings(
        price=_build(PriceConfig, _require_mapping(root.get("price"), name="price"), name="price"),
        range=_build(RangeConfig, _require_mapping(root.get("range"), name="range"), name="range"),
        operator=_build(OperatorConfig, _require_mapping(root.get("operator"), name="operator"), name="operator"),
        heart=_build(HeartConfig, _require_mapping(root.get("heart"), name="heart"), name="heart"),
        log_level=str(log_section.get("level", "INFO")).upper(),
    )


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """Load settings from *path* (or defaults), then apply environment overrides."""
    root: Mapping[str, Any] = {}
    if path is not None:
        root = _require_mapping(yaml.safe_load(Path(path).read_text(encoding="utf-8")), name="settings")
    settings = settings_from_mapping(root)

    level = _str_env("RBS_LOG_LEVEL")
    if level is not None:
        settings = replace(settings, log_level=level.upper())
    frequency = _int_env("RBS_HEART_FREQUENCY")
    if frequency is not None:
        settings = replace(settings, heart=replace(settings.heart, frequency=frequency))
    return settings


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
