"""
Heartbeat trigger.

A keeper calls `beat()` once per period; the heart then records a price
observation and runs the operator, both under its own identity and inside one
transaction: a bad feed or a failing operate leaves nothing behind, including
the beat itself.
"""

from __future__ import annotations

import logging

from ..core.range_bound.config import HeartConfig
from ..core.range_bound.errors import BeatStoppedError, InvalidParamsError, OutOfCycleError
from ..core.range_bound.types import OperateReport
from .authority import HEART_ADMIN, Policy
from .operator import Operator
from .price_oracle import PriceOracle
from .runtime import Host, Participant, transactional

logger = logging.getLogger(__name__)


class Heart(Participant):
    def __init__(
        self,
        *,
        host: Host,
        policy: Policy,
        price: PriceOracle,
        operator: Operator,
        config: HeartConfig = HeartConfig(),
        address: str = "heart",
    ) -> None:
        self.address = address
        self._host = host
        self._policy = policy
        self._price = price
        self._operator = operator
        self._frequency = config.frequency
        self._active = config.active
        self._last_beat = host.now()
        host.register(self)

    def snapshot(self) -> tuple[int, bool, int]:
        return self._last_beat, self._active, self._frequency

    def restore(self, snapshot: tuple[int, bool, int]) -> None:
        self._last_beat, self._active, self._frequency = snapshot

    @property
    def last_beat(self) -> int:
        return self._last_beat

    @property
    def active(self) -> bool:
        return self._active

    @property
    def frequency(self) -> int:
        return self._frequency

    def next_beat(self) -> int:
        return self._last_beat + self._frequency

    @transactional
    def beat(self, caller: str) -> OperateReport:
        if not self._active:
            raise BeatStoppedError("heart is not beating")
        now = self._host.now()
        if now < self.next_beat():
            raise OutOfCycleError(f"next beat at {self.next_beat()}, now {now}")

        self._price.update_moving_average(self.address)
        report = self._operator.operate(self.address)

        # Stay on the original cadence even when beats arrive late.
        self._last_beat = now - ((now - self._last_beat) % self._frequency)
        logger.info(f"Beat by {caller} at {now}; last_beat={self._last_beat}")
        return report

    @transactional
    def reset_beat(self, caller: str) -> None:
        """Make the next beat callable immediately."""
        self._policy.require(caller, HEART_ADMIN)
        self._last_beat = self._host.now() - self._frequency

    @transactional
    def toggle_beat(self, caller: str) -> bool:
        self._policy.require(caller, HEART_ADMIN)
        self._active = not self._active
        logger.info(f"Heart {'started' if self._active else 'stopped'}")
        return self._active

    @transactional
    def set_frequency(self, caller: str, frequency: int) -> None:
        self._policy.require(caller, HEART_ADMIN)
        if not isinstance(frequency, int) or isinstance(frequency, bool) or frequency <= 0:
            raise InvalidParamsError(f"frequency must be a positive int: {frequency}")
        self._frequency = frequency
