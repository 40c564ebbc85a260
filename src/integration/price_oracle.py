"""
Price oracle component (imperative shell).

Reads the token and reserve feeds, validates them, and maintains the moving
average through the pure kernel in `src/core/range_bound/price.py`.
"""

from __future__ import annotations

import logging
from typing import Sequence

from ..core.oracle import combine_prices, require_valid
from ..core.range_bound import price as kernel
from ..core.range_bound.config import PriceConfig
from ..core.range_bound.errors import BadFeedError, InvalidParamsError, InvariantViolationError
from ..core.range_bound.invariants import check_price
from ..core.range_bound.math import MAX_TOKEN_DECIMALS
from ..core.range_bound.types import PriceState
from .authority import PRICE_ADMIN, PRICE_UPDATE, Policy
from .collaborators import PriceFeed
from .runtime import Host, Participant, transactional

logger = logging.getLogger(__name__)


class PriceOracle(Participant):
    def __init__(
        self,
        *,
        host: Host,
        policy: Policy,
        token_feed: PriceFeed,
        reserve_feed: PriceFeed,
        config: PriceConfig = PriceConfig(),
    ) -> None:
        self._host = host
        self._policy = policy
        self._token_feed = token_feed
        self._reserve_feed = reserve_feed
        self._token_feed_decimals = int(token_feed.decimals())
        self._reserve_feed_decimals = int(reserve_feed.decimals())
        for name, dec in (("token", self._token_feed_decimals), ("reserve", self._reserve_feed_decimals)):
            if not (0 <= dec <= MAX_TOKEN_DECIMALS):
                raise InvalidParamsError(f"{name} feed decimals out of range: {dec}")
        self._state = kernel.initial_price_state(config)
        host.register(self)

    def snapshot(self) -> PriceState:
        return self._state

    def restore(self, snapshot: PriceState) -> None:
        self._state = snapshot

    # -- Views ------------------------------------------------------------------

    @property
    def state(self) -> PriceState:
        return self._state

    @property
    def decimals(self) -> int:
        return self._state.decimals

    @property
    def is_initialized(self) -> bool:
        return self._state.initialized

    @property
    def observations(self) -> tuple[int, ...]:
        return self._state.observations

    def get_current_price(self) -> int:
        """Live token price in reserve from both feeds; raises `BadFeedError` on any bad reading."""
        now = self._host.now()
        s = self._state
        try:
            token_answer = require_valid(
                self._token_feed.latest_round_data(),
                now=now,
                update_threshold=s.token_feed_update_threshold,
                feed=self._token_feed.name,
            )
            reserve_answer = require_valid(
                self._reserve_feed.latest_round_data(),
                now=now,
                update_threshold=s.reserve_feed_update_threshold,
                feed=self._reserve_feed.name,
            )
        except BadFeedError as exc:
            logger.warning(f"Price feed rejected: {exc}")
            raise
        return combine_prices(
            token_answer, self._token_feed_decimals, reserve_answer, self._reserve_feed_decimals, s.decimals,
        )

    def get_last_price(self) -> int:
        return kernel.last_price(self._state)

    def get_moving_average(self) -> int:
        return kernel.moving_average(self._state)

    def get_target_price(self) -> int:
        return kernel.target_price(self._state)

    # -- Mutations --------------------------------------------------------------

    def _commit(self, state: PriceState) -> None:
        violations = check_price(state)
        if violations:
            raise InvariantViolationError(violations)
        self._state = state

    @transactional
    def update_moving_average(self, caller: str) -> int:
        """Record the current price as the newest observation; returns it."""
        self._policy.require(caller, PRICE_UPDATE)
        current = self.get_current_price()
        self._commit(kernel.record_observation(self._state, current, self._host.now()))
        logger.debug(
            f"Observation recorded: price={current} moving_average={kernel.moving_average(self._state)}"
        )
        return current

    @transactional
    def initialize(self, caller: str, observations: Sequence[int], last_observation_time: int) -> None:
        self._policy.require(caller, PRICE_ADMIN)
        self._commit(kernel.initialize(self._state, observations, last_observation_time, self._host.now()))
        logger.info(
            f"Moving average seeded: {self._state.num_observations} observations, "
            f"average={kernel.moving_average(self._state)}"
        )

    @transactional
    def change_moving_average_duration(self, caller: str, duration: int) -> None:
        self._policy.require(caller, PRICE_ADMIN)
        self._commit(kernel.change_moving_average_duration(self._state, duration))
        logger.info(f"Moving average duration set to {duration}s; re-seeding required")

    @transactional
    def change_observation_frequency(self, caller: str, frequency: int) -> None:
        self._policy.require(caller, PRICE_ADMIN)
        self._commit(kernel.change_observation_frequency(self._state, frequency))
        logger.info(f"Observation frequency set to {frequency}s; re-seeding required")

    @transactional
    def change_update_thresholds(self, caller: str, token_threshold: int, reserve_threshold: int) -> None:
        self._policy.require(caller, PRICE_ADMIN)
        self._commit(kernel.change_update_thresholds(self._state, token_threshold, reserve_threshold))

    @transactional
    def change_minimum_target_price(self, caller: str, minimum_target_price: int) -> None:
        self._policy.require(caller, PRICE_ADMIN)
        self._commit(kernel.change_minimum_target_price(self._state, minimum_target_price))
