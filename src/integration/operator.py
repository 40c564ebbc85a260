"""
Range operator (imperative shell).

Ties the price oracle, the range kernel and the regen tracker together:
- `operate()` runs once per heartbeat (re-centre band, observe, reconcile
  auctions, regenerate, open/close cushions);
- `swap()` fills users against a wall at the wall price.

All state lives in frozen kernel types; this class only sequences transitions
and talks to collaborators. Every public mutation runs inside the host's
transaction and is checked against the range/regen invariants before it
returns, so a failing call leaves operator, ledger and auctions untouched.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from ..core.range_bound import range as range_kernel
from ..core.range_bound.config import OperatorConfig, RangeConfig
from ..core.range_bound.cushion import cushion_capacity, cushion_market_params
from ..core.range_bound.errors import (
    AlreadyInitializedError,
    AmountLessThanMinimumError,
    InactiveError,
    InsufficientCapacityError,
    InvalidParamsError,
    InvariantViolationError,
    NotInitializedError,
    WallDownError,
)
from ..core.range_bound.invariants import check_range, check_regen
from ..core.range_bound.math import (
    NO_MARKET,
    full_capacity_high,
    full_capacity_low,
    reserve_to_token,
    token_to_reserve,
)
from ..core.range_bound.regen import eligible_for_regen, is_favorable, new_regen_status, observe
from ..core.range_bound.types import Asset, OperateReport, RangeState, RegenStatus, Side, SideMode
from .authority import OPERATOR_ADMIN, OPERATOR_EMERGENCY, OPERATOR_OPERATE, OPERATOR_POLICY, Policy
from .collaborators import AuctionCallback, Auctioneer, Minter, Treasury
from .price_oracle import PriceOracle
from .runtime import Host, Participant, nonreentrant, transactional

logger = logging.getLogger(__name__)

SIDES = (Side.LOW, Side.HIGH)


class Operator(Participant):
    def __init__(
        self,
        *,
        host: Host,
        policy: Policy,
        price: PriceOracle,
        auctioneer: Auctioneer,
        callback: AuctionCallback,
        treasury: Treasury,
        minter: Minter,
        token: Asset,
        reserve: Asset,
        config: OperatorConfig = OperatorConfig(),
        range_config: RangeConfig = RangeConfig(),
        address: str = "operator",
    ) -> None:
        if token.address == reserve.address:
            raise InvalidParamsError("token and reserve must be distinct assets")
        self.address = address
        self._host = host
        self._policy = policy
        self._price = price
        self._auctioneer = auctioneer
        self._callback = callback
        self._treasury = treasury
        self._minter = minter
        self._token = token
        self._reserve = reserve
        self._config = config
        self._range = range_kernel.initial_range_state(range_config)
        now = host.now()
        self._status: Dict[Side, RegenStatus] = {
            side: new_regen_status(config.regen_observe, now) for side in SIDES
        }
        self._active = False
        self._initialized = False
        self._entered = False
        host.register(self)

    # -- Participant ------------------------------------------------------------

    def snapshot(self) -> tuple:
        return (
            self._range,
            dict(self._status),
            self._config,
            self._auctioneer,
            self._callback,
            self._active,
            self._initialized,
        )

    def restore(self, snapshot: tuple) -> None:
        (
            self._range,
            status,
            self._config,
            self._auctioneer,
            self._callback,
            self._active,
            self._initialized,
        ) = snapshot
        self._status = dict(status)

    # -- Views ------------------------------------------------------------------

    @property
    def range(self) -> RangeState:
        return self._range

    @property
    def config(self) -> OperatorConfig:
        return self._config

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def auctioneer(self) -> Auctioneer:
        return self._auctioneer

    @property
    def callback(self) -> AuctionCallback:
        return self._callback

    def status(self, side: Side) -> RegenStatus:
        return self._status[side]

    def side_mode(self, side: Side) -> SideMode:
        if self._range.side(side).has_market:
            return SideMode.CUSHION_OPEN
        return SideMode.WALL_ONLY

    def full_capacity(self, side: Side) -> int:
        """Capacity a side regenerates to, from current treasury reserves."""
        balance = self._treasury.get_reserve_balance(self._reserve.address)
        if not side.is_high:
            return full_capacity_low(balance, self._config.reserve_factor)
        high = self._range.high
        return full_capacity_high(
            balance,
            self._config.reserve_factor,
            high.wall_price,
            high.wall_spread,
            high.cushion_spread,
            token_decimals=self._token.decimals,
            reserve_decimals=self._reserve.decimals,
            oracle_decimals=self._price.decimals,
        )

    def get_amount_out(self, token_in: str, amount_in: int) -> int:
        """Wall fill for *amount_in* of *token_in*; raises if the wall cannot cover it."""
        side = self._side_for(token_in)
        amount_out = self._amount_out(side, amount_in)
        capacity = self._range.side(side).capacity
        if amount_out > capacity:
            raise InsufficientCapacityError(amount_out, capacity)
        return amount_out

    def _side_for(self, token_in: str) -> Side:
        if token_in == self._token.address:
            return Side.LOW
        if token_in == self._reserve.address:
            return Side.HIGH
        raise InvalidParamsError(f"unsupported token: {token_in}")

    def _amount_out(self, side: Side, amount_in: int) -> int:
        if amount_in <= 0:
            raise InvalidParamsError(f"amount_in must be positive: {amount_in}")
        price = self._range.side(side).wall_price
        decimals = (self._token.decimals, self._reserve.decimals, self._price.decimals)
        if side.is_high:
            return reserve_to_token(amount_in, price, *decimals)
        return token_to_reserve(amount_in, price, *decimals)

    # -- Guards -----------------------------------------------------------------

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise NotInitializedError("operator has not been initialized")

    def _require_active(self) -> None:
        if not self._active:
            raise InactiveError("operator is not active")

    def _check_invariants(self) -> None:
        violations = check_range(self._range)
        for side in SIDES:
            violations.extend(check_regen(self._status[side], side))
        if violations:
            raise InvariantViolationError(violations)

    # -- Heartbeat --------------------------------------------------------------

    @transactional
    def operate(self, caller: str) -> OperateReport:
        self._policy.require(caller, OPERATOR_OPERATE)
        self._require_initialized()
        self._require_active()
        now = self._host.now()

        target = self._price.get_target_price()
        self._range = range_kernel.update_prices(self._range, target)

        last = self._price.get_last_price()
        average = self._price.get_moving_average()
        for side in SIDES:
            self._status[side] = observe(self._status[side], is_favorable(side, last, average))
        logger.debug(f"Heartbeat prices: target={target} last={last} moving_average={average}")

        consumed: Dict[Side, int] = {}
        walls_down: List[Side] = []
        closed: List[Side] = []
        for side in SIDES:
            was_active = self._range.side(side).active
            had_market = self._range.side(side).has_market
            consumed[side] = self._reconcile(side, now)
            if had_market and not self._range.side(side).has_market:
                closed.append(side)
            if was_active and not self._range.side(side).active:
                walls_down.append(side)

        regenerated: List[Side] = []
        for side in SIDES:
            if eligible_for_regen(
                self._status[side],
                now=now,
                regen_wait=self._config.regen_wait,
                regen_threshold=self._config.regen_threshold,
            ):
                if self._range.side(side).has_market:
                    closed.append(side)
                self._regenerate(side, now)
                regenerated.append(side)

        opened: List[Side] = []
        for side in SIDES:
            action = self._adjust_cushion(side, last, now)
            if action == "opened":
                opened.append(side)
            elif action == "closed":
                closed.append(side)

        self._check_invariants()
        return OperateReport(
            target_price=target,
            last_price=last,
            moving_average=average,
            consumed=consumed,
            regenerated=tuple(regenerated),
            walls_down=tuple(walls_down),
            cushions_opened=tuple(opened),
            cushions_closed=tuple(closed),
        )

    def _reconcile(self, side: Side, now: int) -> int:
        """Charge a side for what its cushion sold since the last snapshot.

        A concluded market gets its final charge here and its record cleared,
        so a market is never charged twice and never skipped.
        """
        current = self._range.side(side)
        if not current.has_market:
            return 0
        market = current.market
        live = self._auctioneer.is_live(market)
        if live:
            remaining = self._auctioneer.current_capacity(market)
        else:
            # a closed market reports zero capacity; only real sales count
            remaining = self._auctioneer.unsold_capacity(market)
        consumed = max(current.last_market_capacity - remaining, 0)
        capacity = current.capacity - consumed
        if capacity < 0:
            logger.warning(
                f"{side.value} side auction consumed {consumed} against capacity {current.capacity}; "
                "saturating at zero"
            )
            capacity = 0
        self._range = range_kernel.update_capacity(
            self._range, side, capacity, remaining if live else 0, now=now,
        )
        if consumed:
            logger.info(f"{side.value} cushion market {market} consumed {consumed}; capacity now {capacity}")
        if current.active and not self._range.side(side).active:
            logger.info(f"{side.value} wall down: capacity {capacity} below threshold {current.threshold}")
        if not live or not self._range.side(side).active:
            self._close_market(side)
        return consumed

    def _close_market(self, side: Side) -> None:
        market = self._range.side(side).market
        if self._auctioneer.is_live(market):
            self._auctioneer.close_market(market)
        self._range = range_kernel.update_market(self._range, side, NO_MARKET, 0)
        logger.info(f"{side.value} cushion down (market {market})")

    def _adjust_cushion(self, side: Side, price: int, now: int) -> Optional[str]:
        current = self._range.side(side)
        if not current.active:
            return None
        if side.is_high:
            inside = current.cushion_price < price < current.wall_price
            outside = price < current.cushion_price or price > current.wall_price
        else:
            inside = current.wall_price < price < current.cushion_price
            outside = price > current.cushion_price or price < current.wall_price
        if current.has_market:
            if outside:
                self._deactivate(side, now)
                return "closed"
            return None
        if inside and self._activate(side, now):
            return "opened"
        return None

    def _activate(self, side: Side, now: int) -> bool:
        current = self._range.side(side)
        if cushion_capacity(current, self._config.cushion_factor) == 0:
            logger.info(f"{side.value} cushion skipped: no capacity")
            return False
        params = cushion_market_params(
            side,
            current,
            token=self._token,
            reserve=self._reserve,
            oracle_decimals=self._price.decimals,
            config=self._config,
            callback=self._callback.address,
            now=now,
        )
        market = self._auctioneer.create_market(params)
        self._callback.whitelist(self._auctioneer.get_teller(), market)
        self._range = range_kernel.update_market(self._range, side, market, params.capacity)
        logger.info(
            f"{side.value} cushion up: market={market} capacity={params.capacity} "
            f"initial={params.formatted_initial_price} minimum={params.formatted_minimum_price}"
        )
        return True

    def _deactivate(self, side: Side, now: int) -> None:
        """Close a side's cushion, charging it for sales first. No-op without one."""
        if not self._range.side(side).has_market:
            return
        self._reconcile(side, now)
        if self._range.side(side).has_market:
            self._close_market(side)

    def _regenerate(self, side: Side, now: int) -> None:
        self._deactivate(side, now)
        capacity = self.full_capacity(side)
        self._range = range_kernel.regenerate(self._range, side, capacity, now=now)
        self._status[side] = new_regen_status(self._config.regen_observe, now)
        logger.info(f"{side.value} wall regenerated: capacity={capacity}")

    # -- Swaps ------------------------------------------------------------------

    @nonreentrant
    @transactional
    def swap(self, caller: str, token_in: str, amount_in: int, min_amount_out: int = 0) -> int:
        """Sell *amount_in* of *token_in* into its wall; returns the amount paid out."""
        self._require_active()
        side = self._side_for(token_in)
        amount_out = self._amount_out(side, amount_in)
        current = self._range.side(side)
        if not current.active:
            raise WallDownError(f"{side.value} wall is down")
        if amount_out > current.capacity:
            raise InsufficientCapacityError(amount_out, current.capacity)
        if amount_out < min_amount_out:
            raise AmountLessThanMinimumError(amount_out, min_amount_out)

        now = self._host.now()
        self._range = range_kernel.update_capacity(self._range, side, current.capacity - amount_out, now=now)
        if not self._range.side(side).active:
            logger.info(f"{side.value} wall down after swap: capacity {self._range.side(side).capacity}")
            self._deactivate(side, now)
        self._check_invariants()

        if side.is_high:
            self._treasury.deposit_reserves(caller, self._reserve.address, amount_in)
            self._minter.mint_to(caller, amount_out)
        else:
            self._minter.burn_from(caller, amount_in)
            self._treasury.withdraw_reserves(caller, self._reserve.address, amount_out)
        logger.info(f"Swap: {caller} sold {amount_in} {token_in} for {amount_out} at the {side.value} wall")
        return amount_out

    # -- Admin ------------------------------------------------------------------

    @transactional
    def initialize(self, caller: str) -> None:
        self._policy.require(caller, OPERATOR_ADMIN)
        if self._initialized:
            raise AlreadyInitializedError("operator already initialized")
        now = self._host.now()
        self._range = range_kernel.update_prices(self._range, self._price.get_target_price())
        for side in SIDES:
            self._regenerate(side, now)
        self._active = True
        self._initialized = True
        self._check_invariants()
        logger.info("Operator initialized and active")

    @transactional
    def regenerate(self, caller: str, side: Side) -> None:
        self._policy.require(caller, OPERATOR_ADMIN)
        self._require_initialized()
        self._regenerate(side, self._host.now())
        self._check_invariants()

    @transactional
    def activate(self, caller: str) -> None:
        self._policy.require(caller, OPERATOR_EMERGENCY)
        self._require_initialized()
        self._active = True
        logger.info("Operator activated")

    @nonreentrant
    @transactional
    def deactivate(self, caller: str) -> None:
        self._policy.require(caller, OPERATOR_EMERGENCY)
        now = self._host.now()
        self._active = False
        for side in SIDES:
            self._deactivate(side, now)
        self._check_invariants()
        logger.info("Operator deactivated")

    @nonreentrant
    @transactional
    def deactivate_cushion(self, caller: str, side: Side) -> None:
        self._policy.require(caller, OPERATOR_EMERGENCY)
        self._deactivate(side, self._host.now())
        self._check_invariants()

    @transactional
    def set_spreads(self, caller: str, cushion_spread: int, wall_spread: int, side: Optional[Side] = None) -> None:
        self._policy.require(caller, OPERATOR_POLICY)
        self._range = range_kernel.set_spreads(self._range, cushion_spread, wall_spread, side)
        if self._initialized:
            self._range = range_kernel.update_prices(self._range, self._price.get_target_price())
        self._check_invariants()

    @transactional
    def set_threshold_factor(self, caller: str, threshold_factor: int) -> None:
        self._policy.require(caller, OPERATOR_POLICY)
        self._range = range_kernel.set_threshold_factor(self._range, threshold_factor)
        self._check_invariants()
        logger.info(f"Threshold factor set to {threshold_factor}")

    def _evolve(self, caller: str, **changes: int) -> None:
        self._policy.require(caller, OPERATOR_POLICY)
        self._config = self._config.evolve(**changes)
        logger.info(f"Operator config v{self._config.version}: {changes}")

    @transactional
    def set_cushion_factor(self, caller: str, cushion_factor: int) -> None:
        self._evolve(caller, cushion_factor=cushion_factor)

    @transactional
    def set_cushion_params(self, caller: str, duration: int, debt_buffer: int, deposit_interval: int) -> None:
        self._evolve(
            caller,
            cushion_duration=duration,
            cushion_debt_buffer=debt_buffer,
            cushion_deposit_interval=deposit_interval,
        )

    @transactional
    def set_reserve_factor(self, caller: str, reserve_factor: int) -> None:
        self._evolve(caller, reserve_factor=reserve_factor)

    @transactional
    def set_regen_params(self, caller: str, wait: int, threshold: int, observe_window: int) -> None:
        """Change regen parameters and clear both observation windows."""
        self._evolve(caller, regen_wait=wait, regen_threshold=threshold, regen_observe=observe_window)
        for side in SIDES:
            self._status[side] = replace(
                new_regen_status(observe_window, self._host.now()),
                last_regen=self._status[side].last_regen,
            )
        self._check_invariants()

    @transactional
    def set_bond_contracts(self, caller: str, auctioneer: Auctioneer, callback: AuctionCallback) -> None:
        self._policy.require(caller, OPERATOR_POLICY)
        if auctioneer is None or callback is None:
            raise InvalidParamsError("auctioneer and callback are required")
        open_sides: Tuple[Side, ...] = tuple(s for s in SIDES if self._range.side(s).has_market)
        if open_sides:
            raise InvalidParamsError(
                f"close open cushions before replacing bond contracts: {[s.value for s in open_sides]}"
            )
        self._auctioneer = auctioneer
        self._callback = callback
        logger.info("Bond contracts replaced")
