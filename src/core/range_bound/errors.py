"""Exception types for the range-bound operations kernels.

Every failure is typed so monitoring can tell a stale oracle apart from an
exhausted wall or a bad configuration. Nothing here degrades into a partial
state: callers that catch these errors see the pre-call state.
"""

from __future__ import annotations


class RangeBoundError(Exception):
    """Base class for all range-bound operation failures."""


# -- Input / configuration ---------------------------------------------------

class InvalidParamsError(RangeBoundError, ValueError):
    """Raised when a parameter or configuration value is out of bounds."""


class UnauthorizedError(RangeBoundError):
    """Raised when a caller lacks the capability for an operation."""

    def __init__(self, caller: str, capability: str) -> None:
        self.caller = caller
        self.capability = capability
        super().__init__(f"{caller!r} lacks capability {capability!r}")


# -- Oracle integrity --------------------------------------------------------

class BadFeedError(RangeBoundError):
    """Raised when a price feed reading is stale, non-positive or round-inconsistent."""

    def __init__(self, feed: str, reason: str = "") -> None:
        self.feed = feed
        self.reason = reason
        super().__init__(f"bad feed {feed}" + (f": {reason}" if reason else ""))


# -- Capacity / state --------------------------------------------------------

class NotInitializedError(RangeBoundError):
    """Raised when a component is used before it has been seeded/initialized."""


class AlreadyInitializedError(RangeBoundError):
    """Raised on a second one-time initialization."""


class InactiveError(RangeBoundError):
    """Raised when the operator is switched off."""


class WallDownError(RangeBoundError):
    """Raised when swapping against a wall that is not active."""


class InsufficientCapacityError(RangeBoundError):
    def __init__(self, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        super().__init__(f"amount out {requested} exceeds capacity {available}")


class AmountLessThanMinimumError(RangeBoundError):
    def __init__(self, amount_out: int, minimum: int) -> None:
        self.amount_out = amount_out
        self.minimum = minimum
        super().__init__(f"amount out {amount_out} below minimum {minimum}")


class ReentrancyError(RangeBoundError):
    """Raised when a guarded entrypoint is re-entered before it finished."""


class BeatStoppedError(RangeBoundError):
    """Raised when the heartbeat has been switched off."""


class OutOfCycleError(RangeBoundError):
    """Raised when a heartbeat arrives before the next beat is due."""


# -- Invariants ----------------------------------------------------------------

class InvariantViolationError(RangeBoundError):
    """Raised when a post-state violates one or more invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
