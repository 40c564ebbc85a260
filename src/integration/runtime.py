"""
In-process host runtime (imperative shell).

Components in this package behave like contracts on a single host: every
public state-changing call runs to completion or leaves no trace. The host
provides that by snapshotting every registered participant before a call and
restoring all of them if the call raises.

Participants implement `snapshot()` / `restore(snapshot)`. Snapshots must be
cheap; components keep their state in frozen dataclasses so a snapshot is a
handful of references.
"""

from __future__ import annotations

import functools
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Tuple, TypeVar

from ..core.range_bound.errors import InvalidParamsError, ReentrancyError

F = TypeVar("F", bound=Callable[..., Any])


class Participant:
    """Interface for state that must roll back with a failed call."""

    def snapshot(self) -> Any:
        raise NotImplementedError

    def restore(self, snapshot: Any) -> None:
        raise NotImplementedError


class SystemClock:
    """Wall-clock seconds."""

    def __call__(self) -> int:
        return int(time.time())


class ManualClock:
    """Deterministic clock for tests and simulations."""

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise InvalidParamsError(f"clock start must be non-negative: {start}")
        self._now = int(start)

    def __call__(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise InvalidParamsError(f"cannot move clock backwards: {seconds}")
        self._now += int(seconds)
        return self._now

    def set(self, timestamp: int) -> None:
        if timestamp < self._now:
            raise InvalidParamsError(f"cannot move clock backwards: {timestamp} < {self._now}")
        self._now = int(timestamp)


class Host:
    """Clock + transaction boundary shared by all components of one deployment."""

    def __init__(self, clock: Optional[Callable[[], int]] = None) -> None:
        self._clock = clock if clock is not None else SystemClock()
        self._participants: List[Participant] = []
        # Re-entrant so nested component calls (heart -> oracle -> operator) join the caller's lock.
        self._lock = threading.RLock()

    def now(self) -> int:
        return int(self._clock())

    def register(self, participant: Participant) -> None:
        with self._lock:
            if not any(p is participant for p in self._participants):
                self._participants.append(participant)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Run a block all-or-nothing across every registered participant.

        Nested blocks take their own savepoint, so a caller that catches a
        nested failure still sees the nested call fully undone.
        """
        with self._lock:
            snapshots: List[Tuple[Participant, Any]] = [(p, p.snapshot()) for p in self._participants]
            try:
                yield
            except BaseException:
                for participant, snap in reversed(snapshots):
                    participant.restore(snap)
                raise


def transactional(method: F) -> F:
    """Run a component method inside its host's `atomic()` block."""

    @functools.wraps(method)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        with self._host.atomic():
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


def nonreentrant(method: F) -> F:
    """Reject re-entry into any guarded method of the same component.

    The flag is only read and written under the host lock, so callers on other
    threads wait their turn instead of tripping the guard.
    """

    @functools.wraps(method)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        with self._host._lock:
            if getattr(self, "_entered", False):
                raise ReentrancyError(f"{type(self).__name__}.{method.__name__} re-entered")
            self._entered = True
            try:
                return method(self, *args, **kwargs)
            finally:
                self._entered = False

    return wrapper  # type: ignore[return-value]
