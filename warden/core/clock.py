"""Time sources.

Every component that compares against the current time takes a Clock, so
tests can pin time instead of patching the time module.
"""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Abstract source of the current time."""

    @abstractmethod
    def now(self) -> float:
        """Return the current time in seconds since the epoch."""


class SystemClock(Clock):
    """Clock backed by the system wall clock."""

    def now(self) -> float:
        return time.time()


class FixedClock(Clock):
    """Clock that only moves when told to.

    Example:
        >>> clock = FixedClock(1_700_000_000)
        >>> clock.advance(30)
        >>> clock.now()
        1700000030.0
    """

    def __init__(self, timestamp: float = 0.0):
        self._timestamp = float(timestamp)
        self._lock = threading.Lock()

    def now(self) -> float:
        with self._lock:
            return self._timestamp

    def set(self, timestamp: float) -> None:
        with self._lock:
            self._timestamp = float(timestamp)

    def advance(self, seconds: float) -> None:
        with self._lock:
            self._timestamp += seconds
