"""
Project Risk Engine - Clock.

============================================================
RESPONSIBILITY
============================================================
Injectable time source for the engine.

Activity scoring and completion-date projections depend on
"now". Reading it through a Clock keeps scoring
deterministic in tests and reproducible in batch recompute.

- SystemClock: real UTC time (production default)
- FixedClock: frozen, manually advanced time (tests, replay)

============================================================
"""

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional


class Clock(ABC):
    """Abstract interface for the engine's time source."""

    @abstractmethod
    def now(self) -> datetime:
        """Get current UTC datetime."""
        pass


class SystemClock(Clock):
    """Production clock using actual system time, in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """
    Frozen clock for deterministic scoring.

    Time only moves when ``set_time`` or ``advance`` is called.
    """

    def __init__(self, initial_time: Optional[datetime] = None):
        """
        Initialize fixed clock.

        Args:
            initial_time: Frozen time (defaults to current UTC)
        """
        self._time = _as_utc(initial_time or datetime.now(timezone.utc))
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._time

    def set_time(self, new_time: datetime) -> None:
        """Set the current time."""
        with self._lock:
            self._time = _as_utc(new_time)

    def advance(self, seconds: float = 0, **kwargs) -> None:
        """
        Advance time by the specified amount.

        Args:
            seconds: Number of seconds to advance
            **kwargs: Passed to timedelta (hours, minutes, days, etc.)
        """
        with self._lock:
            self._time = self._time + timedelta(seconds=seconds, **kwargs)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


_default_clock: Clock = SystemClock()


def get_default_clock() -> Clock:
    """Clock used when none is injected."""
    return _default_clock
