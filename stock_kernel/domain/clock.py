"""
Clock -- Deterministic time abstraction.

Responsibility:
    Provides an injectable clock so that report assembly never calls
    ``datetime.now()`` or ``time.monotonic()`` directly.  Wall time stamps the
    report header; monotonic time drives deadlines.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O (except SystemClock,
    which is the one sanctioned I/O boundary for time).

Failure modes:
    None.
"""

import time
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """
    Abstract clock interface.

    Contract:
        Services that need the current time receive a Clock instance via
        constructor injection.

    Guarantees:
        - ``now()`` returns a timezone-aware UTC ``datetime``.
        - ``monotonic()`` never goes backwards.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current wall-clock time."""
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Get a monotonic reading in seconds, for measuring elapsed time."""
        ...


class SystemClock(Clock):
    """Production clock that returns actual system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()


class DeterministicClock(Clock):
    """
    Test clock with controlled time.

    Contract:
        Used in tests for deterministic report headers and deadlines.

    Guarantees:
        - ``now()`` returns the same value on repeated calls until
          ``advance()`` or ``set_time()`` is called.
        - ``advance()`` moves wall time and monotonic time together.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = fixed_time or datetime(
            2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc
        )
        self._advance_seconds = 0.0

    def now(self) -> datetime:
        return self._fixed_time + timedelta(seconds=self._advance_seconds)

    def monotonic(self) -> float:
        return self._advance_seconds

    def set_time(self, time: datetime) -> None:
        """Set the wall clock to a specific time (monotonic is unaffected)."""
        self._fixed_time = time - timedelta(seconds=self._advance_seconds)

    def advance(self, seconds: float = 1) -> None:
        """Advance the clock by the specified seconds."""
        self._advance_seconds += seconds
