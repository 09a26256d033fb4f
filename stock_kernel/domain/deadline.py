"""
Deadline -- caller-supplied time budget and cancellation signal.

Responsibility:
    Lets the caller bound how long a report may take.  The assembler checks
    the deadline before each section and between ledger pages; once it has
    expired the remaining stages are skipped while finished sections are
    kept.

Architecture position:
    Kernel > Domain.  Reads time only through an injected ``Clock``.

Failure modes:
    - ``check()`` raises ``DeadlineExceededError`` when the budget is spent
      and ``ReportCancelledError`` after ``cancel()``.
"""

from __future__ import annotations

from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.exceptions import DeadlineExceededError, ReportCancelledError


class Deadline:
    """Monotonic time budget with explicit cancellation.

    ``budget_seconds=None`` means no time limit; the deadline can still be
    cancelled.
    """

    def __init__(self, budget_seconds: float | None = None, clock: Clock | None = None):
        if budget_seconds is not None and budget_seconds < 0:
            raise ValueError("budget_seconds cannot be negative")
        self._clock = clock or SystemClock()
        self._budget = budget_seconds
        self._started = self._clock.monotonic()
        self._cancelled = False

    @classmethod
    def unbounded(cls, clock: Clock | None = None) -> Deadline:
        return cls(None, clock)

    @property
    def budget_seconds(self) -> float | None:
        return self._budget

    @property
    def elapsed_seconds(self) -> float:
        return self._clock.monotonic() - self._started

    @property
    def remaining_seconds(self) -> float | None:
        if self._budget is None:
            return None
        return max(self._budget - self.elapsed_seconds, 0.0)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def expired(self) -> bool:
        if self._cancelled:
            return True
        return self._budget is not None and self.elapsed_seconds >= self._budget

    def cancel(self) -> None:
        """Signal that the caller no longer wants the report."""
        self._cancelled = True

    def check(self, stage: str) -> None:
        """Raise if the deadline has passed before ``stage`` starts."""
        if self._cancelled:
            raise ReportCancelledError(stage, self.elapsed_seconds)
        if self._budget is not None and self.elapsed_seconds >= self._budget:
            raise DeadlineExceededError(stage, self.elapsed_seconds, self._budget)
