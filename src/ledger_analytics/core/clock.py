"""Clock abstraction for calendar-dependent analytics.

WallClock: real wall-clock date (dashboard use)
FixedClock: pinned date (tests, reproducible reports)

Analytics never call date.today() directly; "current month" for goal
progress and "today" for the daily-loss check come from the clock.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol


class IClock(Protocol):
    """Clock interface used by all time-dependent code."""

    def today(self) -> date:
        """Current calendar day."""
        ...


class WallClock:
    """Real wall-clock date in the local timezone."""

    def today(self) -> date:
        return date.today()


class FixedClock:
    """Clock pinned to one calendar day."""

    def __init__(self, today: date) -> None:
        self._today = today

    def today(self) -> date:
        return self._today

    def set_today(self, today: date) -> None:
        self._today = today
