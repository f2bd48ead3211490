"""Clock abstraction for open-ended cycles and details."""

from abc import ABC, abstractmethod
from datetime import date as Date


class Clock(ABC):
    """Source of the current date."""

    @abstractmethod
    def today(self) -> Date:
        """Return the current date."""


class SystemClock(Clock):
    """Wall-clock date."""

    def today(self) -> Date:
        return Date.today()


class FixedClock(Clock):
    """
    Clock pinned to one date.

    Example:
        clock = FixedClock(date(2025, 3, 31))
        calculator = CycleMetricsCalculator(clock=clock)
    """

    def __init__(self, fixed_date: Date):
        self.fixed_date = fixed_date

    def today(self) -> Date:
        return self.fixed_date

    def __repr__(self) -> str:
        return f"FixedClock({self.fixed_date.isoformat()})"


SYSTEM_CLOCK = SystemClock()
