"""
Convivencia Business Calendar

Business-day arithmetic for statutory deadlines.

A business day is any calendar day that is not a Saturday or a Sunday.
No public-holiday calendar is modeled: deadlines must be reproducible from
the open date alone, so the weekend rule is the only input.

All arithmetic is local-calendar based; no timezone adjustment is made.
When a datetime is passed its time of day is carried through unchanged.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Protocol, TypeVar, runtime_checkable

from ..exceptions import DeadlineCalculationError

# date or datetime; datetime is a subclass of date
D = TypeVar("D", bound=date)

SATURDAY = 5
SUNDAY = 6


@runtime_checkable
class BusinessCalendar(Protocol):
    """
    Protocol for business calendars.

    Implementations decide which days count toward a business-day deadline.
    """

    def is_business_day(self, d: date) -> bool:
        """
        Check if a date is a business day.

        Args:
            d: Date to check

        Returns:
            True if the date counts toward business-day deadlines
        """
        ...

    def add_business_days(self, start: D, days: int) -> D:
        """
        Add business days to a date.

        Args:
            start: Starting date (or datetime)
            days: Number of business days to add (non-negative)

        Returns:
            The resulting date
        """
        ...


@dataclass(frozen=True)
class WeekendCalendar:
    """
    Calendar where only weekend days are non-business days.

    The weekend is fixed to Saturday and Sunday for Chilean school
    deadlines; the field exists so tests can state it explicitly.
    """

    # Weekend days (0=Monday, 6=Sunday)
    weekend_days: frozenset[int] = field(
        default_factory=lambda: frozenset({SATURDAY, SUNDAY})
    )

    def is_weekend(self, d: date) -> bool:
        """Check if a date is a weekend day."""
        return d.weekday() in self.weekend_days

    def is_business_day(self, d: date) -> bool:
        """A business day is any day that is not a weekend day."""
        return not self.is_weekend(d)

    def add_business_days(self, start: D, days: int) -> D:
        """
        Add business days to a date.

        Advances one calendar day at a time and counts only business days
        until the count reaches ``days``. ``add_business_days(d, 0)`` is
        ``d`` itself, even when ``d`` falls on a weekend.

        Args:
            start: Starting date or datetime
            days: Number of business days to add

        Returns:
            The resulting date (same type as ``start``)

        Raises:
            DeadlineCalculationError: If days is negative
        """
        if days < 0:
            raise DeadlineCalculationError(
                message=f"Business day count must be non-negative, got {days}",
                details={"start": start.isoformat(), "days": days},
            )

        current = start
        remaining = days
        while remaining > 0:
            current += timedelta(days=1)
            if self.is_business_day(current):
                remaining -= 1

        return current

    def business_days_between(self, start: date, end: date) -> int:
        """
        Count business days between two dates.

        Args:
            start: Start date (exclusive)
            end: End date (inclusive)

        Returns:
            Number of business days between the dates (0 if end <= start)
        """
        if start >= end:
            return 0

        count = 0
        current = start + timedelta(days=1)

        while current <= end:
            if self.is_business_day(current):
                count += 1
            current += timedelta(days=1)

        return count
