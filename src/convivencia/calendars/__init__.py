"""
Convivencia Calendars

Business-day arithmetic for statutory deadlines (Saturdays and Sundays
excluded, no holiday calendar).

Usage:
    from convivencia.calendars import add_business_days, is_business_day

    # 10 business days from a Friday lands on the Friday two weeks later
    deadline = add_business_days(date(2025, 5, 9), 10)
"""
from __future__ import annotations

from datetime import date, datetime

from .base import D, BusinessCalendar, WeekendCalendar

# Shared immutable instance
SCHOOL_CALENDAR = WeekendCalendar()


def add_business_days(start: D, days: int) -> D:
    """Add business days using the default school calendar."""
    return SCHOOL_CALENDAR.add_business_days(start, days)


def is_business_day(d: date) -> bool:
    """Check if a date is a business day in the default school calendar."""
    return SCHOOL_CALENDAR.is_business_day(d)


def business_days_between(start: date, end: date) -> int:
    """Count business days in (start, end] using the default calendar."""
    return SCHOOL_CALENDAR.business_days_between(start, end)


def to_school_time(value: datetime) -> datetime:
    """
    Express a timestamp as naive school-local time.

    Every timestamp a case holds is naive local time. An aware value is
    converted to the host's local time zone and loses its tzinfo; a naive
    value is taken as local already.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


__all__ = [
    "BusinessCalendar",
    "WeekendCalendar",
    "SCHOOL_CALENDAR",
    "add_business_days",
    "is_business_day",
    "business_days_between",
    "to_school_time",
]
