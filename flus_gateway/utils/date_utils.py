"""Date manipulation utilities"""

from datetime import date, timedelta
from dateutil.relativedelta import relativedelta

SATURDAY = 5
SUNDAY = 6


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month (month is 1-12)"""
    return (date(year, month, 1) + relativedelta(day=31)).day


def clamp_day(year: int, month: int, day: int) -> date:
    """Build a date, clamping day into [1, days_in_month]"""
    return date(year, month, 1) + relativedelta(day=max(1, day))


def add_months_clamped(from_date: date, months: int) -> date:
    """
    Add (or subtract) whole months, clamping to the target month's last day.

    Jan 31 + 1 month -> Feb 28 (or 29), never Mar 3.
    """
    return from_date + relativedelta(months=months)


def adjust_to_business_day(d: date) -> date:
    """Move a weekend date back to the preceding Friday (closings never move later)"""
    weekday = d.weekday()
    if weekday == SATURDAY:
        return d - timedelta(days=1)
    if weekday == SUNDAY:
        return d - timedelta(days=2)
    return d


def last_business_day_of_month(year: int, month: int) -> date:
    """Last calendar day of the month, shifted back off the weekend"""
    return adjust_to_business_day(clamp_day(year, month, 31))
