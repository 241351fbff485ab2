"""Calendar primitives for schedule generation.

All functions operate on plain calendar dates. Weekdays follow the
0=Sunday..6=Saturday numbering used throughout the scheduler, which is
not the same as ``date.weekday()`` (0=Monday).
"""
from datetime import date, datetime, timedelta
from typing import Tuple

from dateutil.relativedelta import relativedelta

from budget_recurrence.config import MONTH_FORMAT


SUNDAY = 0
SATURDAY = 6

SHIFT_DIRECTIONS = ("forward", "backward", "nearest")

_MONTH_LENGTHS = [31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]


def _check_month(month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"Month out of range: {month}")


def is_leap_year(year: int) -> bool:
    """Gregorian leap year test."""
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month."""
    _check_month(month)
    if month == 2 and is_leap_year(year):
        return 29
    return _MONTH_LENGTHS[month - 1]


def weekday(d: date) -> int:
    """Day of week with 0=Sunday..6=Saturday."""
    return d.isoweekday() % 7


def is_business_day(d: date) -> bool:
    """True for Monday through Friday."""
    return weekday(d) not in (SATURDAY, SUNDAY)


def last_business_day_of_month(year: int, month: int) -> date:
    """Last Monday-Friday date of the given month.

    Starts from the last calendar day and steps back over a trailing
    weekend: Saturday -> Friday (-1), Sunday -> Friday (-2).
    """
    last = date(year, month, days_in_month(year, month))
    dow = weekday(last)
    if dow == SATURDAY:
        return last - timedelta(days=1)
    if dow == SUNDAY:
        return last - timedelta(days=2)
    return last


def nearest_business_day(d: date, direction: str = "forward") -> date:
    """Move a weekend date onto a business day.

    Args:
        d: Date to adjust; business days are returned unchanged
        direction: "forward" moves Saturday/Sunday to the following Monday,
            "backward" moves them to the preceding Friday, "nearest" moves
            Saturday to Friday and Sunday to Monday

    Returns:
        Adjusted date
    """
    if direction not in SHIFT_DIRECTIONS:
        raise ValueError(f"Invalid shift direction: {direction}")

    dow = weekday(d)
    if dow == SATURDAY:
        if direction == "forward":
            return d + timedelta(days=2)
        return d - timedelta(days=1)
    if dow == SUNDAY:
        if direction == "backward":
            return d - timedelta(days=2)
        return d + timedelta(days=1)
    return d


def add_months(d: date, n: int) -> date:
    """Add n calendar months, clamping the day to the target month's length.

    Jan 31 + 1 month is Feb 28 (Feb 29 in a leap year), never Mar 3.
    """
    return d + relativedelta(months=n)


def month_index(d: date) -> int:
    """Months elapsed since year 0, for month-difference arithmetic."""
    return d.year * 12 + d.month - 1


def month_bounds(year_month: str) -> Tuple[date, date]:
    """Return (first_day, last_day) for a YYYY-MM month string."""
    try:
        first = datetime.strptime(year_month, MONTH_FORMAT).date()
    except (TypeError, ValueError):
        raise ValueError(f"Invalid month: {year_month}")
    return first, first.replace(day=days_in_month(first.year, first.month))
