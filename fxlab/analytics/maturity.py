"""
Time-to-maturity conversions.

Two year-fraction conventions live here and are kept apart on purpose:

- days_to_years: fixed 365-day year, used when the maturity is entered as
  a number of days.
- time_to_maturity: exact elapsed days divided by the length of the
  current year (366 in leap years), used when a maturity date is picked.
"""

import calendar
import math
from datetime import date, datetime
from typing import Optional, Union
from fxlab.errors import InvalidInputError

DateLike = Union[date, datetime]

_SECONDS_PER_DAY = 86400.0


def days_to_years(days: int) -> float:
    """
    Convert a number of days to years on a fixed 365-day year.

    Args:
        days: Number of days (>= 0)

    Returns:
        days / 365 rounded to 6 decimals

    Raises:
        InvalidInputError: If days is negative
    """
    if days < 0:
        raise InvalidInputError(f"days cannot be negative, got {days}")
    return round(days / 365, 6)


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raise InvalidInputError(f"expected a date or datetime, got {value!r}")


def _elapsed_days(maturity_date: DateLike, now: Optional[DateLike]) -> float:
    if now is None:
        now = datetime.now()
    start = _as_datetime(now)
    end = _as_datetime(maturity_date)
    if (start.tzinfo is None) != (end.tzinfo is None):
        raise InvalidInputError("maturity_date and now must both be naive or both be aware")
    return (end - start).total_seconds() / _SECONDS_PER_DAY


def time_to_maturity(maturity_date: DateLike, now: Optional[DateLike] = None) -> float:
    """
    Exact year fraction until a maturity date.

    The elapsed days are divided by 366 when `now` falls in a leap year and
    by 365 otherwise. Datetimes contribute fractional days. A maturity in
    the past gives a negative fraction.

    Args:
        maturity_date: Expiry date or datetime
        now: Valuation date or datetime (default: current local time)

    Returns:
        Year fraction rounded to 6 decimals
    """
    if now is None:
        now = datetime.now()
    days = _elapsed_days(maturity_date, now)
    days_in_year = 366 if calendar.isleap(now.year) else 365
    return round(days / days_in_year, 6)


def days_to_maturity(maturity_date: DateLike, now: Optional[DateLike] = None) -> int:
    """
    Whole days remaining until a maturity date.

    Args:
        maturity_date: Expiry date or datetime
        now: Valuation date or datetime (default: current local time)

    Returns:
        Floor of the elapsed days, never negative
    """
    return max(0, math.floor(_elapsed_days(maturity_date, now)))
