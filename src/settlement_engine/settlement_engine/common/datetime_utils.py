from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Iterator

from dateutil.relativedelta import relativedelta

from ..core.exceptions import ValidationError

_MONTH_KEY = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def parse_month_key(value: str) -> tuple[int, int]:
    """Parse a YYYY-MM month key into (year, month)."""
    if not isinstance(value, str) or not _MONTH_KEY.match(value):
        raise ValidationError(f"Invalid month (YYYY-MM): {value!r}")
    year, month = value.split("-")
    return int(year), int(month)


def month_key(value: date) -> str:
    return value.strftime("%Y-%m")


def month_bounds(month: str) -> tuple[date, date]:
    """First and last calendar day of a YYYY-MM month."""
    year, mon = parse_month_key(month)
    last_day = calendar.monthrange(year, mon)[1]
    return date(year, mon, 1), date(year, mon, last_day)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day in [start, end], inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def overlap(start: date, end: date, window_start: date, window_end: date) -> tuple[date, date] | None:
    lo = max(start, window_start)
    hi = min(end, window_end)
    if lo > hi:
        return None
    return lo, hi


def add_months(value: date, months: int) -> date:
    """Calendar month arithmetic; day is clamped to the target month's length."""
    return value + relativedelta(months=months)


def months_between(start: date, end: date) -> int:
    """Completed calendar months from start's month to end's month, never negative.

    Day-of-month is ignored: 2024-04-20 -> 2024-06-01 is 2.
    """
    months = (end.year - start.year) * 12 + (end.month - start.month)
    return max(months, 0)
