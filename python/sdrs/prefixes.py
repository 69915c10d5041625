"""
Time-bucketed prefix generation.

Objects are laid out as ``<base>/yyyy/MM/dd/HH/...``. To select everything
written inside a time window with as few prefixes as possible, the window is
walked backwards from its end in four passes of decreasing resolution: hours
until midnight, days until the first of the month, months until January, and
then whole years. Each pass only starts once the previous one has reached the
boundary of the next coarser unit, so a full calendar year collapses into a
single ``yyyy`` prefix.
"""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta, timezone

from sdrs.exceptions import InvalidRangeError

HOUR_FORMAT = "%Y/%m/%d/%H"
DAY_FORMAT = "%Y/%m/%d"
MONTH_FORMAT = "%Y/%m"
YEAR_FORMAT = "%Y"


def to_utc(value: datetime) -> datetime:
    """Normalize a datetime to UTC, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _minus_months(value: datetime, months: int) -> datetime:
    """Step back whole months, clamping the day to the target month length."""
    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _format_prefix(base_path: str, value: datetime, fmt: str) -> str:
    stamp = value.strftime(fmt)
    if not base_path:
        return stamp
    return f"{base_path.rstrip('/')}/{stamp}"


def generate_time_prefixes(
    base_path: str,
    start_time: datetime,
    end_time: datetime,
) -> list[str]:
    """
    Generate the prefixes covering the interval between two times.

    Args:
        base_path: Leading path segment of every prefix (a dataset path).
            An empty base yields bare date prefixes.
        start_time: Time of the least recent prefix to generate. Objects
            older than this value are not guaranteed to be left out: the
            final year prefix may reach past it.
        end_time: Time of the most recent prefix to generate. Truncated to
            the start of its hour.

    Returns:
        Prefixes of the form ``base/period``, most recent first.

    Raises:
        InvalidRangeError: If ``end_time`` is before ``start_time``.
    """
    start = to_utc(start_time)
    end = to_utc(end_time)

    if end < start:
        raise InvalidRangeError.end_before_start(start, end)

    current = end.replace(minute=0, second=0, microsecond=0)
    result: list[str] = []

    while current.hour > 0 and current > start:
        current -= timedelta(hours=1)
        result.append(_format_prefix(base_path, current, HOUR_FORMAT))

    while current.day > 1 and current > start:
        current -= timedelta(days=1)
        result.append(_format_prefix(base_path, current, DAY_FORMAT))

    while current.month > 1 and current > start:
        current = _minus_months(current, 1)
        result.append(_format_prefix(base_path, current, MONTH_FORMAT))

    while current > start:
        current = _minus_months(current, 12)
        result.append(_format_prefix(base_path, current, YEAR_FORMAT))

    return result
