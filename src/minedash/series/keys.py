"""Bucket key formats for daily, weekly and monthly series.

Day keys are ``DD.MM.YY``, week keys ``DD.MM.YY–DD.MM.YY`` (Sunday to
Saturday, en-dash separated) and month keys ``MM.YY``. Dates are read in
UTC and two-digit years always belong to the 2000s.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from typing import Tuple

WEEK_SEPARATOR = "–"

_DAY_KEY = re.compile(r"^(\d{2})\.(\d{2})\.(\d{2})$")
_MONTH_KEY = re.compile(r"^(\d{2})\.(\d{2})$")

_CENTURY = 2000


def _utc_date(moment: date | datetime) -> date:
    # Naive datetimes are taken to be UTC already.
    if isinstance(moment, datetime):
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc)
        return moment.date()
    return moment


def format_day_key(moment: date | datetime) -> str:
    """Format the UTC calendar day of ``moment`` as ``DD.MM.YY``."""

    day = _utc_date(moment)
    return f"{day.day:02d}.{day.month:02d}.{day.year % 100:02d}"


def parse_day_key(key: str) -> datetime:
    """Parse a ``DD.MM.YY`` key into UTC midnight of that day.

    Raises:
        ValueError: If ``key`` is not a valid ``DD.MM.YY`` date.
    """

    match = _DAY_KEY.match(key) if isinstance(key, str) else None
    if match is None:
        raise ValueError(f"Invalid day key: {key!r} (expected DD.MM.YY)")
    day, month, year = (int(part) for part in match.groups())
    return datetime(_CENTURY + year, month, day, tzinfo=timezone.utc)


def week_bounds(moment: date | datetime) -> Tuple[date, date]:
    """Return the Sunday starting and the Saturday ending the week of ``moment``."""

    day = _utc_date(moment)
    # date.weekday() counts from Monday; weeks here start on Sunday.
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def format_week_key(moment: date | datetime) -> str:
    """Format the week containing ``moment`` as ``DD.MM.YY–DD.MM.YY``."""

    start, end = week_bounds(moment)
    return f"{format_day_key(start)}{WEEK_SEPARATOR}{format_day_key(end)}"


def format_month_key(moment: date | datetime) -> str:
    """Format the UTC month of ``moment`` as ``MM.YY``."""

    day = _utc_date(moment)
    return f"{day.month:02d}.{day.year % 100:02d}"


def bucket_start(key: str) -> datetime:
    """Return the UTC start of the bucket named by a day, week or month key.

    Week keys start six days before their last day, so a week spanning a
    century boundary (``26.12.99–01.01.00``) still starts in 1999. Month
    keys start at the 1st of the month.

    Raises:
        ValueError: If ``key`` matches none of the three formats.
    """

    if WEEK_SEPARATOR in key:
        start_key, end_key = key.split(WEEK_SEPARATOR, 1)
        parse_day_key(start_key)  # rejects a malformed start day
        return parse_day_key(end_key) - timedelta(days=6)
    month = _MONTH_KEY.match(key)
    if month is not None:
        return datetime(_CENTURY + int(month.group(2)), int(month.group(1)), 1, tzinfo=timezone.utc)
    return parse_day_key(key)


def bucket_sort_key(key: str) -> Tuple[datetime, str]:
    """Chronological sort key for bucket keys; ties are broken by the key text."""

    return bucket_start(key), key


__all__ = [
    "WEEK_SEPARATOR",
    "bucket_sort_key",
    "bucket_start",
    "format_day_key",
    "format_month_key",
    "format_week_key",
    "parse_day_key",
    "week_bounds",
]
