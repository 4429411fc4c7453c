"""Re-bucketing of daily count series into weeks or months."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Literal, Mapping

from minedash.errors import UnsupportedGranularityError
from minedash.series.keys import bucket_sort_key, format_month_key, format_week_key, parse_day_key
from minedash.series.models import BucketPoint, DailyPoint

LOGGER = logging.getLogger(__name__)

Granularity = Literal["day", "week", "month"]
GRANULARITIES = ("day", "week", "month")

# Dashboard time filters: whole history per day, last-7 view per week, last-30 view per month.
TIME_FILTER_GRANULARITY: Mapping[str, Granularity] = {
    "all": "day",
    "7": "week",
    "30": "month",
}

_KEY_FORMATTERS: Dict[str, Callable] = {
    "week": format_week_key,
    "month": format_month_key,
}


def check_granularity(granularity: str) -> Granularity:
    """Return ``granularity`` if supported, else raise :class:`UnsupportedGranularityError`."""

    if granularity not in GRANULARITIES:
        raise UnsupportedGranularityError(granularity)
    return granularity  # type: ignore[return-value]


def granularity_for_time_filter(time_filter: str) -> Granularity:
    """Translate a dashboard time filter (``all``, ``7``, ``30``) into a granularity."""

    try:
        return TIME_FILTER_GRANULARITY[str(time_filter)]
    except KeyError:
        raise UnsupportedGranularityError(time_filter) from None


def aggregate(series: Iterable[DailyPoint], granularity: str) -> List[BucketPoint]:
    """Re-bucket a daily series at ``granularity``.

    ``"day"`` returns the points unchanged and in their input order. For
    ``"week"`` and ``"month"`` the counts of every point falling in a bucket
    are summed (duplicate day keys included) and one point per non-empty
    bucket is returned in chronological order. Input order does not matter
    and the input is never modified.

    Args:
        series: Daily points keyed ``DD.MM.YY``.
        granularity: ``"day"``, ``"week"`` or ``"month"``.

    Returns:
        A new list of bucket points.

    Raises:
        UnsupportedGranularityError: For any other granularity.
        ValueError: If a point's key is not a valid day key.
    """

    resolved = check_granularity(granularity)
    points = list(series)
    if resolved == "day":
        return points

    to_bucket = _KEY_FORMATTERS[resolved]
    totals: Dict[str, int] = defaultdict(int)
    for point in points:
        totals[to_bucket(parse_day_key(point.key))] += point.count

    LOGGER.debug("Aggregated %d daily points into %d %s buckets", len(points), len(totals), resolved)
    return [BucketPoint(key, totals[key]) for key in sorted(totals, key=bucket_sort_key)]


__all__ = [
    "GRANULARITIES",
    "Granularity",
    "TIME_FILTER_GRANULARITY",
    "aggregate",
    "check_granularity",
    "granularity_for_time_filter",
]
