"""Daily, weekly and monthly count series."""

from .aggregator import (
    GRANULARITIES,
    TIME_FILTER_GRANULARITY,
    Granularity,
    aggregate,
    check_granularity,
    granularity_for_time_filter,
)
from .correlator import compare_events, correlate, filter_events
from .keys import (
    WEEK_SEPARATOR,
    bucket_sort_key,
    bucket_start,
    format_day_key,
    format_month_key,
    format_week_key,
    parse_day_key,
    week_bounds,
)
from .models import BucketPoint, CorrelatedSeriesSet, DailyPoint, FilteredEvents, to_daily_points

__all__ = [
    "BucketPoint",
    "CorrelatedSeriesSet",
    "DailyPoint",
    "FilteredEvents",
    "GRANULARITIES",
    "Granularity",
    "TIME_FILTER_GRANULARITY",
    "WEEK_SEPARATOR",
    "aggregate",
    "bucket_sort_key",
    "bucket_start",
    "check_granularity",
    "compare_events",
    "correlate",
    "filter_events",
    "format_day_key",
    "format_month_key",
    "format_week_key",
    "granularity_for_time_filter",
    "parse_day_key",
    "to_daily_points",
    "week_bounds",
]
