"""Alignment of several bucketed series onto one shared axis."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, Mapping, Sequence

from minedash.series.aggregator import aggregate, check_granularity
from minedash.series.keys import bucket_sort_key
from minedash.series.models import BucketPoint, CorrelatedSeriesSet, DailyPoint, FilteredEvents
from minedash.settings import Settings, get_settings

LOGGER = logging.getLogger(__name__)


def _totals(points: Iterable[BucketPoint]) -> Dict[str, int]:
    totals: Dict[str, int] = defaultdict(int)
    for point in points:
        totals[point.key] += point.count
    return totals


def correlate(
    named_series: Mapping[str, Iterable[BucketPoint]],
    names: Sequence[str] | None = None,
) -> CorrelatedSeriesSet:
    """Align named series on the sorted union of their bucket keys.

    Args:
        named_series: Bucketed series by name, all at the same granularity.
        names: Series to include in the result, in order. Defaults to every
            name in ``named_series`` sorted alphabetically. A name with no
            backing series is returned as all zeros.

    Returns:
        The shared axis and one zero-filled count sequence per name. The
        result does not depend on the iteration order of ``named_series``.
    """

    lookups = {name: _totals(points) for name, points in named_series.items()}
    axis = tuple(sorted({key for lookup in lookups.values() for key in lookup}, key=bucket_sort_key))
    selected = sorted(lookups) if names is None else list(names)

    aligned: Dict[str, tuple] = {}
    for name in selected:
        lookup = lookups.get(name, {})
        aligned[name] = tuple(lookup.get(key, 0) for key in axis)
    return CorrelatedSeriesSet(axis=axis, series=aligned)


def filter_events(
    events: Mapping[str, Iterable[DailyPoint]],
    total_by_day: Iterable[DailyPoint] = (),
    granularity: str | None = None,
    *,
    settings: Settings | None = None,
) -> FilteredEvents:
    """Re-bucket every event series and the daily total at one granularity.

    ``granularity`` defaults to ``series.default_granularity`` from the
    settings.
    """

    resolved = check_granularity(granularity or (settings or get_settings()).series.default_granularity)
    LOGGER.debug("Filtering %d event series at %s granularity", len(events), resolved)
    return FilteredEvents(
        granularity=resolved,
        total_by_day=aggregate(total_by_day, resolved),
        events={name: aggregate(points, resolved) for name, points in events.items()},
    )


def compare_events(
    events: Mapping[str, Iterable[DailyPoint]],
    names: Sequence[str],
    granularity: str,
) -> CorrelatedSeriesSet | None:
    """Correlate the named event series for a comparison chart.

    Returns ``None`` when any of ``names`` has no series in ``events``.
    """

    missing = [name for name in names if name not in events]
    if missing:
        LOGGER.debug("Cannot compare events, missing series: %s", ", ".join(missing))
        return None
    resolved = check_granularity(granularity)
    bucketed = {name: aggregate(events[name], resolved) for name in names}
    return correlate(bucketed, names=names)


__all__ = ["compare_events", "correlate", "filter_events"]
