"""Value objects shared by the series aggregation and correlation helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from minedash.normalization.coercion import coerce_int, coerce_optional_str

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BucketPoint:
    """One bucket of a series: a day, week-range or month key and its count."""

    key: str
    count: int


@dataclass(frozen=True, slots=True)
class DailyPoint(BucketPoint):
    """A bucket keyed by a single ``DD.MM.YY`` day."""


@dataclass(frozen=True, slots=True)
class CorrelatedSeriesSet:
    """Several series aligned on one sorted, gap-free bucket axis.

    Every sequence in ``series`` has exactly one count per ``axis`` key.
    """

    axis: Tuple[str, ...]
    series: Dict[str, Tuple[int, ...]] = field(default_factory=dict)

    def points(self, name: str) -> List[BucketPoint]:
        """Return the aligned series ``name`` as bucket points (all zero when unknown)."""

        counts = self.series.get(name) or (0,) * len(self.axis)
        return [BucketPoint(key, count) for key, count in zip(self.axis, counts)]


@dataclass(frozen=True, slots=True)
class FilteredEvents:
    """Event series and the daily total re-bucketed at one granularity."""

    granularity: str
    total_by_day: List[BucketPoint]
    events: Dict[str, List[BucketPoint]]


def to_daily_points(rows: Iterable[Any]) -> List[DailyPoint]:
    """Convert raw ``{"date": "DD.MM.YY", "count": n}`` rows into daily points.

    Rows without a date are dropped; counts are int-coerced and negative
    counts clamped to zero.
    """

    points: List[DailyPoint] = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        key = coerce_optional_str(row.get("date"))
        if key is None:
            LOGGER.debug("Dropping series row without a date: %r", row)
            continue
        points.append(DailyPoint(key, max(0, coerce_int(row.get("count")))))
    return points


__all__ = ["BucketPoint", "CorrelatedSeriesSet", "DailyPoint", "FilteredEvents", "to_daily_points"]
