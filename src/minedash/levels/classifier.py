"""Hash-rate level classification.

Players are ranked into levels 0-10 by their effective hash-rate (Th). The
boundaries are a fixed business table; a hash-rate below the level-0 floor
(no ASIC owned) is not classifiable and maps to ``None``.
"""

from __future__ import annotations

import bisect
import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from minedash.errors import LevelTableError
from minedash.normalization.coercion import coerce_percentage
from minedash.normalization.schema import LeaderboardEntry, LevelStat

LOGGER = logging.getLogger(__name__)

# Upper reference shown for the open-ended top level (1 Eh expressed in Th).
TOP_LEVEL_CEILING = 1_000_000_000


@dataclass(frozen=True, slots=True)
class LevelRange:
    """Inclusive hash-rate bounds of one level; ``upper`` is ``None`` for the top level."""

    level: int
    lower: int
    upper: int | None


class LevelTable:
    """Ordered, validated set of contiguous level ranges.

    Validation runs once at construction: levels must start at 0 and
    increase by one, each range must start right after the previous one ends,
    and only the last range may be open-ended.
    """

    def __init__(self, ranges: Sequence[LevelRange]) -> None:
        self.ranges: Tuple[LevelRange, ...] = tuple(ranges)
        self._validate()
        self._lowers = [item.lower for item in self.ranges]

    def _validate(self) -> None:
        if not self.ranges:
            raise LevelTableError("Level table must define at least one range")
        previous: LevelRange | None = None
        for index, current in enumerate(self.ranges):
            if current.level != index:
                raise LevelTableError(f"Expected level {index} at position {index}, found level {current.level}")
            if current.upper is None and index != len(self.ranges) - 1:
                raise LevelTableError(f"Only the top level may be open-ended (level {current.level})")
            if current.upper is not None and current.upper < current.lower:
                raise LevelTableError(f"Level {current.level} has upper bound below lower bound")
            if previous is not None:
                expected = previous.upper + 1
                if current.lower < expected:
                    raise LevelTableError(f"Level {current.level} overlaps level {previous.level}")
                if current.lower > expected:
                    raise LevelTableError(f"Gap between level {previous.level} and level {current.level}")
            previous = current

    @property
    def floor(self) -> int:
        """int: Smallest classifiable hash-rate."""

        return self.ranges[0].lower

    @property
    def top_level(self) -> int:
        """int: Highest level in the table."""

        return self.ranges[-1].level

    def classify(self, hashrate: float) -> int | None:
        """Return the level whose inclusive range contains ``hashrate``.

        ``None`` is returned below the floor and for values that fall between
        one range's integer upper bound and the next range's lower bound
        (e.g. ``935.5``).
        """

        if hashrate is None or math.isnan(hashrate) or hashrate < self.floor:
            return None
        candidate = self.ranges[bisect.bisect_right(self._lowers, hashrate) - 1]
        if candidate.upper is not None and hashrate > candidate.upper:
            return None
        return candidate.level

    def thresholds(self, level: int | None) -> Tuple[int, int]:
        """Return ``(current, next)`` hash-rate thresholds for progress bars.

        ``current`` is the lower bound of ``level`` and ``next`` is the lower
        bound of the following level (``TOP_LEVEL_CEILING`` for the top
        level). Unknown levels give ``(0, 0)``.
        """

        if level is None or not 0 <= level <= self.top_level:
            return 0, 0
        current = self.ranges[level].lower
        if level == self.top_level:
            return current, TOP_LEVEL_CEILING
        return current, self.ranges[level + 1].lower

    def __len__(self) -> int:
        return len(self.ranges)

    def __iter__(self):
        return iter(self.ranges)


LEVEL_TABLE = LevelTable(
    [
        LevelRange(0, 234, 935),
        LevelRange(1, 936, 4913),
        LevelRange(2, 4914, 14975),
        LevelRange(3, 14976, 24803),
        LevelRange(4, 24804, 49841),
        LevelRange(5, 49842, 99917),
        LevelRange(6, 99918, 249911),
        LevelRange(7, 249912, 499823),
        LevelRange(8, 499824, 999881),
        LevelRange(9, 999882, 7999991),
        LevelRange(10, 7999992, None),
    ]
)


def classify(hashrate: float, table: LevelTable = LEVEL_TABLE) -> int | None:
    """Classify a hash-rate with the default level table."""

    return table.classify(hashrate)


def level_thresholds(level: int | None, table: LevelTable = LEVEL_TABLE) -> Tuple[int, int]:
    """Return the ``(current, next)`` thresholds of ``level``."""

    return table.thresholds(level)


def build_level_histogram(
    hashrates: Iterable[float],
    *,
    total_users: int | None = None,
    table: LevelTable = LEVEL_TABLE,
) -> List[LevelStat]:
    """Build a level histogram from per-user hash-rates.

    Args:
        hashrates: One effective hash-rate per user.
        total_users: Denominator for the percentages; defaults to the number
            of hash-rates supplied (unclassifiable users included).
        table: Level table used for classification.

    Returns:
        Exactly one :class:`LevelStat` per level in ``table``, in level
        order. Users below the level-0 floor are not counted in any row.
    """

    counts: Counter[int] = Counter()
    population = 0
    for hashrate in hashrates:
        population += 1
        level = table.classify(hashrate)
        if level is not None:
            counts[level] += 1

    denominator = population if total_users is None else total_users
    LOGGER.debug(
        "Level histogram: %d users, %d classified, denominator %d",
        population,
        sum(counts.values()),
        denominator,
    )

    stats: List[LevelStat] = []
    for item in table:
        count = counts.get(item.level, 0)
        share = count / denominator * 100 if denominator > 0 else 0.0
        stats.append(
            LevelStat(level=item.level, users_at_level=count, percentage_of_total=coerce_percentage(share))
        )
    return stats


def users_at_level(
    entries: Iterable[LeaderboardEntry],
    level: int,
    table: LevelTable = LEVEL_TABLE,
) -> List[LeaderboardEntry]:
    """Return leaderboard entries whose hash-rate falls in ``level``, re-ranked from 1."""

    matching = [entry for entry in entries if table.classify(entry.hashrate) == level]
    return [entry.model_copy(update={"rank": rank}) for rank, entry in enumerate(matching, start=1)]


__all__ = [
    "LEVEL_TABLE",
    "LevelRange",
    "LevelTable",
    "TOP_LEVEL_CEILING",
    "build_level_histogram",
    "classify",
    "level_thresholds",
    "users_at_level",
]
