"""Exception hierarchy for minedash.

The engine degrades malformed input data to typed defaults; these errors are
reserved for programmer mistakes such as an invalid level table or an
unsupported aggregation granularity.
"""


class MinedashError(Exception):
    """Base class for all minedash errors."""


class LevelTableError(MinedashError, ValueError):
    """Raised when a level table has gaps, overlaps, or bad ordering."""


class UnsupportedGranularityError(MinedashError, ValueError):
    """Raised when a series is aggregated with an unknown granularity."""

    def __init__(self, granularity: object) -> None:
        super().__init__(f"Unsupported granularity: {granularity!r} (expected 'day', 'week' or 'month')")
        self.granularity = granularity


__all__ = ["MinedashError", "LevelTableError", "UnsupportedGranularityError"]
