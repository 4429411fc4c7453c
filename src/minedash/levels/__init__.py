"""Hash-rate level table and level statistics."""

from .classifier import (
    LEVEL_TABLE,
    TOP_LEVEL_CEILING,
    LevelRange,
    LevelTable,
    build_level_histogram,
    classify,
    level_thresholds,
    users_at_level,
)

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
