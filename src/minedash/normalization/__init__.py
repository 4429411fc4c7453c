"""Normalization of raw webhook payloads into canonical records."""

from .coercion import coerce_array, coerce_bool, coerce_float, coerce_int, coerce_map, coerce_percentage
from .normalizer import (
    iter_user_batches,
    normalize_kpi_rows,
    normalize_leaderboard,
    normalize_level_stats,
    normalize_order,
    normalize_user,
)
from .rules import FieldRule, apply_rules
from .schema import AsicKpiUser, CanonicalOrder, CanonicalUser, LeaderboardEntry, LevelStat, RefKpiUser

__all__ = [
    "AsicKpiUser",
    "CanonicalOrder",
    "CanonicalUser",
    "FieldRule",
    "LeaderboardEntry",
    "LevelStat",
    "RefKpiUser",
    "apply_rules",
    "coerce_array",
    "coerce_bool",
    "coerce_float",
    "coerce_int",
    "coerce_map",
    "coerce_percentage",
    "iter_user_batches",
    "normalize_kpi_rows",
    "normalize_leaderboard",
    "normalize_level_stats",
    "normalize_order",
    "normalize_user",
]
