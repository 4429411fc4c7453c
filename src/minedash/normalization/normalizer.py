"""Record normalization for webhook payloads.

Turns already-unwrapped raw rows (users, orders, leaderboard rows, KPI
table rows and precomputed level statistics) into canonical, frozen
records. Field mapping is driven by the rule tables in
:mod:`minedash.normalization.reference_data`; only derived and nested fields
are handled here explicitly.

The normalizer has no failure path: missing or malformed values degrade to
the field defaults.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Union

from minedash.normalization.coercion import coerce_map, coerce_percentage
from minedash.normalization.reference_data import (
    HASHRATE_PER_ASIC,
    KPI_ASIC_FIELD_RULES,
    KPI_REF_FIELD_RULES,
    LEADERBOARD_FIELD_RULES,
    LEGACY_ASSET_LABELS,
    LEVEL_STAT_FIELD_RULES,
    ORDER_FIELD_RULES,
    USER_FIELD_RULES,
)
from minedash.normalization.rules import apply_rules
from minedash.normalization.schema import (
    AsicKpiUser,
    CanonicalOrder,
    CanonicalUser,
    LeaderboardEntry,
    LevelStat,
    RefKpiUser,
)
from minedash.observability import get_observability
from minedash.settings import Settings, get_settings

LOGGER = logging.getLogger(__name__)

# Level tables are always reported at least through this level.
HIGHEST_LEVEL = 10

# KPI table kind -> (row rules, row model).
KPI_TABLES = {
    "asic": (KPI_ASIC_FIELD_RULES, AsicKpiUser),
    "ref": (KPI_REF_FIELD_RULES, RefKpiUser),
}


def _as_dict(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def normalize_order(raw: Mapping[str, Any]) -> CanonicalOrder:
    """Normalize one raw order row."""

    return CanonicalOrder(**apply_rules(_as_dict(raw), ORDER_FIELD_RULES))


def normalize_user(
    raw: Mapping[str, Any],
    *,
    default_username: str | None = None,
    default_language: str | None = None,
) -> CanonicalUser:
    """Normalize one raw user row into a :class:`CanonicalUser`.

    Args:
        raw: Raw user row as delivered by the users webhook.
        default_username: Replacement for the ``"Unknown"`` username default.
        default_language: Replacement for the ``"en"`` language defaults.

    Returns:
        The canonical user. ``total_hashrate`` is always derived from
        ``total_asics``; any hash-rate total present in ``raw`` is ignored.
    """

    defaults: Dict[str, Any] = {}
    if default_username is not None:
        defaults["username"] = default_username
    if default_language is not None:
        defaults["person_language"] = default_language
        defaults["tg_language"] = default_language

    fields = apply_rules(_as_dict(raw), USER_FIELD_RULES, defaults=defaults)

    fields["total_hashrate"] = fields["total_asics"] * HASHRATE_PER_ASIC
    if fields["level"] is not None and fields["level"] < 0:
        fields["level"] = 0
    fields["assets_metadata"] = _relabel_assets(fields["assets_metadata"])
    fields["orders"] = _normalize_orders(fields["orders"])

    return CanonicalUser(**fields)


def _relabel_assets(metadata: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    relabeled: Dict[str, Dict[str, Any]] = {}
    for asset_id, entry in metadata.items():
        asset = dict(coerce_map(entry))
        name = asset.get("name")
        if name:
            asset["name"] = LEGACY_ASSET_LABELS.get(name, name)
        else:
            asset["name"] = f"Asset {asset_id}"
        relabeled[str(asset_id)] = asset
    return relabeled


def _normalize_orders(rows: Iterable[Any]) -> List[CanonicalOrder]:
    orders: List[CanonicalOrder] = []
    for row in rows:
        if not isinstance(row, Mapping):
            LOGGER.debug("Skipping non-object order entry of type %s", type(row).__name__)
            continue
        orders.append(normalize_order(row))
    return orders


def normalize_leaderboard(rows: Iterable[Any]) -> List[LeaderboardEntry]:
    """Normalize leaderboard rows, numbering unranked rows by position."""

    entries: List[LeaderboardEntry] = []
    for index, row in enumerate(rows):
        fields = apply_rules(_as_dict(row), LEADERBOARD_FIELD_RULES)
        if fields["rank"] is None:
            fields["rank"] = index + 1
        entries.append(LeaderboardEntry(**fields))
    return entries


def normalize_level_stats(rows: Iterable[Any], *, through_level: int = HIGHEST_LEVEL) -> List[LevelStat]:
    """Normalize a precomputed level table into a contiguous run of levels.

    Rows without a parsable, non-negative level are dropped. Missing levels
    between 0 and ``max(through_level, highest observed level)`` are filled
    with zero-count rows. A later duplicate of a level replaces an earlier one.
    """

    by_level: Dict[int, LevelStat] = {}
    for row in rows:
        fields = apply_rules(_as_dict(row), LEVEL_STAT_FIELD_RULES)
        level = fields["level"]
        if level is None or level < 0:
            LOGGER.debug("Dropping level stat row without a usable level: %r", row)
            continue
        by_level[level] = LevelStat(
            level=level,
            users_at_level=max(0, fields["users_at_level"]),
            percentage_of_total=coerce_percentage(fields["percentage_of_total"]),
        )

    highest = max([through_level, *by_level])
    return [by_level.get(level) or LevelStat(level=level) for level in range(highest + 1)]


def normalize_kpi_rows(
    rows: Iterable[Any],
    level: int | None = None,
    *,
    kind: str = "asic",
) -> List[Union[AsicKpiUser, RefKpiUser]]:
    """Normalize rows of a per-level KPI table.

    Args:
        rows: Raw KPI rows from the ASIC or referral KPI webhook.
        level: Only rows whose ``current_level`` parses to this level are
            kept. ``None`` keeps every row.
        kind: ``"asic"`` for :class:`AsicKpiUser` rows or ``"ref"`` for
            :class:`RefKpiUser` rows.

    Raises:
        ValueError: If ``kind`` names no KPI table.
    """

    try:
        rules, model = KPI_TABLES[kind]
    except KeyError:
        raise ValueError(f"Unknown KPI table kind: {kind!r}") from None

    records: List[Union[AsicKpiUser, RefKpiUser]] = []
    for row in rows:
        fields = apply_rules(_as_dict(row), rules)
        if level is not None and fields["current_level"] != level:
            continue
        if fields["current_level"] is None:
            fields["current_level"] = 0
        if not fields["effective_ths"]:
            fields["effective_ths"] = "0"
        records.append(model(**fields))
    return records


def iter_user_batches(
    raws: Iterable[Any],
    *,
    batch_size: int | None = None,
    settings: Settings | None = None,
) -> Iterator[List[CanonicalUser]]:
    """Normalize users in slices of at most ``batch_size`` records.

    Callers rendering large user lists can hand control back to their event
    loop between slices.
    """

    resolved = settings or get_settings()
    size = batch_size if batch_size is not None else resolved.normalization.batch_size
    if size < 1:
        raise ValueError("batch_size must be a positive integer")
    observability = get_observability(component="normalizer", settings=resolved)

    batch: List[CanonicalUser] = []
    batch_index = 0
    for raw in raws:
        batch.append(
            normalize_user(
                raw,
                default_username=resolved.normalization.default_username,
                default_language=resolved.normalization.default_language,
            )
        )
        if len(batch) >= size:
            observability.emit_event("normalizer.batch", batch=batch_index, records=len(batch))
            yield batch
            batch = []
            batch_index += 1
    if batch:
        observability.emit_event("normalizer.batch", batch=batch_index, records=len(batch))
        yield batch


__all__ = [
    "HIGHEST_LEVEL",
    "KPI_TABLES",
    "iter_user_batches",
    "normalize_kpi_rows",
    "normalize_leaderboard",
    "normalize_level_stats",
    "normalize_order",
    "normalize_user",
]
