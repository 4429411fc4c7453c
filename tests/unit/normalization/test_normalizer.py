"""Unit tests for minedash.normalization.normalizer.

These tests cover alias resolution, derived fields, nested JSON decoding
and the level-stat table normalization.
"""

import json
import logging

import pytest
from pydantic import ValidationError

from minedash.normalization.normalizer import (
    iter_user_batches,
    normalize_kpi_rows,
    normalize_leaderboard,
    normalize_level_stats,
    normalize_order,
    normalize_user,
)
from minedash.normalization.reference_data import HASHRATE_PER_ASIC
from minedash.normalization.schema import AsicKpiUser, CanonicalUser, RefKpiUser
from minedash.settings.config import Settings


def _settings(**normalization):
    return Settings(env="test", normalization=normalization)


def test_empty_record_exposes_every_default():
    """A record without any known key yields the documented defaults."""
    user = normalize_user({})

    assert user == CanonicalUser()
    assert user.person_id == 0
    assert user.username == "Unknown"
    assert user.person_language == "en"
    assert user.level is None
    assert user.total_hashrate == 0
    assert user.transactions == []
    assert user.balance_by_asset == {}
    assert user.wallet_address is None


@pytest.mark.parametrize(
    "raw,expected",
    [
        ({"person_id": 1, "user_id": 2, "id": 3}, 1),
        ({"user_id": "2", "id": 3}, 2),
        ({"id": 3}, 3),
        ({"person_id": None, "id": "9"}, 9),
        ({"person_id": "abc"}, 0),
    ],
)
def test_identity_falls_back_through_alias_keys(raw, expected):
    """person_id is read from person_id, then user_id, then id."""
    assert normalize_user(raw).person_id == expected


@pytest.mark.parametrize("raw_hashrate", [None, 0, 999999, "12345", "junk"])
def test_total_hashrate_is_derived_from_asics(raw_hashrate):
    """Any supplied hash-rate total is ignored in favour of asics * 234."""
    user = normalize_user({"total_asics": "7", "total_hashrate": raw_hashrate})
    assert user.total_asics == 7
    assert user.total_hashrate == 7 * HASHRATE_PER_ASIC


@pytest.mark.parametrize(
    "raw,expected",
    [
        ({}, None),
        ({"level": None}, None),
        ({"level": 0}, 0),
        ({"level": "0"}, 0),
        ({"level": "not-a-level"}, 0),
        ({"level": "5"}, 5),
        ({"level": 7.8}, 7),
        ({"level": -2}, 0),
    ],
)
def test_level_keeps_absent_distinct_from_zero(raw, expected):
    """An absent level stays unknown; unparsable and literal zero both become 0."""
    assert normalize_user(raw).level == expected


def test_boolean_flags_accept_alternate_representations():
    """Premium and onboarding flags accept True, "true" and alternate keys."""
    user = normalize_user({"is_ecos_premium": "true", "onboarding_done": True, "tg_premium": "true"})
    assert user.is_premium is True
    assert user.onboarding_done is True
    assert user.tg_premium is True

    legacy = normalize_user({"ecos_premium": True, "onbording_done": "true"})
    assert legacy.is_premium is True
    assert legacy.onboarding_done is True

    assert normalize_user({"is_ecos_premium": "yes"}).is_premium is False


def test_numeric_fields_are_finite_numbers():
    """Stringified and malformed numbers are coerced to finite values."""
    user = normalize_user(
        {
            "total_asics": "12.7",
            "effective_ths": "3456.5",
            "progress_cached": "NaN",
            "total_balance": "100.25 XP",
            "poke_sent_count": "3",
            "total_ton_spent": None,
        }
    )
    assert user.total_asics == 12
    assert user.effective_hashrate == pytest.approx(3456.5)
    assert user.progress == 0.0
    assert user.total_balance == pytest.approx(100.25)
    assert user.poke_sent_count == 3
    assert user.total_ton_spent == 0.0


def test_nested_json_strings_are_decoded():
    """JSON-encoded sub-fields become real lists and maps."""
    user = normalize_user(
        {
            "all_transactions": json.dumps([{"amount": 10}, {"amount": 5}]),
            "balance_by_asset": '{"XP": 120}',
            "referees": json.dumps([{"person_id": 4}]),
            "mining_summary": {"sessions": 3},
        }
    )
    assert user.transactions == [{"amount": 10}, {"amount": 5}]
    assert user.balance_by_asset == {"XP": 120}
    assert user.referees == [{"person_id": 4}]
    assert user.mining_summary == {"sessions": 3}


def test_malformed_and_absent_nested_fields_both_degrade_to_empty():
    """Malformed nested JSON is indistinguishable from an absent field."""
    absent = normalize_user({})
    malformed = normalize_user({"transactions": "[{oops", "balance_history": "{", "referees": "null"})

    assert malformed.transactions == absent.transactions == []
    assert malformed.balance_history == absent.balance_history == {}
    assert malformed.referees == absent.referees == []


def test_wrapped_transactions_are_unwrapped():
    """A ``{"transactions": [...]}`` wrapper yields the nested list."""
    user = normalize_user({"transactions": {"transactions": [{"type": "mining"}]}})
    assert user.transactions == [{"type": "mining"}]


def test_assets_metadata_relabels_legacy_asset():
    """The legacy ECOScoin label is renamed and unnamed assets get a placeholder."""
    user = normalize_user(
        {
            "assets_metadata": json.dumps(
                {
                    "1": {"name": "ECOScoin", "decimals": 2},
                    "2": {"name": "USDT"},
                    "3": {"decimals": 6},
                }
            )
        }
    )
    assert user.assets_metadata["1"] == {"name": "XP", "decimals": 2}
    assert user.assets_metadata["2"] == {"name": "USDT"}
    assert user.assets_metadata["3"] == {"name": "Asset 3", "decimals": 6}


def test_relabeling_does_not_mutate_raw_payload():
    """The raw metadata map is left untouched."""
    metadata = {"1": {"name": "ECOScoin"}}
    normalize_user({"assets_metadata": metadata})
    assert metadata == {"1": {"name": "ECOScoin"}}


def test_telegram_fields_fall_back_to_person_fields():
    """Telegram timestamps and language fall back to the generic values."""
    user = normalize_user(
        {
            "person_created_at": "2024-01-01T00:00:00Z",
            "person_updated_at": "2024-02-01T00:00:00Z",
            "language": "ru",
        }
    )
    assert user.tg_created_at == "2024-01-01T00:00:00Z"
    assert user.tg_updated_at == "2024-02-01T00:00:00Z"
    assert user.tg_language == "ru"
    assert user.person_language == "ru"


def test_orders_are_normalized_individually(caplog):
    """Each order row is normalized; non-object entries are skipped."""
    raw_orders = [
        {"id": 55, "item": "asic_s19", "points_spent": "150", "metadata": '{"qty": 1}'},
        "garbage",
        {"order_status": "paid", "ton": "0.5"},
    ]
    with caplog.at_level(logging.DEBUG, logger="minedash.normalization.normalizer"):
        user = normalize_user({"orders": json.dumps(raw_orders)})

    assert len(user.orders) == 2
    first, second = user.orders
    assert first.order_id == "55"
    assert first.item_code == "asic_s19"
    assert first.amount_points == 150.0
    assert first.metadata == {"qty": 1}
    assert first.status == "pending"
    assert second.status == "paid"
    assert second.amount_ton == 0.5
    assert "non-object order entry" in caplog.text


def test_normalize_order_defaults():
    """An empty order row exposes order defaults."""
    order = normalize_order({})
    assert order.order_id is None
    assert order.status == "pending"
    assert order.amount_points == 0.0


def test_normalize_user_accepts_non_mapping_input():
    """Input that is not an object degrades to an all-default record."""
    assert normalize_user(None) == CanonicalUser()


def test_defaults_can_be_overridden():
    """Username and language defaults can be supplied by the caller."""
    user = normalize_user({}, default_username="anonymous", default_language="de")
    assert user.username == "anonymous"
    assert user.person_language == "de"
    assert user.tg_language == "de"
    assert normalize_user({"username": "miner"}, default_username="anonymous").username == "miner"


def test_canonical_user_is_frozen():
    """Normalized records cannot be modified."""
    user = normalize_user({"username": "miner"})
    with pytest.raises(ValidationError):
        user.username = "other"


def test_normalize_leaderboard_aliases_and_ranks():
    """Leaderboard rows map th to hashrate and number missing ranks by position."""
    entries = normalize_leaderboard(
        [
            {"rank": 1, "user_id": "10", "username": "a", "asic_count": "3", "th": "702.5", "avatar_url": ""},
            {"id": 11, "tg_username": "b", "total_th": 234},
            {"rank": "x", "tg_photo_url": "https://t.me/p.jpg"},
        ]
    )
    assert [entry.rank for entry in entries] == [1, 2, 3]
    assert entries[0].user_id == 10
    assert entries[0].hashrate == pytest.approx(702.5)
    assert entries[0].asic_count == 3
    assert entries[0].avatar_url is None
    assert entries[1].username == "b"
    assert entries[1].hashrate == 234.0
    assert entries[2].user_id is None
    assert entries[2].username == "Unknown"
    assert entries[2].avatar_url == "https://t.me/p.jpg"


def test_normalize_level_stats_fills_gaps_through_level_ten():
    """Missing levels up to 10 are filled with zero rows."""
    stats = normalize_level_stats(
        [
            {"level": "2", "users_per_level": "5", "percentage": "12.5%"},
            {"level": 0, "users_per_level": 3, "percentage": 7.5},
        ]
    )
    assert [stat.level for stat in stats] == list(range(11))
    assert stats[0].users_at_level == 3
    assert stats[0].percentage_of_total == "7.50%"
    assert stats[2].users_at_level == 5
    assert stats[2].percentage_of_total == "12.50%"
    assert stats[1].users_at_level == 0
    assert stats[1].percentage_of_total == "0.00%"


def test_normalize_level_stats_drops_unusable_rows_and_extends_past_ten():
    """Rows without a usable level are dropped; observed levels above 10 are kept."""
    stats = normalize_level_stats(
        [
            {"level": "junk", "users_per_level": 99},
            {"users_per_level": 4},
            {"level": -1, "users_per_level": 4},
            {"level": 12, "users_per_level": "2", "percentage": None},
        ]
    )
    assert len(stats) == 13
    assert sum(stat.users_at_level for stat in stats) == 2
    assert stats[12].users_at_level == 2
    assert stats[12].percentage_of_total == "0.00%"


def test_iter_user_batches_slices_and_reports(caplog):
    """Users are normalized in slices of at most batch_size records."""
    settings = _settings(batch_size=2, default_username="anon")
    raws = [{"id": index} for index in range(5)]

    with caplog.at_level(logging.INFO, logger="minedash.observability"):
        batches = list(iter_user_batches(raws, settings=settings))

    assert [len(batch) for batch in batches] == [2, 2, 1]
    assert [user.person_id for batch in batches for user in batch] == [0, 1, 2, 3, 4]
    assert batches[0][0].username == "anon"
    assert caplog.text.count("normalizer.batch") == 3


def test_iter_user_batches_explicit_size_wins():
    """An explicit batch size overrides the configured one."""
    batches = list(iter_user_batches([{}] * 3, batch_size=3, settings=_settings(batch_size=1)))
    assert [len(batch) for batch in batches] == [3]


@pytest.mark.parametrize("batch_size", [0, -1])
def test_iter_user_batches_rejects_invalid_size(batch_size):
    """A non-positive batch size is a programmer error, even when settings hold a valid one."""
    with pytest.raises(ValueError):
        list(iter_user_batches([{}, {}, {}], batch_size=batch_size, settings=_settings(batch_size=2)))


@pytest.mark.parametrize(
    "raw,expected",
    [
        ({}, None),
        ({"required_asics_for_next_level": None}, None),
        ({"required_asics_for_next_level": ""}, None),
        ({"required_asics_for_next_level": "abc"}, None),
        ({"required_asics_for_next_level": "0"}, 0),
        ({"required_asics_for_next_level": "12"}, 12),
        ({"required_asics_for_next_level": 7}, 7),
    ],
)
def test_kpi_required_asics_is_nullable(raw, expected):
    """Blank or unparsable required-ASIC counts stay unknown instead of becoming 0."""
    (row,) = normalize_kpi_rows([raw])
    assert row.required_asics_for_next_level == expected


def test_kpi_rows_default_and_coerce_fields():
    """KPI rows coerce numeric strings and fall back to empty defaults."""
    full, empty = normalize_kpi_rows(
        [
            {
                "person_id": "42",
                "tg_id": 1001,
                "username": "miner",
                "current_level": "3",
                "effective_ths": 3456.5,
                "total_asics": "15",
                "missing_asics": "4",
                "progress_percent": "72.5",
                "person_created_at": "",
                "tg_photo_url": "https://t.me/p.jpg",
            },
            {"effective_ths": ""},
        ]
    )
    assert isinstance(full, AsicKpiUser)
    assert full.person_id == 42
    assert full.tg_id == "1001"
    assert full.current_level == 3
    assert full.effective_ths == "3456.5"
    assert full.total_asics == 15
    assert full.missing_asics == 4
    assert full.progress_percent == pytest.approx(72.5)
    assert full.person_created_at is None
    assert full.tg_photo_url == "https://t.me/p.jpg"

    assert empty == AsicKpiUser()
    assert empty.username == ""
    assert empty.effective_ths == "0"
    assert empty.current_level == 0


def test_kpi_rows_filter_on_parsed_level():
    """Only rows whose current level parses to the requested level are kept."""
    rows = [
        {"person_id": 1, "current_level": "2"},
        {"person_id": 2, "current_level": 2},
        {"person_id": 3, "current_level": "3"},
        {"person_id": 4, "current_level": "junk"},
        {"person_id": 5},
        "not-a-row",
    ]
    assert [row.person_id for row in normalize_kpi_rows(rows, 2)] == [1, 2]
    assert normalize_kpi_rows(rows, 0) == []
    assert [row.person_id for row in normalize_kpi_rows(rows)] == [1, 2, 3, 4, 5, 0]


def test_ref_kpi_rows_carry_referral_totals():
    """Referral KPI rows expose total_referrals and no ASIC progress columns."""
    (row,) = normalize_kpi_rows([{"person_id": 8, "current_level": 1, "total_referrals": "9"}], 1, kind="ref")
    assert isinstance(row, RefKpiUser)
    assert row.total_referrals == 9
    assert not hasattr(row, "required_asics_for_next_level")


def test_kpi_rows_reject_unknown_kind():
    """Only the asic and ref KPI tables exist."""
    with pytest.raises(ValueError):
        normalize_kpi_rows([], kind="ref3")
