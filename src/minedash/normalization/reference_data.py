"""Reference data for normalization.

Rule tables listing, for every canonical field, the raw keys that different
webhook versions have used for it (first match wins), plus the fixed
business constants applied while normalizing.
"""

from minedash.normalization.rules import FieldRule

# One ASIC unit contributes this many hash-rate units (Th).
HASHRATE_PER_ASIC = 234

# Legacy asset labels rewritten in ``assets_metadata``.
LEGACY_ASSET_LABELS = {
    "ECOScoin": "XP",
}

USER_FIELD_RULES = (
    FieldRule("person_id", ("person_id", "user_id", "id"), "int", default=0),
    FieldRule("person_language", ("person_language", "language"), "str", default="en"),
    FieldRule("wallet_address", ("wallet_address", "wallet"), "optional_str"),
    FieldRule("hex_wallet_address", ("hex_wallet_address", "hex_wallet"), "optional_str"),
    FieldRule("is_premium", ("is_ecos_premium", "ecos_premium"), "bool"),
    FieldRule("premium_until", ("ecos_premium_until", "premium_until"), "optional_str"),
    FieldRule("onboarding_done", ("onbording_done", "onboarding_done"), "bool"),
    FieldRule("person_created_at", ("person_created_at", "created_at", "registered_at"), "str", default=""),
    FieldRule("person_updated_at", ("person_updated_at", "updated_at"), "str", default=""),
    FieldRule("tg_id", ("tg_id", "telegram_id", "telegramId"), "str", default=""),
    FieldRule("first_name", ("first_name", "firstName"), "str", default=""),
    FieldRule("last_name", ("last_name", "lastName"), "str", default=""),
    FieldRule("username", ("username", "tg_username", "name"), "str", default="Unknown"),
    FieldRule("tg_language", ("tg_language", "telegram_language", "language"), "str", default="en"),
    FieldRule("tg_premium", ("tg_premium", "telegram_premium"), "bool"),
    FieldRule("photo_url", ("photo_url", "avatar_url", "avatar", "tg_photo_url"), "optional_str"),
    FieldRule("tg_created_at", ("tg_created_at", "telegram_created_at", "person_created_at"), "str", default=""),
    FieldRule("tg_updated_at", ("tg_updated_at", "telegram_updated_at", "person_updated_at"), "str", default=""),
    FieldRule("total_asics", ("total_asics", "total_asics_count", "asic_count", "asics"), "int", default=0),
    # Absent level stays unknown (None); a present but unparsable level becomes 0.
    FieldRule("level", ("level",), "int", default=None, fallback=0),
    FieldRule("effective_hashrate", ("effective_ths", "effective_th"), "float", default=0.0),
    FieldRule("progress", ("progress_cached", "progress"), "float", default=0.0),
    FieldRule("level_updated_at", ("level_updated_at",), "optional_str"),
    FieldRule("ownership_details", ("ownership_details",), "array", default=[]),
    FieldRule("total_balance", ("total_balance",), "float", default=0.0),
    FieldRule("balance_by_asset", ("balance_by_asset",), "map", default={}),
    FieldRule("assets_metadata", ("assets_metadata",), "map", default={}),
    FieldRule("balance_history", ("balance_history",), "map", default={}),
    FieldRule("last_transaction", ("last_transaction",), "raw"),
    FieldRule("transactions", ("all_transactions", "transactions"), "array", default=[]),
    FieldRule("transactions_by_type", ("transactions_by_type",), "map", default={}),
    FieldRule("mining_summary", ("mining_summary",), "map", default={}),
    FieldRule("last_mining", ("last_mining",), "raw"),
    FieldRule("checkin_summary", ("checkin_summary",), "map", default={}),
    FieldRule("streak_summary", ("streak_summary",), "map", default={}),
    FieldRule("participation_summary", ("participation_summary",), "map", default={}),
    FieldRule("poke_sent_count", ("poke_sent_count",), "int", default=0),
    FieldRule("poke_received_count", ("poke_received_count",), "int", default=0),
    FieldRule("poke_rewards", ("poke_rewards",), "array", default=[]),
    FieldRule("total_referrals", ("total_referrals",), "int", default=0),
    FieldRule("referees", ("referees",), "array", default=[]),
    FieldRule("total_orders", ("total_orders",), "int", default=0),
    FieldRule("total_points_spent", ("total_points_spent",), "float", default=0.0),
    FieldRule("total_ton_spent", ("total_ton_spent",), "float", default=0.0),
    FieldRule("orders", ("orders",), "array", default=[]),
)

ORDER_FIELD_RULES = (
    FieldRule("order_id", ("order_id", "id"), "optional_str"),
    FieldRule("item_code", ("item_code", "item", "product"), "str", default=""),
    FieldRule("status", ("status", "order_status"), "str", default="pending"),
    FieldRule("amount_points", ("amount_points", "points_spent", "points"), "float", default=0.0),
    FieldRule("amount_ton", ("amount_ton", "ton_spent", "ton"), "float", default=0.0),
    FieldRule("metadata", ("metadata",), "map", default={}),
    FieldRule("created_at", ("created_at", "order_created_at"), "optional_str"),
)

LEADERBOARD_FIELD_RULES = (
    FieldRule("rank", ("rank",), "int", default=None, fallback=None),
    FieldRule("user_id", ("user_id", "id"), "int", default=None, fallback=None),
    FieldRule("username", ("username", "tg_username"), "str", default="Unknown"),
    FieldRule("asic_count", ("asic_count", "asics"), "int", default=0),
    FieldRule("hashrate", ("th", "total_th"), "float", default=0.0),
    FieldRule("avatar_url", ("avatar_url", "tg_photo_url"), "optional_str"),
)

LEVEL_STAT_FIELD_RULES = (
    # Rows whose level cannot be parsed are dropped, hence no fallback.
    FieldRule("level", ("level",), "int", default=None, fallback=None),
    FieldRule("users_at_level", ("users_per_level", "users_at_level", "count"), "int", default=0),
    FieldRule("percentage_of_total", ("percentage", "percentage_of_total"), "raw"),
)

# Identity and progress columns shared by the ASIC and referral KPI tables.
_KPI_BASE_FIELD_RULES = (
    FieldRule("person_id", ("person_id",), "int", default=0),
    FieldRule("tg_id", ("tg_id",), "str", default=""),
    FieldRule("username", ("username",), "str", default=""),
    FieldRule("first_name", ("first_name",), "str", default=""),
    FieldRule("last_name", ("last_name",), "str", default=""),
    # Kept nullable here so the level filter never matches an unparsable level.
    FieldRule("current_level", ("current_level",), "int", default=None, fallback=None),
    FieldRule("effective_ths", ("effective_ths",), "str", default="0"),
    FieldRule("total_asics", ("total_asics",), "int", default=0),
    FieldRule("person_created_at", ("person_created_at",), "optional_str"),
    FieldRule("tg_photo_url", ("tg_photo_url",), "optional_str"),
)

KPI_ASIC_FIELD_RULES = _KPI_BASE_FIELD_RULES + (
    FieldRule("required_asics_for_next_level", ("required_asics_for_next_level",), "int", default=None, fallback=None),
    FieldRule("missing_asics", ("missing_asics",), "int", default=0),
    FieldRule("progress_percent", ("progress_percent",), "float", default=0.0),
)

KPI_REF_FIELD_RULES = _KPI_BASE_FIELD_RULES + (
    FieldRule("total_referrals", ("total_referrals",), "int", default=0),
)
