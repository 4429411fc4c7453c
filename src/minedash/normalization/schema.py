"""Canonical record definitions produced by the normalizer.

Every model here is frozen: records are built once from a raw webhook row
and then only read by the rendering and export layers.
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class CanonicalOrder(BaseModel):
    """One entry of a user's shop order history."""

    model_config = ConfigDict(frozen=True)

    order_id: str | None = None
    item_code: str = ""
    status: str = "pending"
    amount_points: float = 0.0
    amount_ton: float = 0.0
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: str | None = None


class CanonicalUser(BaseModel):
    """Fully normalized player record.

    Attributes:
        person_id: Numeric game identity (``0`` when no id key parsed).
        total_hashrate: Always ``total_asics * 234``.
        level: Non-negative level, or ``None`` when the raw level is absent.
        transactions: Transaction history, unwrapped from any JSON encoding.
        orders: Order history, each entry independently normalized.
    """

    model_config = ConfigDict(frozen=True)

    person_id: int = 0
    person_language: str = "en"
    wallet_address: str | None = None
    hex_wallet_address: str | None = None
    is_premium: bool = False
    premium_until: str | None = None
    onboarding_done: bool = False
    person_created_at: str = ""
    person_updated_at: str = ""

    tg_id: str = ""
    first_name: str = ""
    last_name: str = ""
    username: str = "Unknown"
    tg_language: str = "en"
    tg_premium: bool = False
    photo_url: str | None = None
    tg_created_at: str = ""
    tg_updated_at: str = ""

    total_asics: int = 0
    total_hashrate: int = 0
    level: int | None = Field(default=None, ge=0)
    effective_hashrate: float = 0.0
    progress: float = 0.0
    level_updated_at: str | None = None
    ownership_details: List[Any] = Field(default_factory=list)

    total_balance: float = 0.0
    balance_by_asset: Dict[str, Any] = Field(default_factory=dict)
    assets_metadata: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    balance_history: Dict[str, Any] = Field(default_factory=dict)
    last_transaction: Any = None
    transactions: List[Any] = Field(default_factory=list)
    transactions_by_type: Dict[str, Any] = Field(default_factory=dict)

    mining_summary: Dict[str, Any] = Field(default_factory=dict)
    last_mining: Any = None
    checkin_summary: Dict[str, Any] = Field(default_factory=dict)
    streak_summary: Dict[str, Any] = Field(default_factory=dict)
    participation_summary: Dict[str, Any] = Field(default_factory=dict)

    poke_sent_count: int = 0
    poke_received_count: int = 0
    poke_rewards: List[Any] = Field(default_factory=list)

    total_referrals: int = 0
    referees: List[Any] = Field(default_factory=list)

    total_orders: int = 0
    total_points_spent: float = 0.0
    total_ton_spent: float = 0.0
    orders: List[CanonicalOrder] = Field(default_factory=list)


class LeaderboardEntry(BaseModel):
    """Row of the hash-rate leaderboard."""

    model_config = ConfigDict(frozen=True)

    rank: int
    user_id: int | None = None
    username: str = "Unknown"
    asic_count: int = 0
    hashrate: float = 0.0
    avatar_url: str | None = None


class LevelStat(BaseModel):
    """Number of users at one level and their share of the population."""

    model_config = ConfigDict(frozen=True)

    level: int = Field(ge=0)
    users_at_level: int = Field(default=0, ge=0)
    percentage_of_total: str = "0.00%"


class _KpiUserBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    person_id: int = 0
    tg_id: str = ""
    username: str = ""
    first_name: str = ""
    last_name: str = ""
    current_level: int = 0
    effective_ths: str = "0"
    total_asics: int = 0
    person_created_at: str | None = None
    tg_photo_url: str | None = None


class AsicKpiUser(_KpiUserBase):
    """Row of the per-level ASIC KPI table.

    ``required_asics_for_next_level`` is ``None`` when the source leaves it
    blank or it cannot be parsed, for example at the top level.
    """

    required_asics_for_next_level: int | None = None
    missing_asics: int = 0
    progress_percent: float = 0.0


class RefKpiUser(_KpiUserBase):
    """Row of the per-level referral KPI table."""

    total_referrals: int = 0


__all__ = ["AsicKpiUser", "CanonicalOrder", "CanonicalUser", "LeaderboardEntry", "LevelStat", "RefKpiUser"]
