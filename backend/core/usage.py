from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from backend.core.mortgage import round_half_up
from backend.core.supabase_repo import SupabaseRepo


LOGGER = logging.getLogger(__name__)

UNLIMITED = -1
DEFAULT_TIER = "individual"
DEFAULT_TIER_DISPLAY_NAME = "Agente Individual"


class FeatureType(str, Enum):
    PROPERTY_ANALYSIS = "propertyAnalysis"
    AD_GENERATION = "adGeneration"
    VOICE_QUERIES = "voiceQueries"
    CONTRACTS = "contracts"


TIER_LIMITS: dict[str, dict[FeatureType, int]] = {
    "individual": {
        FeatureType.PROPERTY_ANALYSIS: 50,
        FeatureType.AD_GENERATION: 100,
        FeatureType.VOICE_QUERIES: 20,
        FeatureType.CONTRACTS: 10,
    },
    "small_agency": {
        FeatureType.PROPERTY_ANALYSIS: 200,
        FeatureType.AD_GENERATION: 400,
        FeatureType.VOICE_QUERIES: 80,
        FeatureType.CONTRACTS: 40,
    },
    "corporate": {
        FeatureType.PROPERTY_ANALYSIS: 1000,
        FeatureType.AD_GENERATION: 2000,
        FeatureType.VOICE_QUERIES: 400,
        FeatureType.CONTRACTS: 200,
    },
    "enterprise": {feature: UNLIMITED for feature in FeatureType},
}

_FEATURE_NAMES = {
    "es": {
        FeatureType.PROPERTY_ANALYSIS: "análisis de propiedades",
        FeatureType.AD_GENERATION: "generación de anuncios",
        FeatureType.VOICE_QUERIES: "consultas de voz",
        FeatureType.CONTRACTS: "generación de contratos",
    },
    "en": {
        FeatureType.PROPERTY_ANALYSIS: "property analyses",
        FeatureType.AD_GENERATION: "ad generation",
        FeatureType.VOICE_QUERIES: "voice queries",
        FeatureType.CONTRACTS: "contract generation",
    },
}


@dataclass(slots=True)
class UsageCheck:
    allowed: bool
    current: int
    limit: int
    percentage: int
    tier_name: str


@dataclass(slots=True)
class FeatureUsage:
    current: int
    limit: int
    percentage: int


@dataclass(slots=True)
class UsageStats:
    tier_name: str
    tier_display_name: str
    features: dict[FeatureType, FeatureUsage]


def resolve_tier(tier: str | None) -> str:
    return tier if tier in TIER_LIMITS else DEFAULT_TIER


def usage_percentage(current: int, limit: int) -> int:
    if limit == UNLIMITED or limit <= 0:
        return 0
    return round_half_up(current / limit * 100)


def evaluate_usage(tier: str | None, feature: FeatureType, current: int) -> UsageCheck:
    tier_name = resolve_tier(tier)
    limit = TIER_LIMITS[tier_name][feature]
    if limit == UNLIMITED:
        return UsageCheck(allowed=True, current=0, limit=UNLIMITED, percentage=0, tier_name=tier_name)
    return UsageCheck(
        allowed=current < limit,
        current=current,
        limit=limit,
        percentage=usage_percentage(current, limit),
        tier_name=tier_name,
    )


def is_approaching_limit(percentage: int) -> bool:
    return 80 <= percentage < 100


def is_limit_reached(percentage: int) -> bool:
    return percentage >= 100


def limit_reached_message(feature: FeatureType, current: int, limit: int, lang: str = "es") -> str:
    if lang == "es":
        name = _FEATURE_NAMES["es"][feature]
        return f"Has alcanzado el límite mensual de {name} ({current}/{limit}). Actualiza tu plan para continuar."
    name = _FEATURE_NAMES["en"][feature]
    return f"You've reached the monthly limit for {name} ({current}/{limit}). Upgrade your plan to continue."


def check_usage_limit(repo: SupabaseRepo, agency_id: str, feature: FeatureType) -> UsageCheck:
    """
    Fails open: a lookup error allows the action and is only logged.
    """
    try:
        tier = resolve_tier(repo.get_agency_tier(agency_id))
        if TIER_LIMITS[tier][feature] == UNLIMITED:
            return evaluate_usage(tier, feature, 0)
        current = repo.get_current_usage(agency_id, feature.value)
        return evaluate_usage(tier, feature, current)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Usage check failed agency=%s feature=%s: %s", agency_id, feature.value, exc)
        return UsageCheck(allowed=True, current=0, limit=0, percentage=0, tier_name=DEFAULT_TIER)


def record_usage(repo: SupabaseRepo, agency_id: str, user_id: str, feature: FeatureType) -> bool:
    try:
        repo.increment_usage(agency_id, user_id, feature.value)
        return True
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Usage increment failed agency=%s feature=%s: %s", agency_id, feature.value, exc)
        return False


def get_usage_stats(repo: SupabaseRepo, agency_id: str) -> UsageStats:
    tier = resolve_tier(repo.get_agency_tier(agency_id))
    display_name = repo.get_tier_display_name(tier) or DEFAULT_TIER_DISPLAY_NAME
    features: dict[FeatureType, FeatureUsage] = {}
    for feature, limit in TIER_LIMITS[tier].items():
        current = repo.get_current_usage(agency_id, feature.value)
        features[feature] = FeatureUsage(
            current=current,
            limit=limit,
            percentage=usage_percentage(current, limit),
        )
    return UsageStats(tier_name=tier, tier_display_name=display_name, features=features)
