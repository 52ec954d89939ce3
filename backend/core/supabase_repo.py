from __future__ import annotations

import os
from typing import Any

from supabase import Client, create_client


PROPERTY_COLUMNS = (
    "id, title, type, operation, status, address, specs, amenities, sale_price, rent_price, "
    "currency, views, favorites, date_added, agent_id, agency_id"
)


class SupabaseRepo:
    def __init__(self, url: str | None = None, service_role_key: str | None = None) -> None:
        supabase_url = url or os.environ.get("SUPABASE_URL")
        supabase_key = service_role_key or os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
        if not supabase_url or not supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required.")
        self.client: Client = create_client(supabase_url, supabase_key)

    def get_properties(self, agency_id: str | None = None) -> list[dict[str, Any]]:
        query = self.client.table("properties").select(PROPERTY_COLUMNS)
        if agency_id:
            query = query.eq("agency_id", agency_id)
        return query.order("date_added", desc=True).execute().data or []

    def get_available_properties(self) -> list[dict[str, Any]]:
        # Public portal catalog across every agency.
        return (
            self.client.table("properties")
            .select(PROPERTY_COLUMNS)
            .in_("status", ["AVAILABLE", "DISPONIBLE"])
            .order("date_added", desc=True)
            .execute()
            .data
            or []
        )

    def replace_similar_properties(self, property_id: str, rows: list[dict[str, Any]]) -> None:
        # Write the new set before pruning so a failed write keeps the previous rows.
        if rows:
            self.client.table("similar_properties").upsert(
                rows, on_conflict="property_id,similar_property_id"
            ).execute()
        stale = self.client.table("similar_properties").delete().eq("property_id", property_id)
        keep_ids = [str(row["similar_property_id"]) for row in rows]
        if keep_ids:
            stale = stale.not_.in_("similar_property_id", keep_ids)
        stale.execute()

    def get_agency_tier(self, agency_id: str) -> str | None:
        rows = (
            self.client.table("agencies")
            .select("subscription_tier")
            .eq("id", agency_id)
            .limit(1)
            .execute()
            .data
            or []
        )
        return rows[0].get("subscription_tier") if rows else None

    def get_tier_display_name(self, tier_name: str) -> str | None:
        rows = (
            self.client.table("subscription_tiers")
            .select("display_name")
            .eq("name", tier_name)
            .limit(1)
            .execute()
            .data
            or []
        )
        return rows[0].get("display_name") if rows else None

    def get_current_usage(self, agency_id: str, feature_type: str) -> int:
        response = self.client.rpc(
            "get_current_usage",
            {"p_agency_id": agency_id, "p_feature_type": feature_type},
        ).execute()
        return int(response.data or 0)

    def increment_usage(self, agency_id: str, user_id: str, feature_type: str) -> None:
        self.client.rpc(
            "increment_usage",
            {"p_agency_id": agency_id, "p_user_id": user_id, "p_feature_type": feature_type},
        ).execute()
