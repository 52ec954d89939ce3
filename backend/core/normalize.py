from __future__ import annotations

from datetime import datetime, timezone
import re
from typing import Any

from backend.core.models import Layout, Listing, Locality, OperationType, PropertyStatus, PropertyType


_FRACTION_RE = re.compile(r"\.(\d+)(?=[+-]|$)")
_SHORT_OFFSET_RE = re.compile(r"(:\d{2}(?:\.\d+)?[+-]\d{2})$")

# Values written by the Spanish-language dashboard.
_LEGACY_PROPERTY_TYPES = {
    "CASA": PropertyType.HOUSE,
    "DEPARTAMENTO": PropertyType.APARTMENT,
    "TERRENO": PropertyType.LAND,
    "LOCAL": PropertyType.COMMERCIAL,
    "OFICINA": PropertyType.OFFICE,
    "BODEGA": PropertyType.WAREHOUSE,
    "RANCHO": PropertyType.RANCH,
    "EDIFICIO": PropertyType.BUILDING,
}
_LEGACY_OPERATIONS = {
    "VENTA": OperationType.SALE,
    "RENTA": OperationType.RENT,
    "TRASPASO": OperationType.TRANSFER,
}
_LEGACY_STATUSES = {
    "DISPONIBLE": PropertyStatus.AVAILABLE,
    "APARTADA": PropertyStatus.RESERVED,
    "VENDIDA": PropertyStatus.SOLD,
    "RENTADA": PropertyStatus.RENTED,
}


def row_to_listing(row: dict[str, Any]) -> Listing | None:
    """
    Map a `properties` row to a Listing; None when the row cannot be ranked.
    """
    listing_id = row.get("id")
    if listing_id is None or str(listing_id).strip() == "":
        return None
    category = _parse_enum(row.get("type"), PropertyType, _LEGACY_PROPERTY_TYPES)
    deal_kind = _parse_enum(row.get("operation"), OperationType, _LEGACY_OPERATIONS)
    if category is None or deal_kind is None:
        return None
    status = _parse_enum(row.get("status"), PropertyStatus, _LEGACY_STATUSES) or PropertyStatus.AVAILABLE

    address = row.get("address") if isinstance(row.get("address"), dict) else {}
    specs = row.get("specs") if isinstance(row.get("specs"), dict) else {}

    return Listing(
        id=str(listing_id),
        category=category,
        deal_kind=deal_kind,
        locality=Locality(
            country=_clean_text(address.get("country")),
            region=_clean_text(address.get("state") or address.get("region")),
            city=_clean_text(address.get("city")),
            neighborhood=_clean_text(address.get("colony") or address.get("neighborhood")),
        ),
        layout=Layout(
            bedrooms=_non_negative_int(specs.get("bedrooms")),
            bathrooms=_non_negative_float(specs.get("bathrooms")),
            total_area_m2=_non_negative_float(specs.get("m2Total", specs.get("m2_total"))),
            built_area_m2=_non_negative_float(specs.get("m2Built", specs.get("m2_built"))),
            parking=_non_negative_int(specs.get("parking")),
        ),
        amenities=_parse_amenities(row.get("amenities")),
        sale_price=_safe_float(row.get("sale_price")),
        rent_price=_safe_float(row.get("rent_price")),
        title=str(row.get("title") or ""),
        status=status,
        currency=str(row.get("currency") or "MXN"),
        views=_non_negative_int(row.get("views")),
        favorites=_non_negative_int(row.get("favorites")),
        date_added=_parse_dt(row.get("date_added")),
        agent_id=_clean_text(row.get("agent_id")),
        agency_id=_clean_text(row.get("agency_id")),
    )


def similar_to_record(
    reference: Listing,
    candidate: Listing,
    rank: int,
    points: int,
    computed_at: datetime | None = None,
) -> dict[str, Any]:
    return {
        "property_id": reference.id,
        "similar_property_id": candidate.id,
        "rank": rank,
        "score": points,
        "computed_at": (computed_at or datetime.now(timezone.utc)).isoformat(),
    }


def _parse_enum(value: Any, enum_cls: Any, legacy: dict[str, Any]) -> Any:
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return None
    key = value.strip().upper()
    if key in legacy:
        return legacy[key]
    try:
        return enum_cls(key)
    except ValueError:
        return None


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _safe_float(value: Any) -> float | None:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _non_negative_float(value: Any) -> float:
    parsed = _safe_float(value)
    return parsed if parsed is not None and parsed > 0 else 0.0


def _non_negative_int(value: Any) -> int:
    try:
        parsed = int(float(value)) if value is not None else 0
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(parsed, 0)


def _parse_amenities(value: Any) -> frozenset[str]:
    # Sheet-synced rows store amenities as one comma-separated string.
    if isinstance(value, str):
        items: Any = value.split(",")
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = value
    else:
        return frozenset()
    return frozenset(str(item).strip() for item in items if str(item).strip())


def _parse_dt(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(_to_iso(value))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def _to_iso(value: str) -> str:
    # Python 3.10 fromisoformat needs exactly 6 fraction digits and an hh:mm offset.
    text = value.strip().replace("Z", "+00:00").replace(" ", "T", 1)
    text = _FRACTION_RE.sub(lambda match: "." + match.group(1).ljust(6, "0")[:6], text)
    return _SHORT_OFFSET_RE.sub(r"\1:00", text)
