from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from backend.core.models import Listing, OperationType, PropertyStatus, PropertyType


PRICE_CEILING = 999_999_999
SORT_KEYS = ("date", "price", "views")


@dataclass(slots=True)
class ListingQuery:
    text: str = ""
    category: PropertyType | None = None
    deal_kind: OperationType | None = None
    status: PropertyStatus | None = None
    min_bedrooms: int | None = None
    min_bathrooms: float | None = None
    price_min: float = 0
    price_max: float = PRICE_CEILING
    country: str | None = None
    city: str | None = None
    neighborhood: str | None = None
    sort_by: str = "date"


def search_price(listing: Listing) -> float:
    # Inventory search reads rent only for rentals; transfers are quoted on the sale price.
    if listing.deal_kind is OperationType.RENT:
        return listing.rent_price or 0.0
    return listing.sale_price or 0.0


def matches(listing: Listing, query: ListingQuery) -> bool:
    needle = query.text.strip().lower()
    if needle and not any(
        needle in (value or "").lower()
        for value in (listing.title, listing.locality.neighborhood, listing.locality.city)
    ):
        return False
    if query.category is not None and listing.category != query.category:
        return False
    if query.deal_kind is not None and listing.deal_kind != query.deal_kind:
        return False
    if query.status is not None and listing.status != query.status:
        return False
    if query.min_bedrooms is not None and listing.layout.bedrooms < query.min_bedrooms:
        return False
    if query.min_bathrooms is not None and listing.layout.bathrooms < query.min_bathrooms:
        return False
    if not (query.price_min <= search_price(listing) <= query.price_max):
        return False
    if query.country and listing.locality.country != query.country:
        return False
    if query.city and query.city.lower() not in (listing.locality.city or "").lower():
        return False
    if query.neighborhood and query.neighborhood.lower() not in (listing.locality.neighborhood or "").lower():
        return False
    return True


def sort_listings(listings: Iterable[Listing], sort_by: str = "date") -> list[Listing]:
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unsupported sort key: {sort_by!r}")
    items = list(listings)
    if sort_by == "price":
        items.sort(key=search_price, reverse=True)
    elif sort_by == "views":
        items.sort(key=lambda listing: listing.views or 0, reverse=True)
    else:
        items.sort(key=lambda listing: _date_key(listing.date_added), reverse=True)
    return items


def filter_listings(listings: Iterable[Listing], query: ListingQuery | None = None) -> list[Listing]:
    resolved = query or ListingQuery()
    return sort_listings((listing for listing in listings if matches(listing, resolved)), resolved.sort_by)


def _date_key(value: datetime | None) -> tuple[bool, datetime]:
    # Undated listings sort after every dated one.
    if value is None:
        return False, datetime.min.replace(tzinfo=timezone.utc)
    if value.tzinfo is None:
        return True, value.replace(tzinfo=timezone.utc)
    return True, value
