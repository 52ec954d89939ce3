from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Sequence

from backend.core.models import Listing, OperationType, PropertyStatus, PropertyType


MAX_COMPARED = 3

# (criterion, better-when) pairs in display order.
COMPARISON_CRITERIA: tuple[tuple[str, str], ...] = (
    ("price", "min"),
    ("price_per_m2", "min"),
    ("built_area_m2", "max"),
    ("bedrooms", "max"),
    ("bathrooms", "max"),
    ("parking", "max"),
)


@dataclass(slots=True)
class MarketInsights:
    average_price: float
    average_price_per_m2: float
    type_distribution: dict[PropertyType, int] = field(default_factory=dict)


@dataclass(slots=True)
class InventoryStats:
    total: int
    available: int
    sale: int
    rent: int


def market_insights(listings: Sequence[Listing]) -> MarketInsights:
    if not listings:
        return MarketInsights(average_price=0.0, average_price_per_m2=0.0)

    average_price = sum(listing.price for listing in listings) / len(listings)

    per_m2 = [
        listing.price / listing.layout.built_area_m2
        for listing in listings
        if listing.layout.built_area_m2 > 0
    ]
    average_price_per_m2 = sum(per_m2) / len(per_m2) if per_m2 else 0.0

    return MarketInsights(
        average_price=average_price,
        average_price_per_m2=average_price_per_m2,
        type_distribution=dict(Counter(listing.category for listing in listings)),
    )


def inventory_stats(listings: Sequence[Listing]) -> InventoryStats:
    return InventoryStats(
        total=len(listings),
        available=sum(1 for x in listings if x.status is PropertyStatus.AVAILABLE),
        sale=sum(1 for x in listings if x.deal_kind is OperationType.SALE),
        rent=sum(1 for x in listings if x.deal_kind is OperationType.RENT),
    )


@dataclass(slots=True)
class ListingComparison:
    listings: list[Listing]
    values: dict[str, list[float]]
    winners: dict[str, int]
    best: Listing


def price_per_built_m2(listing: Listing) -> float:
    return listing.price / (listing.layout.built_area_m2 or 1)


def compare_listings(listings: Sequence[Listing]) -> ListingComparison:
    """
    Side-by-side comparison of two or three listings.

    `winners` maps each criterion to the index of the better listing; ties go
    to the earliest one. `best` is the listing with the lowest price per built m².
    """
    items = list(listings)
    if not 2 <= len(items) <= MAX_COMPARED:
        raise ValueError(f"compare_listings needs 2 to {MAX_COMPARED} listings, got {len(items)}.")

    values = {
        "price": [x.price for x in items],
        "price_per_m2": [price_per_built_m2(x) for x in items],
        "built_area_m2": [x.layout.built_area_m2 for x in items],
        "bedrooms": [float(x.layout.bedrooms) for x in items],
        "bathrooms": [float(x.layout.bathrooms) for x in items],
        "parking": [float(x.layout.parking) for x in items],
    }
    winners = {}
    for criterion, mode in COMPARISON_CRITERIA:
        # A third listing with a zero value sits out every criterion except price per m².
        skip_zero_third = criterion != "price_per_m2"
        winners[criterion] = _winner_index(values[criterion], mode, skip_zero_third)

    return ListingComparison(
        listings=items,
        values=values,
        winners=winners,
        best=items[_winner_index(values["price_per_m2"], "min", skip_zero_third=False)],
    )


def _winner_index(values: list[float], mode: str, skip_zero_third: bool) -> int:
    candidates = list(values)
    if skip_zero_third and len(candidates) == MAX_COMPARED and not candidates[2]:
        candidates = candidates[:2]
    target = min(candidates) if mode == "min" else max(candidates)
    return candidates.index(target)
