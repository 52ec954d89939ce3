from __future__ import annotations

from typing import Callable, Sequence

from backend.core.models import Listing


DEFAULT_MAX_RESULTS = 4
BASELINE_POINTS = 50
MAX_AMENITY_POINTS = 10

Criterion = Callable[[Listing, Listing], int]


def baseline_points(reference: Listing, candidate: Listing) -> int:
    return BASELINE_POINTS


def price_points(reference: Listing, candidate: Listing) -> int:
    base_price = reference.price
    compare_price = candidate.price
    if base_price <= 0 or compare_price <= 0:
        return 0
    diff_ratio = abs(base_price - compare_price) / base_price
    if diff_ratio <= 0.2:
        return 30
    if diff_ratio <= 0.4:
        return 15
    return 0


def location_points(reference: Listing, candidate: Listing) -> int:
    base = reference.locality
    compare = candidate.locality
    if base.city == compare.city:
        if base.neighborhood == compare.neighborhood:
            return 30
        return 20
    if base.region == compare.region:
        return 5
    return 0


def bedroom_points(reference: Listing, candidate: Listing) -> int:
    diff = abs(reference.layout.bedrooms - candidate.layout.bedrooms)
    if diff == 0:
        return 15
    if diff == 1:
        return 8
    return 0


def bathroom_points(reference: Listing, candidate: Listing) -> int:
    diff = abs(reference.layout.bathrooms - candidate.layout.bathrooms)
    if diff == 0:
        return 10
    if diff <= 1:
        return 5
    return 0


def area_points(reference: Listing, candidate: Listing) -> int:
    base_area = reference.layout.total_area_m2
    compare_area = candidate.layout.total_area_m2
    if base_area <= 0 or compare_area <= 0:
        return 0
    diff_ratio = abs(base_area - compare_area) / base_area
    if diff_ratio <= 0.2:
        return 10
    if diff_ratio <= 0.4:
        return 5
    return 0


def amenity_points(reference: Listing, candidate: Listing) -> int:
    shared = len(reference.amenities & candidate.amenities)
    return min(shared, MAX_AMENITY_POINTS)


# Evaluated in order once both hard gates pass.
CRITERIA: tuple[tuple[str, Criterion], ...] = (
    ("baseline", baseline_points),
    ("price", price_points),
    ("location", location_points),
    ("bedrooms", bedroom_points),
    ("bathrooms", bathroom_points),
    ("area", area_points),
    ("amenities", amenity_points),
)


def passes_gates(reference: Listing, candidate: Listing) -> bool:
    return reference.category == candidate.category and reference.deal_kind == candidate.deal_kind


def score_breakdown(reference: Listing, candidate: Listing) -> dict[str, int]:
    """
    Points per criterion, or an empty dict when category or deal kind differ.
    """
    if not passes_gates(reference, candidate):
        return {}
    return {name: criterion(reference, candidate) for name, criterion in CRITERIA}


def score(reference: Listing, candidate: Listing) -> int:
    """
    Relevance of candidate to reference. 0 means not comparable.

    Price and area ratios are taken against the reference, so the score is
    not symmetric in its arguments.
    """
    return sum(score_breakdown(reference, candidate).values())


def score_pool(reference: Listing, pool: Sequence[Listing]) -> list[tuple[Listing, int]]:
    """
    Non-zero scores for every pool member other than the reference, best first.
    """
    scored = [
        (candidate, score(reference, candidate))
        for candidate in pool
        if candidate.id != reference.id
    ]
    ranked = [item for item in scored if item[1] > 0]
    # list.sort is stable: equal scores keep their pool order.
    ranked.sort(key=lambda item: item[1], reverse=True)
    return ranked


def rank_similar(reference: Listing, pool: Sequence[Listing], limit: int = DEFAULT_MAX_RESULTS) -> list[Listing]:
    if limit <= 0:
        raise ValueError("limit must be a positive integer.")
    return [candidate for candidate, _ in score_pool(reference, pool)[:limit]]
