import copy

import pytest

from backend.core.models import Layout, Listing, Locality, OperationType, PropertyType
from backend.core.similarity import (
    amenity_points,
    area_points,
    bathroom_points,
    bedroom_points,
    location_points,
    price_points,
    rank_similar,
    score,
    score_breakdown,
)


def _listing(listing_id="ref", **overrides):
    values = {
        "category": PropertyType.HOUSE,
        "deal_kind": OperationType.SALE,
        "sale_price": 1_000_000.0,
        "locality": Locality(country="MEXICO", region="Illinois", city="Springfield", neighborhood="Oak Hill"),
        "layout": Layout(bedrooms=3, bathrooms=2, total_area_m2=180.0),
        "amenities": frozenset({"pool", "garage"}),
    }
    values.update(overrides)
    return Listing(id=listing_id, **values)


def _dissimilar(listing_id, **overrides):
    values = {
        "sale_price": 10_000_000.0,
        "locality": Locality(country="USA", region="Texas", city="Austin", neighborhood="Downtown"),
        "layout": Layout(bedrooms=8, bathrooms=6, total_area_m2=0.0),
        "amenities": frozenset(),
    }
    values.update(overrides)
    return _listing(listing_id, **values)


def test_reference_scenario_scores_147():
    reference = _listing()
    candidate = _listing("a", sale_price=1_050_000.0)
    assert score(reference, candidate) == 147


def test_different_category_is_not_comparable():
    reference = _listing()
    candidate = _listing("b", category=PropertyType.APARTMENT)
    assert score(reference, candidate) == 0
    assert score_breakdown(reference, candidate) == {}
    assert rank_similar(reference, [candidate]) == []


def test_different_deal_kind_is_not_comparable():
    reference = _listing()
    candidate = _listing("b", deal_kind=OperationType.RENT, rent_price=1_000_000.0)
    assert score(reference, candidate) == 0


def test_same_gates_score_at_least_baseline():
    reference = _listing()
    candidate = _dissimilar("c")
    assert score(reference, candidate) == 50


def test_score_is_not_symmetric():
    a = _listing("a", sale_price=100.0)
    b = _listing("b", sale_price=150.0)
    assert price_points(a, b) == 0
    assert price_points(b, a) == 15
    assert score(a, b) != score(b, a)


def test_shared_amenities_are_capped_at_ten():
    tags = frozenset(f"tag-{i}" for i in range(15))
    reference = _listing(amenities=tags)
    candidate = _dissimilar("c", amenities=tags)
    assert amenity_points(reference, candidate) == 10
    assert score(reference, candidate) == 60


def test_price_points_thresholds():
    reference = _listing(sale_price=1000.0)
    assert price_points(reference, _listing("x", sale_price=1200.0)) == 30
    assert price_points(reference, _listing("x", sale_price=700.0)) == 15
    assert price_points(reference, _listing("x", sale_price=1500.0)) == 0
    assert price_points(reference, _listing("x", sale_price=None)) == 0
    assert price_points(_listing(sale_price=-5.0), _listing("x", sale_price=1000.0)) == 0


def test_rent_and_transfer_use_rent_price():
    reference = _listing(deal_kind=OperationType.TRANSFER, sale_price=None, rent_price=20_000.0)
    candidate = _listing("x", deal_kind=OperationType.TRANSFER, sale_price=20_000.0, rent_price=21_000.0)
    assert price_points(reference, candidate) == 30


def test_location_points_city_neighborhood_and_region():
    reference = _listing()
    same_city = Locality(region="Illinois", city="Springfield", neighborhood="Elm Park")
    same_region = Locality(region="Illinois", city="Chicago", neighborhood="Oak Hill")
    elsewhere = Locality(region="Ohio", city="Columbus", neighborhood="Oak Hill")
    assert location_points(reference, _listing("x")) == 30
    assert location_points(reference, _listing("x", locality=same_city)) == 20
    assert location_points(reference, _listing("x", locality=same_region)) == 5
    assert location_points(reference, _listing("x", locality=elsewhere)) == 0


def test_bedroom_and_bathroom_points():
    reference = _listing(layout=Layout(bedrooms=3, bathrooms=2))
    assert bedroom_points(reference, _listing("x", layout=Layout(bedrooms=4))) == 8
    assert bedroom_points(reference, _listing("x", layout=Layout(bedrooms=1))) == 0
    assert bathroom_points(reference, _listing("x", layout=Layout(bathrooms=2))) == 10
    assert bathroom_points(reference, _listing("x", layout=Layout(bathrooms=1))) == 5
    assert bathroom_points(reference, _listing("x", layout=Layout(bathrooms=4))) == 0


def test_area_points_use_reference_area():
    reference = _listing(layout=Layout(total_area_m2=100.0))
    assert area_points(reference, _listing("x", layout=Layout(total_area_m2=115.0))) == 10
    assert area_points(reference, _listing("x", layout=Layout(total_area_m2=135.0))) == 5
    assert area_points(reference, _listing("x", layout=Layout(total_area_m2=200.0))) == 0
    assert area_points(reference, _listing("x", layout=Layout(total_area_m2=0.0))) == 0


def test_rank_similar_excludes_reference_and_zero_scores():
    reference = _listing()
    pool = [
        _listing("ref"),
        _listing("apartment", category=PropertyType.APARTMENT),
        _listing("close", sale_price=1_050_000.0),
        _dissimilar("far"),
    ]
    ranked = rank_similar(reference, pool, limit=10)
    assert [item.id for item in ranked] == ["close", "far"]


def test_rank_similar_respects_limit():
    reference = _listing()
    pool = [_listing(f"c{i}") for i in range(6)]
    assert len(rank_similar(reference, pool)) == 4
    assert len(rank_similar(reference, pool, limit=2)) == 2


def test_rank_similar_keeps_pool_order_for_ties():
    reference = _listing()
    first = _dissimilar("first")
    best = _listing("best")
    second = _dissimilar("second")
    ranked = rank_similar(reference, [first, best, second], limit=3)
    assert [item.id for item in ranked] == ["best", "first", "second"]

    ranked = rank_similar(reference, [second, best, first], limit=3)
    assert [item.id for item in ranked] == ["best", "second", "first"]


def test_rank_similar_rejects_non_positive_limit():
    with pytest.raises(ValueError):
        rank_similar(_listing(), [_listing("x")], limit=0)


def test_scoring_and_ranking_leave_inputs_untouched():
    reference = _listing()
    pool = [_dissimilar("far"), _listing("ref"), _listing("close", sale_price=1_050_000.0)]
    reference_before = copy.deepcopy(reference)
    pool_before = copy.deepcopy(pool)
    pool_ids = [id(item) for item in pool]

    score(reference, pool[2])
    rank_similar(reference, pool, limit=1)

    assert reference == reference_before
    assert pool == pool_before
    assert [id(item) for item in pool] == pool_ids
