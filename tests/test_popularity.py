"""Tests for the popularity ranker and its rating fallback."""

from datetime import datetime, timedelta, timezone

from hybridrec.recommender.models import Algorithm
from hybridrec.recommender.popularity import PopularityRanker, popularity_weight


def test_popularity_weights_differ_from_collaborative_scale():
    assert popularity_weight("purchase") == 5
    assert popularity_weight("like") == 3
    assert popularity_weight("cart") == 2
    assert popularity_weight("view") == 1
    assert popularity_weight("unknown") == 1


def test_rank_orders_by_weighted_volume(shop_store):
    items = PopularityRanker(shop_store).rank(4)

    assert [item.product_id for item in items] == [2, 3, 5, 8]
    assert [item.score for item in items] == [9.0, 6.0, 6.0, 5.0]
    assert all(item.algorithm == Algorithm.POPULARITY for item in items)
    assert items[0].explanation == "Popular and trending product"


def test_rank_excludes_ids(shop_store):
    items = PopularityRanker(shop_store).rank(10, exclude_ids=[1, 2])

    assert [item.product_id for item in items] == [3, 5, 8, 6, 4, 7]


def test_window_is_measured_from_clock(shop_store, now):
    ranker = PopularityRanker(shop_store, window_days=1, clock=lambda: now)

    items = ranker.rank(10)

    # last 24 hours: 2 and 3 purchased, 6 liked, 1 viewed twice, 7 carted
    assert [item.product_id for item in items] == [2, 3, 6, 1, 7]


def test_aggregation_failure_uses_rating_fallback(failing_store_factory):
    store = failing_store_factory("aggregate_interactions_by_product")

    items = PopularityRanker(store).rank(3)

    assert [item.product_id for item in items] == [2, 3, 7]
    assert all(item.algorithm == Algorithm.RATING for item in items)
    assert items[0].explanation == "Highly rated product"


def test_empty_window_uses_rating_fallback(shop_store):
    future = datetime.now(timezone.utc) + timedelta(days=365)
    ranker = PopularityRanker(shop_store, clock=lambda: future)

    items = ranker.rank(2, exclude_ids=[2])

    assert [item.product_id for item in items] == [3, 7]
    assert items[0].algorithm == Algorithm.RATING


def test_empty_catalog_returns_empty(empty_store):
    assert PopularityRanker(empty_store).rank(5) == []


def test_total_store_failure_returns_empty(failing_store_factory):
    store = failing_store_factory(
        "aggregate_interactions_by_product", "find_products_sorted_by_rating"
    )

    assert PopularityRanker(store).rank(5) == []
