"""Tests for the in-memory data store and CSV loading."""

from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest

from hybridrec.recommender.models import Algorithm, Interaction
from hybridrec.recommender.popularity import PopularityRanker, popularity_weight
from hybridrec.recommender.store import InMemoryDataStore
from hybridrec.recommender.utils import (
    check_data_exists,
    load_data_store,
    save_data_store,
)


def test_find_interactions_most_recent_first(shop_store):
    interactions = shop_store.find_interactions(user_id=4)

    assert [i.product_id for i in interactions] == [3, 5, 6, 4, 8, 2]
    timestamps = [i.timestamp for i in interactions]
    assert timestamps == sorted(timestamps, reverse=True)


def test_find_interactions_filters_types_and_limit(shop_store):
    interactions = shop_store.find_interactions(
        user_id=2, types=["like", "purchase"], limit=1
    )

    assert len(interactions) == 1
    assert interactions[0].product_id == 3
    assert interactions[0].type == "purchase"
    assert interactions[0].rating == 4


def test_find_interactions_unknown_user_is_empty(shop_store):
    assert shop_store.find_interactions(user_id=999) == []


def test_find_users_excludes_target(shop_store):
    assert shop_store.find_users(exclude_user_id=1, limit=100) == [2, 3, 4, 5]
    assert shop_store.find_users(exclude_user_id=1, limit=2) == [2, 3]


def test_find_products_excluding_respects_limit(shop_store):
    products = shop_store.find_products_excluding({1, 2}, limit=3)

    assert [p.id for p in products] == [3, 4, 5]


def test_aggregate_interactions_by_product(shop_store, now):
    rows = shop_store.aggregate_interactions_by_product(
        since=now - timedelta(days=30), weight_fn=popularity_weight
    )

    assert [(pid, score) for pid, score, _ in rows] == [
        (2, 9.0),
        (3, 6.0),
        (5, 6.0),
        (8, 5.0),
        (6, 4.0),
        (4, 3.0),
        (1, 2.0),
        (7, 2.0),
    ]
    counts = {pid: count for pid, _, count in rows}
    assert counts[2] == 3
    assert counts[6] == 2  # the old purchase is outside the window


def test_aggregate_excludes_ids_before_limit(shop_store, now):
    rows = shop_store.aggregate_interactions_by_product(
        since=now - timedelta(days=30),
        weight_fn=popularity_weight,
        exclude_ids={2, 3},
        limit=2,
    )

    assert [pid for pid, _, _ in rows] == [5, 8]


def test_products_sorted_by_rating(shop_store):
    products = shop_store.find_products_sorted_by_rating(3, exclude_ids={2})

    assert [p.id for p in products] == [3, 7, 5]


def test_add_interaction_appends(shop_store, now):
    shop_store.add_interaction(Interaction(6, 8, "like", now, rating=5))

    interactions = shop_store.find_interactions(user_id=6)
    assert len(interactions) == 1
    assert interactions[0].rating == 5
    assert 6 in shop_store.find_users(exclude_user_id=None, limit=100)


def test_add_interaction_rejects_unknown_type(shop_store, now):
    with pytest.raises(ValueError):
        shop_store.add_interaction(Interaction(1, 1, "wishlist", now))


def test_users_derived_from_interactions_when_missing(now):
    products = pd.DataFrame([{"id": 1, "category": "Books", "price": 5.0}])
    interactions = pd.DataFrame(
        [
            {"user_id": 7, "product_id": 1, "type": "view", "timestamp": now},
            {"user_id": 3, "product_id": 1, "type": "like", "timestamp": now},
        ]
    )

    store = InMemoryDataStore(products, interactions)

    assert store.find_users(exclude_user_id=None, limit=10) == [3, 7]
    assert store.get_product(1).rating == 0.0


def test_missing_product_columns_raise():
    with pytest.raises(ValueError, match="missing required columns"):
        InMemoryDataStore(pd.DataFrame([{"id": 1}]), pd.DataFrame())


def test_save_and_load_data_store(shop_store, tmp_path):
    save_data_store(shop_store, str(tmp_path))

    assert check_data_exists(str(tmp_path))
    loaded = load_data_store(str(tmp_path))

    assert loaded.num_products == shop_store.num_products
    assert loaded.num_users == shop_store.num_users
    assert loaded.num_interactions == shop_store.num_interactions
    assert [i.product_id for i in loaded.find_interactions(user_id=4)] == [3, 5, 6, 4, 8, 2]
    assert isinstance(loaded.find_interactions(user_id=1)[0].timestamp, datetime)


def test_load_data_store_missing_dir_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_data_store(str(tmp_path / "missing"))


def test_utc_suffixed_csv_timestamps_feed_popularity(tmp_path):
    recent = (datetime.now(timezone.utc) - timedelta(days=1)).strftime("%Y-%m-%dT%H:%M:%SZ")
    (tmp_path / "products.csv").write_text(
        "id,category,price,rating,stock\n"
        "1,Books,12.0,4.0,3\n"
        "2,Games,30.0,3.5,5\n"
    )
    (tmp_path / "interactions.csv").write_text(
        "user_id,product_id,type,timestamp\n"
        f"1,1,purchase,{recent}\n"
        f"2,2,view,{recent}\n"
    )

    store = load_data_store(str(tmp_path))
    items = PopularityRanker(store).rank(2)

    assert [item.product_id for item in items] == [1, 2]
    assert all(item.algorithm == Algorithm.POPULARITY for item in items)


def test_naive_timestamps_are_stored_as_utc(shop_store, now):
    naive = now.replace(tzinfo=None) + timedelta(minutes=5)
    shop_store.add_interaction(Interaction(1, 8, "view", naive))

    latest = shop_store.find_interactions(user_id=1)[0]

    assert latest.product_id == 8
    assert latest.timestamp.tzinfo is not None
    assert PopularityRanker(shop_store, clock=lambda: naive).rank(1)
