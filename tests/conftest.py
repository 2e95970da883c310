"""Shared fixtures for HybridRec tests.

The ``shop_store`` fixture is a small catalog with four active users:

    user 1: view 1, purchase 2
    user 2: like 2, purchase 3, view 1, cart 7
    user 3: purchase 5, like 6 (plus a purchase of 6 outside the window)
    user 4: view 2, purchase 8, like 4, view 6, view 5, view 3
    user 5: no interactions
"""

from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from hybridrec.config import RecommenderSettings
from hybridrec.recommender.models import Interaction, Product
from hybridrec.recommender.store import DataStoreError, InMemoryDataStore


def make_products() -> List[Product]:
    return [
        Product(id=1, category="Books", price=10.0, rating=4.0, stock=5, name="Novel"),
        Product(id=2, category="Electronics", price=100.0, rating=5.0, stock=3, name="Headphones"),
        Product(id=3, category="Electronics", price=90.0, rating=4.8, stock=7, name="Speaker"),
        Product(id=4, category="Books", price=15.0, rating=3.5, stock=2, name="Cookbook"),
        Product(id=5, category="Clothing", price=40.0, rating=4.2, stock=9, name="Jacket"),
        Product(id=6, category="Home", price=60.0, rating=2.0, stock=1, name="Lamp"),
        Product(id=7, category="Electronics", price=120.0, rating=4.5, stock=4, name="Keyboard"),
        Product(id=8, category="Toys", price=25.0, rating=3.0, stock=6, name="Puzzle"),
    ]


def make_interactions(now: datetime) -> List[Interaction]:
    def ago(hours: int) -> datetime:
        return now - timedelta(hours=hours)

    return [
        Interaction(1, 1, "view", ago(10)),
        Interaction(1, 2, "purchase", ago(5), rating=5),
        Interaction(2, 2, "like", ago(30)),
        Interaction(2, 3, "purchase", ago(20), rating=4),
        Interaction(2, 1, "view", ago(15)),
        Interaction(2, 7, "cart", ago(12)),
        Interaction(3, 5, "purchase", ago(40)),
        Interaction(3, 6, "like", ago(8)),
        Interaction(3, 6, "purchase", now - timedelta(days=45)),
        Interaction(4, 2, "view", ago(50)),
        Interaction(4, 8, "purchase", ago(48)),
        Interaction(4, 4, "like", ago(47)),
        Interaction(4, 6, "view", ago(46)),
        Interaction(4, 5, "view", ago(45)),
        Interaction(4, 3, "view", ago(44)),
    ]


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc)


@pytest.fixture
def products() -> List[Product]:
    return make_products()


@pytest.fixture
def shop_store(now, products) -> InMemoryDataStore:
    """Store with the catalog and interactions described above."""
    return InMemoryDataStore.from_records(
        products, make_interactions(now), user_ids=[1, 2, 3, 4, 5]
    )


@pytest.fixture
def empty_store() -> InMemoryDataStore:
    return InMemoryDataStore.from_records([], [], user_ids=[])


@pytest.fixture
def settings() -> RecommenderSettings:
    return RecommenderSettings(data_dir="unused", branch_timeout_seconds=5.0)


class FailingStore(InMemoryDataStore):
    """Store whose selected methods raise ``DataStoreError``."""

    failing_methods = ()

    def __getattribute__(self, name):
        if name in object.__getattribute__(self, "failing_methods"):
            def fail(*args, **kwargs):
                raise DataStoreError(f"{name} unavailable")
            return fail
        return object.__getattribute__(self, name)


@pytest.fixture
def failing_store_factory(now, products):
    """Build a store where the named methods raise ``DataStoreError``."""

    def factory(*method_names: str) -> FailingStore:
        store = FailingStore.from_records(
            products, make_interactions(now), user_ids=[1, 2, 3, 4, 5]
        )
        store.failing_methods = tuple(method_names)
        return store

    return factory
