"""Tests for the inference module."""

import pytest

from hybridrec.recommender.infer import (
    batch_recommend_for_users,
    recommend_products_for_user,
)
from hybridrec.recommender.utils import save_data_store


@pytest.fixture
def data_dir(shop_store, tmp_path):
    """Write the shop store to CSV files."""
    save_data_store(shop_store, str(tmp_path))
    return tmp_path


def test_recommend_products_for_user_known_user(data_dir, settings):
    recommendations = recommend_products_for_user(
        user_id=1, data_dir=str(data_dir), limit=4, settings=settings
    )

    assert [item.product_id for item in recommendations] == [3, 4, 7, 5]


def test_recommend_products_for_unknown_user_returns_popular(data_dir, settings):
    recommendations = recommend_products_for_user(
        user_id=999, data_dir=str(data_dir), limit=2, settings=settings
    )

    assert [item.product_id for item in recommendations] == [2, 3]


def test_recommend_products_missing_data_raises(tmp_path, settings):
    with pytest.raises(FileNotFoundError):
        recommend_products_for_user(
            user_id=1, data_dir=str(tmp_path / "missing"), settings=settings
        )


def test_batch_recommend_for_users(data_dir, settings):
    results = batch_recommend_for_users(
        [1, 2, 5], data_dir=str(data_dir), limit=3, settings=settings
    )

    assert set(results) == {1, 2, 5}
    assert all(len(items) <= 3 for items in results.values())
    assert [item.product_id for item in results[5]] == [2, 3, 5]
