"""Tests for profile building and content-based scoring."""

import pytest

from hybridrec.recommender.content import (
    ContentRecommender,
    content_score,
    score_candidates,
)
from hybridrec.recommender.models import Algorithm, Interaction, Product, UserProfile
from hybridrec.recommender.profile import ProfileBuilder


@pytest.fixture
def scenario_profile(shop_store) -> UserProfile:
    """Profile of user 1: viewed a book, bought headphones."""
    interactions = shop_store.find_interactions(user_id=1)
    return ProfileBuilder(shop_store).build(interactions)


def test_profile_from_view_and_purchase(scenario_profile):
    assert scenario_profile.category_scores == {"Books": 1.0, "Electronics": 5.0}
    assert scenario_profile.avg_price == pytest.approx(55.0)
    assert scenario_profile.avg_rating == pytest.approx(4.5)
    assert scenario_profile.preferred_types == {"view": 1, "purchase": 1}


def test_profile_accumulates_repeated_interactions(shop_store, now):
    interactions = [
        Interaction(9, 2, "view", now),
        Interaction(9, 2, "purchase", now),
        Interaction(9, 999, "like", now),
    ]

    profile = ProfileBuilder(shop_store).build(interactions)

    # Unknown product 999 only counts toward the type distribution
    assert profile.category_scores == {"Electronics": 6.0}
    assert profile.avg_price == pytest.approx(100.0)
    assert profile.preferred_types == {"view": 1, "purchase": 1, "like": 1}


def test_profile_without_matched_products(shop_store, now):
    profile = ProfileBuilder(shop_store).build([Interaction(9, 999, "view", now)])

    assert profile.category_scores == {}
    assert profile.avg_price == 0.0
    assert profile.avg_rating == 0.0


def test_content_score_matches_formula(scenario_profile):
    candidate = Product(id=3, category="Electronics", price=90.0, rating=4.8)

    score = content_score(scenario_profile, candidate)

    expected = (
        0.4 * (5 / 5)
        + 0.2 * max(0, 1 - abs(90 - 55) / 55)
        + 0.3 * max(0, 1 - abs(4.8 - 4.5) / 5)
        + 0.1 * (4.8 / 5)
    )
    assert score == pytest.approx(expected)
    assert score == pytest.approx(0.8507, abs=1e-3)


def test_missing_averages_are_not_renormalized():
    profile = UserProfile(category_scores={"Books": 2.0})
    candidate = Product(id=1, category="Books", price=10.0, rating=5.0)

    # category term plus the quality term only
    assert content_score(profile, candidate) == pytest.approx(0.4 + 0.1)


def test_category_normalized_by_at_least_one():
    profile = UserProfile(category_scores={"Books": 0.5})
    candidate = Product(id=1, category="Books", price=10.0, rating=0.0)

    assert content_score(profile, candidate) == pytest.approx(0.4 * 0.5)


def test_price_proximity_floors_at_zero(scenario_profile):
    far = Product(id=9, category="Toys", price=500.0, rating=0.0)
    scores = score_candidates(scenario_profile, [far])

    # rating proximity: 1 - 4.5 / 5
    assert scores[0] == pytest.approx(0.3 * (1 - 4.5 / 5))


def test_recommend_ranks_unseen_products(shop_store):
    interactions = shop_store.find_interactions(user_id=1)
    recommender = ContentRecommender(shop_store)

    items = recommender.recommend(interactions, {1, 2}, limit=4)

    assert [item.product_id for item in items] == [3, 7, 5, 4]
    assert all(item.algorithm == Algorithm.CONTENT for item in items)
    assert items[0].explanation == "Matches your interests based on past interactions"
    assert items[0].score == pytest.approx(0.8507, abs=1e-3)


def test_recommend_respects_candidate_limit(shop_store):
    interactions = shop_store.find_interactions(user_id=1)
    recommender = ContentRecommender(shop_store, candidate_limit=2)

    items = recommender.recommend(interactions, {1, 2}, limit=10)

    # only products 3 and 4 are scanned
    assert sorted(item.product_id for item in items) == [3, 4]


def test_store_failure_returns_empty(failing_store_factory):
    store = failing_store_factory("find_products_excluding")
    interactions = store.find_interactions(user_id=1)

    assert ContentRecommender(store).recommend(interactions, {1, 2}, limit=5) == []
