"""Content-based scoring of catalog products against a user profile."""

import logging
from typing import AbstractSet, List, Optional, Sequence

import numpy as np

from hybridrec.recommender.models import (
    Algorithm,
    Interaction,
    Product,
    RecommendationItem,
    UserProfile,
)
from hybridrec.recommender.profile import ProfileBuilder
from hybridrec.recommender.store import DataStore

# Configure module logger
logger = logging.getLogger(__name__)

# Score component weights
CATEGORY_WEIGHT = 0.4
PRICE_WEIGHT = 0.2
RATING_MATCH_WEIGHT = 0.3
RATING_QUALITY_WEIGHT = 0.1
MAX_RATING = 5.0

DEFAULT_CANDIDATE_LIMIT = 500
EXPLANATION = "Matches your interests based on past interactions"


def score_candidates(profile: UserProfile, products: Sequence[Product]) -> np.ndarray:
    """Score every product against the profile.

    score = 0.4 * category affinity (relative to the strongest category)
          + 0.2 * price proximity   (only with a price history)
          + 0.3 * rating proximity  (only with a rating history)
          + 0.1 * rating / 5

    Missing terms contribute nothing; the remaining terms are not rescaled.
    """
    if not products:
        return np.zeros(0)

    max_category = max(list(profile.category_scores.values()) + [1.0])
    category = np.array(
        [profile.category_scores.get(p.category, 0.0) for p in products]
    )
    prices = np.array([p.price for p in products], dtype=float)
    ratings = np.array([p.rating for p in products], dtype=float)

    scores = CATEGORY_WEIGHT * (category / max_category)

    if profile.avg_price > 0:
        price_proximity = np.maximum(
            0.0, 1.0 - np.abs(prices - profile.avg_price) / profile.avg_price
        )
        scores += PRICE_WEIGHT * price_proximity

    if profile.avg_rating > 0:
        rating_proximity = np.maximum(
            0.0, 1.0 - np.abs(ratings - profile.avg_rating) / MAX_RATING
        )
        scores += RATING_MATCH_WEIGHT * rating_proximity

    scores += RATING_QUALITY_WEIGHT * (ratings / MAX_RATING)
    return scores


def content_score(profile: UserProfile, product: Product) -> float:
    """Score a single product against the profile."""
    return float(score_candidates(profile, [product])[0])


class ContentRecommender:
    """Ranks unseen catalog products by profile match."""

    def __init__(
        self,
        store: DataStore,
        profile_builder: Optional[ProfileBuilder] = None,
        candidate_limit: int = DEFAULT_CANDIDATE_LIMIT,
    ):
        self.store = store
        self.profile_builder = profile_builder or ProfileBuilder(store)
        self.candidate_limit = candidate_limit

    def recommend_for_profile(
        self,
        profile: UserProfile,
        interacted_ids: AbstractSet[int],
        limit: int,
    ) -> List[RecommendationItem]:
        candidates = self.store.find_products_excluding(
            interacted_ids, self.candidate_limit
        )
        if not candidates:
            return []

        scores = score_candidates(profile, candidates)
        ids = np.array([p.id for p in candidates])

        # Highest score first, lowest product id among equals
        order = np.lexsort((ids, -scores))[:limit]

        return [
            RecommendationItem(
                product=candidates[idx],
                algorithm=Algorithm.CONTENT,
                explanation=EXPLANATION,
                score=float(scores[idx]),
            )
            for idx in order
        ]

    def recommend(
        self,
        interactions: Sequence[Interaction],
        interacted_ids: AbstractSet[int],
        limit: int,
    ) -> List[RecommendationItem]:
        """Build the user's profile and return up to ``limit`` matches.

        Any store failure degrades to an empty list.
        """
        try:
            profile = self.profile_builder.build(interactions)
            recommendations = self.recommend_for_profile(
                profile, interacted_ids, limit
            )

            logger.info(
                "Content recommendations generated",
                extra={
                    "num_categories": len(profile.category_scores),
                    "num_recommendations": len(recommendations),
                },
            )
            return recommendations

        except Exception as e:
            logger.error(
                "Content-based recommendation failed",
                extra={"error": str(e)},
                exc_info=True,
            )
            return []
