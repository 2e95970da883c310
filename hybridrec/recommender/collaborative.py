"""Collaborative filtering over similar users' interactions.

Each similar user's signal-bearing interactions (likes, purchases and cart
adds) vote for products the target user hasn't touched yet. A vote is the
interaction weight scaled by the user's similarity to the target.
"""

import logging
from typing import AbstractSet, Dict, List, Optional

from hybridrec.recommender.models import (
    Algorithm,
    InteractionType,
    RecommendationItem,
)
from hybridrec.recommender.similarity import SimilarityEngine
from hybridrec.recommender.store import DataStore

# Configure module logger
logger = logging.getLogger(__name__)

# Interaction weights for collaborative and profile scoring
INTERACTION_WEIGHTS: Dict[str, float] = {
    InteractionType.PURCHASE.value: 5.0,
    InteractionType.LIKE.value: 4.0,
    InteractionType.CART.value: 3.0,
    InteractionType.VIEW.value: 1.0,
}
DEFAULT_INTERACTION_WEIGHT = 1.0

# Views are too noisy to vote with
SIGNAL_TYPES = (
    InteractionType.LIKE.value,
    InteractionType.PURCHASE.value,
    InteractionType.CART.value,
)

DEFAULT_SIMILAR_USER_INTERACTION_LIMIT = 50
EXPLANATION = "Users with similar preferences also liked this"


def interaction_weight(interaction_type: str) -> float:
    """Weight of an interaction type; unknown types count as a view."""
    return INTERACTION_WEIGHTS.get(interaction_type, DEFAULT_INTERACTION_WEIGHT)


class CollaborativeRecommender:
    """User-based collaborative filtering."""

    def __init__(
        self,
        store: DataStore,
        similarity_engine: Optional[SimilarityEngine] = None,
        similar_user_interaction_limit: int = DEFAULT_SIMILAR_USER_INTERACTION_LIMIT,
    ):
        self.store = store
        self.similarity_engine = similarity_engine or SimilarityEngine(store)
        self.similar_user_interaction_limit = similar_user_interaction_limit

    def score_products(
        self, user_id: int, interacted_ids: AbstractSet[int]
    ) -> Dict[int, float]:
        """Accumulate similarity-weighted votes per product."""
        similar_users = self.similarity_engine.find_similar_users(
            user_id, interacted_ids
        )
        if not similar_users:
            logger.debug(f"No similar users for user {user_id}")
            return {}

        scores: Dict[int, float] = {}
        for similar in similar_users:
            their_interactions = self.store.find_interactions(
                user_id=similar.user_id,
                types=SIGNAL_TYPES,
                limit=self.similar_user_interaction_limit,
            )
            for interaction in their_interactions:
                if interaction.product_id in interacted_ids:
                    continue
                vote = interaction_weight(interaction.type) * similar.similarity
                scores[interaction.product_id] = (
                    scores.get(interaction.product_id, 0.0) + vote
                )

        return scores

    def recommend(
        self,
        user_id: int,
        interacted_ids: AbstractSet[int],
        limit: int,
    ) -> List[RecommendationItem]:
        """Return up to ``limit`` collaborative recommendations.

        Any store failure degrades to an empty list.
        """
        try:
            scores = self.score_products(user_id, interacted_ids)
            if not scores:
                return []

            ranked = sorted(scores.items(), key=lambda x: (-x[1], x[0]))[:limit]

            products = {
                p.id: p
                for p in self.store.find_products_by_ids(pid for pid, _ in ranked)
            }

            recommendations = [
                RecommendationItem(
                    product=products[pid],
                    algorithm=Algorithm.COLLABORATIVE,
                    explanation=EXPLANATION,
                    score=score,
                )
                for pid, score in ranked
                if pid in products
            ]

            logger.info(
                "Collaborative recommendations generated",
                extra={
                    "user_id": user_id,
                    "num_scored": len(scores),
                    "num_recommendations": len(recommendations),
                },
            )
            return recommendations

        except Exception as e:
            logger.error(
                "Collaborative filtering failed",
                extra={"user_id": user_id, "error": str(e)},
                exc_info=True,
            )
            return []
