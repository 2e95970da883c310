"""User-to-user similarity based on shared interacted products."""

import logging
from typing import AbstractSet, List

from hybridrec.recommender.models import SimilarityScore
from hybridrec.recommender.store import DataStore

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_CANDIDATE_USER_LIMIT = 100
DEFAULT_CANDIDATE_INTERACTION_LIMIT = 100
DEFAULT_SIMILAR_USER_LIMIT = 10
DEFAULT_SIMILARITY_THRESHOLD = 0.1


def jaccard_similarity(a: AbstractSet[int], b: AbstractSet[int]) -> float:
    """Return |a & b| / |a | b|, or 0.0 when both sets are empty."""
    union = len(a | b)
    if union == 0:
        return 0.0
    return len(a & b) / union


class SimilarityEngine:
    """Finds users whose interacted products overlap with the target's."""

    def __init__(
        self,
        store: DataStore,
        candidate_user_limit: int = DEFAULT_CANDIDATE_USER_LIMIT,
        candidate_interaction_limit: int = DEFAULT_CANDIDATE_INTERACTION_LIMIT,
        similar_user_limit: int = DEFAULT_SIMILAR_USER_LIMIT,
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ):
        self.store = store
        self.candidate_user_limit = candidate_user_limit
        self.candidate_interaction_limit = candidate_interaction_limit
        self.similar_user_limit = similar_user_limit
        self.threshold = threshold

    def find_similar_users(
        self, user_id: int, user_product_ids: AbstractSet[int]
    ) -> List[SimilarityScore]:
        """Return the most similar users, best first.

        Candidates at or below the threshold are dropped. Equal similarities
        keep the order in which candidates were scanned. Store failures
        yield an empty list.
        """
        try:
            candidates = self.store.find_users(
                exclude_user_id=user_id, limit=self.candidate_user_limit
            )

            similarities = []
            for candidate_id in candidates:
                their_interactions = self.store.find_interactions(
                    user_id=candidate_id, limit=self.candidate_interaction_limit
                )
                their_product_ids = {i.product_id for i in their_interactions}

                similarity = jaccard_similarity(user_product_ids, their_product_ids)
                if similarity > self.threshold:
                    similarities.append(SimilarityScore(candidate_id, similarity))

            # sorted() is stable, so ties stay in scan order
            similarities = sorted(
                similarities, key=lambda s: s.similarity, reverse=True
            )[: self.similar_user_limit]

            logger.debug(
                "Found similar users",
                extra={
                    "user_id": user_id,
                    "num_candidates": len(candidates),
                    "num_similar": len(similarities),
                },
            )
            return similarities

        except Exception as e:
            logger.error(
                "Similar user search failed",
                extra={"user_id": user_id, "error": str(e)},
                exc_info=True,
            )
            return []
