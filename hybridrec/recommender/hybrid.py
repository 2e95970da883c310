"""Hybrid recommendation module.

Combines collaborative filtering, content-based scoring and popularity.
The three strategies run concurrently over the same data store, then their
ranked lists are merged with fixed weights. Users without any history get
the popularity list directly.
"""

import dataclasses
import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from hybridrec.config import RecommenderSettings, get_settings
from hybridrec.recommender.collaborative import CollaborativeRecommender
from hybridrec.recommender.content import ContentRecommender
from hybridrec.recommender.models import RecommendationItem
from hybridrec.recommender.popularity import PopularityRanker
from hybridrec.recommender.profile import ProfileBuilder
from hybridrec.recommender.similarity import SimilarityEngine
from hybridrec.recommender.store import DataStore
from hybridrec.recommender.utils import load_data_store

# Configure module logger
logger = logging.getLogger(__name__)

# Contribution of each list a product appears in
COLLABORATIVE_WEIGHT = 0.4
CONTENT_WEIGHT = 0.4
POPULARITY_WEIGHT = 0.2

METHOD_HYBRID = "hybrid"
METHOD_COLD_START = "cold_start"
METHOD_FALLBACK = "fallback"


class RecommendationBlender:
    """Merges ranked lists by summing a fixed weight per appearance."""

    def __init__(
        self,
        collaborative_weight: float = COLLABORATIVE_WEIGHT,
        content_weight: float = CONTENT_WEIGHT,
        popularity_weight: float = POPULARITY_WEIGHT,
    ):
        self.collaborative_weight = collaborative_weight
        self.content_weight = content_weight
        self.popularity_weight = popularity_weight

    def blend(
        self,
        collaborative: List[RecommendationItem],
        content: List[RecommendationItem],
        popularity: List[RecommendationItem],
        limit: int,
    ) -> List[RecommendationItem]:
        """Return the top ``limit`` products by combined score.

        The first sighting of a product fixes its snapshot, tag and
        explanation; later sightings only add their weight.
        """
        combined: Dict[int, RecommendationItem] = {}

        weighted_lists = (
            (collaborative, self.collaborative_weight),
            (content, self.content_weight),
            (popularity, self.popularity_weight),
        )
        for items, weight in weighted_lists:
            for item in items:
                existing = combined.get(item.product_id)
                if existing is None:
                    combined[item.product_id] = dataclasses.replace(
                        item, combined_score=weight
                    )
                else:
                    existing.combined_score += weight

        ranked = sorted(
            combined.values(), key=lambda r: (-r.combined_score, r.product_id)
        )
        return ranked[:limit]


class HybridRecommender:
    """Generates blended recommendations for a user."""

    def __init__(
        self,
        store: DataStore,
        settings: Optional[RecommenderSettings] = None,
    ):
        self.store = store
        self.settings = settings or get_settings()

        similarity_engine = SimilarityEngine(
            store,
            candidate_user_limit=self.settings.candidate_user_limit,
            candidate_interaction_limit=self.settings.max_user_interactions,
            similar_user_limit=self.settings.similar_user_limit,
            threshold=self.settings.similarity_threshold,
        )
        self.collaborative = CollaborativeRecommender(
            store,
            similarity_engine=similarity_engine,
            similar_user_interaction_limit=self.settings.similar_user_interaction_limit,
        )
        self.content = ContentRecommender(
            store,
            profile_builder=ProfileBuilder(store),
            candidate_limit=self.settings.content_candidate_limit,
        )
        self.popularity = PopularityRanker(
            store, window_days=self.settings.popularity_window_days
        )
        self.blender = RecommendationBlender()

        logger.info(
            "Initialized HybridRecommender",
            extra={
                "branch_timeout_seconds": self.settings.branch_timeout_seconds,
                "popularity_window_days": self.settings.popularity_window_days,
            },
        )

    def get_popular_products(
        self, limit: Optional[int] = None, exclude_ids: Optional[Iterable[int]] = None
    ) -> List[RecommendationItem]:
        """Trending products, or the best-rated ones when trends are unavailable."""
        limit = self.settings.default_limit if limit is None else limit
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")
        return self.popularity.rank(limit, exclude_ids)

    def _run_branches(
        self, branches: Dict[str, Callable[[], List[RecommendationItem]]]
    ) -> Dict[str, List[RecommendationItem]]:
        """Run the strategies in parallel and collect their lists.

        A branch that raises or misses the deadline contributes an empty
        list; the others are unaffected.
        """
        executor = ThreadPoolExecutor(
            max_workers=len(branches), thread_name_prefix="hybridrec"
        )
        try:
            futures = {name: executor.submit(fn) for name, fn in branches.items()}
            done, _ = wait(
                futures.values(), timeout=self.settings.branch_timeout_seconds
            )

            results: Dict[str, List[RecommendationItem]] = {}
            for name, future in futures.items():
                if future not in done:
                    future.cancel()
                    logger.warning(
                        "Recommendation branch timed out",
                        extra={
                            "branch": name,
                            "timeout_seconds": self.settings.branch_timeout_seconds,
                        },
                    )
                    results[name] = []
                    continue

                try:
                    results[name] = future.result()
                except Exception as e:
                    logger.error(
                        "Recommendation branch failed",
                        extra={"branch": name, "error": str(e)},
                        exc_info=True,
                    )
                    results[name] = []

            return results
        finally:
            # Don't block the request on a stalled branch
            executor.shutdown(wait=False)

    def generate_recommendations(
        self,
        user_id: int,
        limit: Optional[int] = None,
        return_scores: bool = False,
    ) -> List[RecommendationItem] | Tuple[List[RecommendationItem], Dict]:
        """Get recommendations for a user.

        Args:
            user_id: Target user.
            limit: Maximum number of items (defaults to the configured limit).
            return_scores: Also return a breakdown of how the list was built.

        Returns:
            Ranked recommendation items, or ``(items, breakdown)`` when
            ``return_scores`` is set.

        Raises:
            ValueError: If ``limit`` is not positive.
        """
        limit = self.settings.default_limit if limit is None else limit
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")

        start_time = time.time()
        breakdown: Dict = {"method": METHOD_HYBRID}

        try:
            interactions = self.store.find_interactions(
                user_id=user_id, limit=self.settings.max_user_interactions
            )

            if not interactions:
                logger.info(
                    "User has no interactions, using popularity",
                    extra={"user_id": user_id, "strategy": METHOD_COLD_START},
                )
                recommendations = self.get_popular_products(limit)
                breakdown = {"method": METHOD_COLD_START}
            else:
                interacted_ids = {i.product_id for i in interactions}

                results = self._run_branches(
                    {
                        "collaborative": lambda: self.collaborative.recommend(
                            user_id, interacted_ids, limit
                        ),
                        "content": lambda: self.content.recommend(
                            interactions, interacted_ids, limit
                        ),
                        "popularity": lambda: self.get_popular_products(
                            limit, interacted_ids
                        ),
                    }
                )

                recommendations = self.blender.blend(
                    results["collaborative"],
                    results["content"],
                    results["popularity"],
                    limit,
                )
                breakdown.update(
                    {name: len(items) for name, items in results.items()}
                )

        except Exception as e:
            logger.error(
                "Recommendation generation failed, using popularity",
                extra={
                    "user_id": user_id,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            recommendations = self.get_popular_products(limit)
            breakdown = {"method": METHOD_FALLBACK}

        logger.info(
            "Recommendations generated",
            extra={
                "user_id": user_id,
                "method": breakdown["method"],
                "num_recommendations": len(recommendations),
                "total_time_ms": round((time.time() - start_time) * 1000, 2),
            },
        )

        if return_scores:
            return recommendations, breakdown
        return recommendations


def create_hybrid_recommender(
    data_dir: Optional[str] = None,
    settings: Optional[RecommenderSettings] = None,
) -> HybridRecommender:
    """Create a hybrid recommender from the CSV files in ``data_dir``."""
    settings = settings or get_settings()
    store = load_data_store(data_dir or settings.data_dir)
    return HybridRecommender(store, settings=settings)
