"""Trending products over a recent interaction window.

This is also the fallback for every other strategy: cold-start users get
the popularity list directly, and the hybrid recommender degrades to it when
anything unexpected happens. When the interaction window can't be read the
ranker falls back to the catalog's best-rated products.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from hybridrec.recommender.models import (
    Algorithm,
    InteractionType,
    RecommendationItem,
)
from hybridrec.recommender.store import DataStore, utc_now

# Configure module logger
logger = logging.getLogger(__name__)

# Popularity uses its own interaction scale
POPULARITY_WEIGHTS: Dict[str, float] = {
    InteractionType.PURCHASE.value: 5.0,
    InteractionType.LIKE.value: 3.0,
    InteractionType.CART.value: 2.0,
    InteractionType.VIEW.value: 1.0,
}
DEFAULT_POPULARITY_WEIGHT = 1.0

DEFAULT_WINDOW_DAYS = 30
POPULARITY_EXPLANATION = "Popular and trending product"
RATING_EXPLANATION = "Highly rated product"


def popularity_weight(interaction_type: str) -> float:
    """Weight of an interaction type for trending scores."""
    return POPULARITY_WEIGHTS.get(interaction_type, DEFAULT_POPULARITY_WEIGHT)


class PopularityRanker:
    """Ranks products by weighted interaction volume in a trailing window."""

    def __init__(
        self,
        store: DataStore,
        window_days: int = DEFAULT_WINDOW_DAYS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.window_days = window_days
        self.clock = clock

    def rank(
        self, limit: int, exclude_ids: Optional[Iterable[int]] = None
    ) -> List[RecommendationItem]:
        """Return up to ``limit`` trending products not in ``exclude_ids``.

        Falls back to the rating-sorted catalog if aggregation fails or the
        window holds no usable products.
        """
        excluded = set(exclude_ids or [])
        since = self.clock() - timedelta(days=self.window_days)

        try:
            rows = self.store.aggregate_interactions_by_product(
                since=since,
                weight_fn=popularity_weight,
                exclude_ids=excluded,
                limit=limit,
            )
            products = {
                p.id: p for p in self.store.find_products_by_ids(r[0] for r in rows)
            }
            recommendations = [
                RecommendationItem(
                    product=products[product_id],
                    algorithm=Algorithm.POPULARITY,
                    explanation=POPULARITY_EXPLANATION,
                    score=total_score,
                )
                for product_id, total_score, _ in rows
                if product_id in products
            ]
        except Exception as e:
            logger.warning(
                "Popularity aggregation failed, using rating fallback",
                extra={"error": str(e), "error_type": type(e).__name__},
                exc_info=True,
            )
            return self.rating_fallback(limit, excluded)

        if not recommendations:
            logger.info(
                "No trending products in window, using rating fallback",
                extra={"window_days": self.window_days},
            )
            return self.rating_fallback(limit, excluded)

        return recommendations

    def rating_fallback(
        self, limit: int, exclude_ids: Optional[Iterable[int]] = None
    ) -> List[RecommendationItem]:
        """Best-rated catalog products.

        Empty only when the catalog is empty or cannot be read at all.
        """
        try:
            products = self.store.find_products_sorted_by_rating(limit, exclude_ids)
        except Exception as e:
            logger.error(
                "Rating fallback failed",
                extra={"error": str(e), "error_type": type(e).__name__},
                exc_info=True,
            )
            return []

        return [
            RecommendationItem(
                product=product,
                algorithm=Algorithm.RATING,
                explanation=RATING_EXPLANATION,
                score=product.rating,
            )
            for product in products
        ]
