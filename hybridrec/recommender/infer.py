"""Module for getting recommendations.

Loads the data store from disk and runs the hybrid recommender for one or
many users.
"""

import logging
import time
from typing import Dict, List, Optional

from hybridrec.config import RecommenderSettings, get_settings
from hybridrec.recommender.hybrid import HybridRecommender
from hybridrec.recommender.models import RecommendationItem
from hybridrec.recommender.utils import load_data_store

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = "data"


def recommend_products_for_user(
    user_id: int,
    data_dir: str = DEFAULT_DATA_DIR,
    limit: int = 10,
    settings: Optional[RecommenderSettings] = None,
) -> List[RecommendationItem]:
    """Get recommendations for a user.

    Loads the data store and returns up to ``limit`` blended recommendations.

    Raises:
        FileNotFoundError: If the data files are missing.
    """
    start_time = time.time()

    logger.info(
        "Starting recommendation generation",
        extra={"user_id": user_id, "limit": limit, "data_dir": data_dir},
    )

    load_start = time.time()
    store = load_data_store(data_dir)
    logger.info(
        "Data loaded",
        extra={
            "user_id": user_id,
            "load_time_ms": round((time.time() - load_start) * 1000, 2),
            "num_users": store.num_users,
            "num_products": store.num_products,
        },
    )

    recommender = HybridRecommender(store, settings=settings or get_settings())
    recommendations = recommender.generate_recommendations(user_id, limit)

    logger.info(
        "Recommendations ready",
        extra={
            "user_id": user_id,
            "num_recommendations": len(recommendations),
            "total_time_ms": round((time.time() - start_time) * 1000, 2),
        },
    )
    return recommendations


def batch_recommend_for_users(
    user_ids: List[int],
    data_dir: str = DEFAULT_DATA_DIR,
    limit: int = 10,
    settings: Optional[RecommenderSettings] = None,
) -> Dict[int, List[RecommendationItem]]:
    """Generate recommendations for multiple users in batch.

    Loads the data once and reuses the recommender for every user.

    Args:
        user_ids: Users to generate recommendations for.
        data_dir: Directory containing the CSV data files.
        limit: Number of recommendations per user.
        settings: Optional settings override.

    Returns:
        Dictionary mapping user IDs to their recommendation lists.

    Raises:
        FileNotFoundError: If the data files are missing.

    Example:
        >>> results = batch_recommend_for_users([1, 5, 10], limit=5)
        >>> for user_id, items in results.items():
        ...     print(user_id, [item.product_id for item in items])
    """
    logger.info(
        f"Generating batch recommendations for {len(user_ids)} users, limit={limit}"
    )

    store = load_data_store(data_dir)
    recommender = HybridRecommender(store, settings=settings or get_settings())

    results = {}
    for user_id in user_ids:
        try:
            results[user_id] = recommender.generate_recommendations(user_id, limit)
        except Exception as e:
            logger.error(f"Failed to generate recommendations for user {user_id}: {e}")
            # Continue with other users, return empty list for failed user
            results[user_id] = []

    logger.info(f"Batch recommendations completed for {len(results)} users")

    return results
