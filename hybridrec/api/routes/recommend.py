"""Recommendation endpoints for the HybridRec API.

This module provides API endpoints for personalized recommendations, the
popular products list and a user's interaction history. The data store is
loaded from CSV files once and cached for subsequent requests.
"""

import logging
import threading
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from hybridrec.api.exceptions import DataLoadError, DataNotFoundError
from hybridrec.api.metrics import metrics_service
from hybridrec.config import get_settings
from hybridrec.recommender.hybrid import HybridRecommender
from hybridrec.recommender.models import RecommendationItem
from hybridrec.recommender.store import InMemoryDataStore
from hybridrec.recommender.utils import check_data_exists, load_data_store

# Configure module logger
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(
    prefix="/recommend",
    tags=["recommendations"],
)

MAX_LIMIT = 100
DEFAULT_HISTORY_LIMIT = 50

# Cached data store and recommender
_store_cache: Optional[InMemoryDataStore] = None
_recommender_cache: Optional[HybridRecommender] = None
_last_loaded: Optional[datetime] = None
_cache_lock = threading.RLock()


class ProductModel(BaseModel):
    id: int
    name: str = ""
    description: str = ""
    category: str
    price: float
    rating: float
    stock: int


class RecommendationItemModel(BaseModel):
    """A recommended product with the strategy that produced it."""

    product: ProductModel
    algorithm: str = Field(..., description="collaborative, content, popularity or rating")
    explanation: str
    score: float = Field(..., description="Score from the producing strategy")
    combined_score: float = Field(..., description="Blend score across strategies")


class RecommendationResponse(BaseModel):
    """Response model for recommendation requests.

    Attributes:
        user_id: The user ID for which recommendations were generated.
        recommendations: Ranked recommendation items.
        method: How the list was built (hybrid, cold_start or fallback).
        scores: Per-strategy list sizes, only when explain=true.
    """

    user_id: int = Field(..., description="User ID for recommendations")
    recommendations: List[RecommendationItemModel]
    method: str
    scores: Optional[Dict[str, Any]] = None


class PopularResponse(BaseModel):
    recommendations: List[RecommendationItemModel]


class HistoryEntry(BaseModel):
    user_id: int
    product_id: int
    type: str
    rating: Optional[int] = None
    timestamp: datetime
    product: Optional[ProductModel] = None


class HistoryResponse(BaseModel):
    user_id: int
    interactions: List[HistoryEntry]


def _to_models(items: List[RecommendationItem]) -> List[RecommendationItemModel]:
    return [RecommendationItemModel(**item.to_dict()) for item in items]


def set_store(store: Optional[InMemoryDataStore]) -> None:
    """Replace the cached store (``None`` clears the cache)."""
    global _store_cache, _recommender_cache, _last_loaded

    with _cache_lock:
        _store_cache = store
        _recommender_cache = HybridRecommender(store) if store is not None else None
        _last_loaded = datetime.now() if store is not None else None


def get_cache_status() -> Dict[str, Any]:
    store = _store_cache
    return {
        "data_loaded": store is not None,
        "timestamp_last_loaded": _last_loaded.isoformat() if _last_loaded else None,
        "num_users": store.num_users if store is not None else 0,
        "num_products": store.num_products if store is not None else 0,
        "num_interactions": store.num_interactions if store is not None else 0,
    }


def load_store_if_needed(data_dir: Optional[str] = None) -> InMemoryDataStore:
    """Load the data store from disk if not already loaded.

    Args:
        data_dir: Directory containing the CSV files; defaults to the
            configured data directory.

    Returns:
        The cached ``InMemoryDataStore``.

    Raises:
        DataNotFoundError: If the data files are missing.
        DataLoadError: If the files cannot be parsed.
    """
    with _cache_lock:
        if _store_cache is not None:
            logger.debug("Using cached data store")
            return _store_cache

        data_dir = data_dir or get_settings().data_dir

        if not check_data_exists(data_dir):
            logger.error(f"Data not found in {data_dir}")
            raise DataNotFoundError(data_dir)

        try:
            logger.info(f"Loading data from {data_dir}")
            store = load_data_store(data_dir)
        except Exception as e:
            logger.error(f"Failed to load data: {e}", exc_info=True)
            raise DataLoadError(data_dir, e) from e

        set_store(store)
        logger.info("Data loaded successfully")
        return store


def get_recommender() -> HybridRecommender:
    """Return the recommender bound to the cached store, loading it on first use."""
    # Store and recommender are swapped together under the same lock
    with _cache_lock:
        load_store_if_needed()
        return _recommender_cache


@router.get("/popular", response_model=PopularResponse)
def get_popular(
    limit: int = Query(10, ge=1, le=MAX_LIMIT),
    exclude: Optional[List[int]] = Query(None),
) -> PopularResponse:
    """Get trending products, optionally excluding some product ids."""
    start_time = time.time()
    recommender = get_recommender()
    items = recommender.get_popular_products(limit, exclude)
    metrics_service.record_request("popular", (time.time() - start_time) * 1000)
    return PopularResponse(recommendations=_to_models(items))


@router.get("/history/{user_id}", response_model=HistoryResponse)
def get_history(
    user_id: int,
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=MAX_LIMIT),
) -> HistoryResponse:
    """Get a user's most recent interactions joined with their products."""
    store = load_store_if_needed()
    interactions = store.find_interactions(user_id=user_id, limit=limit)
    products = {
        p.id: p for p in store.find_products_by_ids(i.product_id for i in interactions)
    }

    entries = []
    for interaction in interactions:
        product = products.get(interaction.product_id)
        entries.append(
            HistoryEntry(
                user_id=interaction.user_id,
                product_id=interaction.product_id,
                type=interaction.type,
                rating=interaction.rating,
                timestamp=interaction.timestamp,
                product=ProductModel(**product.to_dict()) if product else None,
            )
        )

    return HistoryResponse(user_id=user_id, interactions=entries)


@router.get("/{user_id}", response_model=RecommendationResponse)
def get_recommendations(
    user_id: int,
    limit: int = Query(10, ge=1, le=MAX_LIMIT),
    explain: bool = False,
) -> RecommendationResponse:
    """Get product recommendations for a user.

    Blends collaborative, content-based and popularity recommendations.
    Users without history receive the popular products list.

    Example:
        GET /recommend/42?limit=5
        Returns the top 5 recommendations for user 42.
    """
    logger.info(f"Generating recommendations for user {user_id}, limit={limit}")
    start_time = time.time()

    recommender = get_recommender()
    items, breakdown = recommender.generate_recommendations(
        user_id, limit, return_scores=True
    )

    metrics_service.record_request(
        breakdown["method"], (time.time() - start_time) * 1000
    )

    return RecommendationResponse(
        user_id=user_id,
        recommendations=_to_models(items),
        method=breakdown["method"],
        scores=breakdown if explain else None,
    )


@router.post("/reload-data")
def reload_data() -> Dict[str, Any]:
    """Reload the data files from disk, clearing the cache."""
    logger.info("Reloading data...")
    with _cache_lock:
        set_store(None)
        store = load_store_if_needed()
    return {
        "status": "Data reloaded successfully",
        "num_products": store.num_products,
        "num_interactions": store.num_interactions,
    }
