"""Interaction recording endpoint.

Appends view, like, cart and purchase events to the loaded data store so
they feed subsequent recommendations.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from hybridrec.api.exceptions import InvalidInteractionError, ProductNotFoundError
from hybridrec.api.routes.recommend import load_store_if_needed
from hybridrec.recommender.models import Interaction, InteractionType
from hybridrec.recommender.store import utc_now

# Configure module logger
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/interactions",
    tags=["interactions"],
)


class InteractionRequest(BaseModel):
    user_id: int = Field(..., gt=0)
    product_id: int = Field(..., gt=0)
    type: InteractionType
    rating: Optional[int] = Field(default=None, ge=1, le=5)


@router.post("", status_code=status.HTTP_201_CREATED)
def record_interaction(request: InteractionRequest) -> Dict[str, Any]:
    """Record an interaction between a user and a product."""
    store = load_store_if_needed()

    if store.get_product(request.product_id) is None:
        raise ProductNotFoundError(request.product_id)

    interaction = Interaction(
        user_id=request.user_id,
        product_id=request.product_id,
        type=request.type.value,
        rating=request.rating,
        timestamp=utc_now(),
    )

    try:
        store.add_interaction(interaction)
    except ValueError as e:
        raise InvalidInteractionError(str(e), {"type": request.type.value}) from e

    logger.info(
        "Interaction recorded",
        extra={
            "user_id": interaction.user_id,
            "product_id": interaction.product_id,
            "interaction_type": interaction.type,
        },
    )

    return {
        "message": "Interaction recorded",
        "interaction": {
            "user_id": interaction.user_id,
            "product_id": interaction.product_id,
            "type": interaction.type,
            "rating": interaction.rating,
            "timestamp": interaction.timestamp.isoformat(),
        },
    }
