"""Content preference profiles built from a user's own interactions."""

import logging
from typing import Dict, Sequence

from hybridrec.recommender.collaborative import interaction_weight
from hybridrec.recommender.models import Interaction, UserProfile
from hybridrec.recommender.store import DataStore

# Configure module logger
logger = logging.getLogger(__name__)


class ProfileBuilder:
    """Derives a ``UserProfile`` from interactions and their products."""

    def __init__(self, store: DataStore):
        self.store = store

    def build(self, interactions: Sequence[Interaction]) -> UserProfile:
        """Build a profile for one user's interactions.

        Category scores sum the interaction weight of every interaction whose
        product exists in the catalog. Average price and rating are taken
        over the distinct matched products, and are 0 when none matched.
        """
        products = {
            p.id: p
            for p in self.store.find_products_by_ids(
                i.product_id for i in interactions
            )
        }

        category_scores: Dict[str, float] = {}
        preferred_types: Dict[str, int] = {}

        for interaction in interactions:
            preferred_types[interaction.type] = (
                preferred_types.get(interaction.type, 0) + 1
            )

            product = products.get(interaction.product_id)
            if product is None:
                continue
            category_scores[product.category] = category_scores.get(
                product.category, 0.0
            ) + interaction_weight(interaction.type)

        avg_price = 0.0
        avg_rating = 0.0
        if products:
            avg_price = sum(p.price for p in products.values()) / len(products)
            avg_rating = sum(p.rating for p in products.values()) / len(products)

        return UserProfile(
            category_scores=category_scores,
            avg_price=avg_price,
            avg_rating=avg_rating,
            preferred_types=preferred_types,
        )
