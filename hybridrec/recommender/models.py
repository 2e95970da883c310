"""Domain types for the hybrid recommender.

Interactions and products are read from the data store and never modified
here. Profiles, similarity scores and recommendation items are built per
request and thrown away afterwards.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class InteractionType(str, Enum):
    """Kinds of user/product interaction recorded by the shop."""

    VIEW = "view"
    LIKE = "like"
    CART = "cart"
    PURCHASE = "purchase"


class Algorithm(str, Enum):
    """Tag describing which strategy produced a recommendation."""

    COLLABORATIVE = "collaborative"
    CONTENT = "content"
    POPULARITY = "popularity"
    RATING = "rating"


@dataclass(frozen=True)
class Interaction:
    """A single user/product event."""

    user_id: int
    product_id: int
    type: str
    timestamp: datetime
    rating: Optional[int] = None


@dataclass(frozen=True)
class Product:
    """Catalog entry as seen by the recommender."""

    id: int
    category: str
    price: float
    rating: float = 0.0
    stock: int = 0
    name: str = ""
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class UserProfile:
    """Content preferences derived from one user's interactions."""

    category_scores: Dict[str, float] = field(default_factory=dict)
    avg_price: float = 0.0
    avg_rating: float = 0.0
    preferred_types: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class SimilarityScore:
    user_id: int
    similarity: float


@dataclass
class RecommendationItem:
    """One entry of a ranked recommendation list.

    Attributes:
        product: Snapshot of the recommended product.
        algorithm: Strategy that first produced the item.
        explanation: Human-readable reason shown to the user.
        score: Score assigned by the producing strategy.
        combined_score: Blend score; zero until the item is blended.
    """

    product: Product
    algorithm: Algorithm
    explanation: str
    score: float = 0.0
    combined_score: float = 0.0

    @property
    def product_id(self) -> int:
        return self.product.id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product": self.product.to_dict(),
            "algorithm": self.algorithm.value,
            "explanation": self.explanation,
            "score": round(self.score, 6),
            "combined_score": round(self.combined_score, 6),
        }
