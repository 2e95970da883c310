"""Data access for interactions, products and users.

The recommender only reads through the ``DataStore`` interface. The bundled
``InMemoryDataStore`` keeps the three collections in pandas DataFrames, which
is enough for CSV-backed deployments and for tests.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Tuple

import pandas as pd

from hybridrec.recommender.models import Interaction, InteractionType, Product

# Configure module logger
logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = ["id", "name", "description", "category", "price", "rating", "stock"]
INTERACTION_COLUMNS = ["user_id", "product_id", "type", "rating", "timestamp"]
USER_COLUMNS = ["user_id"]

# (product_id, total_score, interaction_count)
PopularityRow = Tuple[int, float, int]


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc_timestamp(value: datetime) -> pd.Timestamp:
    timestamp = pd.Timestamp(value)
    if timestamp.tzinfo is None:
        return timestamp.tz_localize("UTC")
    return timestamp.tz_convert("UTC")


class DataStoreError(Exception):
    """Raised when the backing data cannot be read or written."""


class DataStore(Protocol):
    """Read capabilities the recommender needs from its collaborators."""

    def find_interactions(
        self,
        user_id: Optional[int] = None,
        types: Optional[Iterable[str]] = None,
        limit: Optional[int] = None,
    ) -> List[Interaction]:
        ...

    def find_users(self, exclude_user_id: Optional[int], limit: int) -> List[int]:
        ...

    def find_products_by_ids(self, product_ids: Iterable[int]) -> List[Product]:
        ...

    def find_products_excluding(
        self, product_ids: Iterable[int], limit: int
    ) -> List[Product]:
        ...

    def aggregate_interactions_by_product(
        self,
        since: datetime,
        weight_fn: Callable[[str], float],
        exclude_ids: Optional[Iterable[int]] = None,
        limit: Optional[int] = None,
    ) -> List[PopularityRow]:
        ...

    def find_products_sorted_by_rating(
        self, limit: int, exclude_ids: Optional[Iterable[int]] = None
    ) -> List[Product]:
        ...


def _prepare_products(df: pd.DataFrame) -> pd.DataFrame:
    required = {"id", "category", "price"}
    if not required.issubset(df.columns):
        missing = required - set(df.columns)
        raise ValueError(f"Product data missing required columns: {missing}")

    df = df.copy()
    defaults = {"name": "", "description": "", "rating": 0.0, "stock": 0}
    for column, default in defaults.items():
        if column not in df.columns:
            df[column] = default
    df["name"] = df["name"].fillna("").astype(str)
    df["description"] = df["description"].fillna("").astype(str)
    df["rating"] = df["rating"].fillna(0.0).astype(float)
    df["stock"] = df["stock"].fillna(0).astype(int)
    df["id"] = df["id"].astype(int)
    df["category"] = df["category"].astype(str)
    df["price"] = df["price"].astype(float)

    if (df["price"] < 0).any():
        raise ValueError("Product prices must be non-negative")

    return df[PRODUCT_COLUMNS].drop_duplicates("id").reset_index(drop=True)


def _prepare_interactions(df: pd.DataFrame) -> pd.DataFrame:
    required = {"user_id", "product_id", "type"}
    if not required.issubset(df.columns):
        missing = required - set(df.columns)
        raise ValueError(f"Interaction data missing required columns: {missing}")

    df = df.copy()
    if "rating" not in df.columns:
        df["rating"] = None
    if "timestamp" not in df.columns:
        df["timestamp"] = pd.Timestamp.now(tz="UTC")
    df["user_id"] = df["user_id"].astype(int)
    df["product_id"] = df["product_id"].astype(int)
    df["type"] = df["type"].astype(str)
    df["rating"] = pd.to_numeric(df["rating"], errors="coerce").astype("Int64")
    # Naive timestamps are taken as UTC
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    return df[INTERACTION_COLUMNS].reset_index(drop=True)


def _row_to_product(row) -> Product:
    return Product(
        id=int(row.id),
        name=row.name,
        description=row.description,
        category=row.category,
        price=float(row.price),
        rating=float(row.rating),
        stock=int(row.stock),
    )


def _row_to_interaction(row) -> Interaction:
    return Interaction(
        user_id=int(row.user_id),
        product_id=int(row.product_id),
        type=row.type,
        rating=None if pd.isna(row.rating) else int(row.rating),
        timestamp=row.timestamp.to_pydatetime(),
    )


class InMemoryDataStore:
    """DataFrame-backed implementation of ``DataStore``.

    Interactions are append-only. Every read grabs the current frame once, so
    a request never observes a half-applied append.
    """

    def __init__(
        self,
        products: pd.DataFrame,
        interactions: pd.DataFrame,
        users: Optional[pd.DataFrame] = None,
    ):
        self._products = _prepare_products(products)
        self._interactions = _prepare_interactions(interactions)

        if users is None:
            user_ids = sorted(self._interactions["user_id"].unique().tolist())
            users = pd.DataFrame({"user_id": user_ids})
        elif "user_id" not in users.columns:
            raise ValueError("User data missing required column: user_id")
        self._users = (
            users[USER_COLUMNS].astype(int).drop_duplicates().reset_index(drop=True)
        )

        self._write_lock = threading.Lock()

        logger.info(
            "Initialized InMemoryDataStore",
            extra={
                "num_products": self.num_products,
                "num_users": self.num_users,
                "num_interactions": self.num_interactions,
            },
        )

    @classmethod
    def from_records(
        cls,
        products: Iterable[Product],
        interactions: Iterable[Interaction],
        user_ids: Optional[Sequence[int]] = None,
    ) -> "InMemoryDataStore":
        """Build a store from domain objects instead of DataFrames."""
        products_df = pd.DataFrame(
            [p.to_dict() for p in products], columns=PRODUCT_COLUMNS
        )
        interactions_df = pd.DataFrame(
            [
                {
                    "user_id": i.user_id,
                    "product_id": i.product_id,
                    "type": i.type,
                    "rating": i.rating,
                    "timestamp": i.timestamp,
                }
                for i in interactions
            ],
            columns=INTERACTION_COLUMNS,
        )
        users_df = None
        if user_ids is not None:
            users_df = pd.DataFrame({"user_id": list(user_ids)}, dtype=int)
        return cls(products_df, interactions_df, users_df)

    @property
    def products(self) -> pd.DataFrame:
        return self._products

    @property
    def interactions(self) -> pd.DataFrame:
        return self._interactions

    @property
    def users(self) -> pd.DataFrame:
        return self._users

    @property
    def num_products(self) -> int:
        return len(self._products)

    @property
    def num_users(self) -> int:
        return len(self._users)

    @property
    def num_interactions(self) -> int:
        return len(self._interactions)

    def find_interactions(
        self,
        user_id: Optional[int] = None,
        types: Optional[Iterable[str]] = None,
        limit: Optional[int] = None,
    ) -> List[Interaction]:
        """Return interactions matching the filter, most recent first."""
        df = self._interactions
        if user_id is not None:
            df = df[df["user_id"] == user_id]
        if types is not None:
            df = df[df["type"].isin(list(types))]

        df = df.sort_values("timestamp", ascending=False, kind="mergesort")
        if limit is not None:
            df = df.head(limit)

        return [_row_to_interaction(row) for row in df.itertuples(index=False)]

    def find_users(self, exclude_user_id: Optional[int], limit: int) -> List[int]:
        """Return up to ``limit`` user ids in directory order."""
        users = self._users["user_id"]
        if exclude_user_id is not None:
            users = users[users != exclude_user_id]
        return [int(uid) for uid in users.head(limit)]

    def find_products_by_ids(self, product_ids: Iterable[int]) -> List[Product]:
        ids = set(product_ids)
        if not ids:
            return []
        df = self._products
        df = df[df["id"].isin(ids)]
        return [_row_to_product(row) for row in df.itertuples(index=False)]

    def get_product(self, product_id: int) -> Optional[Product]:
        products = self.find_products_by_ids([product_id])
        return products[0] if products else None

    def find_products_excluding(
        self, product_ids: Iterable[int], limit: int
    ) -> List[Product]:
        df = self._products
        excluded = set(product_ids)
        if excluded:
            df = df[~df["id"].isin(excluded)]
        return [_row_to_product(row) for row in df.head(limit).itertuples(index=False)]

    def aggregate_interactions_by_product(
        self,
        since: datetime,
        weight_fn: Callable[[str], float],
        exclude_ids: Optional[Iterable[int]] = None,
        limit: Optional[int] = None,
    ) -> List[PopularityRow]:
        """Group interactions newer than ``since`` by product and sum weights.

        Rows are ordered by total score descending, then product id.
        """
        df = self._interactions
        window = df[df["timestamp"] >= to_utc_timestamp(since)]

        excluded = set(exclude_ids or [])
        if excluded:
            window = window[~window["product_id"].isin(excluded)]

        if window.empty:
            return []

        grouped = (
            window.assign(score=window["type"].map(weight_fn).astype(float))
            .groupby("product_id")
            .agg(total_score=("score", "sum"), interaction_count=("score", "size"))
            .reset_index()
            .sort_values(["total_score", "product_id"], ascending=[False, True])
        )
        if limit is not None:
            grouped = grouped.head(limit)

        return [
            (int(row.product_id), float(row.total_score), int(row.interaction_count))
            for row in grouped.itertuples(index=False)
        ]

    def find_products_sorted_by_rating(
        self, limit: int, exclude_ids: Optional[Iterable[int]] = None
    ) -> List[Product]:
        df = self._products
        excluded = set(exclude_ids or [])
        if excluded:
            df = df[~df["id"].isin(excluded)]
        df = df.sort_values(["rating", "id"], ascending=[False, True])
        return [_row_to_product(row) for row in df.head(limit).itertuples(index=False)]

    def add_interaction(self, interaction: Interaction) -> None:
        """Append an interaction to the store."""
        if interaction.type not in {t.value for t in InteractionType}:
            raise ValueError(f"Unknown interaction type: {interaction.type}")

        row = pd.DataFrame(
            [
                {
                    "user_id": interaction.user_id,
                    "product_id": interaction.product_id,
                    "type": interaction.type,
                    "rating": interaction.rating,
                    "timestamp": interaction.timestamp,
                }
            ],
            columns=INTERACTION_COLUMNS,
        )
        row = _prepare_interactions(row)

        with self._write_lock:
            self._interactions = pd.concat(
                [self._interactions, row], ignore_index=True
            )
            if interaction.user_id not in set(self._users["user_id"]):
                self._users = pd.concat(
                    [self._users, pd.DataFrame({"user_id": [interaction.user_id]})],
                    ignore_index=True,
                )

        logger.debug(
            "Recorded interaction",
            extra={
                "user_id": interaction.user_id,
                "product_id": interaction.product_id,
                "interaction_type": interaction.type,
            },
        )
