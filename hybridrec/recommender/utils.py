"""Utility functions for loading recommender data.

This module provides helper functions for reading the interaction, product
and user collections from CSV files, persisting them back, and building an
``InMemoryDataStore`` from a data directory.
"""

import logging
from pathlib import Path
from typing import Tuple

import pandas as pd

from hybridrec.recommender.store import (
    INTERACTION_COLUMNS,
    PRODUCT_COLUMNS,
    USER_COLUMNS,
    InMemoryDataStore,
)

# Configure module logger
logger = logging.getLogger(__name__)

# Data filenames
PRODUCTS_FILENAME = "products.csv"
USERS_FILENAME = "users.csv"
INTERACTIONS_FILENAME = "interactions.csv"


def _read_csv(csv_path: str, required_columns: set) -> pd.DataFrame:
    csv_file = Path(csv_path)
    if not csv_file.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    logger.info(f"Loading CSV from {csv_path}")
    df = pd.read_csv(csv_file)

    if not required_columns.issubset(df.columns):
        missing = required_columns - set(df.columns)
        raise ValueError(f"CSV {csv_path} missing required columns: {missing}")

    logger.info(f"Loaded {len(df)} records from {csv_file.name}")
    return df


def load_products_csv(csv_path: str) -> pd.DataFrame:
    """Load the product catalog.

    Args:
        csv_path: Path to a CSV file with at least ``id``, ``category`` and
            ``price`` columns. ``name``, ``description``, ``rating`` and
            ``stock`` are optional.

    Returns:
        DataFrame with one row per product.

    Raises:
        FileNotFoundError: If the CSV file does not exist.
        ValueError: If required columns are missing.
    """
    return _read_csv(csv_path, {"id", "category", "price"})


def load_interactions_csv(csv_path: str) -> pd.DataFrame:
    """Load the interaction log.

    Args:
        csv_path: Path to a CSV file with ``user_id``, ``product_id``,
            ``type`` and ``timestamp`` columns and an optional ``rating``.

    Returns:
        DataFrame with parsed timestamps.

    Raises:
        FileNotFoundError: If the CSV file does not exist.
        ValueError: If required columns are missing.
    """
    df = _read_csv(csv_path, {"user_id", "product_id", "type", "timestamp"})
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    return df


def load_users_csv(csv_path: str) -> pd.DataFrame:
    """Load the user directory (a ``user_id`` column)."""
    return _read_csv(csv_path, {"user_id"})


def get_data_paths(data_dir: str) -> Tuple[Path, Path, Path]:
    """Get file paths for the data files without loading them.

    Args:
        data_dir: Directory where the CSV files are stored.

    Returns:
        A tuple of paths for products, users and interactions.
    """
    data_path = Path(data_dir)
    return (
        data_path / PRODUCTS_FILENAME,
        data_path / USERS_FILENAME,
        data_path / INTERACTIONS_FILENAME,
    )


def check_data_exists(data_dir: str) -> bool:
    """Check if the product and interaction files exist.

    The users file is optional; without it the directory is derived from
    the interaction log.
    """
    products_path, _, interactions_path = get_data_paths(data_dir)
    return products_path.exists() and interactions_path.exists()


def load_data_store(data_dir: str) -> InMemoryDataStore:
    """Build an in-memory store from the CSV files in ``data_dir``.

    Args:
        data_dir: Directory containing ``products.csv``, ``interactions.csv``
            and optionally ``users.csv``.

    Returns:
        Populated ``InMemoryDataStore``.

    Raises:
        FileNotFoundError: If the directory or a required file is missing.
        ValueError: If a file is malformed.

    Example:
        >>> store = load_data_store("data")
        >>> print(f"Loaded {store.num_products} products")
    """
    data_path = Path(data_dir)
    if not data_path.exists():
        raise FileNotFoundError(f"Data directory does not exist: {data_dir}")

    products_path, users_path, interactions_path = get_data_paths(data_dir)

    products = load_products_csv(str(products_path))
    interactions = load_interactions_csv(str(interactions_path))
    users = load_users_csv(str(users_path)) if users_path.exists() else None

    if users is None:
        logger.warning(f"No {USERS_FILENAME} in {data_dir}, deriving users from interactions")

    return InMemoryDataStore(products, interactions, users)


def save_data_store(store: InMemoryDataStore, output_dir: str) -> None:
    """Write the store's collections to CSV files in ``output_dir``.

    Creates the directory if it doesn't exist.
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    products_path, users_path, interactions_path = get_data_paths(output_dir)

    store.products[PRODUCT_COLUMNS].to_csv(products_path, index=False)
    logger.info(f"Saved products to {products_path}")

    store.users[USER_COLUMNS].to_csv(users_path, index=False)
    logger.info(f"Saved users to {users_path}")

    store.interactions[INTERACTION_COLUMNS].to_csv(interactions_path, index=False)
    logger.info(f"Saved interactions to {interactions_path}")
