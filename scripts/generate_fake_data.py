"""Generate fake shop data for testing and development.

This module creates a synthetic product catalog, user directory and
interaction log (views, likes, cart adds and purchases) and writes them as
the CSV files the recommender loads.

Example:
    Run the script directly to generate default data:
        $ python scripts/generate_fake_data.py

    Or import and use programmatically:
        from scripts.generate_fake_data import generate_fake_interactions
        df = generate_fake_interactions(num_users=100, num_products=200)
"""

import argparse
import random
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pandas as pd

# Default configuration constants
DEFAULT_NUM_USERS = 50
DEFAULT_NUM_PRODUCTS = 100
DEFAULT_NUM_INTERACTIONS = 2000
DEFAULT_DAYS_BACK = 90
SECONDS_PER_DAY = 86400

CATEGORIES = ["Books", "Electronics", "Clothing", "Home", "Sports", "Toys"]
INTERACTION_TYPES = ["view", "like", "cart", "purchase"]
# Views dominate real traffic, purchases are rare
INTERACTION_TYPE_WEIGHTS = [0.6, 0.2, 0.12, 0.08]


def generate_fake_products(
    num_products: int = DEFAULT_NUM_PRODUCTS,
) -> pd.DataFrame:
    """Generate a synthetic product catalog.

    Returns:
        DataFrame with id, name, description, category, price, rating and
        stock columns. Product ids run from 1 to num_products.
    """
    if num_products <= 0:
        raise ValueError("num_products must be positive")

    products = []
    for product_id in range(1, num_products + 1):
        category = random.choice(CATEGORIES)
        products.append({
            "id": product_id,
            "name": f"{category} item {product_id}",
            "description": f"A fine {category.lower()} product",
            "category": category,
            "price": round(random.uniform(5, 500), 2),
            "rating": round(random.uniform(1, 5), 1),
            "stock": random.randint(0, 200),
        })

    return pd.DataFrame(products)


def generate_fake_interactions(
    num_users: int = DEFAULT_NUM_USERS,
    num_products: int = DEFAULT_NUM_PRODUCTS,
    num_interactions: int = DEFAULT_NUM_INTERACTIONS,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> pd.DataFrame:
    """Generate a synthetic interaction log.

    Args:
        num_users: Number of unique users to simulate. Must be positive.
        num_products: Number of unique products available. Must be positive.
        num_interactions: Total number of interaction records to generate.
        start_date: Start of the timestamp range. Defaults to 90 days
            before end_date.
        end_date: End of the timestamp range. Defaults to now.

    Returns:
        DataFrame with user_id, product_id, type, rating and timestamp
        columns, sorted by timestamp.

    Raises:
        ValueError: If any numeric parameter is non-positive or if
            start_date is not before end_date.
    """
    if num_users <= 0 or num_products <= 0 or num_interactions <= 0:
        raise ValueError(
            "num_users, num_products, and num_interactions must be positive"
        )

    if end_date is None:
        end_date = datetime.now(timezone.utc)
    if start_date is None:
        start_date = end_date - timedelta(days=DEFAULT_DAYS_BACK)

    if start_date >= end_date:
        raise ValueError("start_date must be before end_date")

    total_seconds = int((end_date - start_date).total_seconds())

    interactions = []
    for _ in range(num_interactions):
        interaction_type = random.choices(
            INTERACTION_TYPES, weights=INTERACTION_TYPE_WEIGHTS
        )[0]
        rating = None
        if interaction_type in ("like", "purchase") and random.random() < 0.5:
            rating = random.randint(1, 5)

        interactions.append({
            "user_id": random.randint(1, num_users),
            "product_id": random.randint(1, num_products),
            "type": interaction_type,
            "rating": rating,
            "timestamp": start_date + timedelta(seconds=random.randrange(total_seconds)),
        })

    df = pd.DataFrame(interactions)
    df["rating"] = df["rating"].astype("Int64")
    return df.sort_values("timestamp").reset_index(drop=True)


def main() -> None:
    """Generate fake data and save it to the data directory."""
    parser = argparse.ArgumentParser(description="Generate fake HybridRec data")
    parser.add_argument("--users", type=int, default=DEFAULT_NUM_USERS)
    parser.add_argument("--products", type=int, default=DEFAULT_NUM_PRODUCTS)
    parser.add_argument("--interactions", type=int, default=DEFAULT_NUM_INTERACTIONS)
    parser.add_argument(
        "--output-dir",
        type=str,
        default=str(Path(__file__).parent.parent / "data"),
    )
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    if args.seed is not None:
        random.seed(args.seed)

    print(f"Generating {args.interactions} fake interactions...")
    print(f"Users: {args.users}, Products: {args.products}")

    try:
        products = generate_fake_products(args.products)
        interactions = generate_fake_interactions(
            num_users=args.users,
            num_products=args.products,
            num_interactions=args.interactions,
        )
    except ValueError as e:
        print(f"Error generating data: {e}")
        return

    users = pd.DataFrame({"user_id": range(1, args.users + 1)})

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    products.to_csv(output_dir / "products.csv", index=False)
    users.to_csv(output_dir / "users.csv", index=False)
    interactions.to_csv(output_dir / "interactions.csv", index=False)

    print(f"\nData generated successfully!")
    print(f"Saved to: {output_dir}")
    print(f"\nInteraction preview:")
    print(interactions.head(10))
    print(f"\nData summary:")
    print(f"  Total interactions: {len(interactions)}")
    print(f"  Interaction types: {interactions['type'].value_counts().to_dict()}")
    print(f"  Unique users: {interactions['user_id'].nunique()}")
    print(f"  Unique products: {interactions['product_id'].nunique()}")
    print(
        f"  Date range: {interactions['timestamp'].min()} to {interactions['timestamp'].max()}"
    )


if __name__ == "__main__":
    main()
