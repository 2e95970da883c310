"""CLI script for getting product recommendations.

Useful for testing and evaluation. Gets recommendations for a user
and prints them to the console.
"""

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from hybridrec.recommender.hybrid import create_hybrid_recommender
from hybridrec.recommender.models import RecommendationItem

# Setup logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s"
)
logger = logging.getLogger(__name__)


def print_items(items: List[RecommendationItem], explain: bool) -> None:
    for rank, item in enumerate(items, start=1):
        line = f"  {rank:2d}. product {item.product_id} ({item.product.category}, ${item.product.price:.2f})"
        if explain:
            line += (
                f" [{item.algorithm.value}] combined={item.combined_score:.2f}"
                f" score={item.score:.3f} - {item.explanation}"
            )
        print(line)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Get product recommendations for a user",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/predict_cli.py 42
  python scripts/predict_cli.py 42 --limit 5 --explain
  python scripts/predict_cli.py --popular
        """
    )
    parser.add_argument(
        "user_id",
        type=int,
        nargs="?",
        default=None,
        help="User ID to get recommendations for (not needed with --popular)"
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Number of recommendations to return (default: 10)"
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Directory containing the CSV data (default: HYBRIDREC_DATA_DIR or data)"
    )
    parser.add_argument(
        "--popular",
        action="store_true",
        help="Show the popular products list instead of personal recommendations"
    )
    parser.add_argument(
        "--explain",
        action="store_true",
        help="Show algorithm tags and scores"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    args = parser.parse_args(argv)
    if args.user_id is None and not args.popular:
        parser.error("user_id is required unless --popular is given")
    if args.limit <= 0:
        parser.error("--limit must be positive")
    return args


def main() -> None:
    """Main CLI function."""
    args = parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    try:
        recommender = create_hybrid_recommender(args.data_dir)
    except FileNotFoundError as e:
        print(f"Error: data not found", file=sys.stderr)
        print(f"  {e}", file=sys.stderr)
        sys.exit(1)

    if args.popular:
        items = recommender.get_popular_products(args.limit)
        print(f"\nPopular products:")
    else:
        items, breakdown = recommender.generate_recommendations(
            args.user_id, args.limit, return_scores=True
        )
        print(f"\nRecommendations for user {args.user_id} (method: {breakdown['method']}):")
        if args.explain:
            print(f"  Breakdown: {breakdown}")

    print_items(items, args.explain)
    print()


if __name__ == "__main__":
    main()
