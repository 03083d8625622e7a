"""
Run the collection sort from the command line.

Usage:
    python scripts/run_sort.py            # Sort and write every configured collection
    python scripts/run_sort.py --dry-run  # Print the orderings, write nothing
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from exceptions import AppError
from services.sort_run_service import get_sort_run_service


def main():
    dry_run = "--dry-run" in sys.argv[1:]

    print("=" * 60)
    print("COLLECTION SORT" + (" (DRY RUN)" if dry_run else ""))
    print("=" * 60)

    try:
        summary = get_sort_run_service().run(dry_run=dry_run)
    except AppError as e:
        print(f"\n[ERROR] {e.code}: {e.message}")
        sys.exit(1)

    for result in summary.results:
        print(f"\n[OK] {result.title}")
        print(f"     Products: {result.product_count}, visible: {result.visible_count}")
        if result.product_ids:
            for i, product_id in enumerate(result.product_ids[:12]):
                print(f"     {i + 1:>2}. {product_id}")

    for failure in summary.failures:
        print(f"\n[FAILED] {failure.collection_id}")
        print(f"     {failure.error_code}: {failure.error_message}")

    print("\n" + "=" * 60)
    print(f"Unique products: {summary.unique_products}, unique groups: {summary.unique_groups}")
    print("=" * 60)

    if summary.failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
