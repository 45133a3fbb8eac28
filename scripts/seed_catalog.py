#!/usr/bin/env python3
"""Seed product catalog script.

Creates the catalog tables and seeds a deterministic sample catalog.

Usage:
    python scripts/seed_catalog.py --mode small
    python scripts/seed_catalog.py --mode full --seed 7
    python scripts/seed_catalog.py --mode small --no-clear
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from storefront.catalog.generator import GeneratorConfig
from storefront.catalog.service import get_catalog_service
from storefront.infrastructure.database import create_tables, engine


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the storefront product catalog",
    )
    parser.add_argument(
        "--mode",
        choices=["small", "full"],
        default="small",
        help="Catalog size: small (~25 products) or full (~150 products)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for generation (default: 42)",
    )
    parser.add_argument(
        "--no-clear",
        action="store_true",
        help="Don't clear existing catalog rows before seeding",
    )

    args = parser.parse_args()

    config = GeneratorConfig.full() if args.mode == "full" else GeneratorConfig.small()
    config.seed = args.seed

    print("=" * 60)
    print("Storefront Catalog Seeder")
    print("=" * 60)
    print(f"Mode: {args.mode}")
    print(f"Seed: {args.seed}")
    print(f"Clear existing: {not args.no_clear}")
    print()

    print("Creating database tables...")
    await create_tables()
    print("Tables ready.")
    print()

    try:
        result = await get_catalog_service().seed_catalog(
            config=config,
            clear_existing=not args.no_clear,
        )
    finally:
        await engine.dispose()

    print(f"  ✓ Deleted: {result['deleted']} existing products")
    print(f"  ✓ Created: {result['products_created']} products")
    print(f"  ✓ Inactive: {result['inactive']}")
    print(f"  ✓ Featured: {result['featured']}")
    print(f"  ✓ Brands: {result['brands']}")
    print(f"  ✓ Categories: {result['categories']}")
    print()
    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
