#!/usr/bin/env python3
"""
Seed categories and products from a JSON file.

File format:
    {
      "categories": [{"name": "Fine Art", "description": "..."}],
      "products": [{"title": "...", "price": "120.00", "status": "active",
                    "category": "fine-art", "images": [{"url": "..."}]}]
    }

Products whose slug already exists are skipped, so the script can be re-run.

Usage:
    python scripts/seed_catalog.py catalog.json
    python scripts/seed_catalog.py catalog.json --dry-run
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pydantic import ValidationError

from db import get_db_session, session_commit, create_db_and_tables
from models.category import CategoryDTO
from models.product import ProductCreateRequest
from repositories.category import CategoryRepository
from repositories.product import ProductRepository
from services.product import ProductService
from utils.slug import slugify


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the storefront catalog from a JSON file")
    parser.add_argument("file", type=Path)
    parser.add_argument("--dry-run", action="store_true", help="Validate the file without writing")
    return parser.parse_args(argv)


def load_catalog(path: Path) -> dict:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("catalog file must contain a JSON object")
    data.setdefault("categories", [])
    data.setdefault("products", [])
    return data


async def seed(catalog: dict, dry_run: bool = False) -> tuple[int, int, int]:
    """
    Returns:
        (categories created, products created, products skipped)
    """
    categories_created = products_created = products_skipped = 0
    await create_db_and_tables()

    async with get_db_session() as session:
        for raw in catalog["categories"]:
            slug = raw.get("slug") or slugify(raw["name"])
            if await CategoryRepository.get_by_slug(slug, session) is not None:
                continue
            if not dry_run:
                await CategoryRepository.create(CategoryDTO(
                    name=raw["name"], slug=slug,
                    description=raw.get("description"), image=raw.get("image")
                ), session)
            categories_created += 1
        if not dry_run:
            await session_commit(session)

        for raw in catalog["products"]:
            raw = dict(raw)
            category_slug = raw.pop("category", None)
            if category_slug:
                category = await CategoryRepository.get_by_slug(category_slug, session)
                raw["category_id"] = category.id if category else None

            request = ProductCreateRequest.model_validate(raw)
            if await ProductRepository.slug_exists(slugify(request.title), session):
                print(f"⏭️  Skipping '{request.title}' (slug exists)")
                products_skipped += 1
                continue
            if not dry_run:
                await ProductService.create_product(request, session)
            products_created += 1

    return categories_created, products_created, products_skipped


async def main(argv=None):
    args = parse_args(argv)
    try:
        catalog = load_catalog(args.file)
        categories, created, skipped = await seed(catalog, dry_run=args.dry_run)
        prefix = "🔍 Dry run: would create" if args.dry_run else "✅ Created"
        print(f"{prefix} {categories} categories and {created} products ({skipped} skipped)")
    except (OSError, ValueError, KeyError, ValidationError) as e:
        print(f"❌ Invalid catalog: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
