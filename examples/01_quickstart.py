#!/usr/bin/env python3
"""Example: Quickstart — resource-store

Minimal working example: open a repository over an in-memory store,
save a few products, read them back from the cache, and delete one.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install resource-store
"""
from __future__ import annotations

import asyncio

import resource_store
from resource_store import (
    BlobResourceEngine,
    InMemoryBlobBackend,
    NotFoundError,
    Product,
    Repository,
)


async def main() -> None:
    print(f"resource-store version: {resource_store.__version__}")

    # Step 1: Open a repository over an in-memory key-value backend
    engine = BlobResourceEngine.key_value(Product, InMemoryBlobBackend())
    repository = await Repository.open(engine)

    # Step 2: Save a batch; the later Pen wins
    await repository.save_many(
        [
            Product(id=1, name="Pen", price="1.50"),
            Product(id=2, name="Mug", price="6.00"),
            Product(id=1, name="Pen", price="1.25"),
        ]
    )
    for product in repository:
        print(f"  {product.id}: {product.name} ({product.price})")

    # Step 3: Synchronous reads come from the cache
    mug = repository.find(2)
    print(f"\nFound by id: {mug.name if mug else None}")

    # Step 4: Delete and confirm it is gone from the store too
    await repository.delete_by_id(1)
    try:
        await engine.fetch_by_id(1)
    except NotFoundError as exc:
        print(f"After delete: {exc}")


if __name__ == "__main__":
    asyncio.run(main())
