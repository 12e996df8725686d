#!/usr/bin/env python3
"""Example: Storage Backends

Demonstrates the same product collection persisted through the file,
SQLite, and in-memory backends.

Usage:
    python examples/02_storage_backends.py

Requirements:
    pip install resource-store
"""
from __future__ import annotations

import asyncio
import tempfile
from pathlib import Path

from resource_store import (
    BlobResourceEngine,
    InMemoryBlobBackend,
    Product,
    Repository,
    ResourceEngine,
    SQLiteKeyValueBackend,
    YamlCodec,
)

CATALOGUE = [
    Product(id=1, name="Pen", price="1.50"),
    Product(id=2, name="Mug", description="Stoneware, 350 ml"),
]


async def demo_backend(label: str, engine: ResourceEngine[Product]) -> None:
    writer = await Repository.open(engine)
    await writer.replace_all(CATALOGUE)

    reader = await Repository.open(engine)
    names = ", ".join(product.name for product in reader)
    print(f"[{label}] {len(reader)} products: {names}")


async def main() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        root = Path(tmp)
        await demo_backend("file/json", BlobResourceEngine.file(Product, root / "json"))
        await demo_backend(
            "file/yaml",
            BlobResourceEngine.file(Product, root / "yaml", codec=YamlCodec(Product)),
        )
        await demo_backend(
            "sqlite",
            BlobResourceEngine.key_value(Product, SQLiteKeyValueBackend(root / "store.db")),
        )
    await demo_backend("memory", BlobResourceEngine.key_value(Product, InMemoryBlobBackend()))


if __name__ == "__main__":
    asyncio.run(main())
