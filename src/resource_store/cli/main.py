"""CLI entry point for resource-store.

Invoked as::

    resource-store [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m resource_store.cli.main

Commands
--------
- version   — Show version information
- products  — Product collection command group

Products sub-commands
---------------------
- products list    — List all stored products
- products get     — Show one product
- products save    — Create or replace a product
- products delete  — Remove a product
- products clear   — Remove the whole collection
- products import  — Upsert (or replace with) products from a JSON/YAML file
"""
from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, TypeVar

import click
from rich.console import Console
from rich.table import Table

from resource_store.codec import Codec, JsonCodec, YamlCodec
from resource_store.config import BackendKind, StoreSettings, build_engine
from resource_store.engine import ResourceEngine
from resource_store.errors import NotFoundError, StoreError
from resource_store.models import Product
from resource_store.repository import Repository

console = Console()

R = TypeVar("R")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_settings(
    backend: str | None,
    storage_dir: str | None,
    db_path: str | None,
    base_url: str | None,
    log_level: str | None,
) -> StoreSettings:
    """Return environment settings overridden by any explicit CLI options."""
    overrides: dict[str, Any] = {}
    if backend is not None:
        overrides["backend"] = BackendKind(backend)
    if storage_dir is not None:
        overrides["storage_dir"] = Path(storage_dir)
    if db_path is not None:
        overrides["db_path"] = Path(db_path)
    if base_url is not None:
        overrides["base_url"] = base_url
    if log_level is not None:
        overrides["log_level"] = log_level.upper()
    return StoreSettings().model_copy(update=overrides)


def _run(
    engine: ResourceEngine[Product],
    action: Callable[[Repository[Product]], Awaitable[R]],
) -> R:
    """Open a repository over ``engine``, run ``action``, and report failures."""

    async def _main() -> R:
        try:
            repository = await Repository.open(engine)
            return await action(repository)
        finally:
            await engine.aclose()

    try:
        return asyncio.run(_main())
    except NotFoundError as exc:
        console.print(f"[red]Not found:[/red] {exc}")
        sys.exit(1)
    except StoreError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)


def _codec_for(path: Path) -> Codec[Product]:
    if path.suffix.lower() in {".yaml", ".yml"}:
        return YamlCodec(Product)
    return JsonCodec(Product)


def _products_table(products: list[Product]) -> Table:
    table = Table(title=f"Products ({len(products)})")
    table.add_column("id", style="bold cyan", justify="right")
    table.add_column("name")
    table.add_column("description")
    table.add_column("price", justify="right")
    for product in products:
        table.add_row(
            str(product.id),
            product.name,
            product.description or "",
            product.price or "",
        )
    return table


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="resource-store")
def cli() -> None:
    """Generic CRUD over file, key-value, and HTTP stores"""


@cli.command(name="version")
def version_command() -> None:
    """Show version information."""
    from resource_store import __version__

    console.print(f"[bold]resource-store[/bold] v{__version__}")


# ---------------------------------------------------------------------------
# products command group
# ---------------------------------------------------------------------------


@cli.group(name="products")
@click.option(
    "--backend",
    default=None,
    type=click.Choice([kind.value for kind in BackendKind], case_sensitive=False),
    help="Storage backend (default: RESOURCE_STORE_BACKEND or 'file').",
)
@click.option("--storage-dir", default=None, help="Directory for the file backend.")
@click.option("--db-path", default=None, help="SQLite database for the sqlite backend.")
@click.option("--base-url", default=None, help="Server base URL for the remote backend.")
@click.option("--log-level", default=None, help="Logging level (DEBUG, INFO, ...).")
@click.pass_context
def products_group(
    ctx: click.Context,
    backend: str | None,
    storage_dir: str | None,
    db_path: str | None,
    base_url: str | None,
    log_level: str | None,
) -> None:
    """Product collection commands."""
    settings = _make_settings(backend, storage_dir, db_path, base_url, log_level)
    logging.basicConfig(level=settings.log_level)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["engine"] = build_engine(settings, Product)


@products_group.command(name="list")
@click.option("--json-output", is_flag=True, help="Output raw JSON instead of a table.")
@click.pass_context
def products_list(ctx: click.Context, json_output: bool) -> None:
    """List all stored products."""

    async def action(repository: Repository[Product]) -> list[Product]:
        return repository.all()

    products = _run(ctx.obj["engine"], action)
    if json_output:
        console.print_json(JsonCodec(Product).encode_many(products).decode("utf-8"))
        return
    console.print(_products_table(products))


@products_group.command(name="get")
@click.argument("product_id", type=int)
@click.pass_context
def products_get(ctx: click.Context, product_id: int) -> None:
    """Show the product with PRODUCT_ID."""

    async def action(repository: Repository[Product]) -> Product:
        return await repository.fetch_by_id(product_id)

    product = _run(ctx.obj["engine"], action)
    console.print_json(product.model_dump_json())


@products_group.command(name="save")
@click.argument("product_id", type=int)
@click.argument("name")
@click.option("--description", default=None, help="Free-form description.")
@click.option("--price", default=None, help="Price as displayed, e.g. '$19.99'.")
@click.pass_context
def products_save(
    ctx: click.Context,
    product_id: int,
    name: str,
    description: str | None,
    price: str | None,
) -> None:
    """Create or replace the product with PRODUCT_ID."""
    product = Product(id=product_id, name=name, description=description, price=price)

    async def action(repository: Repository[Product]) -> Product:
        return await repository.save(product)

    stored = _run(ctx.obj["engine"], action)
    console.print(f"[green]Product saved:[/green] {stored.id} {stored.name}")


@products_group.command(name="delete")
@click.argument("product_id", type=int)
@click.pass_context
def products_delete(ctx: click.Context, product_id: int) -> None:
    """Remove the product with PRODUCT_ID (local stores ignore an absent ID)."""

    async def action(repository: Repository[Product]) -> None:
        await repository.delete_by_id(product_id)

    _run(ctx.obj["engine"], action)
    console.print(f"[green]Product deleted:[/green] {product_id}")


@products_group.command(name="clear")
@click.confirmation_option(prompt="Remove every stored product?")
@click.pass_context
def products_clear(ctx: click.Context) -> None:
    """Remove the whole product collection."""

    async def action(repository: Repository[Product]) -> None:
        await repository.delete_all()

    _run(ctx.obj["engine"], action)
    console.print("[green]All products removed.[/green]")


@products_group.command(name="import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--replace", is_flag=True, help="Replace the collection instead of upserting.")
@click.pass_context
def products_import(ctx: click.Context, source: Path, replace: bool) -> None:
    """Load products from SOURCE (JSON or YAML array)."""
    try:
        products = _codec_for(source).decode_many(source.read_bytes())
    except StoreError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    async def action(repository: Repository[Product]) -> list[Product]:
        if replace:
            return await repository.replace_all(products)
        return await repository.save_many(products)

    stored = _run(ctx.obj["engine"], action)
    verb = "Replaced collection with" if replace else "Upserted"
    console.print(f"[green]{verb} {len(stored)} products.[/green]")


if __name__ == "__main__":
    cli()
