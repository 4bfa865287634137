"""
Versioned schema migrations.

Each migration creates a fixed group of tables.  Applied versions are
recorded in ``schema_migrations`` so re-running is a no-op; the list is
only ever appended to.

Migrations build their tables from the current model metadata, so a
shipped version must never see its tables change shape: adding or
removing a column on an existing table needs a new migration that alters
it.  ``tests/test_migrations.py`` pins the columns of every shipped table.

Run standalone with ``python -m app.db.migrations``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy import (Column, DateTime, Integer, MetaData, String, Table,
                        insert, select)
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

from app.db.base import Base, utcnow

# Ensure all models are imported so their tables are registered on Base.metadata
from app.models import menu, order, restaurant, review, user  # noqa: F401

logger = logging.getLogger(__name__)

_version_metadata = MetaData()

schema_migrations = Table(
    "schema_migrations",
    _version_metadata,
    Column("version", Integer, primary_key=True),
    Column("name", String(100), nullable=False),
    Column("applied_at", DateTime(timezone=True), nullable=False, default=utcnow),
)


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    tables: tuple[str, ...]

    def apply(self, conn: Connection) -> None:
        tables = [Base.metadata.tables[name] for name in self.tables]
        Base.metadata.create_all(conn, tables=tables)


MIGRATIONS: tuple[Migration, ...] = (
    Migration(1, "identities", ("users", "addresses")),
    Migration(
        2,
        "restaurants_and_menus",
        (
            "restaurants",
            "opening_hours",
            "restaurant_images",
            "menu_categories",
            "menu_items",
            "menu_customizations",
            "customization_options",
        ),
    ),
    Migration(3, "orders", ("orders", "order_items", "tracking_updates")),
    Migration(4, "reviews_and_favorites", ("reviews", "favorites")),
)


def _applied_versions(conn: Connection) -> set[int]:
    return set(conn.execute(select(schema_migrations.c.version)).scalars())


def _run(conn: Connection) -> list[int]:
    _version_metadata.create_all(conn)
    done = _applied_versions(conn)
    applied: list[int] = []
    for migration in sorted(MIGRATIONS, key=lambda m: m.version):
        if migration.version in done:
            continue
        migration.apply(conn)
        conn.execute(
            insert(schema_migrations).values(
                version=migration.version,
                name=migration.name,
                applied_at=utcnow(),
            )
        )
        logger.info("Applied migration %03d_%s", migration.version, migration.name)
        applied.append(migration.version)
    return applied


async def apply_migrations(engine: AsyncEngine) -> list[int]:
    """Apply pending migrations in version order; return the versions applied."""
    async with engine.begin() as conn:
        applied = await conn.run_sync(_run)
    if not applied:
        logger.info("Database schema up to date")
    return applied


async def _main() -> None:
    from app.core.config import Settings
    from app.db.session import create_engine

    settings = Settings()
    engine = create_engine(settings)
    try:
        await apply_migrations(engine)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
    asyncio.run(_main())
