"""
Database schema management for the league database.

Handles initialization, migrations, and schema version tracking.
Applied migrations are recorded in the `meta` table so each one runs once.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .core.types import (
    GAMES_TABLE,
    PLAYER_STATS_TABLE,
    PLAYERS_TABLE,
    SCORE_EVENTS_TABLE,
    TEAMS_TABLE,
)

if TYPE_CHECKING:
    from .pg_async import AsyncPostgresDB

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"

META_DDL = """
CREATE TABLE IF NOT EXISTS meta (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""

COUNTED_TABLES = (
    TEAMS_TABLE,
    PLAYERS_TABLE,
    GAMES_TABLE,
    PLAYER_STATS_TABLE,
    SCORE_EVENTS_TABLE,
)


def get_migration_files() -> list[Path]:
    """Get all SQL migration files in order."""
    if not MIGRATIONS_DIR.exists():
        return []
    return sorted(MIGRATIONS_DIR.glob("*.sql"))


async def run_migrations(db: "AsyncPostgresDB", force: bool = False) -> int:
    """
    Run all pending migrations.

    Each migration and its `meta` bookkeeping row are applied in a single
    transaction.

    Args:
        db: Database connection
        force: If True, run all migrations even if already applied

    Returns:
        Number of migrations applied
    """
    migration_files = get_migration_files()
    if not migration_files:
        logger.warning("No migration files found in %s", MIGRATIONS_DIR)
        return 0

    await db.execute(META_DDL)

    applied = 0
    for migration_file in migration_files:
        migration_name = migration_file.stem
        key = f"migration_{migration_name}"

        if not force:
            existing = await db.fetchone("SELECT value FROM meta WHERE key = %s", (key,))
            if existing:
                logger.debug("Skipping already applied migration: %s", migration_name)
                continue

        logger.info("Applying migration: %s", migration_name)
        sql = migration_file.read_text()

        async with db.transaction() as conn:
            await conn.execute(sql)
            await conn.execute(
                """
                INSERT INTO meta (key, value, updated_at)
                VALUES (%s, 'applied', NOW())
                ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value, updated_at = NOW()
                """,
                (key,),
            )
        applied += 1

    return applied


async def init_database(db: "AsyncPostgresDB") -> int:
    """
    Initialize the database with the full schema.

    Returns:
        Number of migrations applied
    """
    applied = await run_migrations(db)
    logger.info("Database initialized with %d migrations", applied)
    return applied


async def get_schema_version(db: "AsyncPostgresDB") -> str | None:
    """Name of the most recently applied migration, if any."""
    row = await db.fetchone(
        """
        SELECT key FROM meta
        WHERE key LIKE 'migration_%%'
        ORDER BY key DESC
        LIMIT 1
        """
    )
    return row["key"].removeprefix("migration_") if row else None


async def get_table_counts(db: "AsyncPostgresDB") -> dict[str, int]:
    """Row counts for every league table."""
    counts: dict[str, int] = {}
    for table in COUNTED_TABLES:
        row = await db.fetchone(f"SELECT COUNT(*)::int AS n FROM {table}")
        counts[table] = row["n"] if row else 0
    return counts
