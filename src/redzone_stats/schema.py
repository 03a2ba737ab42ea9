"""
Database schema management.

Applies the SQL files in ``migrations/`` in name order and records each one
in ``schema_migrations`` so re-running is a no-op.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .pg_async import AsyncPostgresDB

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"

_CREATE_TRACKING_TABLE = """
    CREATE TABLE IF NOT EXISTS schema_migrations (
        name TEXT PRIMARY KEY,
        applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
"""


def get_migration_files() -> list[Path]:
    """Get all SQL migration files in order."""
    if not MIGRATIONS_DIR.exists():
        return []
    return sorted(MIGRATIONS_DIR.glob("*.sql"))


async def run_migrations(db: "AsyncPostgresDB", force: bool = False) -> int:
    """
    Run all pending migrations.

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

    await db.execute(_CREATE_TRACKING_TABLE)
    applied_rows = await db.fetchall("SELECT name FROM schema_migrations")
    already_applied = {row["name"] for row in applied_rows}

    applied = 0
    for migration_file in migration_files:
        name = migration_file.stem
        if name in already_applied and not force:
            logger.debug("Skipping already applied migration: %s", name)
            continue

        logger.info("Applying migration: %s", name)
        sql = migration_file.read_text()
        async with db.transaction() as conn:
            await conn.execute(sql)
            await conn.execute(
                """
                INSERT INTO schema_migrations (name) VALUES (%s)
                ON CONFLICT (name) DO UPDATE SET applied_at = NOW()
                """,
                (name,),
            )
        applied += 1

    logger.info("Applied %d migration(s)", applied)
    return applied
