"""
Repository abstraction layer.

Usage:
    from redzone_stats.repositories import get_repository

    repo = get_repository(db)
    await repo.upsert_week(2024, 5, rows)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import TeamWeekStatsRepository

if TYPE_CHECKING:
    from ..pg_async import AsyncPostgresDB

__all__ = [
    "TeamWeekStatsRepository",
    "get_repository",
]


def get_repository(db: "AsyncPostgresDB") -> TeamWeekStatsRepository:
    """
    Get the weekly stats repository for the given database connection.

    Currently always returns the PostgreSQL implementation.
    """
    from .postgres import PostgresTeamWeekStatsRepository

    return PostgresTeamWeekStatsRepository(db)
