"""
PostgreSQL implementation of the weekly red-zone repository.

Rows are keyed by (season, week, team_abbreviation); a refresh overwrites every
counter for the key so re-running a week is idempotent.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Sequence

import psycopg

from ..core.models import TeamWeekStats
from ..errors import PersistenceError
from .base import TeamWeekStatsRepository

if TYPE_CHECKING:
    from ..pg_async import AsyncPostgresDB

logger = logging.getLogger(__name__)

TEAM_STATS_TABLE = "nfl_team_stats"

# Model field -> column
COLUMN_MAP = {
    "season": "season",
    "week": "week",
    "team_abbreviation": "team_abbreviation",
    "team_name": "team_name",
    "attempts": "red_zone_attempts",
    "touchdowns": "red_zone_touchdowns",
    "field_goals": "red_zone_field_goals",
    "td_rate": "red_zone_td_rate",
    "opp_attempts": "opp_red_zone_attempts",
    "opp_touchdowns": "opp_red_zone_touchdowns",
    "opp_field_goals": "opp_red_zone_field_goals",
    "opp_td_rate": "opp_red_zone_td_rate",
}

CONFLICT_KEYS = ("season", "week", "team_abbreviation")


def _build_upsert_query() -> str:
    columns = list(COLUMN_MAP.values())
    placeholders = ", ".join(["%s"] * len(columns))
    update_clause = ", ".join(
        f"{col} = EXCLUDED.{col}" for col in columns if col not in CONFLICT_KEYS
    )
    return f"""
        INSERT INTO {TEAM_STATS_TABLE} ({", ".join(columns)})
        VALUES ({placeholders})
        ON CONFLICT ({", ".join(CONFLICT_KEYS)}) DO UPDATE SET
            {update_clause},
            updated_at = NOW()
    """


UPSERT_QUERY = _build_upsert_query()

SELECT_WEEK_QUERY = f"""
    SELECT {", ".join(f"{col} AS {field}" for field, col in COLUMN_MAP.items())}
    FROM {TEAM_STATS_TABLE}
    WHERE season = %s AND week = %s
    ORDER BY team_abbreviation
"""


def _row_params(row: TeamWeekStats) -> tuple[Any, ...]:
    data = row.model_dump()
    return tuple(data[field] for field in COLUMN_MAP)


class PostgresTeamWeekStatsRepository(TeamWeekStatsRepository):
    """PostgreSQL-backed weekly red-zone rows."""

    def __init__(self, db: "AsyncPostgresDB"):
        self.db = db

    async def upsert_week(
        self,
        season: int,
        week: int,
        rows: Sequence[TeamWeekStats],
    ) -> int:
        """Upsert every row in one transaction."""
        if not rows:
            return 0

        for row in rows:
            if (row.season, row.week) != (season, week):
                raise ValueError(
                    f"Row for {row.team_abbreviation} is for {row.season} week {row.week}, "
                    f"expected {season} week {week}"
                )

        try:
            async with self.db.transaction() as conn:
                async with conn.cursor() as cur:
                    await cur.executemany(UPSERT_QUERY, [_row_params(row) for row in rows])
        except psycopg.Error as e:
            logger.error("Failed to upsert red-zone stats for %d week %d: %s", season, week, e)
            raise PersistenceError(
                f"Could not write red-zone stats for {season} week {week}: {e}",
                season=season,
                week=week,
            ) from e

        logger.info("Upserted %d team rows for %d week %d", len(rows), season, week)
        return len(rows)

    async def find_week(self, season: int, week: int) -> list[TeamWeekStats]:
        try:
            records = await self.db.fetchall(SELECT_WEEK_QUERY, (season, week))
        except psycopg.Error as e:
            raise PersistenceError(
                f"Could not read red-zone stats for {season} week {week}: {e}",
                season=season,
                week=week,
            ) from e
        return [TeamWeekStats(**record) for record in records]
