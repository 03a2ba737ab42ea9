"""
Base repository protocol for weekly red-zone rows.

Defines the persistence contract the refresh depends on, keeping the
orchestrator independent of the database implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ..core.models import TeamWeekStats


class TeamWeekStatsRepository(ABC):
    """Abstract interface for weekly team red-zone statistics."""

    @abstractmethod
    async def upsert_week(
        self,
        season: int,
        week: int,
        rows: Sequence[TeamWeekStats],
    ) -> int:
        """
        Insert or overwrite the rows for a (season, week).

        All-or-nothing: either every row is written or none is.

        Args:
            season: Season year
            week: Week number
            rows: One row per team, all for this season/week

        Returns:
            Number of rows written

        Raises:
            PersistenceError: If the write failed
        """
        ...

    @abstractmethod
    async def find_week(self, season: int, week: int) -> list[TeamWeekStats]:
        """
        Load the stored rows for a (season, week), ordered by team abbreviation.

        Raises:
            PersistenceError: If the read failed
        """
        ...
