"""
Weekly red-zone refresh.

Coordinates fetch -> segment -> aggregate -> persist for one (season, week):

1. Validate the request (nothing is fetched for a bad season/week)
2. Fetch the week's games; failure here is fatal, an empty week is a no-op
3. Fetch and segment each game concurrently, bounded by a semaphore.
   A game whose plays cannot be fetched counts as zero plays.
4. Resolve team metadata once per distinct team id
5. Aggregate every drive into per-team rows
6. Upsert all rows in one transaction

Designed to be called by:
- The ``redzone-stats refresh`` CLI command
- Cron jobs / schedulers via refresh_red_zone_stats()

Usage:
    from redzone_stats.redzone import refresh_red_zone_stats

    result = await refresh_red_zone_stats(2024, 5)
    print(f"Upserted {result.record_count} teams")
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any, Optional

from ..core.models import Drive, ScheduledGame, TeamInfo
from ..errors import PartialDataWarning, PersistenceError, UpstreamFetchError, ValidationError
from ..providers.base import (
    CompetitorTeamDirectory,
    GameScheduleFetcher,
    PlayStreamFetcher,
    TeamDirectory,
)
from .aggregator import aggregate_red_zone_stats
from .classifier import PlayClassifier
from .segmenter import segment_game

if TYPE_CHECKING:
    from ..core.config import Settings
    from ..repositories.base import TeamWeekStatsRepository

logger = logging.getLogger(__name__)

MIN_SEASON = 2000
MIN_WEEK = 1
MAX_WEEK = 18


def validate_season_week(season: Any, week: Any) -> None:
    """
    Reject a season/week before anything is fetched.

    Raises:
        ValidationError: If either value is not an integer in range
    """
    max_season = date.today().year + 1
    checks = (
        ("season", season, MIN_SEASON, max_season),
        ("week", week, MIN_WEEK, MAX_WEEK),
    )
    for name, value, low, high in checks:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{name} must be an integer, got {value!r}", name, value)
        if not low <= value <= high:
            raise ValidationError(f"{name} must be between {low} and {high}, got {value}", name, value)


@dataclass
class RefreshResult:
    """Result of a weekly red-zone refresh."""
    season: Any
    week: Any
    success: bool = True
    record_count: int = 0
    error: Optional[str] = None
    games_found: int = 0
    games_failed: int = 0
    drives_counted: int = 0
    warnings: list[PartialDataWarning] = field(default_factory=list)
    duration_seconds: float = 0.0

    def fail(self, error: str) -> "RefreshResult":
        self.success = False
        self.record_count = 0
        self.error = error
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "season": self.season,
            "week": self.week,
            "success": self.success,
            "record_count": self.record_count,
            "error": self.error,
            "games_found": self.games_found,
            "games_failed": self.games_failed,
            "drives_counted": self.drives_counted,
            "warnings": [w.to_dict() for w in self.warnings],
            "duration_seconds": self.duration_seconds,
        }


@dataclass
class GameDrives:
    """Drives segmented from one game (empty if its plays were unavailable)."""
    game: ScheduledGame
    drives: list[Drive] = field(default_factory=list)
    warning: Optional[PartialDataWarning] = None


@dataclass
class WeekData:
    """Everything fetched for a week, ready to aggregate."""
    games: list[ScheduledGame]
    outcomes: list[GameDrives] = field(default_factory=list)
    teams: dict[str, TeamInfo] = field(default_factory=dict)

    @property
    def drives(self) -> list[Drive]:
        return [drive for outcome in self.outcomes for drive in outcome.drives]

    @property
    def warnings(self) -> list[PartialDataWarning]:
        return [outcome.warning for outcome in self.outcomes if outcome.warning]


class RedZoneRefresher:
    """
    Recompute and store a week's red-zone stats.

    Collaborators are injected so the refresh can run against ESPN and
    PostgreSQL in production and against in-memory fakes in tests.
    """

    def __init__(
        self,
        schedule: GameScheduleFetcher,
        plays: PlayStreamFetcher,
        directory: TeamDirectory,
        repository: "TeamWeekStatsRepository",
        *,
        classifier: Optional[PlayClassifier] = None,
        max_concurrent_games: int = 4,
        timeout_seconds: Optional[float] = None,
    ):
        """
        Initialize the refresher.

        Args:
            schedule: Supplies the week's games
            plays: Supplies each game's ordered plays
            directory: Resolves team ids to abbreviation/name
            repository: Stores the weekly rows
            classifier: Play classifier (text heuristic by default)
            max_concurrent_games: Games fetched at the same time
            timeout_seconds: Abort fetching after this long; nothing is written
        """
        if max_concurrent_games < 1:
            raise ValueError("max_concurrent_games must be at least 1")
        self.schedule = schedule
        self.plays = plays
        self.directory = directory
        self.repository = repository
        self.classifier = classifier
        self.max_concurrent_games = max_concurrent_games
        self.timeout_seconds = timeout_seconds

    async def refresh(self, season: int, week: int) -> RefreshResult:
        """
        Refresh red-zone stats for a season/week.

        Never raises for expected failures; inspect ``success``/``error``.
        """
        started = time.monotonic()
        result = RefreshResult(season=season, week=week)
        logger.info("Calculating red zone stats for %s week %s...", season, week)

        try:
            validate_season_week(season, week)

            week_data = await self._gather_with_timeout(season, week)
            result.games_found = len(week_data.games)
            if not week_data.games:
                logger.info("No games scheduled for %d week %d; nothing to refresh", season, week)
                return result

            result.warnings = week_data.warnings
            result.games_failed = len(result.warnings)
            drives = week_data.drives
            result.drives_counted = len(drives)

            rows = aggregate_red_zone_stats(drives, week_data.teams, season=season, week=week)
            result.record_count = await self.repository.upsert_week(season, week, rows)

            for row in rows:
                logger.info(
                    "%s: OFF %d RZ attempts, %d TDs, %d FGs (%s%% TD) | "
                    "DEF %d RZ attempts, %d TDs, %d FGs (%s%% TD)",
                    row.team_abbreviation,
                    row.attempts,
                    row.touchdowns,
                    row.field_goals,
                    row.td_rate,
                    row.opp_attempts,
                    row.opp_touchdowns,
                    row.opp_field_goals,
                    row.opp_td_rate,
                )
            logger.info(
                "Updated %d team red zone stats for %d week %d (%d of %d games failed)",
                result.record_count,
                season,
                week,
                result.games_failed,
                result.games_found,
            )

        except ValidationError as e:
            logger.error("Rejected refresh request: %s", e)
            result.fail(str(e))
        except UpstreamFetchError as e:
            logger.error("Red zone refresh aborted: %s", e)
            result.fail(str(e))
        except asyncio.TimeoutError:
            message = (
                f"Refresh for {season} week {week} timed out after "
                f"{self.timeout_seconds}s; nothing was written"
            )
            logger.error(message)
            result.fail(message)
        except PersistenceError as e:
            logger.error("Red zone stats computed but not stored: %s", e)
            result.fail(str(e))
        finally:
            result.duration_seconds = round(time.monotonic() - started, 3)

        return result

    # =========================================================================
    # Fetch + segment
    # =========================================================================

    async def _gather_with_timeout(self, season: int, week: int) -> WeekData:
        if self.timeout_seconds is None:
            return await self._gather_week(season, week)
        return await asyncio.wait_for(self._gather_week(season, week), self.timeout_seconds)

    async def _gather_week(self, season: int, week: int) -> WeekData:
        # Schedule failures propagate untouched; retrying is the fetcher's call
        games = await self.schedule.get_games(season, week)
        if not games:
            return WeekData(games=[])

        semaphore = asyncio.Semaphore(self.max_concurrent_games)
        outcomes = await asyncio.gather(
            *(self._process_game(game, semaphore) for game in games)
        )
        week_data = WeekData(games=list(games), outcomes=list(outcomes))
        week_data.teams = await self._resolve_teams(week_data, semaphore)
        return week_data

    async def _process_game(self, game: ScheduledGame, semaphore: asyncio.Semaphore) -> GameDrives:
        async with semaphore:
            try:
                plays = await self.plays.get_plays(game.game_id)
            except Exception as e:
                return self._zero_plays(game, str(e))

        # Segmentation is pure and runs outside the semaphore
        try:
            drives = segment_game(plays, self.classifier)
        except ValueError as e:
            return self._zero_plays(game, str(e))
        logger.info(
            "Game %s: %d plays, %d red-zone drives", game.game_id, len(plays), len(drives)
        )
        return GameDrives(game=game, drives=drives)

    @staticmethod
    def _zero_plays(game: ScheduledGame, reason: str) -> GameDrives:
        warning = PartialDataWarning(game.game_id, reason)
        logger.warning("%s; counting it as zero plays", warning)
        return GameDrives(game=game, warning=warning)

    # =========================================================================
    # Team metadata
    # =========================================================================

    async def _resolve_teams(
        self,
        week_data: WeekData,
        semaphore: asyncio.Semaphore,
    ) -> dict[str, TeamInfo]:
        """
        Resolve each distinct team id once.

        Teams come from the competitors of every scheduled game plus every
        team seen in a drive. A game whose plays were unavailable still
        contributes its competitors, with zero counters.
        """
        team_ids: list[str] = []
        for game in week_data.games:
            team_ids.extend(c.team_id for c in game.competitors)
        for drive in week_data.drives:
            team_ids.append(drive.team_id)
            if drive.defense_team_id:
                team_ids.append(drive.defense_team_id)
        distinct_ids = list(dict.fromkeys(team_ids))

        fallback = CompetitorTeamDirectory(week_data.games)

        async def resolve_one(team_id: str) -> tuple[str, Optional[TeamInfo]]:
            info: Optional[TeamInfo] = None
            async with semaphore:
                try:
                    info = await self.directory.resolve(team_id)
                except Exception as e:
                    logger.warning("Team directory failed for %s, using schedule data: %s", team_id, e)
            if info is None:
                info = await fallback.resolve(team_id)
            if info is None:
                logger.warning("No team metadata for %s; skipping its row", team_id)
            return team_id, info

        resolved = await asyncio.gather(*(resolve_one(team_id) for team_id in distinct_ids))
        return {team_id: info for team_id, info in resolved if info is not None}


async def refresh_red_zone_stats(
    season: int,
    week: int,
    settings: Optional["Settings"] = None,
) -> RefreshResult:
    """
    Refresh a week's red-zone stats from ESPN into PostgreSQL.

    Args:
        season: Season year
        week: Regular-season week
        settings: Settings to use (defaults to get_settings())

    Returns:
        RefreshResult with counts and status
    """
    from ..core.config import get_settings
    from ..pg_async import AsyncPostgresDB
    from ..providers.espn import EspnNFLClient
    from ..repositories import get_repository

    settings = settings or get_settings()

    async with EspnNFLClient.from_settings(settings) as espn:
        async with AsyncPostgresDB(
            connection_string=settings.db_url or None,
            max_pool_size=settings.database_pool_size,
        ) as db:
            refresher = RedZoneRefresher(
                schedule=espn,
                plays=espn,
                directory=espn,
                repository=get_repository(db),
                max_concurrent_games=settings.max_concurrent_games,
                timeout_seconds=settings.refresh_timeout_seconds,
            )
            return await refresher.refresh(season, week)
