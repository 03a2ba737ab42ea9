"""
Collaborator interfaces consumed by the refresh orchestrator.

The orchestrator only talks to these abstractions. Providers are responsible
for HTTP, pagination and mapping upstream JSON into Play / ScheduledGame /
TeamInfo; they are NOT responsible for segmentation, aggregation or storage.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..core.models import Play, ScheduledGame, TeamInfo


class GameScheduleFetcher(ABC):
    """Supplies the games played in a (season, week)."""

    @abstractmethod
    async def get_games(self, season: int, week: int) -> list[ScheduledGame]:
        """
        Fetch the week's games.

        An empty list is a valid answer (bye/offseason weeks).

        Raises:
            UpstreamFetchError: If the schedule could not be fetched
        """
        ...


class PlayStreamFetcher(ABC):
    """Supplies a game's plays in their original order."""

    @abstractmethod
    async def get_plays(self, game_id: str) -> list[Play]:
        """
        Fetch every play of a game, ordered as played.

        Raises:
            UpstreamFetchError: If the plays could not be fetched
        """
        ...


class TeamDirectory(ABC):
    """Resolves team ids to display metadata."""

    @abstractmethod
    async def resolve(self, team_id: str) -> Optional[TeamInfo]:
        """Return the team's abbreviation and name, or None if unknown."""
        ...


class CompetitorTeamDirectory(TeamDirectory):
    """
    Directory backed by the competitor metadata already present on the schedule.

    Used as the fallback when the primary directory cannot resolve a team.
    """

    def __init__(self, games: list[ScheduledGame]):
        self._teams: dict[str, TeamInfo] = {}
        for game in games:
            for competitor in game.competitors:
                if competitor.abbreviation:
                    self._teams.setdefault(
                        competitor.team_id,
                        TeamInfo(abbreviation=competitor.abbreviation, name=competitor.name),
                    )

    async def resolve(self, team_id: str) -> Optional[TeamInfo]:
        return self._teams.get(team_id)
