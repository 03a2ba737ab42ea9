"""
Upstream data providers.

Usage:
    from redzone_stats.providers import EspnNFLClient

    async with EspnNFLClient() as espn:
        games = await espn.get_games(2024, 5)
        plays = await espn.get_plays(games[0].game_id)
"""

from .base import (
    CompetitorTeamDirectory,
    GameScheduleFetcher,
    PlayStreamFetcher,
    TeamDirectory,
)
from .espn import EspnNFLClient, parse_play, parse_scoreboard

__all__ = [
    "CompetitorTeamDirectory",
    "GameScheduleFetcher",
    "PlayStreamFetcher",
    "TeamDirectory",
    "EspnNFLClient",
    "parse_play",
    "parse_scoreboard",
]
