"""
ESPN NFL API client.

Implements all three collaborators against ESPN's public JSON APIs:

- schedule: site API scoreboard for a regular-season week
- plays:    core API play-by-play, paginated; page items may be ``$ref`` links
- teams:    site API team documents

Upstream failures surface as UpstreamFetchError; the HTTP layer has already
retried transient errors by then.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import TYPE_CHECKING, Any, Optional

from ..core.http import BaseApiClient, ExternalAPIError
from ..core.models import Competitor, Play, ScheduledGame, TeamInfo
from ..errors import UpstreamFetchError
from .base import GameScheduleFetcher, PlayStreamFetcher, TeamDirectory

if TYPE_CHECKING:
    import httpx

    from ..core.config import Settings

logger = logging.getLogger(__name__)

REGULAR_SEASON = 2

_TEAM_REF = re.compile(r"/teams/(\d+)")

# Raised while walking an upstream document that is not shaped as expected
_MALFORMED = (KeyError, IndexError, TypeError, AttributeError)


# =============================================================================
# Parsing
# =============================================================================


def _team_id_from(node: Optional[dict[str, Any]]) -> Optional[str]:
    """Read a team id from ``{"id": ...}`` or a ``{"$ref": ".../teams/12?..."}`` link."""
    if not node:
        return None
    if node.get("id"):
        return str(node["id"])
    match = _TEAM_REF.search(node.get("$ref") or "")
    return match.group(1) if match else None


def _participant_team_id(raw: dict[str, Any], side: str) -> Optional[str]:
    for participant in raw.get("teamParticipants") or []:
        if participant.get("type") == side:
            return _team_id_from(participant) or _team_id_from(participant.get("team"))
    return None


def _int_or_none(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_play(raw: dict[str, Any], game_id: str, sequence_index: int) -> Play:
    """Map an ESPN core-API play document to a Play."""
    start = raw.get("start") or {}
    play_type = raw.get("type") or {}
    return Play(
        game_id=game_id,
        sequence_index=sequence_index,
        offense_team_id=_participant_team_id(raw, "offense") or _team_id_from(raw.get("team")),
        defense_team_id=_participant_team_id(raw, "defense"),
        yards_to_endzone=_int_or_none(start.get("yardsToEndzone")),
        play_type_text=play_type.get("text") or "",
        is_scoring_play=bool(raw.get("scoringPlay")),
        score_value=_int_or_none(raw.get("scoreValue")) or 0,
    )


def parse_scoreboard(data: dict[str, Any]) -> list[ScheduledGame]:
    """Map a site-API scoreboard document to scheduled games."""
    games = []
    for event in data.get("events") or []:
        competitions = event.get("competitions") or [{}]
        competitors = []
        for competitor in competitions[0].get("competitors") or []:
            team = competitor.get("team") or {}
            team_id = team.get("id") or competitor.get("id")
            if not team_id:
                continue
            competitors.append(
                Competitor(
                    team_id=str(team_id),
                    abbreviation=team.get("abbreviation") or "",
                    name=team.get("displayName") or team.get("name") or "",
                )
            )
        games.append(ScheduledGame(game_id=str(event["id"]), competitors=tuple(competitors)))
    return games


# =============================================================================
# Client
# =============================================================================


class EspnNFLClient(BaseApiClient, GameScheduleFetcher, PlayStreamFetcher, TeamDirectory):
    """ESPN NFL schedule, play-by-play and team client."""

    BASE_URL = "https://site.api.espn.com/apis/site/v2/sports/football/nfl"
    CORE_URL = "https://sports.core.api.espn.com/v2/sports/football/leagues/nfl"

    def __init__(
        self,
        *,
        site_url: Optional[str] = None,
        core_url: Optional[str] = None,
        requests_per_minute: int = 1200,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_backoff: float = 1.0,
        page_size: int = 100,
        max_pages: int = 20,
        transport: Optional["httpx.AsyncBaseTransport"] = None,
    ):
        super().__init__(
            base_url=site_url,
            requests_per_minute=requests_per_minute,
            timeout=timeout,
            max_retries=max_retries,
            retry_backoff=retry_backoff,
            transport=transport,
        )
        self._core_url = (core_url or self.CORE_URL).rstrip("/")
        self._page_size = page_size
        self._max_pages = max_pages

    @classmethod
    def from_settings(cls, settings: "Settings") -> "EspnNFLClient":
        return cls(
            site_url=settings.espn_site_api_url,
            core_url=settings.espn_core_api_url,
            requests_per_minute=settings.espn_requests_per_minute,
            timeout=settings.http_timeout,
            max_retries=settings.http_max_retries,
            page_size=settings.plays_page_size,
            max_pages=settings.plays_max_pages,
        )

    # =========================================================================
    # Schedule
    # =========================================================================

    async def get_games(self, season: int, week: int) -> list[ScheduledGame]:
        """Get the regular-season games for a week."""
        params = {"seasontype": REGULAR_SEASON, "week": week, "dates": season}
        logger.info("Fetching games for %d week %d", season, week)
        try:
            data = await self._get("/scoreboard", params)
        except ExternalAPIError as e:
            raise UpstreamFetchError(
                f"Schedule unavailable for {season} week {week}: {e.message}",
                resource="scoreboard",
                cause=e,
            ) from e

        try:
            games = parse_scoreboard(data)
        except _MALFORMED as e:
            raise UpstreamFetchError(
                f"Malformed schedule for {season} week {week}: {e!r}",
                resource="scoreboard",
                cause=e,
            ) from e
        logger.info("Found %d games for %d week %d", len(games), season, week)
        return games

    # =========================================================================
    # Play-by-play
    # =========================================================================

    async def get_plays(self, game_id: str) -> list[Play]:
        """Get every play of a game in order, following pagination."""
        try:
            raw_plays = await self._fetch_raw_plays(game_id)
            plays = [parse_play(raw, game_id, index) for index, raw in enumerate(raw_plays)]
        except ExternalAPIError as e:
            raise UpstreamFetchError(
                f"Plays unavailable for game {game_id}: {e.message}",
                resource=f"plays/{game_id}",
                cause=e,
            ) from e
        except _MALFORMED as e:
            raise UpstreamFetchError(
                f"Malformed plays for game {game_id}: {e!r}",
                resource=f"plays/{game_id}",
                cause=e,
            ) from e

        logger.info("Fetched %d plays for game %s", len(plays), game_id)
        return plays

    async def _fetch_raw_plays(self, game_id: str) -> list[dict[str, Any]]:
        url = f"{self._core_url}/events/{game_id}/competitions/{game_id}/plays"
        raw_plays: list[dict[str, Any]] = []
        page = 1

        while True:
            data = await self._get(url, {"limit": self._page_size, "page": page})
            items = data.get("items") or []
            if not items:
                break

            raw_plays.extend(await self._expand_refs(items))

            page_index = data.get("pageIndex", page)
            page_count = data.get("pageCount", page)
            if page_index >= page_count:
                break

            page += 1
            if page > self._max_pages:
                logger.warning(
                    "Game %s: stopped after %d pages of plays (%d available)",
                    game_id,
                    self._max_pages,
                    page_count,
                )
                break

        return raw_plays

    async def _expand_refs(self, items: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Replace bare ``$ref`` items with their documents, keeping page order."""

        async def expand(item: dict[str, Any]) -> dict[str, Any]:
            if "$ref" in item and "type" not in item:
                return await self._get(item["$ref"])
            return item

        return list(await asyncio.gather(*(expand(item) for item in items)))

    # =========================================================================
    # Teams
    # =========================================================================

    async def resolve(self, team_id: str) -> Optional[TeamInfo]:
        """Get a team's abbreviation and display name."""
        try:
            data = await self._get(f"/teams/{team_id}")
        except ExternalAPIError as e:
            if e.status_code == 404:
                return None
            raise UpstreamFetchError(
                f"Team {team_id} unavailable: {e.message}",
                resource=f"teams/{team_id}",
                cause=e,
            ) from e

        team = data.get("team") or {}
        abbreviation = team.get("abbreviation")
        if not abbreviation:
            return None
        return TeamInfo(
            abbreviation=abbreviation,
            name=team.get("displayName") or team.get("name") or "",
        )
