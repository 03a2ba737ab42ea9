"""
Error taxonomy for the red-zone refresh.

Fatal conditions (bad input, schedule unavailable, write failure) are raised as
exceptions and turned into a failed RefreshResult by the orchestrator.
PartialDataWarning is never raised; it is recorded on the result and logged.
"""

from __future__ import annotations

from typing import Any, Optional


class RedZoneStatsError(Exception):
    """Base exception for the red-zone stats pipeline."""
    pass


class ValidationError(RedZoneStatsError):
    """Raised when season/week input is rejected before any fetch."""

    def __init__(self, message: str, field_name: Optional[str] = None, field_value: Any = None):
        super().__init__(message)
        self.field_name = field_name
        self.field_value = field_value


class UpstreamFetchError(RedZoneStatsError):
    """Raised when a collaborator cannot supply schedule, play or team data."""

    def __init__(self, message: str, resource: Optional[str] = None, cause: Optional[Exception] = None):
        super().__init__(message)
        self.resource = resource
        self.cause = cause


class PersistenceError(RedZoneStatsError):
    """Raised when the week's rows could not be written."""

    def __init__(self, message: str, season: Optional[int] = None, week: Optional[int] = None):
        super().__init__(message)
        self.season = season
        self.week = week


class PartialDataWarning(RedZoneStatsError):
    """
    One game's plays were unavailable.

    Recovered locally: the game contributes zero plays and the refresh continues.
    """

    def __init__(self, game_id: str, reason: str):
        super().__init__(f"Plays unavailable for game {game_id}: {reason}")
        self.game_id = game_id
        self.reason = reason

    def to_dict(self) -> dict[str, str]:
        return {"game_id": self.game_id, "reason": self.reason}
