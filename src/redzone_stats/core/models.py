"""
Data models for the red-zone pipeline.

Play, Drive and the schedule types are plain frozen dataclasses: they are
created once and never mutated. TeamWeekStats is the persisted row and is a
Pydantic model so its invariants are validated before anything is written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# =============================================================================
# Upstream inputs
# =============================================================================


@dataclass(frozen=True)
class Play:
    """A single play, as delivered by the play stream fetcher."""

    game_id: str
    sequence_index: int
    offense_team_id: Optional[str]
    defense_team_id: Optional[str]
    yards_to_endzone: Optional[int]
    play_type_text: str = ""
    is_scoring_play: bool = False
    score_value: int = 0


@dataclass(frozen=True)
class Competitor:
    """A team taking part in a scheduled game."""

    team_id: str
    abbreviation: str = ""
    name: str = ""


@dataclass(frozen=True)
class ScheduledGame:
    """A game on the (season, week) schedule."""

    game_id: str
    competitors: tuple[Competitor, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TeamInfo:
    """Display metadata for a team."""

    abbreviation: str
    name: str


# =============================================================================
# Segmentation output
# =============================================================================


class DriveOutcome(str, Enum):
    """Result of a red-zone drive. Ordered from least to most decisive."""

    NONE = "none"
    FIELD_GOAL = "field_goal"
    TOUCHDOWN = "touchdown"


@dataclass(frozen=True)
class Drive:
    """A finalized red-zone drive."""

    game_id: str
    team_id: str
    entered_red_zone: bool
    outcome: DriveOutcome = DriveOutcome.NONE
    defense_team_id: Optional[str] = None


# =============================================================================
# Persisted row
# =============================================================================


class TeamWeekStats(BaseModel):
    """Red-zone efficiency for one team in one (season, week)."""

    model_config = ConfigDict(frozen=True)

    season: int
    week: int
    team_abbreviation: str = Field(min_length=1)
    team_name: str

    # Offense: red-zone trips the team made
    attempts: int = Field(default=0, ge=0)
    touchdowns: int = Field(default=0, ge=0)
    field_goals: int = Field(default=0, ge=0)
    td_rate: Optional[Decimal] = None

    # Defense: red-zone trips the team allowed
    opp_attempts: int = Field(default=0, ge=0)
    opp_touchdowns: int = Field(default=0, ge=0)
    opp_field_goals: int = Field(default=0, ge=0)
    opp_td_rate: Optional[Decimal] = None

    @model_validator(mode="after")
    def _check_counters(self) -> "TeamWeekStats":
        for prefix in ("", "opp_"):
            attempts = getattr(self, f"{prefix}attempts")
            scored = getattr(self, f"{prefix}touchdowns") + getattr(self, f"{prefix}field_goals")
            if scored > attempts:
                raise ValueError(
                    f"{prefix}touchdowns + {prefix}field_goals ({scored}) exceeds "
                    f"{prefix}attempts ({attempts})"
                )
            rate = getattr(self, f"{prefix}td_rate")
            if (rate is None) != (attempts == 0):
                raise ValueError(f"{prefix}td_rate must be set exactly when {prefix}attempts > 0")
        return self
