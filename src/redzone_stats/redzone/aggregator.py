"""
Red-zone statistics aggregator.

Reduces every drive emitted for a (season, week) into one TeamWeekStats per
team. Offensive counters are grouped by the drive's team, opponent counters
by the drive's defending team. Games are segmented independently before they
get here, so a drive can only ever be counted once.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Optional

from ..core.models import Drive, DriveOutcome, TeamInfo, TeamWeekStats

logger = logging.getLogger(__name__)

_HUNDREDTHS = Decimal("0.01")


@dataclass
class DriveCounters:
    """Attempts and outcomes for one side of the ball."""

    attempts: int = 0
    outcomes: Counter = field(default_factory=Counter)

    def add(self, drive: Drive) -> None:
        self.attempts += 1
        self.outcomes[drive.outcome] += 1

    @property
    def touchdowns(self) -> int:
        return self.outcomes[DriveOutcome.TOUCHDOWN]

    @property
    def field_goals(self) -> int:
        return self.outcomes[DriveOutcome.FIELD_GOAL]


class RedZoneStatsAggregator:
    """Aggregate red-zone drives into per-team weekly rows."""

    @staticmethod
    def td_rate(touchdowns: int, attempts: int) -> Optional[Decimal]:
        """Touchdowns per attempt as a percentage, rounded half-up to 2 places.

        Args:
            touchdowns: Drives that ended in a touchdown
            attempts: Red-zone drives

        Returns:
            The rate, or None when there were no attempts
        """
        if attempts <= 0:
            return None
        rate = Decimal(touchdowns) * 100 / Decimal(attempts)
        return rate.quantize(_HUNDREDTHS, rounding=ROUND_HALF_UP)

    @staticmethod
    def count_drives(
        drives: Iterable[Drive],
    ) -> tuple[dict[str, DriveCounters], dict[str, DriveCounters]]:
        """Split drives into offense and defense counters keyed by team id."""
        offense: dict[str, DriveCounters] = {}
        defense: dict[str, DriveCounters] = {}

        for drive in drives:
            if not drive.entered_red_zone:
                # The segmenter never emits these; guard the invariant anyway
                continue
            offense.setdefault(drive.team_id, DriveCounters()).add(drive)
            if drive.defense_team_id:
                defense.setdefault(drive.defense_team_id, DriveCounters()).add(drive)

        return offense, defense

    @staticmethod
    def aggregate(
        drives: Iterable[Drive],
        teams: Mapping[str, TeamInfo],
        *,
        season: int,
        week: int,
    ) -> list[TeamWeekStats]:
        """Build one row per resolved team.

        Teams with no drives get zero counters and no rate. Drives whose team
        is missing from ``teams`` cannot be keyed by abbreviation and are
        dropped with a warning.

        Args:
            drives: Every drive emitted for the week
            teams: Resolved display metadata keyed by team id
            season: Season year
            week: Week number

        Returns:
            Rows sorted by team abbreviation
        """
        offense, defense = RedZoneStatsAggregator.count_drives(drives)

        unresolved = sorted(set(offense) - set(teams))
        if unresolved:
            logger.warning(
                "Dropping red-zone drives for unresolved team ids: %s", ", ".join(unresolved)
            )

        rows = []
        for team_id, info in teams.items():
            off = offense.get(team_id, DriveCounters())
            dfn = defense.get(team_id, DriveCounters())
            rows.append(
                TeamWeekStats(
                    season=season,
                    week=week,
                    team_abbreviation=info.abbreviation,
                    team_name=info.name,
                    attempts=off.attempts,
                    touchdowns=off.touchdowns,
                    field_goals=off.field_goals,
                    td_rate=RedZoneStatsAggregator.td_rate(off.touchdowns, off.attempts),
                    opp_attempts=dfn.attempts,
                    opp_touchdowns=dfn.touchdowns,
                    opp_field_goals=dfn.field_goals,
                    opp_td_rate=RedZoneStatsAggregator.td_rate(dfn.touchdowns, dfn.attempts),
                )
            )

        rows.sort(key=lambda row: row.team_abbreviation)
        return rows


def aggregate_red_zone_stats(
    drives: Iterable[Drive],
    teams: Mapping[str, TeamInfo],
    *,
    season: int,
    week: int,
) -> list[TeamWeekStats]:
    """Shortcut for RedZoneStatsAggregator.aggregate."""
    return RedZoneStatsAggregator.aggregate(drives, teams, season=season, week=week)
