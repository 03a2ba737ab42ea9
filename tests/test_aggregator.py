"""
Tests for the red-zone aggregator and the TeamWeekStats row invariants.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from fakes import TEAMS
from redzone_stats.core.models import Drive, DriveOutcome, TeamWeekStats
from redzone_stats.redzone.aggregator import RedZoneStatsAggregator, aggregate_red_zone_stats


def drive(team, outcome=DriveOutcome.NONE, defense=None, game="g1"):
    return Drive(
        game_id=game,
        team_id=team,
        entered_red_zone=True,
        outcome=outcome,
        defense_team_id=defense,
    )


class TestTdRate:

    @pytest.mark.parametrize(
        "touchdowns, attempts, expected",
        [
            (1, 1, Decimal("100.00")),
            (1, 3, Decimal("33.33")),
            (2, 3, Decimal("66.67")),
            (1, 8, Decimal("12.50")),
            (0, 4, Decimal("0.00")),
        ],
    )
    def test_rounded_percentage(self, touchdowns, attempts, expected):
        """TD rate should be a percentage rounded half-up to 2 places."""
        assert RedZoneStatsAggregator.td_rate(touchdowns, attempts) == expected

    def test_absent_without_attempts(self):
        """No attempts should mean no TD rate."""
        assert RedZoneStatsAggregator.td_rate(0, 0) is None


class TestAggregate:

    def test_counts_offense_and_defense(self):
        """Drives should count for the offense and, as opp_*, for the defense."""
        drives = [
            drive("1", DriveOutcome.TOUCHDOWN, defense="2"),
            drive("1", DriveOutcome.FIELD_GOAL, defense="2"),
            drive("1", DriveOutcome.NONE, defense="2"),
            drive("2", DriveOutcome.TOUCHDOWN, defense="1"),
        ]
        teams = {"1": TEAMS["1"], "2": TEAMS["2"]}

        rows = {r.team_abbreviation: r for r in aggregate_red_zone_stats(drives, teams, season=2024, week=5)}

        atl = rows["ATL"]
        assert (atl.attempts, atl.touchdowns, atl.field_goals) == (3, 1, 1)
        assert atl.td_rate == Decimal("33.33")
        assert (atl.opp_attempts, atl.opp_touchdowns, atl.opp_field_goals) == (1, 1, 0)
        assert atl.opp_td_rate == Decimal("100.00")

        buf = rows["BUF"]
        assert (buf.attempts, buf.touchdowns, buf.field_goals) == (1, 1, 0)
        assert (buf.opp_attempts, buf.opp_touchdowns, buf.opp_field_goals) == (3, 1, 1)
        assert buf.team_name == "Buffalo Bills"
        assert (buf.season, buf.week) == (2024, 5)

    def test_team_without_drives_has_no_rate(self):
        """A resolved team with no drives should get a zero row."""
        rows = aggregate_red_zone_stats([], {"3": TEAMS["3"]}, season=2024, week=1)

        assert len(rows) == 1
        assert rows[0].attempts == 0
        assert rows[0].td_rate is None
        assert rows[0].opp_td_rate is None

    def test_unresolved_team_drives_are_dropped(self, caplog):
        """Drives for teams without metadata should be dropped with a warning."""
        drives = [drive("99", DriveOutcome.TOUCHDOWN, defense="1")]

        rows = aggregate_red_zone_stats(drives, {"1": TEAMS["1"]}, season=2024, week=1)

        assert [r.team_abbreviation for r in rows] == ["ATL"]
        assert rows[0].attempts == 0
        assert rows[0].opp_attempts == 1
        assert "99" in caplog.text

    def test_rows_sorted_by_abbreviation(self):
        """Rows should come back sorted by abbreviation."""
        teams = {"5": TEAMS["5"], "1": TEAMS["1"], "3": TEAMS["3"]}

        rows = aggregate_red_zone_stats([], teams, season=2024, week=1)

        assert [r.team_abbreviation for r in rows] == ["ATL", "CHI", "KC"]

    def test_outcomes_never_exceed_attempts(self):
        """Scores never exceed attempts and every drive is counted once per side."""
        outcomes = [DriveOutcome.TOUCHDOWN, DriveOutcome.FIELD_GOAL, DriveOutcome.NONE] * 4
        drives = [drive(str(1 + i % 3), o, defense=str(4 + i % 2)) for i, o in enumerate(outcomes)]

        rows = aggregate_red_zone_stats(drives, TEAMS, season=2024, week=2)

        for row in rows:
            assert row.touchdowns + row.field_goals <= row.attempts
            assert row.opp_touchdowns + row.opp_field_goals <= row.opp_attempts
            assert (row.td_rate is None) == (row.attempts == 0)
        assert sum(r.attempts for r in rows) == len(drives)
        assert sum(r.opp_attempts for r in rows) == len(drives)


class TestTeamWeekStatsModel:

    def test_rejects_more_scores_than_attempts(self):
        """Touchdowns plus field goals above attempts should be rejected."""
        with pytest.raises(PydanticValidationError, match="exceeds"):
            TeamWeekStats(
                season=2024,
                week=1,
                team_abbreviation="ATL",
                team_name="Atlanta Falcons",
                attempts=1,
                touchdowns=1,
                field_goals=1,
                td_rate=Decimal("100.00"),
            )

    def test_rate_required_with_attempts(self):
        """A row with attempts must carry a TD rate."""
        with pytest.raises(PydanticValidationError, match="td_rate"):
            TeamWeekStats(
                season=2024,
                week=1,
                team_abbreviation="ATL",
                team_name="Atlanta Falcons",
                attempts=2,
            )

    def test_rate_forbidden_without_attempts(self):
        """A row without attempts must not carry a TD rate."""
        with pytest.raises(PydanticValidationError, match="td_rate"):
            TeamWeekStats(
                season=2024,
                week=1,
                team_abbreviation="ATL",
                team_name="Atlanta Falcons",
                td_rate=Decimal("0.00"),
            )
