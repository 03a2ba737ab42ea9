"""
Tests for drive segmentation.

Covers the counting policy: only drives that reach the red zone count,
possession changes and leaving the red zone both end a drive, and outcomes
only ever move toward a touchdown.
"""

import pytest

from fakes import make_play
from redzone_stats.core.models import Drive, DriveOutcome
from redzone_stats.redzone.segmenter import ActiveDrive, advance, finish, segment_game


class TestAdvance:

    def test_first_play_starts_a_drive(self):
        """First play should open a drive and emit nothing."""
        state, emitted = advance(None, make_play("1", 60, defense="2"))

        assert emitted is None
        assert state == ActiveDrive(game_id="g1", team_id="1", defense_team_id="2")

    def test_unresolved_offense_leaves_state_unchanged(self):
        """Plays without offense should not touch the state."""
        state = ActiveDrive(game_id="g1", team_id="1", entered_red_zone=True)

        new_state, emitted = advance(state, make_play(None, 50))

        assert new_state is state
        assert emitted is None

    def test_possession_change_emits_red_zone_drive(self):
        """Possession change should emit a drive that reached the red zone."""
        state = ActiveDrive(game_id="g1", team_id="1", defense_team_id="2", entered_red_zone=True)

        new_state, emitted = advance(state, make_play("2", 12, defense="1"))

        assert emitted == Drive(
            game_id="g1",
            team_id="1",
            entered_red_zone=True,
            outcome=DriveOutcome.NONE,
            defense_team_id="2",
        )
        assert new_state.team_id == "2"
        assert new_state.entered_red_zone is True

    def test_possession_change_discards_drive_outside_red_zone(self):
        """Possession change should drop a drive that never reached the red zone."""
        state = ActiveDrive(game_id="g1", team_id="1")

        new_state, emitted = advance(state, make_play("2", 70))

        assert emitted is None
        assert new_state.team_id == "2"

    def test_leaving_red_zone_finalizes_same_team(self):
        """Leaving the red zone should end the drive."""
        state = ActiveDrive(game_id="g1", team_id="1", entered_red_zone=True)

        new_state, emitted = advance(state, make_play("1", 25))

        assert new_state is None
        assert emitted.team_id == "1"
        assert emitted.outcome is DriveOutcome.NONE


class TestScenarios:

    def test_single_scoring_drive(self, scenario_a_plays):
        """One red-zone touchdown drive should be emitted."""
        drives = segment_game(scenario_a_plays)

        assert drives == [
            Drive(
                game_id="g1",
                team_id="1",
                entered_red_zone=True,
                outcome=DriveOutcome.TOUCHDOWN,
                defense_team_id="2",
            )
        ]

    def test_leaving_red_zone_splits_the_drive(self):
        """Re-entering the red zone should start a new attempt."""
        state, first = advance(None, make_play("1", 12))
        assert first is None and state.entered_red_zone

        state, first = advance(state, make_play("1", 25))
        assert state is None
        assert first.outcome is DriveOutcome.NONE

        state, second = advance(state, make_play("1", 18))
        assert second is None
        assert state.entered_red_zone

        last = finish(state)
        assert last.team_id == "1"
        assert last.entered_red_zone

    def test_leaving_red_zone_counts_two_attempts(self):
        """Leaving and re-entering should count twice."""
        plays = [make_play("1", 12), make_play("1", 25), make_play("1", 18)]

        drives = segment_game(plays)

        assert [d.team_id for d in drives] == ["1", "1"]
        assert all(d.outcome is DriveOutcome.NONE for d in drives)


class TestOutcomes:

    def test_field_goal(self):
        """Made field goal should end as FIELD_GOAL."""
        plays = [
            make_play("1", 14),
            make_play("1", 9, "Field Goal Good", scoring=True, score=3),
            make_play("2", 75, "Kickoff"),
        ]

        assert [d.outcome for d in segment_game(plays)] == [DriveOutcome.FIELD_GOAL]

    def test_missed_field_goal_is_no_score(self):
        """Missed field goal should end as NONE."""
        plays = [make_play("1", 14), make_play("1", 14, "Field Goal Missed")]

        assert [d.outcome for d in segment_game(plays)] == [DriveOutcome.NONE]

    def test_touchdown_is_never_downgraded(self):
        """A later field goal should not replace a touchdown."""
        plays = [
            make_play("1", 5, "Passing Touchdown", scoring=True, score=6),
            make_play("1", 15, "Field Goal Good", scoring=True, score=3),
        ]

        assert [d.outcome for d in segment_game(plays)] == [DriveOutcome.TOUCHDOWN]

    def test_field_goal_upgraded_to_touchdown(self):
        """A later touchdown should replace a field goal."""
        plays = [
            make_play("1", 10, "Field Goal Good"),
            make_play("1", 2, "Rushing Touchdown", scoring=True, score=6),
        ]

        assert [d.outcome for d in segment_game(plays)] == [DriveOutcome.TOUCHDOWN]


class TestSegmentGame:

    def test_drive_never_reaching_red_zone_is_dropped(self):
        """Drives outside the red zone should not count."""
        plays = [make_play("1", 75), make_play("1", 45), make_play("2", 80), make_play("2", 22)]

        assert segment_game(plays) == []

    def test_open_drive_is_emitted_at_end_of_stream(self):
        """The open drive should be emitted at end of stream."""
        plays = [make_play("2", 60), make_play("2", 3)]

        drives = segment_game(plays)

        assert len(drives) == 1
        assert drives[0].team_id == "2"

    def test_plays_without_offense_are_skipped(self):
        """Plays without offense should be skipped."""
        plays = [
            make_play("1", 15),
            make_play(None, 40, "Timeout"),
            make_play("1", 8, "Rushing Touchdown", scoring=True, score=6),
        ]

        drives = segment_game(plays)

        assert len(drives) == 1
        assert drives[0].outcome is DriveOutcome.TOUCHDOWN

    def test_defense_filled_from_later_play(self):
        """Defense id should be filled from a later play."""
        plays = [make_play("1", 50), make_play("1", 10, defense="2")]

        assert segment_game(plays)[0].defense_team_id == "2"

    def test_order_matters(self):
        """Play order should change the result."""
        plays = [make_play("1", 12), make_play("1", 25), make_play("1", 18)]
        reordered = [plays[0], plays[2], plays[1]]

        assert len(segment_game(plays)) == 2
        assert len(segment_game(reordered)) == 1

    def test_empty_stream(self):
        """No plays should mean no drives."""
        assert segment_game([]) == []

    def test_rejects_multiple_games(self):
        """Plays from two games should be rejected."""
        plays = [make_play("1", 10, game="g1"), make_play("2", 10, game="g2")]

        with pytest.raises(ValueError, match="single game"):
            segment_game(plays)

    def test_custom_classifier(self):
        """A custom classifier should drive red-zone detection."""
        class EverythingIsRedZone:
            def is_red_zone(self, play):
                return True

            def is_touchdown(self, play):
                return False

            def is_field_goal(self, play):
                return False

        plays = [make_play("1", 80), make_play("2", 90)]

        drives = segment_game(plays, classifier=EverythingIsRedZone())

        assert [d.team_id for d in drives] == ["1", "2"]
