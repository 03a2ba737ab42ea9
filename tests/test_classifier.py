"""
Tests for play classification.
"""

import pytest

from fakes import make_play
from redzone_stats.redzone.classifier import (
    TextPlayClassifier,
    defense_team_id,
    is_field_goal_play,
    is_red_zone_play,
    is_touchdown_play,
    offense_team_id,
)


class TestRedZone:

    @pytest.mark.parametrize(
        "yards, expected",
        [
            (0, False),
            (1, True),
            (8, True),
            (20, True),
            (21, False),
            (75, False),
            (-2, False),
            (None, False),
        ],
    )
    def test_boundaries(self, yards, expected):
        """Red zone is 1-20 yards from the end zone inclusive."""
        assert is_red_zone_play(make_play("1", yards)) is expected


class TestTouchdown:

    def test_scoring_play_with_touchdown_text(self):
        """Scoring play with touchdown text is a touchdown."""
        play = make_play("1", 8, "Passing Touchdown", scoring=True, score=6)
        assert is_touchdown_play(play)

    def test_text_match_is_case_insensitive(self):
        """Touchdown text should match regardless of case."""
        play = make_play("1", 3, "RUSHING TOUCHDOWN", scoring=True)
        assert is_touchdown_play(play)

    def test_td_abbreviation(self):
        """The TD abbreviation should count as touchdown text."""
        play = make_play("1", 12, "Fumble Return TD", scoring=True)
        assert is_touchdown_play(play)

    def test_score_value_six_or_seven(self):
        """Score value 6 or 7 should count without touchdown text."""
        assert is_touchdown_play(make_play("1", 5, "Rush", scoring=True, score=6))
        assert is_touchdown_play(make_play("1", 5, "Rush", scoring=True, score=7))

    def test_requires_scoring_flag(self):
        """Non-scoring plays are never touchdowns."""
        play = make_play("1", 8, "Passing Touchdown", scoring=False, score=6)
        assert not is_touchdown_play(play)

    def test_field_goal_is_not_a_touchdown(self):
        """A made field goal is not a touchdown."""
        play = make_play("1", 15, "Field Goal Good", scoring=True, score=3)
        assert not is_touchdown_play(play)

    def test_extra_point_is_not_a_touchdown(self):
        """An extra point is not a touchdown."""
        play = make_play("1", 15, "Extra Point Good", scoring=True, score=1)
        assert not is_touchdown_play(play)


class TestFieldGoal:

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Field Goal Good", True),
            ("FIELD GOAL GOOD", True),
            ("Field Goal Missed", False),
            ("Missed Field Goal Return", False),
            ("Blocked Field Goal", False),
            ("Punt", False),
            ("", False),
        ],
    )
    def test_text(self, text, expected):
        """Only made field goals should count."""
        assert is_field_goal_play(make_play("1", 12, text)) is expected


class TestTeamIds:

    def test_resolved(self):
        """Team ids should be read from the play."""
        play = make_play("1", 30, defense="2")
        assert offense_team_id(play) == "1"
        assert defense_team_id(play) == "2"

    def test_unresolved(self):
        """Empty team ids should resolve to None."""
        play = make_play("", 30)
        assert offense_team_id(play) is None
        assert defense_team_id(play) is None


def test_text_classifier_delegates_to_predicates():
    """Default classifier should agree with the module predicates."""
    classifier = TextPlayClassifier()
    play = make_play("1", 2, "Rushing Touchdown", scoring=True, score=6)

    assert classifier.is_red_zone(play)
    assert classifier.is_touchdown(play)
    assert not classifier.is_field_goal(play)
