"""
Play classification for red-zone accounting.

Pure predicates over a single Play. Touchdown and field goal detection is a
substring heuristic on the play-type text, so it sits behind the
PlayClassifier protocol and the segmenter never looks at text itself.

Precedence applied by the segmenter: a touchdown beats a field goal on the
same drive, and neither outcome is ever downgraded.
"""

from __future__ import annotations

import re
from typing import Optional, Protocol

from ..core.models import Play

RED_ZONE_YARDS = 20

# "td" is matched as a bare substring, the same way ESPN abbreviates in type text
TOUCHDOWN_TEXT = re.compile(r"touchdown|td", re.IGNORECASE)
TOUCHDOWN_SCORE_VALUES = frozenset({6, 7})


def is_red_zone_play(play: Play) -> bool:
    """True iff the play starts inside the opponent's 20 (goal line excluded)."""
    yards = play.yards_to_endzone
    return yards is not None and 0 < yards <= RED_ZONE_YARDS


def is_touchdown_play(play: Play) -> bool:
    if not play.is_scoring_play:
        return False
    if TOUCHDOWN_TEXT.search(play.play_type_text or ""):
        return True
    return play.score_value in TOUCHDOWN_SCORE_VALUES


def is_field_goal_play(play: Play) -> bool:
    """Made field goals only; missed and blocked attempts do not count."""
    text = (play.play_type_text or "").lower()
    return "field goal" in text and "missed" not in text and "blocked" not in text


def offense_team_id(play: Play) -> Optional[str]:
    return play.offense_team_id or None


def defense_team_id(play: Play) -> Optional[str]:
    return play.defense_team_id or None


class PlayClassifier(Protocol):
    """Narrow interface the segmenter uses to read a play."""

    def is_red_zone(self, play: Play) -> bool: ...

    def is_touchdown(self, play: Play) -> bool: ...

    def is_field_goal(self, play: Play) -> bool: ...


class TextPlayClassifier:
    """Default classifier: yard line for the red zone, type text for outcomes."""

    def is_red_zone(self, play: Play) -> bool:
        return is_red_zone_play(play)

    def is_touchdown(self, play: Play) -> bool:
        return is_touchdown_play(play)

    def is_field_goal(self, play: Play) -> bool:
        return is_field_goal_play(play)


DEFAULT_CLASSIFIER = TextPlayClassifier()
