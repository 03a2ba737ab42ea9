"""
Drive segmentation for one game's play stream.

The segmenter is a fold over the game's plays in their original order:

    state = None
    for play in plays:
        state, drive = advance(state, play)
    drive = finish(state)

``advance`` is pure and returns the next state plus at most one finalized
Drive. State never crosses games; each call to segment_game starts from None.

Counting policy:
- a drive is counted only if it reached the red zone, otherwise it is dropped;
- a change of offense finalizes the current drive;
- a non-red-zone play after the drive entered the red zone finalizes it too,
  even when the same team keeps the ball. Re-entering later is a new attempt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from ..core.models import Drive, DriveOutcome, Play
from .classifier import DEFAULT_CLASSIFIER, PlayClassifier, defense_team_id, offense_team_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveDrive:
    """The drive currently being tracked."""

    game_id: str
    team_id: str
    defense_team_id: Optional[str] = None
    entered_red_zone: bool = False
    outcome: DriveOutcome = DriveOutcome.NONE

    def to_drive(self) -> Drive:
        return Drive(
            game_id=self.game_id,
            team_id=self.team_id,
            entered_red_zone=self.entered_red_zone,
            outcome=self.outcome,
            defense_team_id=self.defense_team_id,
        )


# None means no active drive
DriveState = Optional[ActiveDrive]


def _finalize(drive: ActiveDrive) -> Optional[Drive]:
    return drive.to_drive() if drive.entered_red_zone else None


def advance(
    state: DriveState,
    play: Play,
    classifier: PlayClassifier = DEFAULT_CLASSIFIER,
) -> tuple[DriveState, Optional[Drive]]:
    """Apply one play to the segmenter state."""
    team = offense_team_id(play)
    if team is None:
        return state, None

    emitted: Optional[Drive] = None
    defense = defense_team_id(play)

    if state is None or state.team_id != team:
        if state is not None:
            emitted = _finalize(state)
        state = ActiveDrive(game_id=play.game_id, team_id=team, defense_team_id=defense)
    elif state.defense_team_id is None and defense is not None:
        state = replace(state, defense_team_id=defense)

    in_red_zone = classifier.is_red_zone(play)
    if in_red_zone and not state.entered_red_zone:
        state = replace(state, entered_red_zone=True)

    if classifier.is_touchdown(play):
        state = replace(state, outcome=DriveOutcome.TOUCHDOWN)
    elif classifier.is_field_goal(play) and state.outcome is not DriveOutcome.TOUCHDOWN:
        state = replace(state, outcome=DriveOutcome.FIELD_GOAL)

    if not in_red_zone and state.entered_red_zone:
        # A fresh drive cannot have entered the red zone on a non-red-zone
        # play, so nothing was emitted above.
        return None, state.to_drive()

    return state, emitted


def finish(state: DriveState) -> Optional[Drive]:
    """Finalize whatever drive is still open at the end of the stream."""
    if state is None:
        return None
    return _finalize(state)


def segment_game(
    plays: Iterable[Play],
    classifier: Optional[PlayClassifier] = None,
) -> list[Drive]:
    """
    Turn one game's ordered plays into its red-zone drives.

    Raises:
        ValueError: If the plays belong to more than one game
    """
    classifier = classifier or DEFAULT_CLASSIFIER
    drives: list[Drive] = []
    state: DriveState = None
    game_id: Optional[str] = None
    skipped = 0

    for play in plays:
        if game_id is None:
            game_id = play.game_id
        elif play.game_id != game_id:
            raise ValueError(
                f"segment_game expects a single game, got {game_id!r} and {play.game_id!r}"
            )

        if offense_team_id(play) is None:
            skipped += 1

        state, drive = advance(state, play, classifier)
        if drive is not None:
            drives.append(drive)

    last = finish(state)
    if last is not None:
        drives.append(last)

    if skipped:
        logger.debug("Game %s: skipped %d plays without an offense team", game_id, skipped)
    logger.debug("Game %s: %d red-zone drives", game_id, len(drives))
    return drives
