"""
Red-zone drive segmentation, aggregation and the weekly refresh.

Usage:
    from redzone_stats.redzone import segment_game, aggregate_red_zone_stats

    drives = segment_game(plays)
    rows = aggregate_red_zone_stats(drives, teams, season=2024, week=5)
"""

from .aggregator import RedZoneStatsAggregator, aggregate_red_zone_stats
from .classifier import (
    PlayClassifier,
    TextPlayClassifier,
    is_field_goal_play,
    is_red_zone_play,
    is_touchdown_play,
)
from .refresh import RedZoneRefresher, RefreshResult, refresh_red_zone_stats, validate_season_week
from .segmenter import ActiveDrive, advance, finish, segment_game

__all__ = [
    "RedZoneStatsAggregator",
    "aggregate_red_zone_stats",
    "PlayClassifier",
    "TextPlayClassifier",
    "is_field_goal_play",
    "is_red_zone_play",
    "is_touchdown_play",
    "RedZoneRefresher",
    "RefreshResult",
    "refresh_red_zone_stats",
    "validate_season_week",
    "ActiveDrive",
    "advance",
    "finish",
    "segment_game",
]
