"""
Red Zone Stats - weekly NFL red-zone efficiency from play-by-play data.

Fetches each game's plays, splits them into red-zone drives, and stores
per-team attempts, touchdowns, field goals and TD rate by (season, week).

Usage:
    from redzone_stats import refresh_red_zone_stats

    result = await refresh_red_zone_stats(2024, 5)
"""

from .redzone.refresh import RedZoneRefresher, RefreshResult, refresh_red_zone_stats

__version__ = "1.0.0"

__all__ = [
    "RedZoneRefresher",
    "RefreshResult",
    "refresh_red_zone_stats",
]
