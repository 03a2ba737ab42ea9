"""
Core module for Red Zone Stats.

This module provides the foundational components:
- Configuration management (config.py)
- Data models (models.py)
- Shared HTTP client infrastructure (http.py)

Usage:
    from redzone_stats.core import Settings, get_settings
    from redzone_stats.core import Play, Drive, DriveOutcome, TeamWeekStats
    from redzone_stats.core.http import BaseApiClient, ExternalAPIError
"""

# Configuration
from .config import Settings, get_settings

# Models
from .models import (
    Competitor,
    Drive,
    DriveOutcome,
    Play,
    ScheduledGame,
    TeamInfo,
    TeamWeekStats,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Models
    "Competitor",
    "Drive",
    "DriveOutcome",
    "Play",
    "ScheduledGame",
    "TeamInfo",
    "TeamWeekStats",
]
