"""
Trackmate Analysis Module

Derived views over lap records. Nothing here touches the database.

Modules:
- leaderboard: personal bests, track leaderboards, ranks, recent laps, stats
- drivers: public driver directory

Usage:
    from trackmate.analysis import personal_bests_by_track, leaderboard_view

    pbs = personal_bests_by_track(my_laps)
    view = leaderboard_view(public_laps, profiles, track_id=track_id)
"""

from .leaderboard import (
    RECENT_LAPS_LIMIT,
    SELECT_TRACK_MESSAGE,
    RankedLap,
    PersonalBestStanding,
    DriverStats,
    LeaderboardEntry,
    LeaderboardView,
    sort_laps_by_time,
    personal_bests_by_track,
    track_leaderboard,
    driver_rank,
    personal_best_standing,
    recent_laps,
    driver_stats,
    matches_name,
    filter_laps,
    driver_display_name,
    leaderboard_view
)
from .drivers import DriverDirectory, DriverSummary

__all__ = [
    'RECENT_LAPS_LIMIT',
    'SELECT_TRACK_MESSAGE',
    'RankedLap',
    'PersonalBestStanding',
    'DriverStats',
    'LeaderboardEntry',
    'LeaderboardView',
    'sort_laps_by_time',
    'personal_bests_by_track',
    'track_leaderboard',
    'driver_rank',
    'personal_best_standing',
    'recent_laps',
    'driver_stats',
    'matches_name',
    'filter_laps',
    'driver_display_name',
    'leaderboard_view',
    'DriverDirectory',
    'DriverSummary'
]
