"""
Trackmate

Lap-timing and leaderboard service for track-day drivers.
"""

__version__ = '1.0.0'
