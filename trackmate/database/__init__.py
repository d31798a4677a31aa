"""
Trackmate Database Layer
Persistent storage for tracks, cars, laps, driver profiles and phone sessions.
"""

from .db_manager import DatabaseManager, create_database
from .repository import TrackmateRepository
from .models import (
    Base,
    ProfileModel,
    TrackModel,
    CarModel,
    LapModel,
    PhoneSessionModel,
    AccessTokenModel
)

__all__ = [
    'DatabaseManager',
    'create_database',
    'TrackmateRepository',
    'Base',
    'ProfileModel',
    'TrackModel',
    'CarModel',
    'LapModel',
    'PhoneSessionModel',
    'AccessTokenModel'
]

__version__ = '1.0.0'
