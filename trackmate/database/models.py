"""
SQLAlchemy ORM Models for the Trackmate Database

Defines the tables behind the lap-timing service:
1. profiles - Driver profiles (display name, visibility, avatar)
2. tracks - Circuits (reference data)
3. cars - Cars, each owned by one driver
4. laps - Lap times (canonical milliseconds)
5. phone_sessions - Batches recorded by the Timing app
6. access_tokens - Bearer tokens mapped to a user id

Lap dates are stored as ISO text: manual laps carry 'YYYY-MM-DD', phone laps a
full UTC timestamp. Recent-lap ordering compares this text lexically.
"""

from uuid import uuid4
from datetime import datetime

from sqlalchemy import (
    Column, Integer, Float, String, DateTime, ForeignKey, Boolean, Text
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _new_id() -> str:
    return str(uuid4())


class ProfileModel(Base):
    """
    Driver profile

    is_public_profile = NULL is treated as public. A private profile is
    shown as "Anonymous driver" on leaderboards.
    """
    __tablename__ = 'profiles'

    # Primary Key (== user id)
    id = Column(String(36), primary_key=True)

    display_name = Column(String(100))
    full_name = Column(String(200))
    car = Column(String(200))  # Free-text "what I drive"
    experience_level = Column(String(50))
    preferred_tracks = Column(Text)
    is_public_profile = Column(Boolean, default=True)
    avatar_url = Column(String(500))
    updated_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<Profile(id='{self.id}', name='{self.display_name}', public={self.is_public_profile})>"


class TrackModel(Base):
    """Circuit reference data"""
    __tablename__ = 'tracks'

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(200), nullable=False, index=True)
    country = Column(String(100))
    length_km = Column(Float)
    num_corners = Column(Integer)
    description = Column(Text)
    layout_image_url = Column(String(500))
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    laps = relationship("LapModel", back_populates="track")

    def __repr__(self):
        return f"<Track(name='{self.name}', country='{self.country}')>"


class CarModel(Base):
    """A driver's car"""
    __tablename__ = 'cars'

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), nullable=False, index=True)

    make = Column(String(100))
    model = Column(String(100))
    year = Column(Integer)
    nickname = Column(String(100))
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Car(make='{self.make}', model='{self.model}', owner='{self.user_id}')>"


class PhoneSessionModel(Base):
    """
    One batch of laps recorded by the Timing app

    Granularity: one record per POST /api/phone-sessions
    """
    __tablename__ = 'phone_sessions'

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), nullable=False, index=True)
    driver_id = Column(String(36), nullable=False)
    track_id = Column(String(36), ForeignKey('tracks.id'), nullable=False)
    car_id = Column(String(36), ForeignKey('cars.id'))

    source = Column(String(20), nullable=False)  # phone_gps
    accuracy_tier = Column(String(20), nullable=False)  # phone
    device = Column(String(200))
    sampling_hz = Column(Float)

    started_at = Column(DateTime, nullable=False)
    ended_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    laps = relationship("LapModel", back_populates="phone_session")

    def __repr__(self):
        return f"<PhoneSession(id='{self.id}', track='{self.track_id}', started='{self.started_at}')>"


class LapModel(Base):
    """
    A single timed lap

    Only is_public is ever updated after insert.
    """
    __tablename__ = 'laps'

    id = Column(String(36), primary_key=True, default=_new_id)

    # Foreign Keys
    user_id = Column(String(36), nullable=False, index=True)
    track_id = Column(String(36), ForeignKey('tracks.id'), nullable=False, index=True)
    car_id = Column(String(36), ForeignKey('cars.id'))  # NULL for phone laps without a car
    phone_session_id = Column(String(36), ForeignKey('phone_sessions.id'))

    # Lap Time (milliseconds)
    lap_time_ms = Column(Integer, nullable=False, index=True)
    date = Column(String(40))  # ISO date or timestamp

    # Visibility & Provenance
    is_public = Column(Boolean, default=False)
    source = Column(String(20), default='manual')  # manual / phone_gps
    is_verified = Column(Boolean, default=False)

    # Session metadata (manual entries only)
    session_label = Column(String(100))
    conditions = Column(String(20))  # dry_warm / dry_cool / damp / wet
    temperature_band = Column(String(20))

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    track = relationship("TrackModel", back_populates="laps")
    phone_session = relationship("PhoneSessionModel", back_populates="laps")

    def __repr__(self):
        return f"<Lap(track='{self.track_id}', time={self.lap_time_ms}ms, public={self.is_public})>"


class AccessTokenModel(Base):
    """Opaque bearer token -> user id"""
    __tablename__ = 'access_tokens'

    token = Column(String(128), primary_key=True)
    user_id = Column(String(36), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    revoked = Column(Boolean, default=False)

    def __repr__(self):
        return f"<AccessToken(user='{self.user_id}', revoked={self.revoked})>"


# === Database Schema Version ===
SCHEMA_VERSION = "1.0"
