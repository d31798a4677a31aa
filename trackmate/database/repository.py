"""
Trackmate Repository

Generic select/insert/update operations over the Trackmate tables. Every
method opens its own unit of work on the injected DatabaseManager and returns
detached records (see trackmate.records).

Usage:
    repo = TrackmateRepository(db_manager)
    tracks = repo.list_tracks()
    laps = repo.list_laps(track_id=tracks[0].id, public_only=True)
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from ..records import CarRecord, LapRecord, ProfileRecord, TrackRecord
from .db_manager import DatabaseManager
from .models import (
    AccessTokenModel,
    CarModel,
    LapModel,
    PhoneSessionModel,
    ProfileModel,
    TrackModel
)

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    'display_name', 'full_name', 'car', 'experience_level',
    'preferred_tracks', 'is_public_profile', 'avatar_url'
)


class TrackmateRepository:
    """Query/insert/update interface used by the services and the API"""

    def __init__(self, db_manager: DatabaseManager):
        self.db = db_manager

    # === Tracks ===

    def list_tracks(self) -> List[TrackRecord]:
        with self.db.get_session() as session:
            rows = session.query(TrackModel).order_by(TrackModel.name.asc()).all()
            return [TrackRecord.from_model(row) for row in rows]

    def get_track(self, track_id: str) -> Optional[TrackRecord]:
        with self.db.get_session() as session:
            row = session.get(TrackModel, track_id)
            return TrackRecord.from_model(row) if row else None

    def add_track(self, name: str, **fields) -> TrackRecord:
        with self.db.get_session() as session:
            row = TrackModel(name=name, **fields)
            session.add(row)
            session.flush()
            logger.info("[Repository] Added track %s (%s)", row.id, name)
            return TrackRecord.from_model(row)

    # === Cars ===

    def list_cars(self, user_id: Optional[str] = None) -> List[CarRecord]:
        """Cars in creation order, optionally for one owner"""
        with self.db.get_session() as session:
            query = session.query(CarModel)
            if user_id is not None:
                query = query.filter(CarModel.user_id == user_id)
            rows = query.order_by(CarModel.created_at.asc(), CarModel.id.asc()).all()
            return [CarRecord.from_model(row) for row in rows]

    def get_car(self, car_id: str) -> Optional[CarRecord]:
        with self.db.get_session() as session:
            row = session.get(CarModel, car_id)
            return CarRecord.from_model(row) if row else None

    def add_car(self, user_id: str, **fields) -> CarRecord:
        with self.db.get_session() as session:
            row = CarModel(user_id=user_id, **fields)
            session.add(row)
            session.flush()
            return CarRecord.from_model(row)

    # === Laps ===

    def list_laps(self,
                  user_id: Optional[str] = None,
                  track_id: Optional[str] = None,
                  public_only: bool = False) -> List[LapRecord]:
        """
        Laps ordered by lap time (fastest first)

        Args:
            user_id: Only this driver's laps
            track_id: Only laps at this track
            public_only: Only laps flagged public
        """
        with self.db.get_session() as session:
            query = session.query(LapModel)
            if user_id is not None:
                query = query.filter(LapModel.user_id == user_id)
            if track_id is not None:
                query = query.filter(LapModel.track_id == track_id)
            if public_only:
                query = query.filter(LapModel.is_public.is_(True))
            rows = query.order_by(LapModel.lap_time_ms.asc()).all()
            return [LapRecord.from_model(row) for row in rows]

    def get_lap(self, lap_id: str) -> Optional[LapRecord]:
        with self.db.get_session() as session:
            row = session.get(LapModel, lap_id)
            return LapRecord.from_model(row) if row else None

    def add_laps(self, laps: Iterable[Dict]) -> List[LapRecord]:
        """Insert several laps in one transaction"""
        with self.db.get_session() as session:
            rows = [LapModel(**fields) for fields in laps]
            session.add_all(rows)
            session.flush()
            return [LapRecord.from_model(row) for row in rows]

    def set_lap_public(self, lap_id: str, is_public: bool) -> Optional[LapRecord]:
        with self.db.get_session() as session:
            row = session.get(LapModel, lap_id)
            if row is None:
                return None
            row.is_public = is_public
            session.flush()
            return LapRecord.from_model(row)

    # === Profiles ===

    def list_profiles(self, public_only: bool = False) -> List[ProfileRecord]:
        with self.db.get_session() as session:
            query = session.query(ProfileModel)
            if public_only:
                query = query.filter(ProfileModel.is_public_profile.isnot(False))
            rows = query.order_by(ProfileModel.display_name.asc()).all()
            return [ProfileRecord.from_model(row) for row in rows]

    def get_profile(self, user_id: str) -> Optional[ProfileRecord]:
        with self.db.get_session() as session:
            row = session.get(ProfileModel, user_id)
            return ProfileRecord.from_model(row) if row else None

    def upsert_profile(self, user_id: str, **fields) -> ProfileRecord:
        """Create or update a profile; unknown keys are ignored"""
        with self.db.get_session() as session:
            row = session.get(ProfileModel, user_id)
            if row is None:
                row = ProfileModel(id=user_id)
                session.add(row)
            for key in PROFILE_FIELDS:
                if key in fields:
                    setattr(row, key, fields[key])
            row.updated_at = datetime.utcnow()
            session.flush()
            return ProfileRecord.from_model(row)

    # === Phone sessions ===

    def create_phone_session(self, session_fields: Dict, laps: List[Dict]) -> Tuple[str, int]:
        """
        Persist a phone session and its laps in one transaction

        Returns:
            (phone_session_id, number of laps inserted)
        """
        with self.db.get_session() as session:
            phone_session = PhoneSessionModel(**session_fields)
            session.add(phone_session)
            session.flush()

            rows = [LapModel(phone_session_id=phone_session.id, **fields) for fields in laps]
            session.add_all(rows)
            session.flush()
            return phone_session.id, len(rows)

    # === Access tokens ===

    def add_access_token(self, token: str, user_id: str) -> None:
        with self.db.get_session() as session:
            session.add(AccessTokenModel(token=token, user_id=user_id))

    def get_token_user(self, token: str) -> Optional[str]:
        """User id for a live token, else None"""
        with self.db.get_session() as session:
            row = session.get(AccessTokenModel, token)
            if row is None or row.revoked:
                return None
            return row.user_id

    def revoke_token(self, token: str) -> bool:
        with self.db.get_session() as session:
            row = session.get(AccessTokenModel, token)
            if row is None:
                return False
            row.revoked = True
            return True
