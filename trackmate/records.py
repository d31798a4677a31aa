"""
Plain records passed between the repository, the aggregator and the API

Records are detached copies of database rows, so they can be sorted, filtered
and serialized after the ORM session is closed.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional

UNKNOWN_CAR = 'Unknown car'


@dataclass
class TrackRecord:
    id: str
    name: str
    country: Optional[str] = None
    length_km: Optional[float] = None
    num_corners: Optional[int] = None
    description: Optional[str] = None
    layout_image_url: Optional[str] = None

    @classmethod
    def from_model(cls, model) -> 'TrackRecord':
        return cls(
            id=model.id,
            name=model.name,
            country=model.country,
            length_km=model.length_km,
            num_corners=model.num_corners,
            description=model.description,
            layout_image_url=model.layout_image_url
        )


@dataclass
class CarRecord:
    id: str
    user_id: str
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    nickname: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, model) -> 'CarRecord':
        return cls(
            id=model.id,
            user_id=model.user_id,
            make=model.make,
            model=model.model,
            year=model.year,
            nickname=model.nickname,
            created_at=model.created_at
        )

    @property
    def label(self) -> str:
        """'Make Model (nickname)' as shown in car pickers"""
        name = ' '.join(part for part in (self.make, self.model) if part) or UNKNOWN_CAR
        return f"{name} ({self.nickname})" if self.nickname else name


@dataclass
class ProfileRecord:
    id: str
    display_name: Optional[str] = None
    full_name: Optional[str] = None
    car: Optional[str] = None
    experience_level: Optional[str] = None
    preferred_tracks: Optional[str] = None
    is_public_profile: Optional[bool] = None
    avatar_url: Optional[str] = None

    @classmethod
    def from_model(cls, model) -> 'ProfileRecord':
        return cls(
            id=model.id,
            display_name=model.display_name,
            full_name=model.full_name,
            car=model.car,
            experience_level=model.experience_level,
            preferred_tracks=model.preferred_tracks,
            is_public_profile=model.is_public_profile,
            avatar_url=model.avatar_url
        )

    @property
    def is_public(self) -> bool:
        # NULL visibility counts as public
        return self.is_public_profile is not False


@dataclass
class LapRecord:
    id: str
    user_id: str
    track_id: str
    lap_time_ms: int
    car_id: Optional[str] = None
    date: Optional[str] = None
    is_public: bool = False
    source: Optional[str] = None
    session_label: Optional[str] = None
    conditions: Optional[str] = None
    temperature_band: Optional[str] = None
    phone_session_id: Optional[str] = None

    @classmethod
    def from_model(cls, model) -> 'LapRecord':
        return cls(
            id=model.id,
            user_id=model.user_id,
            track_id=model.track_id,
            lap_time_ms=model.lap_time_ms,
            car_id=model.car_id,
            date=model.date,
            is_public=bool(model.is_public),
            source=model.source,
            session_label=model.session_label,
            conditions=model.conditions,
            temperature_band=model.temperature_band,
            phone_session_id=model.phone_session_id
        )

    def to_dict(self) -> dict:
        return asdict(self)
