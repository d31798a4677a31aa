"""Pydantic request/response models for the Trackmate API"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..records import LapRecord
from ..timing import format_lap_time


# === Requests ===

class TrackCreate(BaseModel):
    name: str = Field(min_length=1)
    country: Optional[str] = None
    length_km: Optional[float] = Field(default=None, gt=0)
    num_corners: Optional[int] = Field(default=None, ge=0)
    description: Optional[str] = None


class CarCreate(BaseModel):
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=1885, le=2100)
    nickname: Optional[str] = None


class LapCreate(BaseModel):
    car_id: Optional[str] = None
    track_id: Optional[str] = None
    minutes: Optional[int] = Field(default=None, ge=0)
    seconds: Optional[int] = Field(default=None, ge=0, le=59)
    milliseconds: Optional[int] = Field(default=None, ge=0, le=999)
    date: Optional[str] = None
    is_public: bool = False
    session_label: Optional[str] = None
    conditions: Optional[str] = None
    temperature_band: Optional[str] = None


class QuickSessionCreate(BaseModel):
    car_id: Optional[str] = None
    track_id: Optional[str] = None
    lap_times: List[str] = Field(default_factory=list)
    date: Optional[str] = None
    is_public: bool = False
    session_label: Optional[str] = None
    conditions: Optional[str] = None
    temperature_band: Optional[str] = None


class LapVisibilityUpdate(BaseModel):
    is_public: bool


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = None
    full_name: Optional[str] = None
    car: Optional[str] = None
    experience_level: Optional[str] = None
    preferred_tracks: Optional[str] = None
    is_public_profile: Optional[bool] = None
    avatar_url: Optional[str] = None


# === Responses ===

class TrackOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    country: Optional[str] = None
    length_km: Optional[float] = None
    num_corners: Optional[int] = None
    description: Optional[str] = None
    layout_image_url: Optional[str] = None


class CarOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    nickname: Optional[str] = None


class LapOut(BaseModel):
    id: str
    user_id: str
    track_id: str
    car_id: Optional[str] = None
    lap_time_ms: int
    lap_time: str
    date: Optional[str] = None
    is_public: bool
    source: Optional[str] = None
    session_label: Optional[str] = None
    conditions: Optional[str] = None
    temperature_band: Optional[str] = None

    @classmethod
    def from_record(cls, lap: LapRecord) -> 'LapOut':
        return cls(lap_time=format_lap_time(lap.lap_time_ms), **{
            k: v for k, v in lap.to_dict().items() if k in cls.model_fields
        })


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    display_name: Optional[str] = None
    full_name: Optional[str] = None
    car: Optional[str] = None
    experience_level: Optional[str] = None
    preferred_tracks: Optional[str] = None
    is_public_profile: Optional[bool] = None
    avatar_url: Optional[str] = None


class LeaderboardRow(BaseModel):
    rank: int
    driver_name: str
    driver_id: Optional[str] = None  # Only when the profile may be linked
    car: str
    date: Optional[str] = None
    lap_time_ms: int
    lap_time: str


class LeaderboardResponse(BaseModel):
    suppressed: bool
    message: Optional[str] = None
    entries: List[LeaderboardRow] = Field(default_factory=list)


class PersonalBestOut(BaseModel):
    lap: LapOut
    rank: Optional[int] = None
    is_private: bool
    message: Optional[str] = None


class TrackDetailResponse(BaseModel):
    track: TrackOut
    personal_best: Optional[PersonalBestOut] = None
    leaderboard: List[LeaderboardRow]
    my_laps: List[LapOut]


class DriverSummaryOut(BaseModel):
    id: str
    display_name: str
    experience_level: Optional[str] = None
    main_car: Optional[str] = None
    public_laps: int
    tracks_driven: int


class TrackBestOut(BaseModel):
    track_id: str
    track_name: str
    lap: LapOut


class DriverProfileResponse(BaseModel):
    id: str
    display_name: str
    avatar_url: Optional[str] = None
    is_own_profile: bool
    tracks_driven_count: int
    total_public_laps: int
    best_overall_lap: Optional[LapOut] = None
    best_overall_track_name: Optional[str] = None
    personal_bests: List[TrackBestOut]
    recent_laps: List[LapOut]
    cars: List[CarOut]


class DeepLinkResponse(BaseModel):
    deep_link: str
    track_id: str
    car_id: Optional[str] = None
    conditions: Optional[str] = None
    fallback_timeout_ms: int  # How long the client waits before offering the fallback
