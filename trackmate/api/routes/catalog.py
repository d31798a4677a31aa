"""Tracks and cars"""

from typing import List

from fastapi import APIRouter, Depends

from ...analysis import leaderboard_view, personal_best_standing
from ...database import TrackmateRepository
from ...errors import NotFoundError
from ..deps import current_user_id, get_repository
from ..schemas import (
    CarCreate,
    CarOut,
    LapOut,
    PersonalBestOut,
    TrackCreate,
    TrackDetailResponse,
    TrackOut
)
from ..views import leaderboard_rows

router = APIRouter(tags=["catalog"])

TRACK_LEADERBOARD_SIZE = 10
PRIVATE_BEST_MESSAGE = 'This lap is private and does not count towards the global leaderboard.'


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


@router.get("/tracks", response_model=List[TrackOut])
def list_tracks(repo: TrackmateRepository = Depends(get_repository)):
    """All tracks by name"""
    return [TrackOut.model_validate(track) for track in repo.list_tracks()]


@router.post("/tracks", response_model=TrackOut)
def add_track(body: TrackCreate,
              user_id: str = Depends(current_user_id),
              repo: TrackmateRepository = Depends(get_repository)):
    fields = {k: _blank_to_none(v) for k, v in body.model_dump(exclude={'name'}).items()}
    return TrackOut.model_validate(repo.add_track(body.name.strip(), **fields))


@router.get("/tracks/{track_id}", response_model=TrackDetailResponse)
def track_detail(track_id: str,
                 user_id: str = Depends(current_user_id),
                 repo: TrackmateRepository = Depends(get_repository)):
    """Track info, my personal best and rank, the top-10 public leaderboard and my laps"""
    track = repo.get_track(track_id)
    if track is None:
        raise NotFoundError('Track not found.')

    my_laps = repo.list_laps(user_id=user_id, track_id=track_id)
    public_laps = repo.list_laps(track_id=track_id, public_only=True)
    cars = {car.id: car for car in repo.list_cars()}
    profiles = {p.id: p for p in repo.list_profiles()}

    combined = {lap.id: lap for lap in my_laps + public_laps}
    standing = personal_best_standing(combined.values(), track_id, user_id)
    personal_best = None
    if standing.best_lap is not None:
        personal_best = PersonalBestOut(
            lap=LapOut.from_record(standing.best_lap),
            rank=standing.rank,
            is_private=standing.is_private,
            message=PRIVATE_BEST_MESSAGE if standing.is_private else None
        )

    view = leaderboard_view(public_laps, profiles, track_id=track_id,
                            viewer_id=user_id, limit=TRACK_LEADERBOARD_SIZE)

    return TrackDetailResponse(
        track=TrackOut.model_validate(track),
        personal_best=personal_best,
        leaderboard=leaderboard_rows(view.entries, cars, profiles, user_id),
        my_laps=[LapOut.from_record(lap) for lap in my_laps]
    )


@router.get("/cars", response_model=List[CarOut])
def list_my_cars(user_id: str = Depends(current_user_id),
                 repo: TrackmateRepository = Depends(get_repository)):
    return [CarOut.model_validate(car) for car in repo.list_cars(user_id=user_id)]


@router.post("/cars", response_model=CarOut)
def add_car(body: CarCreate,
            user_id: str = Depends(current_user_id),
            repo: TrackmateRepository = Depends(get_repository)):
    fields = {k: _blank_to_none(v) for k, v in body.model_dump().items()}
    return CarOut.model_validate(repo.add_car(user_id, **fields))
