"""Leaderboards, the driver directory, public driver pages and my profile"""

from typing import List, Optional

from fastapi import APIRouter, Depends

from ...analysis import (
    DriverDirectory,
    driver_stats,
    leaderboard_view,
    personal_bests_by_track,
    recent_laps
)
from ...database import TrackmateRepository
from ...errors import ForbiddenError, NotFoundError
from ..deps import current_user_id, get_repository, optional_user_id
from ..schemas import (
    CarOut,
    DriverProfileResponse,
    DriverSummaryOut,
    LapOut,
    LeaderboardResponse,
    ProfileOut,
    ProfileUpdate,
    TrackBestOut
)
from ..views import car_label, leaderboard_rows

router = APIRouter(tags=["community"])


@router.get("/leaderboards", response_model=LeaderboardResponse)
def leaderboards(track_id: Optional[str] = None,
                 car_id: Optional[str] = None,
                 driver: Optional[str] = None,
                 user_id: str = Depends(current_user_id),
                 repo: TrackmateRepository = Depends(get_repository)):
    """Public leaderboard for one track, filterable by car and driver name"""
    profiles = {p.id: p for p in repo.list_profiles()}
    if not track_id:
        view = leaderboard_view([], profiles)
        return LeaderboardResponse(suppressed=view.suppressed, message=view.message)

    laps = repo.list_laps(track_id=track_id, public_only=True)
    cars = {car.id: car for car in repo.list_cars()}
    view = leaderboard_view(laps, profiles, track_id=track_id, car_id=car_id,
                            driver_search=driver, viewer_id=user_id)

    return LeaderboardResponse(
        suppressed=view.suppressed,
        message=view.message,
        entries=leaderboard_rows(view.entries, cars, profiles, user_id)
    )


@router.get("/drivers", response_model=List[DriverSummaryOut])
def list_drivers(search: Optional[str] = None,
                 user_id: str = Depends(current_user_id),
                 repo: TrackmateRepository = Depends(get_repository)):
    directory = DriverDirectory(
        repo.list_profiles(public_only=True),
        repo.list_cars(),
        repo.list_laps(public_only=True)
    )

    rows = []
    for summary in directory.summaries(search):
        car = summary.main_car
        rows.append(DriverSummaryOut(
            id=summary.profile.id,
            display_name=summary.profile.display_name or 'Unnamed driver',
            experience_level=summary.profile.experience_level,
            main_car=car_label(car) if car is not None else None,
            public_laps=summary.public_laps,
            tracks_driven=summary.tracks_driven
        ))
    return rows


@router.get("/drivers/{driver_id}", response_model=DriverProfileResponse)
def driver_profile(driver_id: str,
                   viewer_id: Optional[str] = Depends(optional_user_id),
                   repo: TrackmateRepository = Depends(get_repository)):
    """Public driver page; viewable without signing in"""
    profile = repo.get_profile(driver_id)
    if profile is None:
        raise NotFoundError('Driver not found.')

    is_own = viewer_id == profile.id
    if not profile.is_public and not is_own:
        raise ForbiddenError("This driver's profile is private.")

    laps = repo.list_laps(user_id=driver_id, public_only=True)
    tracks = {t.id: t for t in repo.list_tracks()}
    stats = driver_stats(laps)
    best = stats.best_overall_lap

    personal_bests = [
        TrackBestOut(
            track_id=track_id,
            track_name=tracks[track_id].name if track_id in tracks else 'Unknown track',
            lap=LapOut.from_record(lap)
        )
        for track_id, lap in personal_bests_by_track(laps).items()
    ]

    return DriverProfileResponse(
        id=profile.id,
        display_name=profile.display_name or 'Unknown driver',
        avatar_url=profile.avatar_url,
        is_own_profile=is_own,
        tracks_driven_count=stats.tracks_driven_count,
        total_public_laps=stats.total_public_laps,
        best_overall_lap=LapOut.from_record(best) if best else None,
        best_overall_track_name=tracks[best.track_id].name if best and best.track_id in tracks else None,
        personal_bests=personal_bests,
        recent_laps=[LapOut.from_record(lap) for lap in recent_laps(laps)],
        cars=[CarOut.model_validate(car) for car in repo.list_cars(user_id=driver_id)]
    )


@router.get("/profile", response_model=ProfileOut)
def get_my_profile(user_id: str = Depends(current_user_id),
                   repo: TrackmateRepository = Depends(get_repository)):
    profile = repo.get_profile(user_id)
    if profile is None:
        return ProfileOut(id=user_id)
    return ProfileOut.model_validate(profile)


@router.put("/profile", response_model=ProfileOut)
def save_my_profile(body: ProfileUpdate,
                    user_id: str = Depends(current_user_id),
                    repo: TrackmateRepository = Depends(get_repository)):
    fields = {
        k: (v.strip() or None) if isinstance(v, str) else v
        for k, v in body.model_dump(exclude_unset=True).items()
    }
    return ProfileOut.model_validate(repo.upsert_profile(user_id, **fields))
