"""My laps: list, manual entry, quick sessions, visibility toggle"""

from typing import List

from fastapi import APIRouter, Depends, Request

from ...analysis import sort_laps_by_time
from ...database import TrackmateRepository
from ...laps import LapService
from ..deps import current_user_id, get_repository
from ..schemas import LapCreate, LapOut, LapVisibilityUpdate, QuickSessionCreate

router = APIRouter(prefix="/laps", tags=["laps"])


def get_lap_service(request: Request) -> LapService:
    return request.app.state.lap_service


@router.get("", response_model=List[LapOut])
def list_my_laps(user_id: str = Depends(current_user_id),
                 repo: TrackmateRepository = Depends(get_repository)):
    """My laps, fastest first"""
    return [LapOut.from_record(lap) for lap in sort_laps_by_time(repo.list_laps(user_id=user_id))]


@router.post("", response_model=LapOut)
def add_lap(body: LapCreate,
            user_id: str = Depends(current_user_id),
            service: LapService = Depends(get_lap_service)):
    lap = service.add_manual_lap(user_id, **body.model_dump())
    return LapOut.from_record(lap)


@router.post("/quick-session", response_model=List[LapOut])
def add_quick_session(body: QuickSessionCreate,
                      user_id: str = Depends(current_user_id),
                      service: LapService = Depends(get_lap_service)):
    laps = service.add_quick_session(user_id, **body.model_dump())
    return [LapOut.from_record(lap) for lap in laps]


@router.patch("/{lap_id}", response_model=LapOut)
def set_lap_visibility(lap_id: str,
                       body: LapVisibilityUpdate,
                       user_id: str = Depends(current_user_id),
                       service: LapService = Depends(get_lap_service)):
    return LapOut.from_record(service.set_public(user_id, lap_id, body.is_public))
