"""Timing setup: build the deep link for the native app"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from ...database import TrackmateRepository
from ...errors import ForbiddenError, InvalidInputError
from ...timing import UI_CONDITIONS, DeepLinkRequest, normalize_conditions
from ..deps import current_user_id, get_repository
from ..schemas import DeepLinkResponse

router = APIRouter(prefix="/timing", tags=["timing"])


@router.get("/deep-link", response_model=DeepLinkResponse)
def timing_deep_link(request: Request,
                     track_id: Optional[str] = None,
                     car_id: Optional[str] = None,
                     conditions: Optional[str] = None,
                     user_id: str = Depends(current_user_id),
                     repo: TrackmateRepository = Depends(get_repository)):
    """
    Deep link for the current timing selection

    conditions uses the form vocabulary (dry_warm, dry_cool, damp, wet) and is
    reduced to dry/damp/wet on the wire.
    """
    if not track_id:
        raise InvalidInputError('Select a track to start timing.')
    if repo.get_track(track_id) is None:
        raise InvalidInputError('Invalid trackId')

    if car_id:
        car = repo.get_car(car_id)
        if car is None:
            raise InvalidInputError('Invalid carId')
        if car.user_id != user_id:
            raise ForbiddenError('Car does not belong to user')

    if conditions and conditions not in UI_CONDITIONS:
        raise InvalidInputError(f"Invalid conditions: {conditions}")

    link = DeepLinkRequest(
        track_id=track_id,
        car_id=car_id or None,
        conditions=normalize_conditions(conditions) if conditions else None
    )
    return DeepLinkResponse(
        deep_link=link.to_url(),
        track_id=link.track_id,
        car_id=link.car_id,
        conditions=link.conditions,
        fallback_timeout_ms=request.app.state.settings.deep_link_timeout_ms
    )
