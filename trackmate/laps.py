"""
Lap Entry

Manual lap entry (single lap and "quick session" batches) and the owner-only
public/private toggle. Every time passes the plausibility guard before
anything is written; a batch with one bad lap writes nothing.

Usage:
    service = LapService(repository)
    lap = service.add_manual_lap(user_id, car_id=car.id, track_id=track.id,
                                 minutes=1, seconds=54, milliseconds=320)
    service.set_public(user_id, lap.id, True)
"""

import logging
from typing import List, Optional, Sequence, Union

from .errors import ForbiddenError, InvalidInputError, NotFoundError
from .records import LapRecord
from .timing import UI_CONDITIONS, check_plausible, compose_lap_time, parse_lap_time

logger = logging.getLogger(__name__)

SOURCE_MANUAL = 'manual'


class LapService:
    """Writes laps on behalf of an authenticated driver"""

    def __init__(self, repository):
        self.repository = repository

    def _check_selection(self, user_id: str, car_id: Optional[str], track_id: Optional[str]):
        if not car_id or not track_id:
            raise InvalidInputError('Select a car and a track.')

        if self.repository.get_track(track_id) is None:
            raise InvalidInputError('Invalid trackId')

        car = self.repository.get_car(car_id)
        if car is None:
            raise InvalidInputError('Invalid carId')
        if car.user_id != user_id:
            raise ForbiddenError('Car does not belong to user')

    @staticmethod
    def _check_conditions(conditions: Optional[str]):
        if conditions and conditions not in UI_CONDITIONS:
            raise InvalidInputError(f"Invalid conditions: {conditions}")

    def _lap_fields(self, user_id, car_id, track_id, lap_time_ms, date, is_public,
                    session_label, conditions, temperature_band) -> dict:
        return {
            'user_id': user_id,
            'car_id': car_id,
            'track_id': track_id,
            'lap_time_ms': lap_time_ms,
            'date': date or None,
            'is_public': bool(is_public),
            'source': SOURCE_MANUAL,
            'is_verified': False,
            'session_label': session_label or None,
            'conditions': conditions or None,
            'temperature_band': temperature_band or None,
        }

    def add_manual_lap(self,
                       user_id: str,
                       car_id: Optional[str],
                       track_id: Optional[str],
                       minutes: Optional[int],
                       seconds: Optional[int],
                       milliseconds: Optional[int],
                       date: Optional[str] = None,
                       is_public: bool = False,
                       session_label: Optional[str] = None,
                       conditions: Optional[str] = None,
                       temperature_band: Optional[str] = None) -> LapRecord:
        """
        Add one lap from the minutes/seconds/milliseconds form

        Raises:
            InvalidInputError: missing selection/fields or implausible time
            ForbiddenError: car belongs to another driver
        """
        if minutes is None or seconds is None or milliseconds is None:
            raise InvalidInputError('Fill minutes, seconds and milliseconds.')

        total_ms = check_plausible(compose_lap_time(minutes, seconds, milliseconds))
        self._check_selection(user_id, car_id, track_id)
        self._check_conditions(conditions)

        lap, = self.repository.add_laps([self._lap_fields(
            user_id, car_id, track_id, total_ms, date, is_public,
            session_label, conditions, temperature_band
        )])
        logger.info("[Laps] User %s added %dms at track %s", user_id, total_ms, track_id)
        return lap

    def add_quick_session(self,
                          user_id: str,
                          car_id: Optional[str],
                          track_id: Optional[str],
                          lap_times: Sequence[Union[str, int]],
                          date: Optional[str] = None,
                          is_public: bool = False,
                          session_label: Optional[str] = None,
                          conditions: Optional[str] = None,
                          temperature_band: Optional[str] = None) -> List[LapRecord]:
        """
        Add a batch of laps sharing car, track, date and session metadata

        Args:
            lap_times: Each entry is lap-time text ('1:54.320') or milliseconds

        Returns:
            The inserted laps, in input order
        """
        if not lap_times:
            raise InvalidInputError('Enter at least one lap time.')

        times = []
        for number, value in enumerate(lap_times, start=1):
            total_ms = value if isinstance(value, int) else parse_lap_time(value)
            if total_ms is None:
                raise InvalidInputError(f"Lap {number}: could not read lap time {value!r}")
            try:
                check_plausible(total_ms)
            except InvalidInputError as e:
                raise type(e)(f"Lap {number}: {e.message}") from e
            times.append(total_ms)

        self._check_selection(user_id, car_id, track_id)
        self._check_conditions(conditions)

        laps = self.repository.add_laps([
            self._lap_fields(user_id, car_id, track_id, total_ms, date, is_public,
                             session_label, conditions, temperature_band)
            for total_ms in times
        ])
        logger.info("[Laps] User %s added quick session of %d laps at track %s", user_id, len(laps), track_id)
        return laps

    def set_public(self, user_id: str, lap_id: str, is_public: bool) -> LapRecord:
        """Toggle a lap's visibility (owner only)"""
        lap = self.repository.get_lap(lap_id)
        if lap is None:
            raise NotFoundError('Lap not found.')
        if lap.user_id != user_id:
            raise ForbiddenError('Lap does not belong to user')

        return self.repository.set_lap_public(lap_id, bool(is_public))
