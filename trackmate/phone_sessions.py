"""
Phone Session Ingest

Receives a batch of laps recorded by the Timing app and stores it as one
phone session plus one public lap per recorded lap.

The payload is validated once, declaratively, by PhoneSessionPayload;
parse_payload turns any violation into an InvalidInputError carrying the
message for the first offending field.

Payload:
    {
      "trackId": "...", "carId": "..." | null (may be omitted),
      "source": "phone_gps", "accuracyTier": "phone",
      "device": "...", "samplingHz": 10,
      "sessionStartedAt": <epoch ms>, "sessionEndedAt": <epoch ms>,
      "laps": [{"index": 0, "startTime": ..., "endTime": ..., "durationMs": ...}]
    }
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, ValidationError, field_validator

from .errors import ForbiddenError, InvalidInputError, StorageError

logger = logging.getLogger(__name__)

SOURCE_PHONE_GPS = 'phone_gps'
ACCURACY_TIER_PHONE = 'phone'

# 9999-12-31T23:59:59.999Z, the last instant datetime can represent
MAX_EPOCH_MS = 253402300799999
MAX_LAP_DURATION_MS = 24 * 60 * 60 * 1000

Number = Union[StrictInt, StrictFloat]

# First failing top-level field -> message
_FIELD_MESSAGES = {
    'trackId': 'Invalid trackId',
    'carId': 'Invalid carId',
    'source': 'Invalid source, expected phone_gps',
    'accuracyTier': 'Invalid accuracyTier, expected phone',
    'laps': 'At least one lap is required',
    'sessionStartedAt': 'Invalid session timestamps',
    'sessionEndedAt': 'Invalid session timestamps',
    'device': 'Invalid device',
    'samplingHz': 'Invalid samplingHz',
}


def _check_epoch_ms(value):
    if value < 0 or value > MAX_EPOCH_MS:
        raise ValueError(f"timestamp must be between 0 and {MAX_EPOCH_MS} ms")
    return value


class PhoneLapPayload(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    index: StrictInt
    startTime: Number
    endTime: Number
    durationMs: Number

    @field_validator('startTime', 'endTime')
    @classmethod
    def timestamp_in_range(cls, value):
        return _check_epoch_ms(value)

    @field_validator('durationMs')
    @classmethod
    def duration_in_range(cls, value):
        if value < 0 or value > MAX_LAP_DURATION_MS:
            raise ValueError(f"durationMs must be between 0 and {MAX_LAP_DURATION_MS}")
        return value


class PhoneSessionPayload(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    trackId: StrictStr = Field(min_length=1)
    carId: Optional[StrictStr] = None  # Omitted is the same as null
    source: Literal['phone_gps']
    accuracyTier: Literal['phone']
    laps: List[PhoneLapPayload] = Field(min_length=1)
    sessionStartedAt: Number
    sessionEndedAt: Number
    device: Optional[StrictStr] = None
    samplingHz: Optional[Number] = None

    @field_validator('sessionStartedAt', 'sessionEndedAt')
    @classmethod
    def timestamp_in_range(cls, value):
        return _check_epoch_ms(value)


@dataclass
class IngestResult:
    phone_session_id: str
    laps_inserted: int

    def to_response(self) -> dict:
        return {'ok': True, 'phoneSessionId': self.phone_session_id, 'lapsInserted': self.laps_inserted}


def _message_for(error: ValidationError) -> str:
    first = error.errors()[0]
    loc = first.get('loc') or ()
    if not loc:
        return 'Invalid JSON payload'

    field = loc[0]
    # A problem inside an individual lap, as opposed to a missing/empty list
    if field == 'laps' and len(loc) > 1:
        return 'Invalid lap payload'
    return _FIELD_MESSAGES.get(field, f"Invalid {field}")


def parse_payload(body: Union[str, bytes]) -> PhoneSessionPayload:
    """
    Validate a raw JSON body

    Raises:
        InvalidInputError: malformed JSON or any schema violation
    """
    try:
        return PhoneSessionPayload.model_validate_json(body)
    except ValidationError as e:
        raise InvalidInputError(_message_for(e)) from e


def epoch_ms_to_datetime(value: float) -> datetime:
    """Epoch milliseconds -> aware UTC datetime"""
    return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)


def epoch_ms_to_iso(value: float) -> str:
    """Epoch milliseconds -> '2025-05-01T10:00:00.000Z'"""
    dt = epoch_ms_to_datetime(value)
    return dt.strftime('%Y-%m-%dT%H:%M:%S.') + f"{dt.microsecond // 1000:03d}Z"


def round_duration(duration_ms: float) -> int:
    """Nearest millisecond, halves rounded up"""
    return int(math.floor(duration_ms + 0.5))


class PhoneSessionIngestor:
    """
    Stores validated phone sessions

    Usage:
        ingestor = PhoneSessionIngestor(repository)
        result = ingestor.ingest(user_id, parse_payload(body))
    """

    def __init__(self, repository):
        self.repository = repository

    def _resolve_car(self, user_id: str, car_id: Optional[str]) -> Optional[str]:
        if not car_id:
            return None

        car = self.repository.get_car(car_id)
        if car is None:
            raise InvalidInputError('Invalid carId')
        if car.user_id != user_id:
            logger.warning("[PhoneSessions] User %s tried to use car %s owned by someone else", user_id, car_id)
            raise ForbiddenError('Car does not belong to user')
        return car.id

    def ingest(self, user_id: str, payload: PhoneSessionPayload) -> IngestResult:
        """
        Persist one phone session and its laps (single transaction)

        Raises:
            InvalidInputError: unknown track/car or unusable timestamps
            ForbiddenError: car belongs to another driver
            StorageError: the write failed; nothing was stored
        """
        if self.repository.get_track(payload.trackId) is None:
            raise InvalidInputError('Invalid trackId')

        car_id = self._resolve_car(user_id, payload.carId)

        try:
            started_at = epoch_ms_to_datetime(payload.sessionStartedAt)
            ended_at = epoch_ms_to_datetime(payload.sessionEndedAt)
            lap_dates = [epoch_ms_to_iso(lap.endTime) for lap in payload.laps]
        except (ValueError, OverflowError, OSError) as e:
            raise InvalidInputError('Invalid session timestamps') from e

        session_fields = {
            'user_id': user_id,
            'driver_id': user_id,
            'track_id': payload.trackId,
            'car_id': car_id,
            'source': payload.source,
            'accuracy_tier': payload.accuracyTier,
            'device': payload.device,
            'sampling_hz': payload.samplingHz,
            # Stored naive, in UTC
            'started_at': started_at.replace(tzinfo=None),
            'ended_at': ended_at.replace(tzinfo=None),
        }

        laps = [
            {
                'user_id': user_id,
                'track_id': payload.trackId,
                'car_id': car_id,
                'lap_time_ms': round_duration(lap.durationMs),
                'date': date,
                'is_public': True,
                'session_label': None,
                'conditions': None,
                'temperature_band': None,
                'source': SOURCE_PHONE_GPS,
                'is_verified': False,
            }
            for lap, date in zip(payload.laps, lap_dates)
        ]

        logger.info(
            "[PhoneSessions] User %s: track=%s car=%s device=%s %.1fHz, %d laps",
            user_id, payload.trackId, car_id, payload.device, payload.samplingHz or 0, len(laps)
        )
        for lap in payload.laps:
            logger.debug("[PhoneSessions]   Lap %d: %sms", lap.index, lap.durationMs)

        try:
            phone_session_id, inserted = self.repository.create_phone_session(session_fields, laps)
        except StorageError as e:
            logger.error("[PhoneSessions] Insert failed: %s", e)
            raise StorageError('Failed to create phone session') from e

        return IngestResult(phone_session_id=phone_session_id, laps_inserted=inserted)
