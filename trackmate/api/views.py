"""Shared builders turning analysis results into response rows"""

from typing import Dict, Iterable, List, Optional

from ..analysis import LeaderboardEntry
from ..records import UNKNOWN_CAR, CarRecord, ProfileRecord
from ..timing import format_lap_time
from .schemas import LeaderboardRow


def car_label(car: Optional[CarRecord]) -> str:
    """Same label as the CSV export and the car pickers"""
    return car.label if car is not None else UNKNOWN_CAR


def leaderboard_rows(entries: Iterable[LeaderboardEntry],
                     cars: Dict[str, CarRecord],
                     profiles: Dict[str, ProfileRecord],
                     viewer_id: Optional[str]) -> List[LeaderboardRow]:
    rows = []
    for entry in entries:
        lap = entry.lap
        profile = profiles.get(lap.user_id)
        linkable = profile is not None and profile.is_public and lap.user_id != viewer_id
        rows.append(LeaderboardRow(
            rank=entry.rank,
            driver_name=entry.driver_name,
            driver_id=lap.user_id if linkable else None,
            car=car_label(cars.get(lap.car_id)),
            date=lap.date,
            lap_time_ms=lap.lap_time_ms,
            lap_time=format_lap_time(lap.lap_time_ms)
        ))
    return rows
