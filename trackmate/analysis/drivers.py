"""
Driver Directory Analytics

Summarizes public drivers for the "browse drivers" listing: main car, number
of public laps and number of distinct tracks driven.

Usage:
    from trackmate.analysis import DriverDirectory

    directory = DriverDirectory(profiles, cars, public_laps)
    rows = directory.summaries(search='ann')
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

import pandas as pd

from ..records import CarRecord, LapRecord, ProfileRecord
from .leaderboard import matches_name


@dataclass
class DriverSummary:
    """One row of the driver directory"""
    profile: ProfileRecord
    main_car: Optional[CarRecord]
    public_laps: int
    tracks_driven: int


class DriverDirectory:
    """
    Public driver directory

    Args:
        profiles: Profiles to list (private ones are skipped)
        cars: All cars; the first car per owner (by creation) is the main car
        laps: Laps to count; only public ones are counted
    """

    def __init__(self, profiles: List[ProfileRecord], cars: List[CarRecord], laps: List[LapRecord]):
        self.profiles = [p for p in profiles if p.is_public]
        self._main_cars = self._first_car_by_owner(cars)
        self._lap_counts = self._lap_counts_by_user(laps)

    @staticmethod
    def _first_car_by_owner(cars: List[CarRecord]) -> Dict[str, CarRecord]:
        main: Dict[str, CarRecord] = {}
        for car in cars:
            main.setdefault(car.user_id, car)
        return main

    @staticmethod
    def _lap_counts_by_user(laps: List[LapRecord]) -> pd.DataFrame:
        df = pd.DataFrame(
            [{'user_id': lap.user_id, 'track_id': lap.track_id} for lap in laps if lap.is_public],
            columns=['user_id', 'track_id']
        )
        if df.empty:
            return pd.DataFrame(columns=['public_laps', 'tracks_driven'])

        return df.groupby('user_id').agg(
            public_laps=('track_id', 'size'),
            tracks_driven=('track_id', 'nunique')
        )

    def summary_for(self, profile: ProfileRecord) -> DriverSummary:
        if profile.id in self._lap_counts.index:
            row = self._lap_counts.loc[profile.id]
            public_laps, tracks_driven = int(row['public_laps']), int(row['tracks_driven'])
        else:
            public_laps, tracks_driven = 0, 0

        return DriverSummary(
            profile=profile,
            main_car=self._main_cars.get(profile.id),
            public_laps=public_laps,
            tracks_driven=tracks_driven
        )

    def summaries(self, search: Optional[str] = None) -> List[DriverSummary]:
        """Directory rows whose display name contains the search text"""
        return [
            self.summary_for(profile)
            for profile in self.profiles
            if matches_name(profile.display_name, search)
        ]
