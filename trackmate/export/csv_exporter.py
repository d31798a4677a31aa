"""
CSV Exporter for Lap Times

Exports a driver's laps to a human-readable CSV file for spreadsheets and
other tools. Track and car ids are resolved to names; times are written both
formatted and in milliseconds.
"""

import logging
from pathlib import Path

import pandas as pd

from ..analysis import sort_laps_by_time
from ..timing import format_lap_time

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    'track', 'car', 'lap_time', 'lap_time_ms', 'date',
    'is_public', 'source', 'session_label', 'conditions', 'temperature_band'
]


class CSVExporter:
    """
    Export laps to CSV

    Usage:
        exporter = CSVExporter(repository)
        exporter.export_laps(user_id, 'exports/my_laps.csv')
    """

    def __init__(self, repository):
        self.repository = repository

    def laps_frame(self, user_id: str) -> pd.DataFrame:
        """The driver's laps, fastest first, as a DataFrame"""
        tracks = {t.id: t.name for t in self.repository.list_tracks()}
        cars = {c.id: c.label for c in self.repository.list_cars(user_id=user_id)}

        rows = [{
            'track': tracks.get(lap.track_id, lap.track_id),
            'car': cars.get(lap.car_id, '') if lap.car_id else '',
            'lap_time': format_lap_time(lap.lap_time_ms),
            'lap_time_ms': lap.lap_time_ms,
            'date': lap.date or '',
            'is_public': lap.is_public,
            'source': lap.source or '',
            'session_label': lap.session_label or '',
            'conditions': lap.conditions or '',
            'temperature_band': lap.temperature_band or '',
        } for lap in sort_laps_by_time(self.repository.list_laps(user_id=user_id))]

        return pd.DataFrame(rows, columns=EXPORT_COLUMNS)

    def export_laps(self, user_id: str, output_path: str) -> Path:
        """
        Write the driver's laps to output_path

        Returns:
            Path of the written file
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        df = self.laps_frame(user_id)
        df.to_csv(path, index=False)

        logger.info("[CSVExporter] Exported %d laps to %s", len(df), path)
        return path
