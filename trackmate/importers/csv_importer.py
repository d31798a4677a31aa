"""
CSV Importer for Lap Times

Imports laps from spreadsheets or other timing tools into one driver's
account, for one track and car.

Recognized columns (first match wins):
- lap_time_ms                     -> milliseconds
- lap_time / LapTime / Time       -> text such as '1:54.320' or '54.3'
- date / Date                     -> lap date (optional)

Every row is parsed and checked against the plausibility bounds before
anything is written; one bad row rejects the whole file.
"""

import logging
import math
from pathlib import Path
from typing import List, Optional

import pandas as pd

from ..errors import InvalidInputError
from ..laps import LapService
from ..records import LapRecord
from ..timing import check_plausible, parse_lap_time

logger = logging.getLogger(__name__)

TIME_TEXT_COLUMNS = ('lap_time', 'LapTime', 'Time')
DATE_COLUMNS = ('date', 'Date')


class CSVImporter:
    """
    Import lap times from a CSV file

    Usage:
        importer = CSVImporter(LapService(repository))
        laps = importer.import_lap_csv('laps.csv', user_id, track_id, car_id)
    """

    def __init__(self, lap_service: LapService):
        self.lap_service = lap_service
        self.imported_records = 0

    def import_lap_csv(self,
                       csv_path: str,
                       user_id: str,
                       track_id: str,
                       car_id: str,
                       is_public: bool = False,
                       session_label: Optional[str] = None) -> List[LapRecord]:
        """
        Import every lap in the file

        Returns:
            Inserted laps
        """
        csv_file = Path(csv_path)
        if not csv_file.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_path}")

        logger.info("[CSVImporter] Importing %s", csv_file.name)

        # Keep everything as text so '1:05.100' is not mangled
        df = pd.read_csv(csv_file, dtype=str, keep_default_na=False)
        if df.empty:
            raise InvalidInputError(f"No laps in {csv_file.name}")

        date_column = next((c for c in DATE_COLUMNS if c in df.columns), None)
        df['_lap_time_ms'] = [self._parse_row(row, number) for number, (_, row) in enumerate(df.iterrows(), start=2)]
        df['_date'] = df[date_column].str.strip() if date_column else ''

        # Same date -> one quick session
        self.imported_records = 0
        inserted: List[LapRecord] = []
        for date, group in df.groupby('_date', sort=False):
            laps = self.lap_service.add_quick_session(
                user_id,
                car_id=car_id,
                track_id=track_id,
                lap_times=[int(ms) for ms in group['_lap_time_ms']],
                date=date or None,
                is_public=is_public,
                session_label=session_label
            )
            inserted.extend(laps)
            self.imported_records += len(laps)

        logger.info("[CSVImporter] Imported %d laps from %s", self.imported_records, csv_file.name)
        return inserted

    def _parse_row(self, row, line_number: int) -> int:
        """Lap time in ms for one row; line_number is the 1-based CSV line"""
        total_ms = None

        raw_ms = str(row.get('lap_time_ms', '')).strip()
        if raw_ms:
            try:
                value = float(raw_ms)
            except ValueError:
                raise InvalidInputError(f"Line {line_number}: lap_time_ms {raw_ms!r} is not a number")
            if not math.isfinite(value) or not value.is_integer():
                raise InvalidInputError(f"Line {line_number}: lap_time_ms {raw_ms!r} is not a whole number of milliseconds")
            total_ms = int(value)
        else:
            for column in TIME_TEXT_COLUMNS:
                text = str(row.get(column, '')).strip()
                if text:
                    total_ms = parse_lap_time(text)
                    if total_ms is None:
                        raise InvalidInputError(f"Line {line_number}: could not read lap time {text!r}")
                    break

        if total_ms is None:
            raise InvalidInputError(f"Line {line_number}: no lap time")

        try:
            return check_plausible(total_ms)
        except InvalidInputError as e:
            raise type(e)(f"Line {line_number}: {e.message}") from e
