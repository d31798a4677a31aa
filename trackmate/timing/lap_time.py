"""
Lap-Time Codec

Converts between the text drivers read and type (``1:54.320``) and the
canonical integer-millisecond value stored on every lap.

Formats accepted by parse_lap_time:
- "M:SS.mmm" / "M:SS:mmm"  -> minutes present
- "SS.mmm"   / "SS:mmm"    -> 1-3 digit seconds, no minutes

Milliseconds shorter than three digits are right-padded ("54.3" -> 54300).

Usage:
    from trackmate.timing import format_lap_time, parse_lap_time

    format_lap_time(114320)      # '1:54.320'
    parse_lap_time('1:54.320')   # 114320
    parse_lap_time('abc')        # None
"""

import re
from typing import Optional

from ..errors import LapTimeValidationError

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND

# Plausibility bounds for a new manual entry (inclusive)
MIN_PLAUSIBLE_LAP_MS = 20000    # 20 seconds
MAX_PLAUSIBLE_LAP_MS = 900000   # 15 minutes

_WITH_MINUTES = re.compile(r'^(\d+):(\d{1,2})[.:](\d{1,3})$')
_WITHOUT_MINUTES = re.compile(r'^(\d{1,3})[.:](\d{1,3})$')


def format_lap_time(ms: int) -> str:
    """
    Format milliseconds as M:SS.mmm

    Minutes are not padded and may exceed two digits; seconds are padded to
    two digits and milliseconds to three. Values are truncated, never rounded.

    Args:
        ms: Non-negative lap time in milliseconds

    Returns:
        Formatted lap time, e.g. '1:54.320'
    """
    ms = int(ms)
    if ms < 0:
        raise ValueError(f"Lap time cannot be negative: {ms}")

    minutes = ms // MS_PER_MINUTE
    seconds = (ms // MS_PER_SECOND) % 60
    millis = ms % MS_PER_SECOND

    return f"{minutes}:{seconds:02d}.{millis:03d}"


def parse_lap_time(text: str) -> Optional[int]:
    """
    Parse lap time text into milliseconds

    Args:
        text: Lap time such as '1:54.320', '1:54:320', '54.3' or '54:300'

    Returns:
        Milliseconds, or None if the text matches no accepted format
    """
    if text is None:
        return None
    text = str(text).strip()

    match = _WITH_MINUTES.match(text)
    if match:
        minutes = int(match.group(1))
        seconds = int(match.group(2))
        if seconds >= 60:
            return None
        millis = match.group(3)
    else:
        match = _WITHOUT_MINUTES.match(text)
        if not match:
            return None
        minutes = 0
        seconds = int(match.group(1))
        millis = match.group(2)

    # "5" means 500 ms, not 5 ms
    millis_value = int(millis.ljust(3, '0'))

    return compose_lap_time(minutes, seconds, millis_value)


def compose_lap_time(minutes: int, seconds: int, milliseconds: int) -> int:
    """Combine the three manual-entry fields into milliseconds"""
    return int(minutes) * MS_PER_MINUTE + int(seconds) * MS_PER_SECOND + int(milliseconds)


def check_plausible(total_ms: int) -> int:
    """
    Reject lap times outside 20s-15min

    Raises:
        LapTimeValidationError: if the time is unrealistically low or high

    Returns:
        total_ms unchanged
    """
    if total_ms < MIN_PLAUSIBLE_LAP_MS:
        raise LapTimeValidationError(
            'Lap time is unrealistically low (less than 20 seconds). Please double-check.'
        )
    if total_ms > MAX_PLAUSIBLE_LAP_MS:
        raise LapTimeValidationError(
            'Lap time is unrealistically high (more than 15 minutes). Please double-check.'
        )
    return total_ms
