"""
Trackmate Timing Module

Lap-time text codec, timing deep links and the handoff to the native app.

Usage:
    from trackmate.timing import format_lap_time, build_timing_deep_link

    format_lap_time(114320)                 # '1:54.320'
    build_timing_deep_link('abc-123')       # 'trackmate://timing?v=1&trackId=abc-123'
"""

from .lap_time import (
    MIN_PLAUSIBLE_LAP_MS,
    MAX_PLAUSIBLE_LAP_MS,
    format_lap_time,
    parse_lap_time,
    compose_lap_time,
    check_plausible
)
from .deeplinks import (
    DEEP_LINK_VERSION,
    WIRE_CONDITIONS,
    UI_CONDITIONS,
    DeepLinkRequest,
    build_timing_deep_link,
    is_valid_conditions,
    normalize_conditions,
    parse_timing_deep_link
)
from .handoff import CONFIRMED_PREFERENCE_KEY, HandoffState, MemoryPreferences, TimingHandoff

__all__ = [
    'MIN_PLAUSIBLE_LAP_MS',
    'MAX_PLAUSIBLE_LAP_MS',
    'format_lap_time',
    'parse_lap_time',
    'compose_lap_time',
    'check_plausible',
    'DEEP_LINK_VERSION',
    'WIRE_CONDITIONS',
    'UI_CONDITIONS',
    'DeepLinkRequest',
    'build_timing_deep_link',
    'is_valid_conditions',
    'normalize_conditions',
    'parse_timing_deep_link',
    'CONFIRMED_PREFERENCE_KEY',
    'HandoffState',
    'MemoryPreferences',
    'TimingHandoff'
]
