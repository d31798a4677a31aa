"""
Timing Deep Links

Builds and parses the versioned custom-scheme URL used to launch the native
Trackmate Timing app with a preselected track, car and conditions:

    trackmate://timing?v=1&trackId=<id>[&carId=<id>][&conditions=dry|damp|wet]

``v`` is always emitted first and ``trackId`` second. The version field is
reserved for breaking changes; the parser rejects versions it does not know.

Usage:
    from trackmate.timing import build_timing_deep_link, normalize_conditions

    url = build_timing_deep_link('abc-123', conditions=normalize_conditions('dry_warm'))
    # 'trackmate://timing?v=1&trackId=abc-123&conditions=dry'
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, quote, urlencode, urlsplit

from ..errors import DeepLinkError

DEEP_LINK_VERSION = '1'
DEEP_LINK_SCHEME = 'trackmate://'
TIMING_PATH = 'timing'

# Wire vocabulary understood by the Timing app (v1)
WIRE_CONDITIONS = ('dry', 'damp', 'wet')

# Richer vocabulary offered in the timing setup form
UI_CONDITIONS = ('dry_warm', 'dry_cool', 'damp', 'wet')

_CONDITIONS_MAP = {
    'dry_warm': 'dry',
    'dry_cool': 'dry',
    'dry': 'dry',
    'damp': 'damp',
    'wet': 'wet',
}


@dataclass(frozen=True)
class DeepLinkRequest:
    """Context handed to the Timing app; built per 'start timing', never stored"""
    track_id: str
    car_id: Optional[str] = None
    conditions: Optional[str] = None

    def to_url(self) -> Optional[str]:
        return build_timing_deep_link(self.track_id, self.car_id, self.conditions)


def build_timing_deep_link(track_id: Optional[str],
                           car_id: Optional[str] = None,
                           conditions: Optional[str] = None) -> Optional[str]:
    """
    Build a deep link for the Timing app

    Args:
        track_id: Track id (required)
        car_id: Car id, included only if non-empty
        conditions: Wire conditions value, included only if non-empty

    Returns:
        The URL, or None when track_id is missing/empty
    """
    if not track_id:
        return None

    # Insertion order is the wire order
    params = [('v', DEEP_LINK_VERSION), ('trackId', track_id)]
    if car_id:
        params.append(('carId', car_id))
    if conditions:
        params.append(('conditions', conditions))

    return f"{DEEP_LINK_SCHEME}{TIMING_PATH}?{urlencode(params, quote_via=quote, safe='')}"


def is_valid_conditions(value: Optional[str]) -> bool:
    """True if value is one of the wire conditions (dry/damp/wet)"""
    return value in WIRE_CONDITIONS


def normalize_conditions(ui_conditions: Optional[str]) -> Optional[str]:
    """Map UI conditions (dry_warm, dry_cool, ...) to wire conditions, or None"""
    return _CONDITIONS_MAP.get(ui_conditions or '')


def parse_timing_deep_link(url: str) -> DeepLinkRequest:
    """
    Parse an inbound timing deep link

    Unknown ``conditions`` values degrade to None rather than failing.

    Raises:
        DeepLinkError: wrong scheme/path, unsupported version, or no trackId
    """
    parts = urlsplit(url or '')
    if f"{parts.scheme}://" != DEEP_LINK_SCHEME or parts.netloc != TIMING_PATH:
        raise DeepLinkError(f"Not a timing deep link: {url!r}")

    query = parse_qs(parts.query, keep_blank_values=True)

    def first(name: str) -> Optional[str]:
        values = query.get(name)
        return values[0] if values else None

    version = first('v')
    if version != DEEP_LINK_VERSION:
        raise DeepLinkError(f"Unsupported deep link version: {version!r}")

    track_id = first('trackId')
    if not track_id:
        raise DeepLinkError('Deep link is missing trackId')

    conditions = first('conditions')
    return DeepLinkRequest(
        track_id=track_id,
        car_id=first('carId') or None,
        conditions=conditions if is_valid_conditions(conditions) else None,
    )
