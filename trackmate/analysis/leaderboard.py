"""
Leaderboard & Personal-Best Analytics

Pure functions over an already-fetched collection of LapRecord. Every view is
recomputed from scratch on each read; nothing here is persisted.

Ordering: laps are ranked by lap_time_ms, then by earliest date (undated laps
after dated ones), then by lap id, so equal times always resolve the same way.

Features:
- Personal best per track
- Public leaderboard for a track (1-based rank)
- A driver's rank and "private, not counted" state
- Recent laps
- Driver aggregate stats
- Track/car/driver-name filtering

Usage:
    from trackmate.analysis import personal_bests_by_track, track_leaderboard

    pbs = personal_bests_by_track(my_laps)
    board = track_leaderboard(all_laps, track_id)
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from ..records import LapRecord, ProfileRecord

RECENT_LAPS_LIMIT = 10
SELECT_TRACK_MESSAGE = 'Select a track to see the leaderboard.'


@dataclass
class RankedLap:
    rank: int  # 1-based
    lap: LapRecord


@dataclass
class PersonalBestStanding:
    """A driver's best lap at one track and where it stands globally"""
    best_lap: Optional[LapRecord]
    rank: Optional[int]  # None when the best lap is private or absent
    is_private: bool


@dataclass
class DriverStats:
    tracks_driven_count: int
    total_public_laps: int
    best_overall_lap: Optional[LapRecord]


@dataclass
class LeaderboardEntry:
    rank: int
    lap: LapRecord
    driver_name: str


@dataclass
class LeaderboardView:
    suppressed: bool
    message: Optional[str] = None
    entries: List[LeaderboardEntry] = field(default_factory=list)


def lap_sort_key(lap: LapRecord):
    """(time, undated?, date, id)"""
    return (lap.lap_time_ms, not lap.date, lap.date or '', lap.id)


def sort_laps_by_time(laps: Iterable[LapRecord]) -> List[LapRecord]:
    """Fastest first"""
    return sorted(laps, key=lap_sort_key)


def personal_bests_by_track(laps: Iterable[LapRecord]) -> Dict[str, LapRecord]:
    """
    Fastest lap per track

    The public flag is ignored: this is the owner's own view.

    Returns:
        track_id -> fastest LapRecord
    """
    best: Dict[str, LapRecord] = {}
    for lap in sort_laps_by_time(laps):
        if lap.track_id not in best:
            best[lap.track_id] = lap
    return best


def track_leaderboard(laps: Iterable[LapRecord], track_id: str) -> List[RankedLap]:
    """Public laps at one track, fastest first, ranked from 1"""
    public = [lap for lap in laps if lap.track_id == track_id and lap.is_public]
    return [RankedLap(rank=i + 1, lap=lap) for i, lap in enumerate(sort_laps_by_time(public))]


def driver_rank(ranked: Iterable[RankedLap], user_id: str) -> Optional[int]:
    """Rank of the driver's first (fastest) entry, or None"""
    for entry in ranked:
        if entry.lap.user_id == user_id:
            return entry.rank
    return None


def personal_best_standing(laps: Iterable[LapRecord], track_id: str, user_id: str) -> PersonalBestStanding:
    """
    The driver's best lap at a track and its global rank

    If that best lap is private it does not count: no rank is given, even
    when a slower public lap of the same driver is on the leaderboard.

    Args:
        laps: Laps containing at least the driver's laps and all public laps at the track
        track_id: Track to evaluate
        user_id: Driver to evaluate
    """
    laps = list(laps)
    mine = sort_laps_by_time(
        lap for lap in laps if lap.user_id == user_id and lap.track_id == track_id
    )
    if not mine:
        return PersonalBestStanding(best_lap=None, rank=None, is_private=False)

    best = mine[0]
    if not best.is_public:
        return PersonalBestStanding(best_lap=best, rank=None, is_private=True)

    rank = driver_rank(track_leaderboard(laps, track_id), user_id)
    return PersonalBestStanding(best_lap=best, rank=rank, is_private=False)


def recent_laps(laps: Iterable[LapRecord], limit: int = RECENT_LAPS_LIMIT) -> List[LapRecord]:
    """
    Most recent laps first

    Dates compare as text; undated laps go last.
    """
    laps = list(laps)
    dated = sorted((lap for lap in laps if lap.date), key=lambda lap: lap.date, reverse=True)
    undated = [lap for lap in laps if not lap.date]
    return (dated + undated)[:limit]


def driver_stats(laps: Iterable[LapRecord]) -> DriverStats:
    """Aggregate stats over a driver's public laps"""
    public = sort_laps_by_time(lap for lap in laps if lap.is_public)
    return DriverStats(
        tracks_driven_count=len({lap.track_id for lap in public}),
        total_public_laps=len(public),
        best_overall_lap=public[0] if public else None
    )


def matches_name(display_name: Optional[str], search: Optional[str]) -> bool:
    """Case-insensitive substring match; an empty search matches everything"""
    needle = (search or '').strip().lower()
    if not needle:
        return True
    return needle in (display_name or '').lower()


def filter_laps(laps: Iterable[LapRecord],
                profiles: Mapping[str, ProfileRecord],
                track_id: Optional[str] = None,
                car_id: Optional[str] = None,
                driver_search: Optional[str] = None) -> List[LapRecord]:
    """
    Apply leaderboard filters (AND-composed)

    Args:
        laps: Laps to filter
        profiles: user_id -> profile, for the name search
        track_id: Exact track id
        car_id: Exact car id
        driver_search: Substring of the driver's display name
    """
    result = []
    for lap in laps:
        if track_id and lap.track_id != track_id:
            continue
        if car_id and lap.car_id != car_id:
            continue
        if driver_search and driver_search.strip():
            profile = profiles.get(lap.user_id)
            if not matches_name(profile.display_name if profile else None, driver_search):
                continue
        result.append(lap)
    return result


def driver_display_name(profile: Optional[ProfileRecord],
                        lap_user_id: str,
                        viewer_id: Optional[str] = None) -> str:
    """Name shown next to a leaderboard entry"""
    if viewer_id is not None and lap_user_id == viewer_id:
        return 'You'
    if profile is not None and profile.is_public:
        return profile.display_name or 'Unnamed driver'
    return 'Anonymous driver'


def leaderboard_view(laps: Iterable[LapRecord],
                     profiles: Mapping[str, ProfileRecord],
                     track_id: Optional[str] = None,
                     car_id: Optional[str] = None,
                     driver_search: Optional[str] = None,
                     viewer_id: Optional[str] = None,
                     limit: Optional[int] = None) -> LeaderboardView:
    """
    Filtered public leaderboard

    Without a track the view is suppressed rather than mixing every track into
    one table.
    """
    if not track_id:
        return LeaderboardView(suppressed=True, message=SELECT_TRACK_MESSAGE)

    public = [lap for lap in laps if lap.is_public]
    filtered = sort_laps_by_time(filter_laps(public, profiles, track_id, car_id, driver_search))
    if limit is not None:
        filtered = filtered[:limit]

    entries = [
        LeaderboardEntry(
            rank=i + 1,
            lap=lap,
            driver_name=driver_display_name(profiles.get(lap.user_id), lap.user_id, viewer_id)
        )
        for i, lap in enumerate(filtered)
    ]
    return LeaderboardView(suppressed=False, entries=entries)
