from trackmate.analysis import DriverDirectory
from trackmate.records import CarRecord, LapRecord, ProfileRecord


def build_directory():
    profiles = [
        ProfileRecord(id='A', display_name='Annie'),
        ProfileRecord(id='B', display_name='Bob', is_public_profile=True),
        ProfileRecord(id='C', display_name='Hidden', is_public_profile=False),
    ]
    cars = [
        CarRecord(id='car-a1', user_id='A', make='Mazda', model='MX-5'),
        CarRecord(id='car-a2', user_id='A', make='Honda', model='S2000'),
    ]
    laps = [
        LapRecord(id='1', user_id='A', track_id='T1', lap_time_ms=70000, is_public=True),
        LapRecord(id='2', user_id='A', track_id='T1', lap_time_ms=71000, is_public=True),
        LapRecord(id='3', user_id='A', track_id='T2', lap_time_ms=60000, is_public=True),
        LapRecord(id='4', user_id='A', track_id='T3', lap_time_ms=60000, is_public=False),
        LapRecord(id='5', user_id='C', track_id='T1', lap_time_ms=60000, is_public=True),
    ]
    return DriverDirectory(profiles, cars, laps)


def test_private_profiles_are_not_listed():
    names = [s.profile.display_name for s in build_directory().summaries()]
    assert names == ['Annie', 'Bob']


def test_counts_public_laps_and_distinct_tracks():
    annie = build_directory().summaries(search='ann')[0]
    assert annie.public_laps == 3
    assert annie.tracks_driven == 2
    assert annie.main_car.id == 'car-a1'


def test_driver_without_laps_or_cars():
    bob = build_directory().summaries(search='BOB')[0]
    assert bob.public_laps == 0
    assert bob.tracks_driven == 0
    assert bob.main_car is None


def test_empty_directory():
    directory = DriverDirectory([ProfileRecord(id='A', display_name='Annie')], [], [])
    assert directory.summaries()[0].public_laps == 0


def test_search_without_match():
    assert build_directory().summaries(search='zed') == []
