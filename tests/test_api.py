import pytest
from fastapi.testclient import TestClient

from trackmate.api import create_app
from trackmate.config import Settings


def test_root_and_health(client):
    assert client.get('/').json()['name'] == 'Trackmate API'
    assert client.get('/health').json()['status'] == 'healthy'


def test_requires_auth(client):
    response = client.get('/cars')
    assert response.status_code == 401
    assert response.json() == {'error': 'Missing or invalid Authorization header'}


class TestCatalog:

    def test_tracks_sorted_by_name(self, client, driver, track, other_track):
        names = [t['name'] for t in client.get('/tracks', headers=driver[1]).json()]
        assert names == ['Anglesey', 'Brands Hatch']

    def test_add_track(self, client, driver):
        response = client.post('/tracks', json={'name': ' Donington ', 'country': ''}, headers=driver[1])
        assert response.status_code == 200
        assert response.json()['name'] == 'Donington'
        assert response.json()['country'] is None

    def test_cars_are_private_to_owner(self, client, driver, rival, driver_car, rival_car):
        cars = client.get('/cars', headers=driver[1]).json()
        assert [c['id'] for c in cars] == [driver_car.id]

    def test_add_car(self, client, driver):
        response = client.post('/cars', json={'make': 'BMW', 'model': 'E36', 'year': 1995}, headers=driver[1])
        assert response.status_code == 200
        assert response.json()['make'] == 'BMW'

    def test_unknown_track_detail(self, client, driver):
        response = client.get('/tracks/missing', headers=driver[1])
        assert response.status_code == 404
        assert response.json() == {'error': 'Track not found.'}


class TestLaps:

    def test_add_and_list(self, client, driver, track, driver_car):
        body = {'car_id': driver_car.id, 'track_id': track.id,
                'minutes': 1, 'seconds': 54, 'milliseconds': 320, 'date': '2024-05-01'}
        response = client.post('/laps', json=body, headers=driver[1])
        assert response.status_code == 200
        assert response.json()['lap_time'] == '1:54.320'
        assert response.json()['is_public'] is False

        laps = client.get('/laps', headers=driver[1]).json()
        assert [lap['lap_time_ms'] for lap in laps] == [114320]

    def test_implausible_lap(self, client, driver, track, driver_car):
        body = {'car_id': driver_car.id, 'track_id': track.id, 'minutes': 0, 'seconds': 10, 'milliseconds': 0}
        response = client.post('/laps', json=body, headers=driver[1])
        assert response.status_code == 400
        assert 'unrealistically low' in response.json()['error']

    def test_seconds_out_of_range(self, client, driver, track, driver_car):
        body = {'car_id': driver_car.id, 'track_id': track.id, 'minutes': 1, 'seconds': 75, 'milliseconds': 0}
        assert client.post('/laps', json=body, headers=driver[1]).status_code == 400

    def test_quick_session(self, client, driver, track, driver_car):
        body = {'car_id': driver_car.id, 'track_id': track.id,
                'lap_times': ['1:30.000', '1:29.500'], 'is_public': True}
        response = client.post('/laps/quick-session', json=body, headers=driver[1])
        assert response.status_code == 200
        assert [lap['lap_time_ms'] for lap in response.json()] == [90000, 89500]

    def test_toggle_by_other_driver(self, client, driver, rival, track, driver_car):
        body = {'car_id': driver_car.id, 'track_id': track.id, 'minutes': 1, 'seconds': 30, 'milliseconds': 0}
        lap_id = client.post('/laps', json=body, headers=driver[1]).json()['id']

        assert client.patch(f'/laps/{lap_id}', json={'is_public': True}, headers=rival[1]).status_code == 403
        response = client.patch(f'/laps/{lap_id}', json={'is_public': True}, headers=driver[1])
        assert response.json()['is_public'] is True


@pytest.fixture
def race(repo, driver, rival, track, driver_car, rival_car):
    """Alice: private 1:25 and public 1:30; Bob: public 1:28"""
    repo.add_laps([
        {'user_id': driver[0], 'track_id': track.id, 'car_id': driver_car.id, 'lap_time_ms': 85000,
         'is_public': False, 'date': '2024-05-01'},
        {'user_id': driver[0], 'track_id': track.id, 'car_id': driver_car.id, 'lap_time_ms': 90000,
         'is_public': True, 'date': '2024-05-01'},
        {'user_id': rival[0], 'track_id': track.id, 'car_id': rival_car.id, 'lap_time_ms': 88000,
         'is_public': True, 'date': '2024-05-02'},
    ])
    return track


class TestLeaderboards:

    def test_suppressed_without_track(self, client, driver, race):
        body = client.get('/leaderboards', headers=driver[1]).json()
        assert body['suppressed'] is True
        assert body['message'] == 'Select a track to see the leaderboard.'
        assert body['entries'] == []

    def test_public_laps_only(self, client, driver, rival, race):
        body = client.get('/leaderboards', params={'track_id': race.id}, headers=driver[1]).json()
        rows = [(e['rank'], e['driver_name'], e['lap_time'], e['driver_id']) for e in body['entries']]
        assert rows == [(1, 'Bob', '1:28.000', rival[0]), (2, 'You', '1:30.000', None)]
        assert body['entries'][0]['car'] == 'Toyota GR86'
        # Same label the CSV export writes
        assert body['entries'][1]['car'] == 'Mazda MX-5 (Miata)'

    def test_driver_filter(self, client, driver, race):
        params = {'track_id': race.id, 'driver': 'bo'}
        body = client.get('/leaderboards', params=params, headers=driver[1]).json()
        assert [e['driver_name'] for e in body['entries']] == ['Bob']

    def test_private_best_is_not_ranked(self, client, driver, race):
        body = client.get(f'/tracks/{race.id}', headers=driver[1]).json()
        best = body['personal_best']
        assert best['lap']['lap_time_ms'] == 85000
        assert best['is_private'] is True
        assert best['rank'] is None
        assert 'does not count' in best['message']
        assert len(body['my_laps']) == 2
        assert [row['lap_time_ms'] for row in body['leaderboard']] == [88000, 90000]

    def test_public_best_is_ranked(self, client, rival, race):
        best = client.get(f'/tracks/{race.id}', headers=rival[1]).json()['personal_best']
        assert best['rank'] == 1
        assert best['is_private'] is False


class TestDrivers:

    def test_directory(self, client, driver, race, repo):
        repo.upsert_profile('user-hidden', display_name='Hidden', is_public_profile=False)
        rows = client.get('/drivers', headers=driver[1]).json()
        assert [r['display_name'] for r in rows] == ['Alice', 'Bob']
        alice = rows[0]
        assert alice['public_laps'] == 1
        assert alice['tracks_driven'] == 1
        assert alice['main_car'] == 'Mazda MX-5 (Miata)'

    def test_public_page_without_sign_in(self, client, rival, race):
        body = client.get(f'/drivers/{rival[0]}').json()
        assert body['display_name'] == 'Bob'
        assert body['is_own_profile'] is False
        assert body['total_public_laps'] == 1
        assert body['best_overall_track_name'] == 'Brands Hatch'
        assert body['personal_bests'][0]['lap']['lap_time'] == '1:28.000'

    def test_page_hides_private_laps(self, client, driver, race):
        body = client.get(f'/drivers/{driver[0]}', headers=driver[1]).json()
        assert body['is_own_profile'] is True
        assert [lap['lap_time_ms'] for lap in body['recent_laps']] == [90000]

    def test_private_profile(self, client, repo, driver):
        repo.upsert_profile('user-hidden', display_name='Hidden', is_public_profile=False)
        response = client.get('/drivers/user-hidden', headers=driver[1])
        assert response.status_code == 403
        assert response.json() == {'error': "This driver's profile is private."}

    def test_unknown_driver(self, client):
        assert client.get('/drivers/nobody').status_code == 404


class TestProfile:

    def test_empty_profile(self, client, verifier):
        token = verifier.issue_token('new-user')
        body = client.get('/profile', headers={'Authorization': f'Bearer {token}'}).json()
        assert body['id'] == 'new-user'
        assert body['display_name'] is None

    def test_partial_update(self, client, driver):
        response = client.put('/profile', json={'experience_level': 'intermediate', 'full_name': ' '},
                              headers=driver[1])
        body = response.json()
        assert body['display_name'] == 'Alice'
        assert body['experience_level'] == 'intermediate'
        assert body['full_name'] is None


class TestTimingDeepLink:

    def test_link_for_selection(self, client, driver, track, driver_car):
        params = {'track_id': track.id, 'car_id': driver_car.id, 'conditions': 'dry_warm'}
        body = client.get('/timing/deep-link', params=params, headers=driver[1]).json()
        assert body['deep_link'] == f'trackmate://timing?v=1&trackId={track.id}&carId={driver_car.id}&conditions=dry'
        assert body['conditions'] == 'dry'
        assert body['fallback_timeout_ms'] == 1200

    def test_track_required(self, client, driver):
        response = client.get('/timing/deep-link', headers=driver[1])
        assert response.status_code == 400
        assert response.json() == {'error': 'Select a track to start timing.'}

    def test_foreign_car(self, client, driver, track, rival_car):
        params = {'track_id': track.id, 'car_id': rival_car.id}
        assert client.get('/timing/deep-link', params=params, headers=driver[1]).status_code == 403


def test_deep_link_reports_configured_timeout(db_manager, driver, track):
    settings = Settings(database_url=db_manager.database_url, deep_link_timeout_ms=2500)
    with TestClient(create_app(settings, db_manager)) as client:
        body = client.get('/timing/deep-link', params={'track_id': track.id}, headers=driver[1]).json()
    assert body['fallback_timeout_ms'] == 2500
