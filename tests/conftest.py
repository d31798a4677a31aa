import pytest
from fastapi.testclient import TestClient

from trackmate.api import create_app
from trackmate.auth import TokenVerifier
from trackmate.config import Settings
from trackmate.database import DatabaseManager, TrackmateRepository


@pytest.fixture
def db_manager(tmp_path):
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'trackmate.db'}")
    manager.initialize()
    yield manager
    manager.close()


@pytest.fixture
def repo(db_manager):
    return TrackmateRepository(db_manager)


@pytest.fixture
def verifier(repo):
    return TokenVerifier(repo)


@pytest.fixture
def client(db_manager):
    settings = Settings(database_url=db_manager.database_url)
    with TestClient(create_app(settings, db_manager)) as test_client:
        yield test_client


@pytest.fixture
def track(repo):
    return repo.add_track('Brands Hatch', country='UK', length_km=3.9)


@pytest.fixture
def other_track(repo):
    return repo.add_track('Anglesey', country='UK')


@pytest.fixture
def driver(repo, verifier):
    """(user_id, auth headers) of a signed-in driver with a public profile"""
    user_id = 'user-alice'
    repo.upsert_profile(user_id, display_name='Alice', is_public_profile=True)
    token = verifier.issue_token(user_id)
    return user_id, {'Authorization': f'Bearer {token}'}


@pytest.fixture
def rival(repo, verifier):
    user_id = 'user-bob'
    repo.upsert_profile(user_id, display_name='Bob', is_public_profile=True)
    token = verifier.issue_token(user_id)
    return user_id, {'Authorization': f'Bearer {token}'}


@pytest.fixture
def driver_car(repo, driver):
    return repo.add_car(driver[0], make='Mazda', model='MX-5', year=1990, nickname='Miata')


@pytest.fixture
def rival_car(repo, rival):
    return repo.add_car(rival[0], make='Toyota', model='GR86')
