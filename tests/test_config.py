import pytest

from trackmate.config import DEFAULT_DATABASE_URL, DEFAULT_DEEP_LINK_TIMEOUT_MS, Settings, load_settings
from trackmate.timing import TimingHandoff


def test_defaults():
    settings = load_settings({})
    assert settings.database_url == DEFAULT_DATABASE_URL
    assert settings.sql_echo is False
    assert settings.log_level == 'INFO'
    assert settings.cors_origins == ['*']
    assert settings.deep_link_timeout_ms == DEFAULT_DEEP_LINK_TIMEOUT_MS


def test_environment():
    settings = load_settings({
        'TRACKMATE_DATABASE_URL': 'postgresql://u:p@localhost/trackmate',
        'TRACKMATE_SQL_ECHO': 'yes',
        'TRACKMATE_LOG_LEVEL': 'debug',
        'TRACKMATE_CORS_ORIGINS': 'https://a.example, https://b.example',
        'TRACKMATE_DEEP_LINK_TIMEOUT_MS': '2000',
    })
    assert settings.sql_echo is True
    assert settings.log_level == 'DEBUG'
    assert settings.cors_origins == ['https://a.example', 'https://b.example']
    assert settings.deep_link_timeout_ms == 2000


def test_bad_timeout():
    with pytest.raises(ValueError):
        load_settings({'TRACKMATE_DEEP_LINK_TIMEOUT_MS': 'soon'})


def test_overrides_skip_none():
    settings = Settings().with_overrides(database_url='sqlite:///other.db', log_level=None)
    assert settings.database_url == 'sqlite:///other.db'
    assert settings.log_level == 'INFO'


def test_handoff_uses_configured_timeout():
    settings = load_settings({'TRACKMATE_DEEP_LINK_TIMEOUT_MS': '2500'})
    handoff = TimingHandoff.from_settings(settings, navigate=lambda url: None, is_page_visible=lambda: True)
    assert handoff.timeout_ms == 2500
