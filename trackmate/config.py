"""
Trackmate Configuration

Settings are read from environment variables once at process start and passed
explicitly to the pieces that need them (app factory, database manager, CLI).

Environment:
    TRACKMATE_DATABASE_URL          sqlite:///trackmate.db (default) or a PostgreSQL URL
    TRACKMATE_SQL_ECHO              1/true/yes to log every SQL statement
    TRACKMATE_LOG_LEVEL             DEBUG/INFO/WARNING/... (default INFO)
    TRACKMATE_CORS_ORIGINS          comma-separated origins (default *)
    TRACKMATE_DEEP_LINK_TIMEOUT_MS  fallback delay after dispatching a deep link
                                    (returned by GET /timing/deep-link, used by TimingHandoff.from_settings)
"""

import os
from dataclasses import dataclass, field, replace
from typing import List, Optional

DEFAULT_DATABASE_URL = 'sqlite:///trackmate.db'
DEFAULT_DEEP_LINK_TIMEOUT_MS = 1200


def _parse_bool(value: Optional[str]) -> bool:
    return (value or '').strip().lower() in ('1', 'true', 'yes', 'on')


def _parse_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(',') if v.strip()]


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration"""
    database_url: str = DEFAULT_DATABASE_URL
    sql_echo: bool = False
    log_level: str = 'INFO'
    cors_origins: List[str] = field(default_factory=lambda: ['*'])
    deep_link_timeout_ms: int = DEFAULT_DEEP_LINK_TIMEOUT_MS

    def with_overrides(self, **overrides) -> 'Settings':
        """Return a copy with non-None overrides applied (used by CLI flags)"""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)


def load_settings(environ=None) -> Settings:
    """
    Build Settings from environment variables

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Settings instance
    """
    env = os.environ if environ is None else environ

    timeout = env.get('TRACKMATE_DEEP_LINK_TIMEOUT_MS')
    try:
        timeout_ms = int(timeout) if timeout else DEFAULT_DEEP_LINK_TIMEOUT_MS
    except ValueError:
        raise ValueError(f"TRACKMATE_DEEP_LINK_TIMEOUT_MS must be an integer, got {timeout!r}")

    return Settings(
        database_url=env.get('TRACKMATE_DATABASE_URL') or DEFAULT_DATABASE_URL,
        sql_echo=_parse_bool(env.get('TRACKMATE_SQL_ECHO')),
        log_level=(env.get('TRACKMATE_LOG_LEVEL') or 'INFO').upper(),
        cors_origins=_parse_csv(env.get('TRACKMATE_CORS_ORIGINS')) or ['*'],
        deep_link_timeout_ms=timeout_ms,
    )
