"""
Database Manager for Trackmate

Handles:
- Database connection management (SQLite/PostgreSQL)
- Schema creation
- Transaction management (one ORM session per unit of work)
- Connection pooling

One manager is constructed at process start and passed explicitly to the API
app, the CLI and the repository. Nothing here is a module-level singleton.
"""

import logging
import threading
from pathlib import Path
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event, Index
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool

from ..errors import StorageError
from .models import (
    Base,
    ProfileModel,
    TrackModel,
    CarModel,
    LapModel,
    PhoneSessionModel,
    AccessTokenModel,
    SCHEMA_VERSION
)

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Database engine and session factory

    Usage:
        db_manager = DatabaseManager('sqlite:///trackmate.db')
        db_manager.initialize()

        with db_manager.get_session() as session:
            session.add(lap_model)
    """

    def __init__(self, database_url: str, echo: bool = False):
        """
        Args:
            database_url: SQLAlchemy URL (sqlite:///path.db or postgresql://...)
            echo: If True, log all SQL statements (useful for debugging)
        """
        self.database_url = database_url
        self.echo = echo
        self.engine = None
        self.session_factory = None
        self._initialized = False
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self):
        """Create the engine and the schema (idempotent)"""
        with self._lock:
            if self._initialized:
                logger.debug("[Database] Already initialized")
                return

            url = make_url(self.database_url)
            if url.get_backend_name() == 'sqlite':
                self._initialize_sqlite(url)
            elif url.get_backend_name() == 'postgresql':
                self._initialize_postgresql()
            else:
                raise ValueError(f"Unsupported database type: {url.get_backend_name()}")

            self._create_schema()
            self._create_indices()

            self._initialized = True
            logger.info("[Database] Initialized %s (schema %s)", url.render_as_string(hide_password=True), SCHEMA_VERSION)

    def _initialize_sqlite(self, url):
        """Initialize SQLite database"""
        in_memory = url.database in (None, '', ':memory:')

        if in_memory:
            # One shared connection, otherwise every checkout sees an empty database
            self.engine = create_engine(
                self.database_url,
                echo=self.echo,
                poolclass=StaticPool,
                connect_args={'check_same_thread': False}
            )
        else:
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
            self.engine = create_engine(
                self.database_url,
                echo=self.echo,
                poolclass=QueuePool,
                pool_size=5,
                max_overflow=10,
                pool_pre_ping=True,
                connect_args={
                    'check_same_thread': False,  # Requests run in a threadpool
                    'timeout': 30  # 30 second timeout for locks
                }
            )

        @event.listens_for(self.engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            if not in_memory:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        self._create_session_factory()

    def _initialize_postgresql(self):
        """Initialize PostgreSQL database"""
        self.engine = create_engine(
            self.database_url,
            echo=self.echo,
            poolclass=QueuePool,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,
            pool_recycle=3600  # Recycle connections after 1 hour
        )
        self._create_session_factory()

    def _create_session_factory(self):
        # Rows are read after commit by the API layer
        self.session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False
        )

    def _create_schema(self):
        Base.metadata.create_all(self.engine)
        logger.info("[Database] Created %d tables", len(Base.metadata.tables))

    def _create_indices(self):
        """Composite indices for the leaderboard queries"""
        with self.engine.connect() as conn:
            Index('idx_laps_track_public_time',
                  LapModel.track_id,
                  LapModel.is_public,
                  LapModel.lap_time_ms).create(conn, checkfirst=True)

            Index('idx_laps_user_track',
                  LapModel.user_id,
                  LapModel.track_id).create(conn, checkfirst=True)

            conn.commit()

    @contextmanager
    def get_session(self) -> Iterator[Session]:
        """
        Get a database session (context manager)

        Commits on success, rolls back on any error. SQLAlchemy errors are
        re-raised as StorageError.
        """
        if not self._initialized:
            raise RuntimeError("DatabaseManager not initialized. Call initialize() first.")

        session = self.session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("[Database] Session error: %s", e)
            raise StorageError(str(e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_statistics(self) -> dict:
        """Row counts per table"""
        if not self._initialized:
            return {}

        stats = {}
        with self.get_session() as session:
            stats['profiles'] = session.query(ProfileModel).count()
            stats['tracks'] = session.query(TrackModel).count()
            stats['cars'] = session.query(CarModel).count()
            stats['laps'] = session.query(LapModel).count()
            stats['phone_sessions'] = session.query(PhoneSessionModel).count()
            stats['access_tokens'] = session.query(AccessTokenModel).count()
        return stats

    def close(self):
        """Dispose of the engine"""
        if self.engine is not None:
            self.engine.dispose()
        self._initialized = False
        logger.info("[Database] Closed connection")

    def __repr__(self):
        status = "initialized" if self._initialized else "not initialized"
        return f"<DatabaseManager({status}, url='{self.database_url}')>"


def create_database(database_url: str, echo: bool = False) -> DatabaseManager:
    """Construct and initialize a DatabaseManager"""
    manager = DatabaseManager(database_url, echo=echo)
    manager.initialize()
    return manager
