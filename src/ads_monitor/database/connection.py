"""Database connection management."""

from contextlib import contextmanager
from typing import Any, Dict, Iterator
import logging

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from .models import Base

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> Dict[str, Any]:
    if database_url.startswith('sqlite'):
        options: Dict[str, Any] = {'connect_args': {'check_same_thread': False}}
        # An in-memory database only lives as long as its single connection
        if ':memory:' in database_url or database_url.rstrip('/') == 'sqlite:':
            options['poolclass'] = StaticPool
        return options

    return {
        'poolclass': QueuePool,
        'pool_size': 10,
        'max_overflow': 20,
        'pool_pre_ping': True,
        'pool_recycle': 3600,
    }


class DatabaseConnection:
    """Database connection manager with connection pooling."""

    def __init__(self, database_url: str, echo: bool = False):
        """Initialize database connection."""
        self.database_url = database_url
        self.echo = echo
        self.engine = None
        self.session_factory = None
        self._initialized = False

    def initialize(self):
        """Initialize database connection and session factory."""
        if self._initialized:
            return

        try:
            self.engine = create_engine(
                self.database_url,
                echo=self.echo,
                **_engine_options(self.database_url)
            )
            self.session_factory = sessionmaker(
                bind=self.engine,
                autocommit=False,
                autoflush=False,
                expire_on_commit=False,
            )

            self._initialized = True
            logger.info("Database connection initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize database connection: {e}")
            raise

    def create_tables(self):
        """Create database tables."""
        if not self._initialized:
            self.initialize()

        try:
            Base.metadata.create_all(bind=self.engine)
            logger.info("Database tables created successfully")
        except Exception as e:
            logger.error(f"Failed to create database tables: {e}")
            raise

    def test_connection(self) -> bool:
        """Test database connection."""
        if not self._initialized:
            try:
                self.initialize()
            except Exception:
                return False

        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database connection test failed: {e}")
            return False

    @contextmanager
    def get_session(self) -> Iterator[Session]:
        """Get database session with automatic cleanup."""
        if not self._initialized:
            self.initialize()

        session = self.session_factory()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self):
        """Close database connection."""
        if self.engine:
            self.engine.dispose()
            logger.info("Database connection closed")
