"""
Database Configuration and Session Management

Async SQLAlchemy engine and session lifecycle for the job store.
The manager is an explicit object: create it when the host starts,
dispose it when the host stops.
"""

from typing import AsyncGenerator, Optional
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
    AsyncEngine
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool
from sqlalchemy import text

from jobhub.core.config import Settings, get_settings
from jobhub.utils.logger import get_logger

# Initialize logger
logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""
    pass


class DatabaseManager:
    """Database connection and session management."""

    def __init__(self, database_url: Optional[str] = None, settings: Optional[Settings] = None) -> None:
        """Initialize database manager."""
        self._settings = settings or get_settings()
        self.database_url = database_url or self._settings.DATABASE_URL
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def engine(self) -> AsyncEngine:
        """Get database engine."""
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call init_database() first.")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get session factory."""
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call init_database() first.")
        return self._session_factory

    async def init_database(self) -> None:
        """Initialize database connections."""
        try:
            engine_kwargs = {
                "echo": self._settings.DEBUG,
            }

            # SQLite-specific configuration
            if self.database_url.startswith("sqlite"):
                engine_kwargs["poolclass"] = StaticPool
                engine_kwargs["connect_args"] = {"check_same_thread": False}
            else:
                # PostgreSQL-specific configuration
                engine_kwargs["pool_size"] = self._settings.DATABASE_POOL_SIZE
                engine_kwargs["max_overflow"] = self._settings.DATABASE_MAX_OVERFLOW
                engine_kwargs["pool_pre_ping"] = True

            self._engine = create_async_engine(self.database_url, **engine_kwargs)

            # Create session factory
            self._session_factory = async_sessionmaker(
                bind=self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )

            await self._test_database_connection()
            logger.info("Database connection initialized", url=self._safe_url())

        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise

    async def _test_database_connection(self) -> None:
        """Test database connection."""
        async with self._engine.begin() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_tables(self) -> None:
        """Create database tables."""
        # Register models on the metadata
        from jobhub.models import job  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")

    async def close_connections(self) -> None:
        """Close database connections."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine disposed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Context manager for database session.

        Commits on success and rolls back on any exception.

        Yields:
            AsyncSession: Database session
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    def _safe_url(self) -> str:
        """Database URL without credentials, for logging."""
        if "@" in self.database_url:
            scheme, _, rest = self.database_url.partition("://")
            return f"{scheme}://***@{rest.split('@', 1)[1]}"
        return self.database_url


async def init_db(db_manager: DatabaseManager) -> None:
    """Initialize database connections and create tables."""
    await db_manager.init_database()
    await db_manager.create_tables()
