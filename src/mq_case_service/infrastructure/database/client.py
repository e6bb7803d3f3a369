"""Database client for SQLite/PostgreSQL connections."""

import asyncio
import functools
import logging
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from mq_case_service.config import Settings, settings as default_settings
from .models import Base

logger = logging.getLogger(__name__)


def service_startup_retry(func=None, *, attempts: int = 5, initial_delay: float = 1.0):
    """Retry an async startup step with exponential backoff.

    Only meant for startup (database not ready yet in K8s/docker compose);
    request handling never retries.
    """

    def decorator(fn):
        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            delay = initial_delay
            for attempt in range(1, attempts + 1):
                try:
                    return await fn(*args, **kwargs)
                except Exception as e:
                    if attempt == attempts:
                        raise
                    logger.warning(
                        f"{fn.__name__} failed (attempt {attempt}/{attempts}): {e}; "
                        f"retrying in {delay:.1f}s"
                    )
                    await asyncio.sleep(delay)
                    delay *= 2

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator


class DatabaseClient:
    """Async database client for SQLAlchemy."""

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize database engine and session factory."""
        self.settings = settings or default_settings
        database_url = self.settings.database_url

        # For SQLite, use NullPool to avoid connection issues
        # For PostgreSQL, use default pool
        engine_kwargs = {"echo": self.settings.log_level == "DEBUG"}
        if "sqlite" in database_url:
            engine_kwargs["poolclass"] = NullPool

        self.engine = create_async_engine(database_url, **engine_kwargs)

        self.async_session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        logger.info(f"Database client initialized with URL: {database_url}")

    @service_startup_retry
    async def verify_connection(self):
        """Verify database connection with retry logic."""
        async with self.engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")

    async def create_tables(self):
        """Create all database tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def drop_tables(self):
        """Drop all database tables (testing utility)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get database session for dependency injection."""
        async with self.async_session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def close(self):
        """Close database engine."""
        await self.engine.dispose()
        logger.info("Database client closed")


# Global database client instance
db_client = DatabaseClient()
