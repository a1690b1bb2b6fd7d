"""
Database session management with SQLAlchemy async
"""

from typing import AsyncIterator, Optional
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
)
from sqlalchemy.pool import NullPool
from core.config import settings
from models.base import Base
import logging

logger = logging.getLogger(__name__)


def create_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """Create an async engine for the configured database."""
    return create_async_engine(
        database_url or settings.DATABASE_URL,
        echo=False,
        poolclass=NullPool,  # one run per process, no pool to keep warm
        future=True
    )


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    from models import checkpoint, invalid_product  # noqa: F401 - registers tables

    async with engine.begin() as conn:
        logger.info("Creating tables...")
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables created successfully.")


# Lazily built so that importing this module never needs a database driver
_engine: Optional[AsyncEngine] = None
_session_maker: Optional[async_sessionmaker] = None


def get_session_maker() -> async_sessionmaker:
    global _engine, _session_maker
    if _session_maker is None:
        _engine = create_engine()
        _session_maker = create_session_maker(_engine)
    return _session_maker


async def get_session() -> AsyncIterator[AsyncSession]:
    """Get database session"""
    async with get_session_maker()() as session:
        yield session
