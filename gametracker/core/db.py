import asyncio
import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from gametracker.models.base import Base


logger = logging.getLogger(__name__)


def _to_async_url(dsn: str) -> str:
    # postgresql://... -> postgresql+asyncpg://...
    return dsn.replace("postgresql://", "postgresql+asyncpg://", 1)


def create_engine_from_dsn(dsn: str) -> AsyncEngine:
    engine = create_async_engine(
        _to_async_url(dsn),
        pool_pre_ping=True,
    )
    logger.info("SQLAlchemy async engine initialized (%s)", engine.url.render_as_string(hide_password=True))
    return engine


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


async def wait_for_database(engine: AsyncEngine, retries: int = 30, delay: float = 1.0) -> None:
    retries = max(retries, 1)
    last_err = None
    for attempt in range(retries):
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            logger.info("Connected to database")
            return
        except Exception as e:
            last_err = e
            logger.warning("Database not ready (%s). Retry %d/%d...", e, attempt + 1, retries)
            await asyncio.sleep(delay)

    logger.error("Failed to connect to database after %d retries: %s", retries, last_err)
    raise last_err


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession from the app's sessionmaker."""
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.sessionmaker
    async with session_factory() as session:
        yield session
