"""
AsyncEngine factory, schema bootstrap and standalone session context manager.

NullPool because PgBouncer owns connection pooling in deployed
environments -- SA should not maintain its own pool on top.
"""

from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from services.parking.config import settings
from services.parking.db.models import Base


def _async_url(database_url: str) -> str:
    """Point plain postgresql:// URLs at the asyncpg driver."""
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return database_url


def create_engine(database_url: str | None = None) -> AsyncEngine:
    """
    Create async engine for use with PgBouncer transaction-mode pooling.
    """
    return create_async_engine(
        _async_url(database_url or settings.database_url),
        poolclass=NullPool,
        echo=settings.debug and settings.environment == "development",
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create the parking_lots / slots tables if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def standalone_session():
    """
    For scripts that run outside FastAPI (seeding, sensor backfills).
    Handles engine lifecycle to prevent connection leaks with NullPool.
    """
    engine = create_engine()
    factory = async_sessionmaker(engine, expire_on_commit=False)
    try:
        async with factory() as session:
            yield session
    finally:
        await engine.dispose()
