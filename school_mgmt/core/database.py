from typing import Any, AsyncGenerator, Dict

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from school_mgmt.core.config import Settings
from school_mgmt.models.base import Base


def engine_options(url: str) -> Dict[str, Any]:
    """Pool options for the configured backend."""
    if url.startswith("sqlite"):
        options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"):
            options["poolclass"] = StaticPool
        return options
    return {
        "pool_pre_ping": True,     # Connection health check
        "pool_size": 20,           # Maximum number of connections in the pool
        "max_overflow": 10,        # Connections allowed beyond pool_size
        "pool_timeout": 30,        # Seconds to wait on pool checkout
        "pool_recycle": 1800,      # Recycle connections after 30 minutes
    }


def build_engine(config: Settings) -> AsyncEngine:
    """Async engine for ``config.DATABASE_URL``; nothing connects until first use."""
    return create_async_engine(
        config.DATABASE_URL,
        echo=config.DATABASE_ECHO,
        **engine_options(config.DATABASE_URL)
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,    # Don't expire objects after commit
        autoflush=False            # Explicit flush management
    )


# FastAPI dependency for database sessions
async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides an async database session from the
    application's own session factory.
    Usage: db: AsyncSession = Depends(get_db)
    """
    session = request.app.state.session_factory()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def init_db(engine: AsyncEngine) -> None:
    """Initialize database tables"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db(engine: AsyncEngine) -> None:
    """Close database connections"""
    await engine.dispose()
