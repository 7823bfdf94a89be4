# database.py - Async database setup and transaction scope
import os
import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from errors import ConflictError

logger = logging.getLogger("opsdesk.database")

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./opsdesk.db")

_engine_kwargs = {
    "echo": os.getenv("SQL_ECHO", "false").lower() == "true",
    "future": True,
    "pool_pre_ping": True,
}
if not DATABASE_URL.startswith("sqlite"):
    # The embedded store uses its own pool; sizing only applies to server databases
    _engine_kwargs.update(pool_size=20, max_overflow=0, pool_recycle=3600)

engine = create_async_engine(DATABASE_URL, **_engine_kwargs)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False,
)


async def get_db_session():
    """Dependency for getting database session (FastAPI Depends)"""
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


@asynccontextmanager
async def transaction(session: AsyncSession):
    """Run a unit of work atomically.

    Commits when the block exits normally and rolls back on every other exit
    path, including task cancellation. Concurrency failures raised by the
    commit (board version mismatch, unique constraint) surface as
    ConflictError after the rollback.
    """
    try:
        yield session
        await session.commit()
    except (StaleDataError, IntegrityError) as exc:
        await session.rollback()
        logger.warning(f"Transaction conflict, rolled back: {exc.__class__.__name__}")
        raise ConflictError("The resource was modified concurrently, please retry") from exc
    except BaseException:
        await session.rollback()
        raise


async def init_db():
    """Initialize database and create tables"""
    from models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database initialized")


async def close_db():
    """Close database connection pool"""
    await engine.dispose()
