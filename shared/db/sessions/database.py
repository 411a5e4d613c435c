from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from shared.core.config import settings
from shared.core.exceptions import BaseAPIException
from shared.core.logging_config import get_logger
from shared.db.models import SlotSwapBase

logger = get_logger(__name__)

# --------------------- Engine & Session Helpers ---------------------


def create_async_db_engine(db_url: str) -> AsyncEngine:
    """Create and return an asynchronous SQLAlchemy engine from the given URL."""
    engine_kwargs: Dict[str, Any] = {"echo": False, "future": True}
    if not db_url.startswith("sqlite"):
        engine_kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_pre_ping=True,
            pool_recycle=settings.DB_POOL_RECYCLE,
            isolation_level=settings.DB_ISOLATION_LEVEL,
        )
    return create_async_engine(url=db_url, **engine_kwargs)


def create_session_factory(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create and return a sessionmaker bound to the given engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# --------------------- Lifecycle Hooks ---------------------


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables registered on SlotSwapBase.metadata."""
    async with engine.begin() as conn:
        logger.info("Creating database tables if they do not exist...")
        await conn.run_sync(SlotSwapBase.metadata.create_all, checkfirst=True)


async def shutdown_db() -> None:
    """Dispose of the global engine and forget the session factory."""
    global global_session_factory, global_engine
    if global_engine is None:
        return
    logger.info("Shutting down DB engine")
    await global_engine.dispose()
    global_engine = None
    global_session_factory = None


async def ping_db(session: AsyncSession) -> bool:
    """Run a trivial query to check connectivity."""
    result = await session.execute(text("SELECT 1"))
    return result.scalar_one() == 1


# --------------------- Global Dependency Support ---------------------

global_session_factory: Optional[async_sessionmaker[AsyncSession]] = None
global_engine: Optional[AsyncEngine] = None


def configure_session_factory(db_url: str) -> async_sessionmaker[AsyncSession]:
    """Configure and store a global session factory and engine (e.g., at app startup)."""
    global global_session_factory, global_engine
    global_engine = create_async_db_engine(db_url)
    global_session_factory = create_session_factory(global_engine)

    return global_session_factory


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(OperationalError),
    after=lambda state: logger.warning(
        f"Retrying DB connection (attempt {state.attempt_number})"
    ),
    reraise=True,
)
async def open_session() -> AsyncSession:
    """Open a session from the global factory, checking the connection first."""
    if global_session_factory is None:
        raise RuntimeError(
            "Session factory not configured. Call `configure_session_factory()` first."
        )

    session = global_session_factory()
    try:
        await session.connection()
    except OperationalError:
        await session.close()
        raise
    return session


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI-compatible dependency to provide a DB session."""
    session = await open_session()
    try:
        yield session
    except Exception as e:
        if not isinstance(e, BaseAPIException):
            logger.error("Database session error: %s", str(e))
        await session.rollback()
        raise
    finally:
        await session.close()


def get_global_engine() -> Optional[AsyncEngine]:
    """Engine configured at startup, if any."""
    return global_engine
