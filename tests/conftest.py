"""
Test configuration and fixtures for the FastAPI application.

This module provides:
- Database fixtures backed by a throwaway SQLite file (aiosqlite)
- In-memory swap store and coordinator fixtures for core logic tests
- FastAPI test client setup with the DB dependency overridden
- Token helpers for authenticated requests
"""

# Standard library
from typing import Any, AsyncGenerator, Callable, Dict

# Test settings must be in place before any application import
from tests.test_config import apply_test_environment, sqlite_url

apply_test_environment()

# Third-party packages
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)

# Local application imports
from main import create_app  # noqa: E402
from shared.core.security import create_access_token  # noqa: E402
from shared.db.sessions.database import (  # noqa: E402
    create_async_db_engine,
    create_session_factory,
    create_tables,
    get_db,
)
from swap_service.services.coordinator import SwapCoordinator  # noqa: E402
from swap_service.services.memory_store import (  # noqa: E402
    InMemorySwapStore,
)
from tests.utils.db_helpers import AsyncDatabaseTestHelper  # noqa: E402


# --- In-memory core fixtures -------------------------------------------------


@pytest.fixture
def memory_store() -> InMemorySwapStore:
    return InMemorySwapStore()


@pytest.fixture
def coordinator(memory_store: InMemorySwapStore) -> SwapCoordinator:
    return SwapCoordinator(memory_store)


# --- Database fixtures -------------------------------------------------------


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh SQLite database with all tables."""
    engine = create_async_db_engine(sqlite_url(str(tmp_path)))
    await create_tables(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session_factory(
    test_engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(test_engine)


@pytest_asyncio.fixture(scope="function")
async def test_db_session(
    test_session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session with proper cleanup."""
    async with test_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@pytest_asyncio.fixture(scope="function")
async def db_helper(
    test_session_factory: async_sessionmaker[AsyncSession],
) -> AsyncDatabaseTestHelper:
    return AsyncDatabaseTestHelper(test_session_factory)


# --- API fixtures ------------------------------------------------------------


@pytest_asyncio.fixture(scope="function")
async def test_app(
    test_session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[Any, None]:
    """Create a test FastAPI application using the test database."""
    app = create_app()

    # Each request gets its own session, as in production
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with test_session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client with proper async support."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(
        transport=transport, base_url="http://testserver", timeout=30.0
    ) as client:
        yield client


# --- Authentication fixtures -------------------------------------------------


@pytest.fixture
def auth_headers() -> Callable[[str], Dict[str, str]]:
    """Build bearer headers for a given user id."""

    def _headers(user_id: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {create_access_token(user_id)}",
            "Content-Type": "application/json",
        }

    return _headers
