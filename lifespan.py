from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI

from shared.core.config import settings
from shared.core.logging_config import get_logger
from shared.db.sessions.database import (
    configure_session_factory,
    create_tables,
    get_global_engine,
    shutdown_db,
)

logger = get_logger(__name__)


# Lifespan event manager
@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[Any, None]:
    """Handle startup and shutdown events for the FastAPI application."""
    logger.info(msg="Starting up FastAPI application...")
    try:
        configure_session_factory(settings.database_url)
        engine = get_global_engine()
        if engine is not None:
            await create_tables(engine)
        logger.info(msg="Database initialized successfully")
    except Exception as e:
        logger.error(msg=f"Startup failed: {str(e)}")
        raise

    yield

    logger.info(msg="Shutting down FastAPI application...")
    try:
        await shutdown_db()
        logger.info(msg="Database shutdown successfully")
    except Exception as e:
        logger.error(msg=f"Shutdown failed: {str(e)}")
        raise
