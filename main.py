from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import JSONResponse

from lifespan import lifespan
from routes import api_router
from shared.core.api_response import api_response
from shared.core.config import settings
from shared.core.exceptions import BaseAPIException
from shared.core.logging_config import get_logger
from shared.db.sessions.database import get_db, ping_db
from shared.utils.exception_handlers import (
    handle_422_exception,
    handle_api_exception,
    handle_http_exception,
)
from shared.utils.execution_time import (
    ExecutionTimeMiddleware,
    RequestContextMiddleware,
)

logger = get_logger(__name__)


def create_app() -> FastAPI:

    fastapi_app: FastAPI = FastAPI(
        title=settings.APP_NAME,
        openapi_url="/slotswap.json",
        version=settings.VERSION,
        description=settings.DESCRIPTION,
        lifespan=lifespan,
        debug=settings.ENVIRONMENT == "development",
        swagger_ui_parameters={
            "filter": True,  # Enable filter
            "persistAuthorization": True,  # Persist auth tokens
            "docExpansion": "none",  # Collapse all tags by default
            "displayRequestDuration": True,  # Show request duration
        },
    )

    @fastapi_app.get(path="/", tags=["System"])
    async def root() -> dict[str, str]:
        return {
            "message": "SlotSwap backend is running",
            "version": settings.VERSION,
            "docs_url": "/docs",
        }

    @fastapi_app.get(path="/health", tags=["System"])
    async def health_check() -> dict[str, str]:
        return {"status": "healthy", "message": "API is running fine!"}

    @fastapi_app.get(path="/health/db", tags=["System"])
    async def database_health_check(
        db: AsyncSession = Depends(get_db),
    ) -> JSONResponse:
        try:
            await ping_db(db)
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return api_response(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                message="Database unreachable",
            )
        return api_response(
            status_code=status.HTTP_200_OK, message="Database reachable"
        )

    fastapi_app.include_router(router=api_router)

    fastapi_app.add_exception_handler(BaseAPIException, handle_api_exception)
    fastapi_app.add_exception_handler(HTTPException, handle_http_exception)
    fastapi_app.add_exception_handler(
        RequestValidationError, handle_422_exception
    )

    # Middleware: last added runs first
    fastapi_app.add_middleware(
        middleware_class=GZipMiddleware, minimum_size=1000
    )
    fastapi_app.add_middleware(ExecutionTimeMiddleware)
    fastapi_app.add_middleware(RequestContextMiddleware)
    fastapi_app.add_middleware(
        middleware_class=CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return fastapi_app


app: FastAPI = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app="main:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        reload=settings.ENVIRONMENT in ("local", "development"),
        use_colors=True,
    )
