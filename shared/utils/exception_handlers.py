# utils/exception_handlers.py

from functools import wraps
from typing import Any, Callable

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.core.api_response import api_response, build_response_body
from shared.core.exceptions import BaseAPIException
from shared.core.logging_config import get_logger

# Scoped logger for this module
logger = get_logger(__name__)


def handle_general_exception(e: Exception) -> JSONResponse:
    """
    Handles unhandled server-side exceptions.
    Logs and returns a standard API response.
    """
    logger.exception("Unhandled error: %s", e)
    return api_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="Something went wrong. Please try again later.",
        log_error=True,
    )


async def handle_api_exception(
    request: Request, exc: BaseAPIException
) -> JSONResponse:
    """
    Converts domain exceptions (NotFound, InvalidState, Conflict, ...) into
    the standard API error envelope.
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "%s %s -> %s %s: %s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.error_code,
        exc.message,
    )
    body = build_response_body(
        exc.status_code,
        exc.message,
        data=exc.details or None,
        error_code=exc.error_code,
    )
    return JSONResponse(status_code=exc.status_code, content=body)


async def handle_http_exception(
    request: Request, exc: HTTPException
) -> JSONResponse:
    """
    Returns HTTPException details unchanged when they already hold the
    envelope, otherwise wraps the message in it.
    """
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = build_response_body(exc.status_code, str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code, content=content, headers=exc.headers
    )


async def handle_422_exception(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handles Pydantic validation errors raised at runtime.
    """
    logger.warning("Validation error on %s: %s", request.url, exc.errors())
    body = build_response_body(
        status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation error"
    )
    body["details"] = jsonable_errors(exc)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=body
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    # ctx may carry the raw exception object, which is not JSON serialisable
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


def exception_handler(func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator for endpoints to standardize exception handling.
    Domain and HTTP errors pass through to the app-level handlers; anything
    else is logged and returned as a generic 500 response.
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except (HTTPException, BaseAPIException):
            raise
        except Exception as e:
            return handle_general_exception(e)

    return wrapper
