from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.requests import Request

from shared.core.logging_config import get_logger
from shared.core.request_context import request_context

logger = get_logger("api_response")


def build_response_body(
    status_code: int,
    message: str,
    data: Optional[Any] = None,
    error_code: Optional[str] = None,
) -> dict[str, Any]:
    """Assemble the envelope shared by success and error responses."""
    timestamp = datetime.now(timezone.utc).isoformat()

    # Retrieve request context (if available)
    request: Optional[Request] = request_context.get()
    method: Optional[str] = request.method if request else None
    path: Optional[str] = request.url.path if request else None

    response_body: dict[str, Any] = {
        "statusCode": status_code,
        "message": message,
        "timestamp": timestamp,
        "method": method,
        "path": path,
    }
    if error_code is not None:
        response_body["errorCode"] = error_code
    if data is not None:
        response_body["data"] = jsonable_encoder(data)
    return response_body


def api_response(
    status_code: int,
    message: str,
    data: Optional[Any] = None,
    log_error: bool = False,
    suppress_raise: bool = False,
    error_code: Optional[str] = None,
) -> JSONResponse:
    """
    Clean and unified API response handler without request dependency.
    """
    response_body = build_response_body(
        status_code, message, data=data, error_code=error_code
    )

    log_payload = {
        "status_code": status_code,
        "message": message,
        "method": response_body["method"],
        "path": response_body["path"],
    }

    if log_error or status_code >= 400:
        logger.error(log_payload)
    else:
        logger.info({"message": message})

    # Raise HTTPException for client-side errors (400–499)
    if 400 <= status_code < 500 and not suppress_raise:
        raise HTTPException(status_code=status_code, detail=response_body)

    return JSONResponse(status_code=status_code, content=response_body)
