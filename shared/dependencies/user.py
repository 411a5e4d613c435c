from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from shared.core.exceptions import ForbiddenError, UnauthorizedError
from shared.core.logging_config import get_logger
from shared.core.security import verify_access_token

logger = get_logger(__name__)

# auto_error=False so a missing header reaches our own 401 handling
user_bearer_scheme = HTTPBearer(scheme_name="UserBearer", auto_error=False)


def extract_token_from_request(request: Request) -> Optional[str]:
    """Extract token from Authorization header or cookie"""
    header = request.headers.get("authorization")
    if header and header.startswith("Bearer "):
        return header[7:]
    cookie = request.cookies.get("access_token")
    return (
        cookie
        if cookie and cookie.lower() not in ["undefined", "null"]
        else None
    )


async def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(
        user_bearer_scheme
    ),
) -> str:
    """Resolve the caller's user id from the bearer token.

    Missing token -> 401, invalid or expired token -> 403.
    """
    token = (
        credentials.credentials
        if credentials
        else extract_token_from_request(request)
    )
    if not token:
        raise UnauthorizedError("Access token required")

    try:
        payload = verify_access_token(token)
    except ValueError as e:
        logger.warning(f"Token verification failed: {e}")
        raise ForbiddenError("Invalid or expired token") from e

    return str(payload["uid"])
