import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from shared.core.config import settings
from shared.core.logging_config import get_logger

logger = get_logger(__name__)


def create_access_token(
    user_id: str,
    extra_claims: Optional[Dict[str, Any]] = None,
    expires_in: Optional[int] = None,
) -> str:
    """
    Create an HS256-signed access token carrying the user id in ``uid``.

    Args:
        user_id: Identifier of the authenticated user.
        extra_claims: Additional claims merged into the payload.
        expires_in: Expiry in seconds, defaults to the configured lifetime.

    Returns:
        str: Encoded JWT token.
    """
    if not user_id:
        raise ValueError("JWT payload must contain user_id.")

    now = datetime.now(timezone.utc)
    lifetime = (
        expires_in
        if expires_in is not None
        else settings.JWT_ACCESS_TOKEN_EXPIRE_SECONDS
    )
    payload = {
        **(extra_claims or {}),
        "uid": user_id,
        "exp": now + timedelta(seconds=lifetime),
        "iat": now,
        "jti": secrets.token_hex(16),
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
    }
    return jwt.encode(
        payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM
    )


def verify_access_token(token: str) -> Dict[str, Any]:
    """
    Verify and decode an access token.

    Raises:
        ValueError: If the token is missing, malformed, expired or lacks ``uid``.
    """
    if not token:
        raise ValueError("JWT token is required.")

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
            options={"require": ["exp", "iat", "uid"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise ValueError("Token has expired.") from e
    except jwt.InvalidTokenError as e:
        logger.warning(f"Rejected access token: {e}")
        raise ValueError("Invalid token.") from e

    return payload
