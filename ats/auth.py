"""Bearer-token authentication for API routes.

Every route that touches user data depends on ``get_current_user_id``; the
resolved id is the only identity the services ever see.
"""

import logging
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ats.config import settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(code: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=code,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """Sign a token carrying the user id in the ``id`` claim.

    Args:
        user_id: Identifier of the user the token is issued to
        expires_delta: Lifetime of the token. Defaults to
            settings.access_token_expire_minutes

    Returns:
        Encoded JWT string
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "id": user_id,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> int:
    """Verify a token and return the caller's user id.

    Raises:
        HTTPException 401: TOKEN_EXPIRED or INVALID_TOKEN
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("TOKEN_EXPIRED")
    except jwt.InvalidTokenError as e:
        logger.debug(f"Rejected bearer token: {e}")
        raise _unauthorized("INVALID_TOKEN")

    user_id = payload.get("id")
    if isinstance(user_id, bool) or not isinstance(user_id, int):
        raise _unauthorized("INVALID_TOKEN")
    return user_id


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> int:
    """FastAPI dependency resolving the authenticated caller.

    Raises:
        HTTPException 401: NO_TOKEN when the Authorization header is missing
            or is not a bearer credential
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("NO_TOKEN")
    return decode_access_token(credentials.credentials)
