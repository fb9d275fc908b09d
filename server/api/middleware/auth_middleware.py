"""Authentication middleware for JWT validation with TTL-cached user lookups."""
from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from uuid import UUID
from typing import Optional
import logging
import time

from utils.jwt_utils import decode_access_token
from core.dependencies import get_user_repo

logger = logging.getLogger(__name__)

# Bearer header is optional because browsers authenticate with the ``token`` cookie
security = HTTPBearer(auto_error=False)

# The JWT already guarantees identity; the lookup only confirms the account
# still exists and is active, which changes rarely.
_USER_CACHE: dict[str, tuple[dict, float]] = {}
_USER_CACHE_TTL_S = 60
_USER_CACHE_MAX = 5_000


def _get_cached_user(user_id: str) -> Optional[dict]:
    entry = _USER_CACHE.get(user_id)
    if entry is None:
        return None
    user, ts = entry
    if time.time() - ts > _USER_CACHE_TTL_S:
        del _USER_CACHE[user_id]
        return None
    return user


def _set_cached_user(user_id: str, user: dict) -> None:
    if len(_USER_CACHE) >= _USER_CACHE_MAX:
        oldest_key = min(_USER_CACHE, key=lambda k: _USER_CACHE[k][1])
        del _USER_CACHE[oldest_key]
    _USER_CACHE[user_id] = (user, time.time())


def invalidate_cached_user(user_id: str) -> None:
    """Drop a cached profile after it has been modified."""
    _USER_CACHE.pop(str(user_id), None)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token: Optional[str] = Cookie(None),
    user_repo=Depends(get_user_repo),
) -> dict:
    """
    Validate the JWT (Bearer header first, then the ``token`` cookie) and
    return the current user.

    Raises HTTPException if the token is missing, invalid or expired.
    """
    raw_token = credentials.credentials if credentials else token
    if not raw_token:
        raise _unauthorized("Authentication token not found. Please sign in again.")

    payload = decode_access_token(raw_token)
    if not payload:
        raise _unauthorized("Invalid or expired token. Please sign in again.")

    user_id = payload.get('user_id')
    if not user_id:
        raise _unauthorized("Invalid token payload")

    user = _get_cached_user(user_id)
    if user is None:
        user = await user_repo.get_by_id(UUID(user_id))
        if not user:
            raise _unauthorized("User not found")
        _set_cached_user(user_id, user)

    if not user.get('is_active'):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled"
        )

    return user
