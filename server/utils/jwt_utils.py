"""JWT token utilities"""
import jwt
from datetime import datetime, timedelta, timezone
from uuid import UUID
from typing import Optional
from config.settings import settings
import secrets
import logging

logger = logging.getLogger(__name__)


def generate_access_token(user_id: UUID) -> str:
    """Generate JWT access token"""
    issued_at = datetime.now(timezone.utc)
    payload = {
        'user_id': str(user_id),
        'exp': issued_at + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        'iat': issued_at,
        'type': 'access'
    }

    return jwt.encode(
        payload,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )


def generate_refresh_token() -> str:
    """Generate opaque refresh token"""
    return secrets.token_urlsafe(32)


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and validate access token; None when invalid, expired or not an access token."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except jwt.ExpiredSignatureError:
        logger.warning("Token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid token: {e}")
        return None

    if payload.get('type') != 'access':
        return None
    return payload
