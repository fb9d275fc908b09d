"""Authentication service."""
import bcrypt
from datetime import datetime, timedelta, timezone
from uuid import UUID
from typing import Tuple
from database.repositories.user_repo import UserRepository
from utils.jwt_utils import generate_access_token, generate_refresh_token
from config.settings import settings
import logging

logger = logging.getLogger(__name__)


def _public(user: dict) -> dict:
    """Strip the password hash before a user leaves the service."""
    return {k: v for k, v in user.items() if k != "password_hash"}


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


class AuthService:
    """Handle sign-up, sign-in and token lifecycle."""

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    async def register_user(
        self,
        name: str,
        email: str,
        password: str,
    ) -> Tuple[dict, str, str]:
        """
        Register a new user.

        Returns: (user, access_token, refresh_token)
        """
        email = email.strip().lower()
        existing_user = await self.user_repo.get_by_email(email)
        if existing_user:
            raise ValueError("Email already exists. Please use a different email or sign in.")

        user = await self.user_repo.create_user(
            name=name.strip(),
            email=email,
            password_hash=hash_password(password),
        )
        if not user:
            raise RuntimeError("User creation returned no row")

        access_token, refresh_token = await self.generate_tokens(UUID(user["id"]))

        logger.info(f"User registered: {email}")
        return _public(user), access_token, refresh_token

    async def login_user(
        self,
        email: str,
        password: str,
    ) -> Tuple[dict, str, str]:
        """
        Login user.

        Returns: (user, access_token, refresh_token)
        """
        user = await self.user_repo.get_by_email(email.strip().lower())
        if not user:
            raise ValueError("Invalid email or password")

        if not user.get("is_active"):
            raise ValueError("Account is disabled")

        password_hash = user.get("password_hash")
        if not password_hash or not bcrypt.checkpw(
            password.encode("utf-8"), password_hash.encode("utf-8")
        ):
            raise ValueError("Invalid email or password")

        access_token, refresh_token = await self.generate_tokens(UUID(user["id"]))
        await self.user_repo.record_login(UUID(user["id"]))

        logger.info(f"User logged in: {user['email']}")
        return _public(user), access_token, refresh_token

    async def generate_tokens(self, user_id: UUID) -> Tuple[str, str]:
        """Generate access + refresh tokens and persist session."""
        access_token = generate_access_token(user_id)
        refresh_token = generate_refresh_token()

        await self.user_repo.store_refresh_token(
            user_id,
            refresh_token,
            expires_at=datetime.now(timezone.utc)
            + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )

        return access_token, refresh_token

    async def refresh_access_token(self, refresh_token: str) -> str:
        """
        Generate new access token from refresh token.

        Returns: new access_token
        """
        session = await self.user_repo.find_refresh_token(refresh_token)
        if not session:
            raise ValueError("Invalid refresh token")

        expires_at = datetime.fromisoformat(session["expires_at"].replace("Z", "+00:00"))
        if datetime.now(timezone.utc) > expires_at:
            await self.user_repo.revoke_refresh_token(refresh_token)
            raise ValueError("Refresh token expired")

        return generate_access_token(UUID(session["user_id"]))

    async def logout(self, refresh_token: str) -> None:
        """Invalidate a refresh token; unknown tokens are ignored."""
        await self.user_repo.revoke_refresh_token(refresh_token)
