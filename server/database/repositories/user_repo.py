"""User repository for database operations."""
from asyncio import to_thread
from typing import Optional
from uuid import UUID
from datetime import datetime, timezone
from supabase import Client
import logging

logger = logging.getLogger(__name__)

# Columns safe to return to clients (everything except the password hash)
PUBLIC_USER_COLUMNS = (
    "id, name, email, assistant_name, assistant_image, "
    "is_active, created_at, updated_at, last_login"
)


class UserRepository:
    """Users, their assistant persona, passwords and refresh tokens."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    async def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
    ) -> dict:
        """Create a new user."""
        try:
            data = {
                "name": name,
                "email": email,
                "password_hash": password_hash,
                "is_active": True,
            }
            response = await to_thread(
                lambda: self.supabase.table("users").insert(data).execute()
            )
            return response.data[0] if response.data else None
        except Exception as e:
            logger.error(f"Error creating user: {e}")
            raise

    async def get_by_email(self, email: str) -> Optional[dict]:
        """Get user (including password hash) by email."""
        try:
            response = await to_thread(
                lambda: self.supabase.table("users")
                .select("*")
                .eq("email", email)
                .execute()
            )
            return response.data[0] if response.data else None
        except Exception as e:
            logger.error(f"Error getting user by email: {e}")
            return None

    async def get_by_id(self, user_id: UUID) -> Optional[dict]:
        """Get user by ID without the password hash."""
        try:
            response = await to_thread(
                lambda: self.supabase.table("users")
                .select(PUBLIC_USER_COLUMNS)
                .eq("id", str(user_id))
                .execute()
            )
            return response.data[0] if response.data else None
        except Exception as e:
            logger.error(f"Error getting user by ID: {e}")
            return None

    async def update_assistant(
        self,
        user_id: UUID,
        assistant_name: str,
        assistant_image: str,
    ) -> Optional[dict]:
        """Set the assistant persona (name + avatar) and return the updated user."""
        try:
            response = await to_thread(
                lambda: self.supabase.table("users")
                .update(
                    {
                        "assistant_name": assistant_name,
                        "assistant_image": assistant_image,
                        "updated_at": datetime.now(timezone.utc).isoformat(),
                    }
                )
                .eq("id", str(user_id))
                .execute()
            )
            if not response.data:
                return None
            user = dict(response.data[0])
            user.pop("password_hash", None)
            return user

    async def record_login(self, user_id: UUID) -> None:
        """Stamp ``last_login``; a failure here never blocks sign-in."""
        stamp = datetime.now(timezone.utc).isoformat()
        try:
            await to_thread(
                lambda: self._users().update({"last_login": stamp}).eq("id", str(user_id)).execute()
            )
        except Exception as e:
            logger.warning(f"Could not record login for user {user_id}: {e}")

    async def update_password(self, user_id: UUID, password_hash: str) -> bool:
        """Replace the stored hash; False when no such user exists."""
        changes = {
            "password_hash": password_hash,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        response = await to_thread(
            lambda: self._users().update(changes).eq("id", str(user_id)).execute()
        )
        return bool(response.data)

    # Refresh tokens live in ``user_sessions``, one row per signed-in client.
    # Unlike the profile lookups above, storage errors here propagate so the
    # auth routes can answer 500 instead of silently issuing dead tokens.

    async def store_refresh_token(
        self,
        user_id: UUID,
        refresh_token: str,
        expires_at: datetime,
        client_type: str = "web",
    ) -> dict:
        row = {
            "user_id": str(user_id),
            "refresh_token": refresh_token,
            "client_type": client_type,
            "expires_at": expires_at.isoformat(),
        }
        response = await to_thread(lambda: self._sessions().insert(row).execute())
        if not response.data:
            raise RuntimeError("Refresh token was not stored")
        return response.data[0]

    async def find_refresh_token(self, refresh_token: str) -> Optional[dict]:
        """``{user_id, expires_at}`` for a known token, else None."""
        response = await to_thread(
            lambda: self._sessions()
            .select("user_id, expires_at")
            .eq("refresh_token", refresh_token)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    async def revoke_refresh_token(self, refresh_token: str) -> None:
        await to_thread(
            lambda: self._sessions().delete().eq("refresh_token", refresh_token).execute()
        )

    async def revoke_user_refresh_tokens(self, user_id: UUID) -> None:
        """Sign the user out everywhere, e.g. after a password reset."""
        await to_thread(
            lambda: self._sessions().delete().eq("user_id", str(user_id)).execute()
        )

    def _users(self):
        return self.supabase.table("users")

    def _sessions(self):
        return self.supabase.table("user_sessions")
