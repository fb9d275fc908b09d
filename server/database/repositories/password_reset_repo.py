"""Password reset code repository."""
from asyncio import to_thread
from datetime import datetime
from typing import Optional
from supabase import Client
import logging

logger = logging.getLogger(__name__)


class PasswordResetRepository:
    """One-time reset codes keyed by email; at most one live code per email."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _codes(self):
        return self.supabase.table("password_reset_codes")

    async def replace_code(self, email: str, code: str, expires_at: datetime) -> dict:
        """Drop earlier codes for ``email`` and store a fresh one."""
        await self.delete_codes(email)
        row = {"email": email, "code": code, "expires_at": expires_at.isoformat()}
        response = await to_thread(lambda: self._codes().insert(row).execute())
        if not response.data:
            raise RuntimeError("Password reset code was not stored")
        return response.data[0]

    async def latest_code(self, email: str) -> Optional[dict]:
        """Newest unspent code for ``email``, expired or not."""
        response = await to_thread(
            lambda: self._codes()
            .select("id, code, expires_at")
            .eq("email", email)
            .eq("consumed", False)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    async def consume_code(self, code_id: str, now: datetime) -> Optional[dict]:
        """Spend a code; only the first caller gets the row back.

        UPDATE ... WHERE consumed = FALSE serializes on the row lock, so two
        concurrent resets with the same code cannot both succeed. Returns
        None when the code is gone, already spent or expired.
        """
        response = await to_thread(
            lambda: self._codes()
            .update({"consumed": True})
            .eq("id", code_id)
            .eq("consumed", False)
            .gte("expires_at", now.isoformat())
            .execute()
        )
        return response.data[0] if response.data else None

    async def delete_codes(self, email: str) -> None:
        await to_thread(lambda: self._codes().delete().eq("email", email).execute())
