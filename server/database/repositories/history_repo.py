"""Command history repository: bounded per-user audit log of assistant commands."""
from asyncio import to_thread
from typing import List, Optional
from uuid import UUID
from supabase import Client
import logging

logger = logging.getLogger(__name__)


class CommandHistoryRepository:
    """
    Append-and-trim access to the ``command_history`` table.

    Appends go through the ``append_command_history`` Postgres function,
    which inserts the new row and deletes everything beyond the newest
    ``limit`` rows for that user in one transaction under a per-user
    advisory lock. Concurrent requests for the same user therefore can
    neither lose entries nor grow the log past ``limit``.
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase

    async def append(
        self,
        user_id: UUID,
        command: str,
        limit: int,
        response: Optional[str] = None,
        intent_type: Optional[str] = None,
    ) -> Optional[dict]:
        """Record one command and evict the oldest entries beyond ``limit``."""
        params = {
            "p_user_id": str(user_id),
            "p_command": command,
            "p_response": response,
            "p_intent_type": intent_type,
            "p_limit": limit,
        }
        try:
            result = await to_thread(
                lambda: self.supabase.rpc("append_command_history", params).execute()
            )
            if isinstance(result.data, list):
                return result.data[0] if result.data else None
            return result.data
        except Exception as e:
            logger.error(f"Error appending command history: {e}", exc_info=True)
            raise

    async def list_recent(self, user_id: UUID, limit: int) -> List[dict]:
        """Newest entries first."""
        try:
            response = await to_thread(
                lambda: self.supabase.table("command_history")
                .select("command, response, intent_type, created_at")
                .eq("user_id", str(user_id))
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
            return response.data if response.data else []
        except Exception as e:
            logger.error(f"Error listing command history: {e}")
            raise
