"""Supabase database client"""
from typing import Optional
from supabase import create_client, Client
from config.settings import settings
import logging

logger = logging.getLogger(__name__)

_supabase_client: Optional[Client] = None


def init_supabase() -> Client:
    """Create the shared Supabase client on first use."""
    global _supabase_client

    if _supabase_client is None:
        logger.info(f"Connecting to Supabase at {settings.SUPABASE_URL}")
        _supabase_client = create_client(
            settings.SUPABASE_URL,
            settings.SUPABASE_KEY
        )
        logger.info("Supabase client ready")

    return _supabase_client


def get_supabase() -> Client:
    """Shared client used by repositories and the avatar storage."""
    return _supabase_client or init_supabase()
