"""Health check routes"""
from asyncio import to_thread
from fastapi import APIRouter
from database.client import get_supabase
from core import dependencies
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

_TABLES = ("users", "user_sessions", "command_history", "password_reset_codes")


@router.get("/health")
async def health_check():
    """Basic health check"""
    return {
        "status": "ok",
        "service": "voice-assistant-api",
        "classifier_ready": dependencies._classifier is not None,
    }


@router.get("/health/db")
async def database_health():
    """Check database connectivity and schema"""
    try:
        supabase = get_supabase()
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "status": "error",
            "database": {"connected": False},
            "message": "Database connection failed. Check SUPABASE_URL and SUPABASE_KEY in .env",
        }

    tables = {}
    for table in _TABLES:
        try:
            await to_thread(
                lambda: supabase.table(table).select("id").limit(1).execute()
            )
            tables[table] = True
        except Exception as e:
            tables[table] = False
            logger.error(f"{table} table error: {e}")

    schema_ready = all(tables.values())
    return {
        "status": "ok" if schema_ready else "degraded",
        "database": {
            "connected": True,
            "schema_ready": schema_ready,
            "tables": tables,
        },
        "message": "Database schema ready" if schema_ready
        else "Database tables not found. Please run server/database/supabase_schema.sql",
    }
