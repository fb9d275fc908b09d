"""Assistant API routes: intent classification and command history."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
import logging

from api.middleware.auth_middleware import get_current_user
from api.schemas.request_schemas import AskAssistantRequest
from api.schemas.response_schemas import (
    AskAssistantResponse,
    HistoryEntryResponse,
    HistoryResponse,
)
from core.dependencies import get_assistant_service
from services.assistant_service import AssistantService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/ask", response_model=AskAssistantResponse)
async def ask_assistant(
    request: AskAssistantRequest,
    current_user: dict = Depends(get_current_user),
    assistant_service: AssistantService = Depends(get_assistant_service),
):
    """
    Classify a command into an intent.

    ClassificationError / ValidationError propagate to the application's
    AssistantError handler, which maps them to 400/408/429/500/503.
    """
    result = await assistant_service.ask(
        current_user,
        request.command,
        timezone_name=request.timezone,
    )
    return AskAssistantResponse(**result)


@router.get("/history", response_model=HistoryResponse)
async def command_history(
    limit: int = Query(20, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    assistant_service: AssistantService = Depends(get_assistant_service),
):
    """Most recent commands of the signed-in user, newest first."""
    try:
        rows = await assistant_service.history(current_user, limit)
    except Exception as e:
        logger.error(f"Error loading command history: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load command history",
        )
    return HistoryResponse(history=[HistoryEntryResponse(**row) for row in rows])
