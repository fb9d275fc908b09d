"""User profile and assistant persona routes"""
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from typing import Optional
from uuid import UUID
import logging

from api.middleware.auth_middleware import get_current_user, invalidate_cached_user
from api.schemas.request_schemas import validate_assistant_name
from api.schemas.response_schemas import (
    CurrentUserResponse,
    UpdateAssistantResponse,
    UserResponse,
)
from config.settings import settings
from core.dependencies import get_avatar_service, get_user_repo
from database.repositories.user_repo import UserRepository
from services.avatar_service import AvatarService, validate_image_url

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/current", response_model=CurrentUserResponse)
async def current_user(current_user: dict = Depends(get_current_user)):
    """Profile of the signed-in user (never includes the password hash)."""
    return CurrentUserResponse(user=UserResponse(**{**current_user, "id": str(current_user["id"])}))


@router.post("/assistant", response_model=UpdateAssistantResponse)
async def update_assistant(
    assistant_name: str = Form(...),
    image_url: Optional[str] = Form(None),
    assistant_image: Optional[UploadFile] = File(None),
    current_user: dict = Depends(get_current_user),
    user_repo: UserRepository = Depends(get_user_repo),
    avatar_service: AvatarService = Depends(get_avatar_service),
):
    """
    Customize the assistant persona.

    Accepts either an uploaded image (JPEG/PNG/WebP up to 5MB) or an
    absolute image URL; an upload wins when both are supplied.
    """
    user_id = UUID(str(current_user["id"]))
    try:
        name = validate_assistant_name(assistant_name, settings.ASSISTANT_NAME_MAX_LENGTH)

        if assistant_image is not None and assistant_image.filename:
            # One byte past the cap is enough for the size check to reject it
            content = await assistant_image.read(settings.AVATAR_MAX_BYTES + 1)
            image = await avatar_service.upload(user_id, content, assistant_image.content_type)
        elif image_url and image_url.strip():
            image = validate_image_url(image_url)
        else:
            raise ValueError("No image provided or uploaded")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Avatar upload failed for user {user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload assistant image",
        )

    try:
        user = await user_repo.update_assistant(user_id, name, image)
    except Exception as e:
        logger.error(f"Error updating assistant: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update assistant",
        )
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    invalidate_cached_user(str(user_id))
    logger.info(f"Assistant persona updated for user {user_id}: {name}")
    return UpdateAssistantResponse(user=UserResponse(**{**user, "id": str(user["id"])}))
