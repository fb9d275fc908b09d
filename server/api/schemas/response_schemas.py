"""API response schemas"""
from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    assistant_name: Optional[str] = None
    assistant_image: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TokenResponse(BaseModel):
    success: bool = True
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse


class CurrentUserResponse(BaseModel):
    success: bool = True
    user: UserResponse


class UpdateAssistantResponse(BaseModel):
    success: bool = True
    message: str = "Assistant updated successfully"
    user: UserResponse


class AskAssistantResponse(BaseModel):
    success: bool = True
    type: str
    userInput: str
    response: str
    timestamp: str


class HistoryEntryResponse(BaseModel):
    command: str
    response: Optional[str] = None
    intent_type: Optional[str] = None
    created_at: datetime


class HistoryResponse(BaseModel):
    success: bool = True
    history: List[HistoryEntryResponse]


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: Optional[str] = None
