"""API request schemas"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
import re

_NAME_RE = re.compile(r"^[a-zA-Z\s]+$")
ASSISTANT_NAME_RE = re.compile(r"^[a-zA-Z0-9\s\-_]+$")


def check_password_strength(v: str) -> str:
    if not re.search(r"[A-Z]", v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", v):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", v):
        raise ValueError("Password must contain at least one digit")
    return v


# Auth schemas
class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be between 2 and 50 characters")
        if not _NAME_RE.match(v):
            raise ValueError("Name can only contain letters and spaces")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_strength(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class LogoutRequest(BaseModel):
    refresh_token: Optional[str] = None


class SendResetCodeRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., pattern=r"^\s*\d{6}\s*$")
    newPassword: str = Field(..., min_length=6, max_length=128)

    @field_validator("newPassword")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return check_password_strength(v)


# Assistant schemas
class AskAssistantRequest(BaseModel):
    command: str = Field(..., max_length=1000)
    timezone: Optional[str] = Field(None, max_length=64)

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Command must be between 1 and 1000 characters")
        return v


def validate_assistant_name(value: Optional[str], max_length: int = 50) -> str:
    """Form fields bypass pydantic models, so the persona name is checked here."""
    name = (value or "").strip()
    if not (2 <= len(name) <= max_length):
        raise ValueError(f"Assistant name must be between 2 and {max_length} characters")
    if not ASSISTANT_NAME_RE.match(name):
        raise ValueError(
            "Assistant name can only contain letters, numbers, spaces, hyphens, and underscores"
        )
    return name
