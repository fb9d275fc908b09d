"""Application configuration settings."""
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import model_validator
from typing import List, Optional

# Get the server directory path
SERVER_DIR = Path(__file__).parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase
    SUPABASE_URL: str
    SUPABASE_KEY: str
    SUPABASE_AVATAR_BUCKET: str = "assistant-avatars"

    # Gemini (generative language API)
    GEMINI_API_URL: str = (
        "https://generativelanguage.googleapis.com/v1beta/models/gemini-pro:generateContent"
    )
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_TIMEOUT: int = 30
    GEMINI_TEMPERATURE: float = 0.7
    GEMINI_TOP_K: int = 40
    GEMINI_TOP_P: float = 0.95
    GEMINI_MAX_OUTPUT_TOKENS: int = 1024
    GEMINI_SAFETY_THRESHOLD: str = "BLOCK_MEDIUM_AND_ABOVE"

    # Authentication
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30

    # Password reset (one-time codes mailed over SMTP)
    PASSWORD_RESET_CODE_TTL_MINUTES: int = 10
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_FROM: Optional[str] = None
    SMTP_TIMEOUT: int = 30

    # Server
    ENVIRONMENT: str = "development"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # CORS: explicit list of allowed origins
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # Rate limiting (requests per minute)
    RATE_LIMIT_PER_MINUTE: int = 100
    AI_RATE_LIMIT_PER_MINUTE: int = 10
    AUTH_RATE_LIMIT_PER_MINUTE: int = 5

    # Assistant
    COMMAND_HISTORY_LIMIT: int = 100
    COMMAND_MAX_LENGTH: int = 1000
    ASSISTANT_NAME_MAX_LENGTH: int = 50
    AVATAR_MAX_BYTES: int = 5 * 1024 * 1024
    ASSISTANT_TIMEZONE: str = "UTC"

    @model_validator(mode="after")
    def _validate_limits(self) -> "Settings":
        if self.COMMAND_HISTORY_LIMIT < 1:
            raise ValueError("COMMAND_HISTORY_LIMIT must be at least 1")
        return self

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    class Config:
        env_file = str(SERVER_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


# Global settings instance
settings = Settings()
