"""Authentication API routes"""
from fastapi import APIRouter, HTTPException, Depends, Response, status
import logging

from api.schemas.request_schemas import (
    RegisterRequest,
    LoginRequest,
    RefreshTokenRequest,
    LogoutRequest,
    SendResetCodeRequest,
    ResetPasswordRequest,
)
from api.schemas.response_schemas import TokenResponse, UserResponse
from config.settings import settings
from core.dependencies import get_auth_service, get_password_reset_service
from core.errors import AssistantError
from services.auth_service import AuthService
from services.password_reset_service import PasswordResetService

logger = logging.getLogger(__name__)
router = APIRouter()

TOKEN_COOKIE = "token"


def _set_token_cookie(response: Response, access_token: str) -> None:
    """HTTP-only session cookie for browser clients."""
    production = not settings.is_development
    response.set_cookie(
        TOKEN_COOKIE,
        access_token,
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="strict" if production else "lax",
        secure=production,
        path="/",
    )


def _token_response(user: dict, access_token: str, refresh_token: str) -> TokenResponse:
    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        user=UserResponse(**{**user, "id": str(user["id"])}),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Register a new user"""
    try:
        user, access_token, refresh_token = await auth_service.register_user(
            name=request.name,
            email=request.email,
            password=request.password,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except Exception as e:
        logger.error(f"Registration error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Registration failed")

    _set_token_cookie(response, access_token)
    return _token_response(user, access_token, refresh_token)


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Login user"""
    try:
        user, access_token, refresh_token = await auth_service.login_user(
            email=request.email,
            password=request.password,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    except Exception as e:
        logger.error(f"Login error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Login failed")

    _set_token_cookie(response, access_token)
    return _token_response(user, access_token, refresh_token)


@router.post("/refresh")
async def refresh_token(
    request: RefreshTokenRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Refresh access token"""
    try:
        new_access_token = await auth_service.refresh_access_token(request.refresh_token)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    except Exception as e:
        logger.error(f"Token refresh error: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Token refresh failed")

    _set_token_cookie(response, new_access_token)
    return {
        "success": True,
        "access_token": new_access_token,
        "token_type": "bearer"
    }


@router.post("/logout")
async def logout(
    response: Response,
    request: LogoutRequest = LogoutRequest(),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Clear the session cookie and revoke the refresh token if one is given."""
    if request.refresh_token:
        try:
            await auth_service.logout(request.refresh_token)
        except Exception as e:
            # The cookie is cleared either way
            logger.error(f"Refresh token revocation failed: {e}")
    response.delete_cookie(TOKEN_COOKIE, path="/")
    return {"success": True, "message": "Logged out successfully"}


@router.post("/forgot-password/send-otp")
async def send_reset_code(
    request: SendResetCodeRequest,
    reset_service: PasswordResetService = Depends(get_password_reset_service),
):
    """Mail a one-time password reset code"""
    try:
        await reset_service.send_code(request.email)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AssistantError:
        raise
    except Exception as e:
        logger.error(f"Send reset code error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error.")

    return {"success": True, "message": "OTP sent to your email."}


@router.post("/forgot-password/verify-otp")
async def reset_password(
    request: ResetPasswordRequest,
    reset_service: PasswordResetService = Depends(get_password_reset_service),
):
    """Trade a reset code for a new password; signs out every session"""
    try:
        await reset_service.reset_password(request.email, request.otp, request.newPassword)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error(f"Password reset error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error.")

    return {"success": True, "message": "Password reset successful."}
