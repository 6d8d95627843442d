"""
Authentication Routes
Register, login, logout and password reset endpoints
"""

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, EmailStr, Field, AliasChoices
from app.config import settings
from app.auth import get_current_user, TOKEN_COOKIE_NAME
from app.schemas.common import Envelope, MessageResponse
from app.schemas.user import RegisterRequest, UserResponse
from app.services.auth_service import auth_service

router = APIRouter()


# Request/Response Models
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    success: bool = True
    message: str
    token: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    user_id: str = Field(..., validation_alias=AliasChoices("userId", "user_id"))
    token: str
    password: str = Field(..., min_length=8, max_length=72)


@router.post("/register", response_model=Envelope[UserResponse], status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest):
    """
    Create a user account

    - **email** must not be registered yet (409 otherwise)
    - **password** at least 8 characters
    """
    user = await auth_service.register(request)
    return {"success": True, "data": user, "message": "User registered successfully"}


@router.post("/login", response_model=LoginResponse)
async def login(credentials: LoginRequest, response: Response):
    """
    Login endpoint

    The JWT is returned in the body and also set as an http-only cookie.
    """
    token = await auth_service.login(credentials.email, credentials.password)

    response.set_cookie(
        key=TOKEN_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.APP_ENV == "production",
        samesite="lax",
        max_age=settings.JWT_EXPIRATION_HOURS * 3600,
    )

    return LoginResponse(message="Login successful", token=token)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    """
    Logout endpoint (clears the auth cookie)
    """
    response.delete_cookie(TOKEN_COOKIE_NAME)
    return {"success": True, "message": "Logged out successfully"}


@router.get("/me", response_model=Envelope[UserResponse])
async def get_current_user_info(current_user: dict = Depends(get_current_user)):
    """
    Get current authenticated user with organization roles and review ids
    """
    user = await auth_service.get_user(current_user["user_id"])
    return {"success": True, "data": user}


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(request: ForgotPasswordRequest):
    await auth_service.send_password_reset_email(request.email)
    return {"success": True, "message": "Password reset email sent"}


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(request: ResetPasswordRequest):
    """
    Reset password with the emailed token
    """
    return await auth_service.reset_user_password(request.user_id, request.token, request.password)
