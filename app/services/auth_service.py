"""
Auth Service
Registration, login and the password reset flow
"""

import logging
import uuid
from datetime import datetime, timedelta
from fastapi import HTTPException, status
from app.config import settings
from app.database import database
from app.auth import (
    hash_password,
    verify_password,
    generate_reset_token,
    create_access_token,
)
from app.schemas.user import RegisterRequest
from app.services.email_service import email_service

logger = logging.getLogger(__name__)


class AuthService:
    """Service for user accounts and authentication"""

    @staticmethod
    async def register(data: RegisterRequest) -> dict:
        """Create a user account, returns the user without its password hash"""
        email = data.email.lower()

        existing = await database.fetch_one(
            "SELECT id FROM users WHERE email = :email",
            {"email": email}
        )
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Email '{email}' is already registered"
            )

        user_id = str(uuid.uuid4())
        now = datetime.utcnow()
        await database.execute(
            """
            INSERT INTO users
            (id, first_name, last_name, email, password_hash, is_verified, created_at, updated_at)
            VALUES (:id, :first_name, :last_name, :email, :password_hash, :is_verified, :now, :now)
            """,
            {
                "id": user_id,
                "first_name": data.first_name,
                "last_name": data.last_name,
                "email": email,
                "password_hash": hash_password(data.password),
                "is_verified": False,
                "now": now,
            }
        )

        logger.info("Registered user %s", email)
        return await AuthService.get_user(user_id)

    @staticmethod
    async def login(email: str, password: str) -> str:
        """Verify credentials and issue a JWT"""
        user = await database.fetch_one(
            "SELECT id, email, password_hash FROM users WHERE email = :email",
            {"email": email.lower()}
        )

        if not user or not verify_password(password, user["password_hash"]):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password"
            )

        return create_access_token({"id": str(user["id"]), "email": user["email"]})

    @staticmethod
    async def get_user(user_id: str) -> dict:
        """User with organization role assignments and review ids"""
        user = await database.fetch_one(
            """
            SELECT id, first_name, last_name, email, is_verified, global_role_id, created_at
            FROM users WHERE id = :id
            """,
            {"id": user_id}
        )
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )

        roles = await database.fetch_all(
            """
            SELECT uor.organization_id, uor.role_id, r.name AS role_name
            FROM user_organization_roles uor
            JOIN roles r ON r.id = uor.role_id
            WHERE uor.user_id = :user_id
            """,
            {"user_id": user_id}
        )
        reviews = await database.fetch_all(
            "SELECT id FROM turf_reviews WHERE user_id = :user_id ORDER BY created_at",
            {"user_id": user_id}
        )

        result = dict(user)
        result["organization_roles"] = [dict(r) for r in roles]
        result["reviews"] = [r["id"] for r in reviews]
        return result

    @staticmethod
    async def send_password_reset_email(email: str) -> bool:
        """Store a hashed reset token for the user and email them the raw token"""
        user = await database.fetch_one(
            "SELECT id, email FROM users WHERE email = :email",
            {"email": email.lower()}
        )
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="There is no user with that email"
            )

        reset_token = generate_reset_token()

        async with database.transaction():
            # Only the latest token is valid
            await database.execute(
                "DELETE FROM tokens WHERE user_id = :user_id",
                {"user_id": user["id"]}
            )
            await database.execute(
                """
                INSERT INTO tokens (id, user_id, token_hash, created_at)
                VALUES (:id, :user_id, :token_hash, :created_at)
                """,
                {
                    "id": str(uuid.uuid4()),
                    "user_id": user["id"],
                    "token_hash": hash_password(reset_token),
                    "created_at": datetime.utcnow(),
                }
            )

        reset_url = f"{settings.CLIENT_URL}/reset-password/?token={reset_token}&id={user['id']}"
        return await email_service.send_password_reset_email(user["email"], reset_url)

    @staticmethod
    async def reset_user_password(user_id: str, token: str, new_password: str) -> dict:
        """Check the reset token, set the new password and consume the token"""
        invalid = HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired token"
        )

        token_record = await database.fetch_one(
            "SELECT id, token_hash, created_at FROM tokens WHERE user_id = :user_id",
            {"user_id": user_id}
        )
        if not token_record:
            raise invalid

        if not verify_password(token, token_record["token_hash"]):
            raise invalid

        created_at = token_record["created_at"]
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        created_at = created_at.replace(tzinfo=None)
        if datetime.utcnow() - created_at > timedelta(minutes=settings.PASSWORD_RESET_TOKEN_MINUTES):
            await database.execute("DELETE FROM tokens WHERE id = :id", {"id": token_record["id"]})
            raise invalid

        user = await database.fetch_one(
            "SELECT id, email FROM users WHERE id = :id",
            {"id": user_id}
        )
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )

        async with database.transaction():
            await database.execute(
                "UPDATE users SET password_hash = :password_hash, updated_at = :now WHERE id = :id",
                {"password_hash": hash_password(new_password), "now": datetime.utcnow(), "id": user_id}
            )
            await database.execute("DELETE FROM tokens WHERE id = :id", {"id": token_record["id"]})

        await email_service.send_password_reset_success_email(user["email"])
        logger.info("Password reset for user %s", user["email"])
        return {"success": True, "message": "Password reset successful!"}


# Create singleton instance
auth_service = AuthService()
