"""
Authentication Module
Password hashing, JWT token management and permission checks
"""

from app.auth.password import hash_password, verify_password, generate_reset_token
from app.auth.dependencies import (
    create_access_token,
    decode_access_token,
    get_current_user,
    check_permission,
    require_permission,
    TOKEN_COOKIE_NAME,
)

__all__ = [
    "hash_password",
    "verify_password",
    "generate_reset_token",
    "create_access_token",
    "decode_access_token",
    "get_current_user",
    "check_permission",
    "require_permission",
    "TOKEN_COOKIE_NAME",
]
