"""
Password Hashing
bcrypt hashes for user passwords and password-reset tokens
"""

from passlib.context import CryptContext
import secrets
import string

# Reset tokens go through the same context as passwords
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    Hash a user password or a reset token

    Args:
        password: Plain text value (bcrypt reads at most 72 bytes)

    Returns:
        bcrypt hash for the users.password_hash / tokens.token_hash columns
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """True when plain_password matches the stored bcrypt hash"""
    return pwd_context.verify(plain_password, hashed_password)


def generate_random_password(length: int = 12) -> str:
    """Letters and digits, used when a platform admin is created without a password"""
    characters = string.ascii_letters + string.digits
    return ''.join(secrets.choice(characters) for _ in range(length))


def generate_reset_token() -> str:
    """32 random bytes, hex encoded (sent to the user, only the hash is stored)"""
    return secrets.token_hex(32)
