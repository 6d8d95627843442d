"""
Application Configuration
Loads settings from environment variables
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from .env file"""

    # Application
    APP_ENV: str = "development"
    APP_NAME: str = "TurfSpot"
    API_PREFIX: str = "/api/v1"
    CLIENT_URL: str = "http://localhost:3001"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./turfspot.db"

    # JWT
    JWT_SECRET_KEY: str = "temp-jwt-secret-change-later"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_HOURS: int = 24 * 30
    PASSWORD_RESET_TOKEN_MINUTES: int = 10

    # Email
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    EMAIL_FROM: str = "noreply@turfspot.app"

    # File Upload
    MAX_UPLOAD_SIZE: int = 5242880  # 5MB
    MAX_IMAGES_PER_UPLOAD: int = 5
    ALLOWED_IMAGE_TYPES: str = "image/jpeg,image/png,image/jpg,image/webp"

    # Image hosting (Supabase Storage)
    SUPABASE_URL: Optional[str] = None
    SUPABASE_KEY: Optional[str] = None
    STORAGE_BUCKET: str = "turfspot"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def allowed_image_types(self) -> set[str]:
        return {t.strip() for t in self.ALLOWED_IMAGE_TYPES.split(",") if t.strip()}


# Create global settings instance
settings = Settings()
