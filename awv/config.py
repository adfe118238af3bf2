"""Application configuration settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    MONGODB_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "awv"

    # Application
    APP_NAME: str = "Annual Wellness Visit"
    API_PREFIX: str = "/api"
    PORT: int = 8000

    # CORS - frontend origins
    BACKEND_CORS_ORIGINS: str = '["http://localhost:3000"]'
    FRONTEND_URL: str = "http://localhost:3000"

    # JWT
    JWT_SECRET_KEY: str = "change-me-in-production-at-least-32-chars"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Invitations
    INVITATION_EXPIRE_HOURS: int = 72

    # Email (SMTP). Sending is skipped when SMTP_USER is empty.
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    EMAIL_FROM: str = "no-reply@awv.local"

    # Firebase Authentication (optional)
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None
    FIREBASE_CONFIG_JSON: Optional[str] = None

    # File storage
    UPLOAD_DIR: str = "/tmp/awv_uploads"
    MAX_LOGO_SIZE_MB: int = 2
    LOGO_MAX_DIMENSION: int = 512

    # Default practice settings, used the first time /practice is read
    PRACTICE_DEFAULT_NAME: str = "Healthcare Wellness Center"
    PRACTICE_DEFAULT_ADDRESS: str = "123 Medical Drive"
    PRACTICE_DEFAULT_CITY: str = "Healthville"
    PRACTICE_DEFAULT_STATE: str = "CA"
    PRACTICE_DEFAULT_ZIP: str = "90210"
    PRACTICE_DEFAULT_PHONE: str = "(555) 123-4567"
    PRACTICE_DEFAULT_EMAIL: str = "info@healthcarewellness.com"

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from JSON string."""
        try:
            return json.loads(self.BACKEND_CORS_ORIGINS)
        except (TypeError, ValueError):
            return ["http://localhost:3000"]

    @property
    def email_enabled(self) -> bool:
        return bool(self.SMTP_USER)


settings = Settings()
