# app/core/config.py
import os
from pydantic_settings import BaseSettings
from pydantic import validator
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from .env"""

    # === Database ===
    DATABASE_URL: str

    @validator("DATABASE_URL")
    def validate_database_url(cls, v):
        """Ensure database URL is safe for current environment"""
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env == "production" and "localhost" in v:
            raise ValueError("🚨 Production environment cannot use localhost database!")
        return v

    # === JWT ===
    SECRET_KEY: str
    ALGORITHM: str = "HS256"

    # === CORS ===
    ALLOWED_ORIGINS: List[str] = ["http://localhost:8081", "http://127.0.0.1:8081"]
    ALLOWED_METHODS: List[str] = ["*"]
    ALLOWED_HEADERS: List[str] = ["*"]

    # === System ===
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # === Biometric templates ===
    # 64 hex characters or Base64 of 32 raw bytes
    FINGERPRINT_ENCRYPTION_KEY: Optional[str] = None
    ALLOW_EPHEMERAL_FINGERPRINT_KEY: bool = False
    EXPOSE_TEMPLATE_HASH: bool = False
    FINGERPRINT_RETENTION_DAYS: Optional[int] = None

    @validator("ALLOW_EPHEMERAL_FINGERPRINT_KEY")
    def validate_ephemeral_key(cls, v):
        """Ephemeral keys make stored templates unreadable after a restart"""
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env == "production" and v:
            raise ValueError("🚨 Production environment cannot use an ephemeral fingerprint key!")
        return v

    @validator("FINGERPRINT_RETENTION_DAYS")
    def validate_retention_days(cls, v):
        if v is not None and v < 1:
            raise ValueError("FINGERPRINT_RETENTION_DAYS must be a positive number of days")
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Create a global settings instance
settings = Settings()
