"""Application configuration"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# HS256 keys shorter than this are rejected at startup (256 bits)
MIN_JWT_SECRET_BYTES = 32


class ConfigError(RuntimeError):
    """Raised when the application is started with an unusable configuration."""


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # API Configuration
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "BOH Event Management API"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "Events, venues and bookings with role-based access control"

    # Security
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=30, ge=15, le=30)
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(default=7, ge=1)
    BCRYPT_ROUNDS: int = Field(default=12, ge=10, le=16)

    # Refresh token cookie
    REFRESH_COOKIE_NAME: str = "refresh_token"
    REFRESH_COOKIE_SECURE: bool = True
    REFRESH_COOKIE_PATH: str = "/api/v1/auth"

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Bookings hold their seats in both statuses; PENDING is for deployments
    # that confirm payment asynchronously.
    BOOKING_INITIAL_STATUS: Literal["CONFIRMED", "PENDING"] = "CONFIRMED"

    # Redis / rate limiting for login and refresh
    REDIS_URL: str = "redis://localhost:6379"
    RATE_LIMIT_ENABLED: bool = True
    AUTH_RATE_LIMIT_ATTEMPTS: int = 5
    AUTH_RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60

    # CORS
    ALLOWED_HOSTS: list[str] = ["http://localhost:3001"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_DIR: Optional[str] = None

    # Development
    DEBUG: bool = False
    ENVIRONMENT: str = "development"


def ensure_signing_key(settings: Settings) -> str:
    """Return the JWT signing key or fail if it is missing or too short."""
    secret = settings.JWT_SECRET
    if not secret:
        raise ConfigError("JWT_SECRET is not configured")
    if len(secret.encode("utf-8")) < MIN_JWT_SECRET_BYTES:
        raise ConfigError(f"JWT_SECRET must be at least {MIN_JWT_SECRET_BYTES} bytes long")
    return secret


@lru_cache
def get_settings() -> Settings:
    """Settings loaded from the environment, built once per process."""
    return Settings()
