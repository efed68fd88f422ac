from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables (and `.env`).
    """

    APP_NAME: str = "Catalog Admin API"
    LOG_LEVEL: str = "INFO"

    # Infrastructure
    DATABASE_URL: str = "sqlite:///./catalog.db"
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_TTL: int = 300
    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/2"

    # File storage
    STORAGE_ROOT: str = "./storage"
    PUBLIC_DISK: str = "public"
    PRODUCT_IMAGE_DIR: str = "images/products"

    # Admin authentication
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60
    PASSWORD_RESET_EXPIRE_MINUTES: int = 60
    PASSWORD_RESET_URL: str = "http://localhost:8000/api/v1/admin/reset-password"

    # Outgoing mail (HTTP provider); unset URL means links are only logged
    EMAIL_API_URL: Optional[str] = None
    EMAIL_API_KEY: Optional[str] = None
    EMAIL_FROM: str = "no-reply@example.com"
    EMAIL_HTTP_TIMEOUT: float = 10.0

    # Product updates
    REQUIRE_IMAGE1_ON_UPDATE: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
