"""Configuration for Livestock Service."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Livestock service configuration.

    All settings can be overridden via environment variables or a ``.env`` file.
    Database credentials are only ever supplied through the environment.
    """

    # Service configuration
    SERVICE_NAME: str = Field(default="livestock-service")
    SERVICE_VERSION: str = Field(default="1.0.0")
    SERVICE_HOST: str = Field(default="0.0.0.0")
    SERVICE_PORT: int = Field(default=8020, ge=1, le=65535)
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )

    # Database
    DATABASE_URL: str = Field(
        default="sqlite:///./livestock.db",
        description="SQLAlchemy URL; the sqlite default is for local development only",
    )
    DB_POOL_SIZE: int = Field(default=10, ge=1)
    DB_MAX_OVERFLOW: int = Field(default=10, ge=0)
    DB_POOL_RECYCLE: int = Field(default=3600, ge=1)
    DB_POOL_PRE_PING: bool = Field(default=True)
    DB_RETRY_ATTEMPTS: int = Field(
        default=3, ge=1, le=10, description="Attempts for transient database errors"
    )
    QUERY_LOG_THRESHOLD_MS: int = Field(default=100, ge=0)

    # CORS
    CORS_ORIGINS: str = Field(default="http://localhost:8080,http://localhost:3000")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


settings = Settings()
