"""
Configuration module for the livestock web client.

This module provides centralized configuration management using Pydantic settings.
All configuration values can be overridden via environment variables or .env file.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings for the livestock web client.

    Attributes:
        LIVESTOCK_SERVICE_URL: Base URL for the livestock service API
        APP_NAME: Display name for the application
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_JSON: Emit JSON structured logs instead of human-readable lines
        REQUEST_TIMEOUT: Default timeout for HTTP requests in seconds
        DEFAULT_PAGE_SIZE: Records per list page
    """

    LIVESTOCK_SERVICE_URL: str = Field(
        default="http://localhost:8020",
        description="Base URL for the livestock service API",
    )

    APP_NAME: str = Field(
        default="Herd Manager",
        description="Display name for the application",
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    LOG_JSON: bool = Field(
        default=False,
        description="Use JSON structured logging",
    )

    REQUEST_TIMEOUT: float = Field(
        default=10.0,
        gt=0,
        le=30.0,
        description="Default timeout for HTTP requests in seconds",
    )

    DEFAULT_PAGE_SIZE: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Records per list page",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("LIVESTOCK_SERVICE_URL")
    @classmethod
    def validate_url(cls, value: str) -> str:
        """
        Validate that the service URL is properly formatted.

        Returns:
            The validated URL without trailing slash

        Raises:
            ValueError: If URL is invalid
        """
        if not value:
            raise ValueError("Service URL cannot be empty")

        value = value.rstrip("/")

        if not (value.startswith("http://") or value.startswith("https://")):
            raise ValueError(
                f"Service URL must start with http:// or https://, got: {value}"
            )

        return value


# Global settings instance
settings = Settings()
