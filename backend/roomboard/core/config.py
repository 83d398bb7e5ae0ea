"""
Application configuration for the Roomboard backend.

Reads database, Redis and server settings from environment variables
(or a local .env file), with sensible defaults for local development.
"""

from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    APP_NAME: str = "Roomboard"

    # Database configuration
    DATABASE_URL: str = "sqlite:///./roomboard.db"
    SQL_ECHO: bool = False  # Set to True for SQL query logging in development

    # Optional Redis URL; when set, Socket.IO emits are relayed through Redis
    # so sessions connected to other worker processes receive them too
    REDIS_URL: Optional[str] = None

    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    HOST: str = "0.0.0.0"
    PORT: int = 8000


# Global settings instance
settings = Settings()
