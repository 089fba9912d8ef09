"""
Configuration management for the Gallery API.
Uses Pydantic Settings for environment variable management.
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    API_TITLE: str = "Gallery API"
    API_VERSION: str = "0.1.0"
    API_DESCRIPTION: str = "CRUD and query API for media galleries"

    # CORS Configuration
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:8000",
    ]

    # Database Configuration
    # Empty value falls back to an in-memory SQLite database
    DATABASE_URL: str = ""
    DB_ECHO: bool = False
    AUTO_CREATE_TABLES: bool = False

    # Listing defaults
    DEFAULT_PAGE_SIZE: int = 10
    # None means no hard cap; callers are responsible for sane page sizes.
    # Independently, page and count above models.MAX_INTEGER are rejected
    # with a 400, and gallery ids above it are reported as not found.
    MAX_PAGE_SIZE: Optional[int] = None

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings


# Global settings instance
settings = Settings()
