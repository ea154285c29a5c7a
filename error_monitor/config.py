"""
Application configuration management.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database (MySQL). When unset, errors are kept in process memory.
    database_url: Optional[str] = None
    memory_store_max_errors: int = 1000

    # Read cache in front of the error listing
    cache_ttl_seconds: float = 5.0

    # n8n
    n8n_api_key: Optional[str] = None
    n8n_base_url: Optional[str] = None

    # Close CRM
    close_api_key: Optional[str] = None
    close_base_url: str = "https://api.close.com/api/v1"

    # Outbound HTTP
    upstream_timeout_seconds: float = 30.0
    upstream_max_retries: int = 3

    # Admin API (protects the debug endpoints when set)
    admin_api_key: Optional[str] = None

    # Application
    log_level: str = "INFO"
    environment: str = "development"

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
