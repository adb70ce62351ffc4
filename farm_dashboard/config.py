"""
Application Configuration
Loads settings from environment variables with validation
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Uses pydantic-settings for validation and type coercion.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ============================================
    # Application Settings
    # ============================================
    app_name: str = "FarmDashboard"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # ============================================
    # Server Settings
    # ============================================
    host: str = "0.0.0.0"
    port: int = 8000

    # ============================================
    # Supabase
    # ============================================
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""

    # ============================================
    # Query Limits
    # ============================================
    sheep_list_limit: int = 200
    transaction_list_limit: int = 50
    alert_limit: int = 50

    # ============================================
    # Reports
    # ============================================
    export_rate_limit: str = "30/minute"
    currency_label: str = "Ksh"

    # ============================================
    # CORS Settings
    # ============================================
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to avoid loading .env file on every call.
    """
    return Settings()


# Export a default settings instance for convenience
settings = get_settings()
