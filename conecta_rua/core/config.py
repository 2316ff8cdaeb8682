"""
Conecta Rua - Configuration Management
Centralized configuration using pydantic-settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Supabase project
    supabase_url: str = "http://localhost:54321"
    supabase_anon_key: Optional[str] = None
    storage_bucket: str = "report-images"
    http_timeout_seconds: float = 30.0

    # Report form limits
    max_images: int = 5
    max_image_bytes: int = 10 * 1024 * 1024
    geolocation_timeout_seconds: float = 10.0

    # Map defaults (centro de Ponta Grossa - PR)
    default_latitude: float = -25.0916
    default_longitude: float = -50.1668
    map_zoom: int = 13

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    session_cookie_name: str = "sb-access-token"
    display_timezone: str = "America/Sao_Paulo"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
