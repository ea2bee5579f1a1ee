"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    gateway_backend: Literal["memory", "firebase"] = "memory"
    firebase_api_key: str = ""
    firebase_project_id: str = ""
    firebase_credentials_file: str = ""  # service-account JSON for Firestore
    firebase_auth_url: str = "https://identitytoolkit.googleapis.com/v1"
    http_timeout: float = 10.0
    log_level: str = "INFO"
    top_rated_limit: int = 10
    featured_limit: int = 3

    model_config = {"env_file": ".env"}


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
