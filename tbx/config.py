# tbx/config.py

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "Trial Balance Classifier"
    app_env: str = "development"
    debug: bool = True
    frontend_url: str = "http://localhost:3000"
    log_level: str = "INFO"

    # API auth ("Authorization: ApiKey <key>")
    api_key: str = "tbx-dev-key"

    # Storage
    memory_dir: str = "Memory"
    classification_config_path: str = "config.yaml"

    # Classification
    default_client_id: str = "DEFAULT"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
