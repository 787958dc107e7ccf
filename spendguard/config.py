"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./spendguard.db"

    # Service
    service_name: str = "spendguard"
    log_level: str = "INFO"

    # Digest / forecast
    digest_title: str = "Weekly Financial Digest"
    forecast_history_limit: int = 30


settings = Settings()
