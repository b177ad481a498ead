"""Application configuration settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Application
    APP_NAME: str = "Patient Portal"
    
    # Remote API
    API_BASE_URL: str = "https://crud-be-ujjp.onrender.com/api"
    REQUEST_TIMEOUT_SECONDS: float = 10.0
    
    # Durable session storage (token + serialized user)
    SESSION_FILE: str = str(Path.home() / ".patient_portal" / "session.json")
    
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    
    # Logging
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )
    
    @property
    def api_base_url(self) -> str:
        """Base URL without a trailing slash."""
        return self.API_BASE_URL.rstrip("/")


settings = Settings()
