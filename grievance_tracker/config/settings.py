"""
Environment configuration for the grievance tracker.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)

SCHEDULER_MODES = ("inline", "celery", "disabled")


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Application configuration
    APP_NAME: str = "Grievance Tracker"
    APP_VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    CORS_ORIGINS: List[str] = Field(default=["*"])

    # Database configuration
    DATABASE_URL: str = "sqlite:///./grievances.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 5

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    LOG_FILE: Optional[str] = None

    # Email configuration
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT_SECONDS: int = 10
    EMAIL_FROM_ADDRESS: str = "noreply@resolveit.com"
    EMAIL_WORKERS: int = 2

    # File storage
    UPLOAD_DIR: str = "uploads"

    # Escalation sweep
    ESCALATION_SCHEDULER_MODE: str = "inline"
    ESCALATION_SWEEP_INTERVAL_SECONDS: int = 3600
    ESCALATION_SWEEP_TIMEOUT_SECONDS: int = 30
    ESCALATION_WORKERS: int = 2

    # Celery (worker mode)
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/1"

    @field_validator("ENVIRONMENT")
    @classmethod
    def normalize_environment(cls, v: str) -> str:
        """Lower-case the environment name"""
        return v.strip().lower()

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure LOG_LEVEL names a logging level"""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid LOG_LEVEL: {v}")
        return level

    @field_validator("ESCALATION_SCHEDULER_MODE")
    @classmethod
    def validate_scheduler_mode(cls, v: str) -> str:
        """Ensure the escalation scheduler mode is known"""
        mode = v.strip().lower()
        if mode not in SCHEDULER_MODES:
            raise ValueError(
                f"ESCALATION_SCHEDULER_MODE must be one of {', '.join(SCHEDULER_MODES)}"
            )
        return mode

    @field_validator("ESCALATION_SWEEP_INTERVAL_SECONDS", "ESCALATION_WORKERS", "EMAIL_WORKERS")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def email_enabled(self) -> bool:
        """SMTP delivery is attempted only when a host is configured"""
        return bool(self.SMTP_HOST)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
