"""
Application configuration with environment-specific secrets management.

Environment files, later ones overriding earlier ones:
1. .env
2. .env.{ENVIRONMENT} (e.g., .env.production, .env.development)
Process environment variables override both.

Required secrets for production:
- JUMPSELLER_API_KEY (JumpSeller "Login")
- JUMPSELLER_API_SECRET (JumpSeller "Auth Token")
"""
import os
from pathlib import Path
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.logging import get_logger

PROJECT_ROOT = Path(__file__).parent.parent.parent

logger = get_logger(__name__)


def env_files(environment: str) -> tuple:
    """Env files for an environment, lowest precedence first. Missing files are skipped."""
    return (PROJECT_ROOT / ".env", PROJECT_ROOT / f".env.{environment}")


class Settings(BaseSettings):
    """Order reconciliation settings."""

    model_config = SettingsConfigDict(
        env_file=env_files(os.getenv("ENVIRONMENT", "development")),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    ENVIRONMENT: Literal["development", "production", "test"] = "development"

    # Application
    APP_NAME: str = "Order Reconciliation API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8001

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # JumpSeller (authoritative commerce platform)
    JUMPSELLER_API_URL: str = "https://api.jumpseller.com/v1"
    JUMPSELLER_API_KEY: str = ""
    JUMPSELLER_API_SECRET: str = ""

    # WeareCloud scraping microservice. The WeareCloud login itself is held
    # by that service.
    WEARECLOUD_SERVICE_URL: str = "http://localhost:8000"
    WEARECLOUD_SERVICE_API_KEY: str = ""
    WEARECLOUD_URL: str = "https://ecommerce.wareclouds.app"

    # Order source calls
    HTTP_TIMEOUT_SECONDS: float = Field(30.0, gt=0)
    UPDATE_TIMEOUT_SECONDS: float = Field(30.0, gt=0)
    FETCH_RETRY_ATTEMPTS: int = Field(3, ge=1, le=10)

    # Matching
    SYNC_PAGE_SIZE: int = Field(100, ge=1, le=200)
    SINGLE_SYNC_PAGE_SIZE: int = Field(50, ge=1, le=200)
    SYNC_EXCLUSIVE_MATCHING: bool = False

    @field_validator("JUMPSELLER_API_URL", "WEARECLOUD_SERVICE_URL", "WEARECLOUD_URL")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    def missing_secrets(self) -> List[str]:
        """Names of required secrets that are unset."""
        required = ("JUMPSELLER_API_KEY", "JUMPSELLER_API_SECRET")
        return [name for name in required if not getattr(self, name)]


def check_required_secrets(config: Settings) -> None:
    """
    Warn about missing secrets; refuse to start production without them.

    Raises:
        ValueError: production environment with secrets missing
    """
    missing = config.missing_secrets()
    if not missing:
        return

    logger.warning(f"Missing required secrets for {config.ENVIRONMENT}: {', '.join(missing)}")
    if config.is_production():
        raise ValueError(
            f"Cannot start in production with missing secrets: {', '.join(missing)}. "
            f"Set them in the environment or .env.production"
        )


settings = Settings()
check_required_secrets(settings)
