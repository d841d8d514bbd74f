# backend/eventbook/core/config.py
import logging
import os
from pathlib import Path
from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import BRAND_NAME

logger = logging.getLogger(__name__)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: Literal["development", "test", "production"] = "development"
    log_level: str = Field(default="INFO", description="Root log level")

    database_url: str = Field(
        default="sqlite:///./eventbook.db",
        description="SQLAlchemy database URL",
    )
    database_echo: bool = False

    # Auth
    secret_key: SecretStr = Field(
        default=SecretStr("dev-secret-key-change-me"),
        description="Secret key for JWT tokens",
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days
    refresh_secret_key: SecretStr = Field(
        default=SecretStr("dev-refresh-secret-change-me"),
        description="Separate signing key for refresh tokens",
    )
    refresh_token_expire_days: int = Field(default=7, ge=1)

    # One-time verification codes
    otp_store_backend: Literal["memory", "redis"] = Field(
        default="memory",
        description="Backing store for e-mail verification codes",
    )
    redis_url: str = "redis://localhost:6379/0"
    otp_ttl_seconds: int = Field(default=600, ge=1)
    otp_max_attempts: int = Field(default=5, ge=1)
    otp_length: int = Field(default=6, ge=4, le=10)

    # Email
    email_enabled: bool = Field(default=False, description="Send e-mail through Resend")
    resend_api_key: Optional[str] = Field(default=None, description="API key for Resend")
    from_email: str = f"{BRAND_NAME} <bookings@eventbook.app>"
    frontend_url: str = "http://localhost:3000"

    # HTTP
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins",
    )

    # Pagination
    default_page_size: int = 10
    max_page_size: int = 100

    is_testing: bool = False

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


settings = Settings()
