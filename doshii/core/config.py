"""
Centralised client configuration.

This module loads every environment variable the client needs using
Pydantic Settings, so values are validated on load.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from doshii.utils.error_handler import ConfigurationException
from doshii.version import get_version

SANDBOX_HOST = "https://sandbox.doshii.co/partner"
LIVE_HOST = "https://live.doshii.co/partner"


class Settings(BaseSettings):
    """
    Client configuration backed by Pydantic Settings.

    Everything is read from environment variables, with defaults that
    point at the Doshii sandbox for development.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # === BASIC SETTINGS ===
    APP_NAME: str = "Doshii Orders Client"
    APP_VERSION: str = Field(default_factory=get_version)
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # === DOSHII API ===
    DOSHII_SANDBOX: bool = Field(default=True)
    # Full base URL, overrides the sandbox/live host when set
    DOSHII_API_BASE_URL: Optional[str] = Field(default=None)
    DOSHII_API_VERSION: str = Field(default="v3")
    DOSHII_CLIENT_ID: Optional[str] = Field(default=None)
    DOSHII_ACCESS_TOKEN: Optional[str] = Field(default=None)

    # === HTTP ===
    DOSHII_REQUEST_TIMEOUT: float = Field(default=30.0)
    DOSHII_CONNECT_TIMEOUT: float = Field(default=10.0)
    DOSHII_MAX_CONNECTIONS: int = Field(default=100)
    DOSHII_MAX_CONNECTIONS_PER_HOST: int = Field(default=30)

    # === LOGGING ===
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE_PATH: Optional[str] = Field(default=None)
    LOG_MAX_SIZE_MB: int = Field(default=10)
    LOG_BACKUP_COUNT: int = Field(default=5)

    @field_validator("DOSHII_API_BASE_URL")
    @classmethod
    def validate_base_url(cls, v):
        """Require an explicit scheme and strip trailing slashes."""
        if v is None:
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError("DOSHII_API_BASE_URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("DOSHII_REQUEST_TIMEOUT", "DOSHII_CONNECT_TIMEOUT")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("Timeouts must be greater than zero")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Check the log level is a valid one."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Check the environment name is a valid one."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT must be one of: {valid_envs}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def api_base_url(self) -> str:
        """Base URL every request path is appended to."""
        if self.DOSHII_API_BASE_URL:
            return self.DOSHII_API_BASE_URL
        host = SANDBOX_HOST if self.DOSHII_SANDBOX else LIVE_HOST
        return f"{host}/{self.DOSHII_API_VERSION}"

    @property
    def user_agent(self) -> str:
        return f"doshii-orders-client/{self.APP_VERSION}"

    def get_default_headers(self) -> dict:
        """
        Headers sent with every Doshii request.

        Returns:
            dict: Default headers, including the bearer token when configured
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }
        if self.DOSHII_ACCESS_TOKEN:
            headers["Authorization"] = f"Bearer {self.DOSHII_ACCESS_TOKEN}"
        return headers

    def get_logging_config(self) -> dict:
        return {
            "level": self.LOG_LEVEL,
            "file_path": self.LOG_FILE_PATH,
            "max_size_mb": self.LOG_MAX_SIZE_MB,
            "backup_count": self.LOG_BACKUP_COUNT,
        }


@lru_cache()
def get_settings() -> Settings:
    """
    Return the cached settings instance.

    Returns:
        Settings: Client configuration
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Drop the cached settings and load them again from the environment.

    Returns:
        Settings: Freshly loaded configuration
    """
    get_settings.cache_clear()
    return get_settings()


def validate_required_settings(settings: Optional[Settings] = None) -> bool:
    """
    Check that production deployments carry credentials.

    Returns:
        bool: True when the configuration is usable

    Raises:
        ConfigurationException: If a required setting is missing
    """
    settings = settings or get_settings()

    if settings.is_production:
        if settings.DOSHII_SANDBOX and not settings.DOSHII_API_BASE_URL:
            raise ConfigurationException(
                "Production environment is pointing at the Doshii sandbox", setting="DOSHII_SANDBOX"
            )
        for name in ("DOSHII_CLIENT_ID", "DOSHII_ACCESS_TOKEN"):
            if not getattr(settings, name):
                raise ConfigurationException(f"Missing required setting: {name}", setting=name)

    return True
