"""
Application configuration with environment-specific secrets management.

Supported environment files (loaded in order of precedence):
1. .env.{ENVIRONMENT} (e.g., .env.production, .env.development)
2. .env (fallback)

Required secrets for production:
- DATABASE_URL
- API_KEY
"""
import os
import logging
from pathlib import Path
from typing import Optional, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the project root directory (3 levels up from this file)
PROJECT_ROOT = Path(__file__).parent.parent.parent

DEFAULT_DATABASE_URL = f"sqlite:///{PROJECT_ROOT / 'hoopstats.db'}"

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings with environment-specific configuration."""

    # Environment
    ENVIRONMENT: Literal["development", "production", "test"] = "development"

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # Application
    APP_NAME: str = "Hoopstats Basketball Stats API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8001

    # Database
    DATABASE_URL: str = DEFAULT_DATABASE_URL

    # Security - single shared key, any authenticated client may act on any team
    API_KEY: str = ""

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE: str = "memory"  # "memory" or "redis"
    REDIS_URL: Optional[str] = None  # Required if using Redis storage

    # CORS - comma-separated string for env var parsing
    CORS_ORIGINS_STR: str = ""

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    @property
    def CORS_ORIGINS(self) -> list[str]:
        """Get CORS origins with environment-aware defaults."""
        if self.CORS_ORIGINS_STR:
            origins = [o.strip() for o in self.CORS_ORIGINS_STR.split(",") if o.strip()]
            if origins:
                if self.is_production() and "*" in origins:
                    logger.warning(
                        "Wildcard CORS origins (*) are not allowed in production. "
                        "Please set explicit origins in CORS_ORIGINS_STR environment variable."
                    )
                    return []
                return origins

        if self.is_production():
            logger.warning(
                "CORS_ORIGINS_STR not set in production. "
                "Please set CORS_ORIGINS_STR environment variable with explicit origins."
            )
            return []

        # Expo dev server and local web builds of the mobile client
        return [
            "http://localhost:8081",
            "http://localhost:19006",
            "http://127.0.0.1:8081",
            "http://127.0.0.1:19006",
        ]

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT == "development"

    def is_sqlite(self) -> bool:
        """Check if the configured database is SQLite."""
        return self.DATABASE_URL.startswith("sqlite")

    def validate_required_secrets(self) -> list[str]:
        """
        Validate that required secrets are set for the current environment.

        Returns:
            List of missing secret names (empty if all present)
        """
        missing = []

        if self.is_production():
            if not self.DATABASE_URL or self.DATABASE_URL == DEFAULT_DATABASE_URL:
                missing.append("DATABASE_URL")
            if not self.API_KEY:
                missing.append("API_KEY")

        if self.RATE_LIMIT_ENABLED and self.RATE_LIMIT_STORAGE == "redis" and not self.REDIS_URL:
            missing.append("REDIS_URL")

        return missing


def _load_env_file() -> Path:
    """
    Load the appropriate environment file based on ENVIRONMENT variable.

    Loads in order of precedence:
    1. .env.{ENVIRONMENT} (e.g., .env.production, .env.development)
    2. .env (fallback)
    """
    environment = os.getenv("ENVIRONMENT", "development")

    env_file = PROJECT_ROOT / f".env.{environment}"
    if env_file.exists():
        logger.info(f"Loading environment from {env_file.name}")
        return env_file

    default_env = PROJECT_ROOT / ".env"
    if default_env.exists():
        logger.info(f"Loading environment from .env (environment: {environment})")
    else:
        logger.debug(f"No environment file found for '{environment}' (checked .env.{environment}, .env)")
    return default_env


_env_file = _load_env_file()


class _SettingsWithEnvFile(Settings):
    model_config = SettingsConfigDict(
        env_file=str(_env_file),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


settings = _SettingsWithEnvFile()


# Validate secrets on startup
missing_secrets = settings.validate_required_secrets()
if missing_secrets:
    logger.warning(f"Missing required secrets for {settings.ENVIRONMENT}: {', '.join(missing_secrets)}")
    if settings.is_production():
        raise ValueError(
            f"Cannot start in production with missing secrets: {', '.join(missing_secrets)}. "
            f"Please set these environment variables in .env.production"
        )
