"""Application configuration via Pydantic BaseSettings."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Environment
    ENVIRONMENT: Environment = Environment.development

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ALLOWED_ORIGINS: str = "*"

    # Deal store -- multiplier on the simulated backend latency (0 disables)
    DEAL_STORE_LATENCY_SCALE: float = 1.0
    DEAL_STORE_SEED: bool = True

    # Hosted backend (tasks, discounts)
    HOSTED_BACKEND_URL: str = ""
    HOSTED_PROJECT_ID: str = ""
    HOSTED_PUBLIC_KEY: str = ""
    HOSTED_TIMEOUT: float = 15.0

    @property
    def hosted_backend_configured(self) -> bool:
        """True when every credential needed by the hosted backend client is set."""
        return bool(
            self.HOSTED_BACKEND_URL and self.HOSTED_PROJECT_ID and self.HOSTED_PUBLIC_KEY
        )

    def get_cors_origins(self) -> list[str]:
        if self.CORS_ALLOWED_ORIGINS == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ALLOWED_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()
