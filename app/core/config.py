"""
Application configuration.
Values are read from environment variables or a local .env file.
"""
import os
import logging
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    APP_ENV: str = "development"
    JWT_SECRET_KEY: str = os.environ.get("JWT_SECRET_KEY", "")
    DATABASE_URL: str
    DB_ECHO: bool = False

    class Config:
        env_file = ".env"


settings = Settings()

# Validate critical security settings
if not settings.JWT_SECRET_KEY:
    raise ValueError(
        "JWT_SECRET_KEY is not set. Export it as an environment variable or add it to .env. "
        "Generate one with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
    )

logger.info("Loaded settings for %s environment", settings.APP_ENV)
