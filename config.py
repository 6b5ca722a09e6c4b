"""
MarkPort v1 - Shared Configuration Module

This module provides centralized configuration management for the import
service and the ingest CLI. It loads settings from environment variables
(and an optional .env file) and provides typed access.
"""

from pathlib import Path
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database configuration. Without a URL the service uses in-memory stores."""
    url: Optional[str] = Field(default=None, alias="DATABASE_URL")
    pool_min_size: int = Field(default=2, alias="DB_POOL_MIN_SIZE")
    pool_max_size: int = Field(default=10, alias="DB_POOL_MAX_SIZE")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class ImportSettings(BaseSettings):
    """Import job processing configuration"""
    batch_size: int = Field(default=10, ge=1, alias="IMPORT_BATCH_SIZE")
    max_concurrent: int = Field(default=2, ge=1, alias="IMPORT_MAX_CONCURRENT")
    job_ttl_seconds: int = Field(default=3600, ge=1, alias="IMPORT_JOB_TTL_SECONDS")
    max_upload_bytes: int = Field(default=20 * 1024 * 1024, ge=1, alias="IMPORT_MAX_UPLOAD_BYTES")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)


class AppSettings(BaseSettings):
    """General application settings"""
    env: str = Field(default="development", alias="APP_ENV")
    default_user_id: str = Field(default="local", alias="DEFAULT_USER_ID")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class ClientSettings(BaseSettings):
    """Settings for the ingest CLI talking to a running import service"""
    server_url: str = Field(default="http://localhost:8000", alias="MARKPORT_SERVER_URL")
    poll_interval: float = Field(default=2.0, gt=0, alias="MARKPORT_POLL_INTERVAL")
    poll_timeout: float = Field(default=600.0, gt=0, alias="MARKPORT_POLL_TIMEOUT")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class Config:
    """Main configuration class that combines all settings"""

    def __init__(self):
        self.database = DatabaseSettings()
        self.imports = ImportSettings()
        self.app = AppSettings()
        self.client = ClientSettings()

    @property
    def is_development(self) -> bool:
        return self.app.env == "development"

    @property
    def is_production(self) -> bool:
        return self.app.env == "production"


# Global config instance, built on first use
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance"""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() re-reads the environment"""
    global _config
    _config = None


def load_env(env_file: str = ".env") -> bool:
    """Load environment variables from file. Returns False if the file is missing."""
    from dotenv import load_dotenv
    env_path = Path(env_file)
    if not env_path.exists():
        return False
    load_dotenv(env_path)
    reset_config()
    return True
