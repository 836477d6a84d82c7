"""Image uploader configuration.

All settings come from environment variables, optionally seeded from a
``.env`` file in the working directory. Variables set in the process
environment win over the file; empty values count as unset.

Missing values never abort startup: an empty bucket or bad database
credentials surface later as failed uploads, not as a crashed process.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

logger = logging.getLogger(__name__)

ENV_FILE = Path(".env")
DEFAULT_STATIC_DIR = Path(__file__).resolve().parent / "static"


def _settings_config() -> SettingsConfigDict:
    return SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        populate_by_name=True,
        extra="ignore",
    )


# ---------------------------------------------------------------------------
# Settings sections
# ---------------------------------------------------------------------------


class ServerSettings(BaseSettings):
    model_config = _settings_config()

    host:       str = Field("0.0.0.0", validation_alias="HOST")
    port:       int = Field(3000, validation_alias="PORT")
    static_dir: str = Field(str(DEFAULT_STATIC_DIR), validation_alias="STATIC_DIR")
    log_level:  str = Field("info", validation_alias="LOG_LEVEL")

    @field_validator("log_level")
    @classmethod
    def normalise_level(cls, value: str) -> str:
        return value.strip().lower()


class StorageSettings(BaseSettings):
    """S3 bucket and credentials. ``None`` credentials → boto3 default chain."""
    model_config = _settings_config()

    region:            Optional[str] = Field(None, validation_alias="AWS_REGION")
    access_key_id:     Optional[str] = Field(None, validation_alias="AWS_ACCESS_KEY_ID")
    secret_access_key: Optional[str] = Field(None, validation_alias="AWS_SECRET_ACCESS_KEY")
    bucket_name:       str           = Field("", validation_alias="AWS_S3_BUCKET_NAME")
    endpoint_url:      Optional[str] = Field(None, validation_alias="AWS_S3_ENDPOINT_URL")


class DatabaseSettings(BaseSettings):
    """MySQL (RDS) connection parameters for the ``image_metadata`` table."""
    model_config = _settings_config()

    host:         str           = Field("localhost", validation_alias="RDS_HOST")
    port:         int           = Field(3306, validation_alias="RDS_PORT")
    user:         str           = Field("", validation_alias="RDS_USER")
    password:     str           = Field("", validation_alias="RDS_PASSWORD")
    database:     str           = Field("", validation_alias="RDS_DATABASE")
    driver:       str           = Field("mysql+pymysql", validation_alias="DATABASE_DRIVER")
    url_override: Optional[str] = Field(None, validation_alias="DATABASE_URL")

    @property
    def url(self) -> str:
        """SQLAlchemy URL; ``DATABASE_URL`` takes precedence when set."""
        if self.url_override:
            return self.url_override
        return URL.create(
            self.driver,
            username=self.user or None,
            password=self.password or None,
            host=self.host,
            port=self.port,
            database=self.database or None,
        ).render_as_string(hide_password=False)


class AppSettings(BaseModel):
    server:   ServerSettings   = Field(default_factory=ServerSettings)
    storage:  StorageSettings  = Field(default_factory=StorageSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_config(env_file: Optional[Path] = ENV_FILE) -> AppSettings:
    """Build *AppSettings* from the environment.

    Args:
        env_file: Dotenv file read beneath the process environment;
                  ``None`` reads the process environment only.
    """
    settings = AppSettings(
        server=ServerSettings(_env_file=env_file),
        storage=StorageSettings(_env_file=env_file),
        database=DatabaseSettings(_env_file=env_file),
    )
    if not settings.storage.bucket_name:
        logger.warning("AWS_S3_BUCKET_NAME is not set; uploads will fail")
    logger.info(
        "Settings loaded (server=%s:%s, bucket=%r, database=%s@%s)",
        settings.server.host,
        settings.server.port,
        settings.storage.bucket_name,
        settings.database.database or "-",
        settings.database.host,
    )
    return settings


_config: Optional[AppSettings] = None


def get_config() -> AppSettings:
    """Return the process-wide settings, loading them on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(settings: Optional[AppSettings]) -> None:
    """Replace (or clear, with ``None``) the process-wide settings."""
    global _config
    _config = settings
