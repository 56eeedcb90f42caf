"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, computed_field, field_validator


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(default=["*"])
    allow_credentials: bool = False
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default=["*"])

    @field_validator("origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        # Environment substitution yields a single comma separated string
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./bookstore.db",
        description="Database connection URL",
    )
    echo: bool = Field(default=False, description="Echo SQL statements")
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")

    @computed_field
    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @computed_field
    @property
    def connection_string(self) -> str:
        """Normalize legacy scheme aliases into a SQLAlchemy URL."""
        if self.url.startswith("postgres://"):
            logger.warning("Rewriting deprecated postgres:// scheme to postgresql://")
            return self.url.replace("postgres://", "postgresql://", 1)
        return self.url


class StorageConfig(BaseModel):
    """Image storage configuration model."""

    upload_dir: str = Field(
        default="public/images", description="Directory holding uploaded images"
    )
    url_prefix: str = Field(
        default="/images", description="URL prefix images are served under"
    )
    max_size_mb: int = Field(default=5, description="Maximum upload size in MiB")
    allowed_extensions: list[str] = Field(
        default_factory=lambda: [".jpeg", ".jpg", ".png", ".gif"],
        description="Accepted file extensions (lower-case, with dot)",
    )
    allowed_mime_types: list[str] = Field(
        default_factory=lambda: ["image/jpeg", "image/jpg", "image/png", "image/gif"],
        description="Accepted declared MIME types",
    )

    @computed_field
    @property
    def max_size_bytes(self) -> int:
        return self.max_size_mb * 1024 * 1024


class AppConfig(BaseModel):
    """Application configuration model."""

    name: str = Field(default="bookstore-api", description="Service name")
    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="0.0.0.0", description="Application host")
    port: int = Field(default=5555, description="Application port")
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    storage: StorageConfig = Field(
        default_factory=StorageConfig, description="Image storage configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
