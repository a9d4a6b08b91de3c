"""Centralized configuration for doc-finder using Pydantic Settings."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed configuration loaded from ``DOC_FINDER_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DOC_FINDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    store_url: str = Field(
        default="sqlite:///doc_finder.sqlite",
        description="Store location: 'sqlite:///path', 'memory://' or a bare SQLite file path",
    )
    sqlite_busy_timeout_ms: int = Field(
        default=30000, ge=0, description="How long SQLite waits on a locked database before failing"
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="info", description="Root logging level"
    )
    log_json: bool = Field(default=False, description="Emit structured JSON log lines")

    # Tracing
    tracing_enabled: bool = Field(default=False, description="Install an OpenTelemetry SDK tracer provider")
    service_name: str = Field(default="doc-finder", description="service.name resource attribute for traces")

    @field_validator("log_level", mode="before")
    @classmethod
    def _lower_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("store_url")
    @classmethod
    def _require_store_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("store_url must not be empty")
        return value
