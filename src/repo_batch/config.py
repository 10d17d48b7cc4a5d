"""Configuration management for repo-batch."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BatchSettings(BaseSettings):
    """Runtime configuration sourced from environment variables and optional .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    log_dir: Path = Field(
        default=Path("~/repo_scripts_logs"), validation_alias="REPO_BATCH_LOG_DIR"
    )
    log_level: str = Field(default="INFO", validation_alias="REPO_BATCH_LOG_LEVEL")
    marker: str = Field(default=".git", validation_alias="REPO_BATCH_MARKER")
    ask_prefix: str = Field(default="::ask::", validation_alias="REPO_BATCH_ASK_PREFIX")
    skip_prefix: str = Field(default="::skip::", validation_alias="REPO_BATCH_SKIP_PREFIX")
    terminate_timeout: float = Field(
        default=5.0, validation_alias="REPO_BATCH_TERMINATE_TIMEOUT"
    )
    prompt_idle_timeout: float = Field(
        default=0.5, validation_alias="REPO_BATCH_PROMPT_IDLE_TIMEOUT"
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "REPO_BATCH_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized

    @field_validator("marker")
    @classmethod
    def _validate_marker(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized or "/" in normalized:
            raise ValueError("REPO_BATCH_MARKER must be a single directory name")
        return normalized

    @field_validator("ask_prefix", "skip_prefix")
    @classmethod
    def _validate_prefix(cls, value: str) -> str:
        if not value or value != value.strip():
            raise ValueError("Protocol prefixes must be non-empty and carry no surrounding whitespace")
        return value

    @field_validator("terminate_timeout", "prompt_idle_timeout")
    @classmethod
    def _validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Timeouts must be > 0")
        return value


@lru_cache(maxsize=1)
def get_settings() -> BatchSettings:
    """Return cached settings instance."""

    settings = BatchSettings()
    settings.log_dir = settings.log_dir.expanduser().resolve()
    return settings


__all__ = ["BatchSettings", "get_settings"]
