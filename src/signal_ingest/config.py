"""Configuration management via pydantic-settings.

All configuration is loaded from environment variables and/or a .env file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Storage ---
    database_path: str = "data/signals.db"
    store_timeout_seconds: float = 30.0
    store_retry_attempts: int = 0

    # --- Logging / reporting ---
    log_level: str = "INFO"
    issues_dir: str = "data/issues"
    summary_issue_limit: int = 10

    # --- Remote sources ---
    max_retry_attempts: int = 2
    remote_timeout_seconds: float = 30.0

    # --- Reconciliation rules ---
    project_dedup_key: Literal["state", "state_date"] = "state_date"

    # ---- Validators ----

    @field_validator("log_level")
    @classmethod
    def _valid_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v.upper()

    @field_validator("max_retry_attempts", "store_retry_attempts")
    @classmethod
    def _valid_retry_attempts(cls, v: int) -> int:
        if v < 0 or v > 5:
            raise ValueError("retry attempts must be between 0 and 5")
        return v

    @field_validator("store_timeout_seconds", "remote_timeout_seconds")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be positive")
        return v

    @field_validator("summary_issue_limit")
    @classmethod
    def _valid_issue_limit(cls, v: int) -> int:
        if v < 1 or v > 100:
            raise ValueError("SUMMARY_ISSUE_LIMIT must be between 1 and 100")
        return v

    @model_validator(mode="after")
    def _ensure_db_parent_dir(self) -> Config:
        """Auto-create parent directory for database file."""
        db_path = Path(self.database_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        return self

    # ---- Convenience properties ----

    @property
    def project_key_includes_date(self) -> bool:
        return self.project_dedup_key == "state_date"
