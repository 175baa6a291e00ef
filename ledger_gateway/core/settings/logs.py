"""Logging configuration settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    """Structured logging configuration.

    Environment variables use LOG_ prefix.
    Example: LOG_LEVEL=DEBUG, LOG_JSON_LOGS=false
    """

    service_name: str = Field(
        default="ledger-gateway",
        description="Service name to include in every JSON record",
    )
    level: LogLevel = Field(default="INFO", description="Root logger level")
    json_logs: bool = Field(
        default=True,
        description="Emit JSON Lines instead of plain text",
    )

    console_enabled: bool = Field(default=True, description="Log to stderr")

    file_path: Path | None = Field(
        default=None,
        description="Optional rotating log file; None disables file logging",
    )
    file_max_bytes: int = Field(default=10_485_760, ge=1024, le=1_073_741_824)
    file_backup_count: int = Field(default=5, ge=0, le=100)

    include_context: bool = Field(
        default=True,
        description="Inject contextvar fields (correlation_id, ...) into records",
    )
    capture_warnings: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    def to_logging_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``configure_logging``."""
        return {
            "log_level": self.level,
            "json_logs": self.json_logs,
            "console_enabled": self.console_enabled,
            "file_path": self.file_path,
            "file_max_bytes": self.file_max_bytes,
            "file_backup_count": self.file_backup_count,
            "include_context": self.include_context,
            "capture_warnings": self.capture_warnings,
            "service_name": self.service_name,
        }
