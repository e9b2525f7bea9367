"""
Environment configuration for the process-wide default logger.

Prefix: ULOG_

    ULOG_TARGET="console(output=stdout) file(path=logs/app-%Y%m%d.log)"
    ULOG_LEVEL=debug
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ULogSettings(BaseSettings):
    """Defaults used by `configure_logging` when arguments are omitted."""

    model_config = SettingsConfigDict(
        env_prefix="ULOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    target: str = Field(default="console()", description="Sink descriptor for the default logger")
    level: Optional[str] = Field(
        default=None,
        description="Minimum severity (error, warning, info, debug); overrides option(level=...)",
    )
