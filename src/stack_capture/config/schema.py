"""Pydantic models for configuration schema."""

import sys
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_source_roots() -> list[Path]:
    # Empty entries on sys.path mean the current directory
    return [Path(entry) if entry else Path.cwd() for entry in sys.path]


class CaptureConfig(BaseModel):
    """Stack capture configuration."""

    context_lines: int = Field(
        2,
        ge=-1,
        le=100,
        description="Lines on each side of the call site; 0 disables, -1 keeps the call line only",
    )
    max_frames: int = Field(100, ge=1, le=1000)
    app_packages: list[str] = []
    excluded_markers: list[str] = [
        "vendor",
        "_vendor",
        "third_party",
        "site-packages",
        "dist-packages",
    ]
    source_roots: list[Path] = Field(default_factory=_default_source_roots)

    @field_validator("app_packages")
    @classmethod
    def validate_app_packages(cls, v: list[str]) -> list[str]:
        """Reject blank package names, which would match every module."""
        for package in v:
            if not package.strip():
                raise ValueError("App package names must not be empty")
        return v


class SourceCacheConfig(BaseModel):
    """Source line cache configuration."""

    max_file_bytes: int = Field(5 * 1024 * 1024, ge=1024)


class RedactionConfig(BaseModel):
    """Secret redaction for source context."""

    enabled: bool = False
    placeholder: str = "[REDACTED]"
    custom_patterns: list[tuple[str, str]] = []


class FileLoggingConfig(BaseModel):
    """File logging configuration."""

    enabled: bool = False
    path: Path = Path("/var/log/stack-capture/stack-capture.log")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"
    file: FileLoggingConfig = FileLoggingConfig()


class CollectorConfig(BaseSettings):
    """Root configuration for stack_capture."""

    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    source_cache: SourceCacheConfig = SourceCacheConfig()
    redaction: RedactionConfig = RedactionConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(
        env_prefix="STACK_CAPTURE_",
        env_nested_delimiter="__",
    )
