"""Configuration loading and validation."""

from .loader import load_config
from .schema import (
    CaptureConfig,
    CollectorConfig,
    LoggingConfig,
    RedactionConfig,
    SourceCacheConfig,
)

__all__ = [
    # Loader
    "load_config",
    # Root config
    "CollectorConfig",
    # Sections
    "CaptureConfig",
    "SourceCacheConfig",
    "RedactionConfig",
    "LoggingConfig",
]
