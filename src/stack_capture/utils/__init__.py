"""Utility functions and helpers.

- security: Secret redaction for source context
- logging: Structured logging pipeline with secret redaction
- metrics: In-process capture and cache metrics
"""

from stack_capture.utils.logging import (
    LogFormat,
    LogLevel,
    configure_logging,
    configure_logging_from_config,
)
from stack_capture.utils.metrics import (
    Counter,
    Histogram,
    MetricsRegistry,
    Timer,
    get_metrics,
)
from stack_capture.utils.security import (
    RedactionError,
    SecretRedactor,
    SecurityError,
)

__all__ = [
    # Metrics
    "Counter",
    "Histogram",
    # Logging
    "LogFormat",
    "LogLevel",
    "MetricsRegistry",
    # Security
    "RedactionError",
    "SecretRedactor",
    "SecurityError",
    "Timer",
    "configure_logging",
    "configure_logging_from_config",
    "get_metrics",
]
