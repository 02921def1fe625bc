"""Structured logging setup for stack_capture.

Capture code logs through ``structlog.get_logger()`` and so follows whatever
pipeline the host application has configured. Hosts without one can install
ours with configure_logging(), or through stack_capture.configure(), which
reads the ``logging`` section of a CollectorConfig.

Events rendered by this pipeline carry the package name and version, and
every string field is passed through the SecretRedactor first: source lines
and paths logged during capture may contain credentials.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from enum import StrEnum
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from stack_capture.utils.security import SecretRedactor

if TYPE_CHECKING:
    from stack_capture.config.schema import LoggingConfig

EventDict = MutableMapping[str, Any]


class LogFormat(StrEnum):
    """Log output format options."""

    JSON = "json"
    CONSOLE = "console"


class LogLevel(StrEnum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@lru_cache(maxsize=1)
def _event_redactor() -> SecretRedactor:
    return SecretRedactor()


@lru_cache(maxsize=1)
def _package_version() -> str | None:
    try:
        from stack_capture._version import __version__
    except (ImportError, RuntimeError):
        return None
    return __version__


def redact_value(value: Any) -> Any:
    """Redact secrets from a log field, descending into containers.

    Args:
        value: Field value; strings are redacted, dicts, lists and tuples
            are rebuilt with redacted members, anything else is returned as is

    Returns:
        Value of the same shape with secrets replaced
    """
    if isinstance(value, str):
        return _event_redactor().redact(value)
    if isinstance(value, dict):
        return {key: redact_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(redact_value(item) for item in value)
    return value


def redact_event(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Processor that redacts secrets from every field of an event."""
    for key, value in event_dict.items():
        event_dict[key] = redact_value(value)
    return event_dict


def add_package_info(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Processor that tags events with the package name and version."""
    event_dict.setdefault("service", "stack-capture")
    version = _package_version()
    if version is not None:
        event_dict.setdefault("version", version)
    return event_dict


def _renderer(log_format: LogFormat) -> Any:
    if log_format == LogFormat.CONSOLE:
        return structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    return structlog.processors.JSONRenderer()


def _handlers(level: int, file_path: Path | None) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if file_path is not None:
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(file_path))
        except OSError as e:
            # Keep logging to stderr
            logging.getLogger("stack_capture").warning(
                "Could not open log file %s: %s", file_path, e
            )

    for handler in handlers:
        handler.setLevel(level)
    return handlers


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    log_format: LogFormat | str = LogFormat.JSON,
    file_path: Path | str | None = None,
) -> None:
    """Install the stack_capture logging pipeline.

    Replaces the structlog configuration and the handlers of the stdlib
    root logger.

    Args:
        level: Minimum level to emit
        log_format: json or console rendering
        file_path: Also write events to this file when given
    """
    level = LogLevel(str(level).upper())
    log_format = LogFormat(str(log_format).lower())
    numeric_level = getattr(logging, level.value)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_package_info,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            redact_event,
            _renderer(log_format),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        handlers=_handlers(numeric_level, Path(file_path) if file_path else None),
        force=True,
    )


def configure_logging_from_config(config: LoggingConfig) -> None:
    """Install the logging pipeline described by a LoggingConfig."""
    configure_logging(
        level=config.level,
        log_format=config.format,
        file_path=config.file.path if config.file.enabled else None,
    )
