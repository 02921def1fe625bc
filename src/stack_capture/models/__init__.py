"""Data models and transfer objects."""

from .stacktrace import Frame, Stacktrace

__all__ = [
    "Frame",
    "Stacktrace",
]
