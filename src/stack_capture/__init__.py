"""Stack trace capture with source context for error reports."""

from stack_capture.core import (
    SourceLineCache,
    StackCollector,
    classify_name,
    configure,
    is_in_app,
    new_stacktrace,
)
from stack_capture.models import Frame, Stacktrace

__all__ = [
    "Frame",
    "SourceLineCache",
    "StackCollector",
    "Stacktrace",
    "classify_name",
    "configure",
    "is_in_app",
    "new_stacktrace",
]
