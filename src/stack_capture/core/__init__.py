"""Core capture components.

This module exports the main capture classes:
- StackCollector: Walks a stack and builds a Stacktrace
- configure / new_stacktrace: Process-wide setup and capture
- SourceLineCache: Loads and caches source lines for context
- CallStackResolver / TracebackResolver: Stack introspection
- classify_name / is_in_app / trim_path: Frame classification
"""

from stack_capture.core.classifier import (
    DEFAULT_EXCLUDED_MARKERS,
    classify_name,
    encode_symbol,
    is_in_app,
    module_from_package,
    trim_path,
)
from stack_capture.core.collector import (
    StackCollector,
    configure,
    get_default_collector,
    new_stacktrace,
)
from stack_capture.core.line_cache import CacheStats, SourceLineCache
from stack_capture.core.resolver import CallStackResolver, TracebackResolver

__all__ = [
    "DEFAULT_EXCLUDED_MARKERS",
    "CacheStats",
    "CallStackResolver",
    "SourceLineCache",
    "StackCollector",
    "TracebackResolver",
    "classify_name",
    "configure",
    "encode_symbol",
    "get_default_collector",
    "is_in_app",
    "module_from_package",
    "new_stacktrace",
    "trim_path",
]
