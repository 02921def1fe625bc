"""Source line cache for stack frame context.

This module implements the SourceLineCache class that serves source lines
around a call site. It handles:
- Reading each file from disk at most once per cache instance
- Caching failed reads as empty results so they are never retried
- Clamping context windows to the file bounds
- Concurrent use from several threads capturing errors at once
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from threading import Lock
from typing import TYPE_CHECKING

import structlog

from stack_capture.utils.metrics import get_metrics

if TYPE_CHECKING:
    from stack_capture.config.schema import SourceCacheConfig

log = structlog.get_logger()

DEFAULT_MAX_FILE_BYTES = 5 * 1024 * 1024


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time statistics for a SourceLineCache."""

    entries: int
    hits: int
    misses: int
    read_errors: int


class SourceLineCache:
    """Caches source files split into lines.

    Entries are keyed by the path string exactly as given and are never
    evicted. A failed read is stored as an empty tuple, so a missing or
    unreadable file costs one disk access for the lifetime of the cache.

    The lock guards lookups and inserts only; file reads run outside it.

    Example:
        cache = SourceLineCache()
        lines, index = cache.load("/app/views.py", line_number=42, context=2)
        call_line = lines[index] if lines else ""
    """

    def __init__(self, max_file_bytes: int = DEFAULT_MAX_FILE_BYTES) -> None:
        """Initialize the cache.

        Args:
            max_file_bytes: Maximum number of bytes read from any one file
        """
        self._max_file_bytes = max_file_bytes
        self._cache: dict[str, tuple[str, ...]] = {}
        self._lock = Lock()
        self._hits = 0
        self._misses = 0
        self._read_errors = 0

    @classmethod
    def from_config(cls, config: SourceCacheConfig) -> SourceLineCache:
        """Create a cache from its configuration section."""
        return cls(max_file_bytes=config.max_file_bytes)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        with self._lock:
            return os.fspath(path) in self._cache

    def lines(self, path: str | os.PathLike[str]) -> tuple[str, ...]:
        """Get all lines of a file, reading it on first use.

        Args:
            path: Path to the source file

        Returns:
            Lines without terminators; empty if the file could not be read
        """
        key = os.fspath(path)

        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._hits += 1
            else:
                self._misses += 1

        metrics = get_metrics()
        if cached is not None:
            metrics.cache_hits.inc()
            log.debug("cache_hit", path=key)
            return cached

        metrics.cache_misses.inc()
        log.debug("cache_miss", path=key)

        lines = self._read(key)

        # Another thread may have loaded the same file meanwhile; keep the first
        with self._lock:
            return self._cache.setdefault(key, lines)

    def load(
        self,
        path: str | os.PathLike[str],
        line_number: int,
        context: int,
    ) -> tuple[tuple[str, ...], int]:
        """Get the lines around a 1-based line number.

        The window spans `context` lines on each side of the target and is
        clamped to the start and end of the file.

        Args:
            path: Path to the source file
            line_number: Target line (1-indexed)
            context: Lines to include before and after the target

        Returns:
            Tuple of (window lines, index of the target line within them).
            The window is empty and the index 0 when the file is unreadable
            or the line number is out of range.
        """
        lines = self.lines(path)

        line = line_number - 1
        if not lines or line < 0 or line >= len(lines):
            return (), 0

        context = max(context, 0)
        start = max(line - context, 0)
        end = min(line + context + 1, len(lines))

        return lines[start:end], line - start

    def clear(self) -> None:
        """Drop all cached entries, including cached failures."""
        with self._lock:
            self._cache.clear()
        log.debug("cache_cleared")

    def stats(self) -> CacheStats:
        """Get hit, miss and error counts for this cache."""
        with self._lock:
            return CacheStats(
                entries=len(self._cache),
                hits=self._hits,
                misses=self._misses,
                read_errors=self._read_errors,
            )

    def _read(self, path: str) -> tuple[str, ...]:
        """Read and split a file, returning an empty tuple on any OS error."""
        try:
            with open(path, "rb") as f:
                data = f.read(self._max_file_bytes + 1)
        except OSError as e:
            with self._lock:
                self._read_errors += 1
            get_metrics().source_read_errors.inc()
            log.debug("source_read_failed", path=path, error=str(e))
            return ()

        if len(data) > self._max_file_bytes:
            log.debug("source_truncated", path=path, max_bytes=self._max_file_bytes)
            data = data[: self._max_file_bytes]

        return split_source(data.decode("utf-8", errors="replace"))


def split_source(text: str) -> tuple[str, ...]:
    """Split source text into lines the way line numbers count them.

    Only '\\n' ends a line, so form feeds and other characters that
    str.splitlines() treats as breaks do not shift numbering. A trailing
    '\\r' is dropped from each line.

    A final '\\n' terminates the last line instead of opening an empty one,
    so "hello\\nworld\\n" has two lines and line 3 of it is out of range.

    Args:
        text: Decoded file content

    Returns:
        Lines without terminators
    """
    if not text:
        return ()

    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()

    return tuple(line[:-1] if line.endswith("\r") else line for line in lines)
