"""Shared test fixtures for stack_capture."""

import logging
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path

import pytest
import structlog

from stack_capture.interfaces.resolver import ResolvedFrame
from stack_capture.utils.metrics import MetricsRegistry


class FakeResolver:
    """Resolver over a fixed list of frames, innermost first."""

    def __init__(self, frames: Sequence[ResolvedFrame]) -> None:
        self.frames = list(frames)
        self.calls: list[int] = []

    def resolve(self, depth: int) -> ResolvedFrame | None:
        self.calls.append(depth)
        if 0 <= depth < len(self.frames):
            return self.frames[depth]
        return None


@pytest.fixture(autouse=True)
def reset_metrics() -> Iterator[None]:
    """Give every test a fresh metrics registry."""
    MetricsRegistry.reset_instance()
    yield
    MetricsRegistry.reset_instance()


@pytest.fixture
def make_source(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a factory that writes a source file under tmp_path."""

    def _make(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _make


@pytest.fixture
def numbered_source(make_source: Callable[[str, str], Path]) -> Path:
    """A ten-line file whose lines read 'line 1' .. 'line 10'."""
    return make_source("numbered.py", "".join(f"line {i}\n" for i in range(1, 11)))


@pytest.fixture
def fake_resolver_factory() -> Callable[[Sequence[ResolvedFrame]], FakeResolver]:
    """Return the FakeResolver class as a factory."""
    return FakeResolver


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Undo structlog and root logger changes made by a test."""
    root = logging.getLogger()
    handlers, level = set(root.handlers), root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    structlog.reset_defaults()
