"""Frame resolvers backed by interpreter introspection.

CallStackResolver walks the live call stack outward from a given frame.
TracebackResolver walks an exception's traceback outward from the frame
that raised it.
"""

from __future__ import annotations

import os
from types import FrameType, TracebackType

from stack_capture.core.classifier import encode_symbol
from stack_capture.interfaces.resolver import ResolvedFrame


def resolve_frame(frame: FrameType, line_number: int | None) -> ResolvedFrame | None:
    """Build a ResolvedFrame from an interpreter frame.

    Pseudo-files such as "<string>" or "<frozen runpy>" keep their name
    as-is; they resolve, but have no readable source.

    Args:
        frame: Interpreter frame
        line_number: Line being executed in that frame

    Returns:
        The resolved frame, or None if its file, line or name is missing
    """
    code = frame.f_code
    filename = code.co_filename
    qualname = code.co_qualname

    if not filename or not qualname or not line_number or line_number < 1:
        return None

    if not filename.startswith("<"):
        filename = os.path.abspath(filename)

    module = frame.f_globals.get("__name__") or ""

    return ResolvedFrame(
        absolute_path=filename,
        line_number=line_number,
        symbol=encode_symbol(str(module), qualname),
    )


class CallStackResolver:
    """Resolves levels of the live call stack.

    Depth 0 is the origin frame itself, depth 1 its caller, and so on.
    Frames are walked lazily and remembered, so resolving depths in order
    touches each frame once.

    Example:
        resolver = CallStackResolver(sys._getframe())
        here = resolver.resolve(0)
    """

    def __init__(self, origin: FrameType | None) -> None:
        """Initialize the resolver.

        Args:
            origin: Innermost frame to expose (depth 0)
        """
        self._frames: list[FrameType] = [origin] if origin is not None else []
        self._exhausted = origin is None

    def _frame_at(self, depth: int) -> FrameType | None:
        while len(self._frames) <= depth and not self._exhausted:
            parent = self._frames[-1].f_back
            if parent is None:
                self._exhausted = True
            else:
                self._frames.append(parent)
        return self._frames[depth] if depth < len(self._frames) else None

    def resolve(self, depth: int) -> ResolvedFrame | None:
        if depth < 0:
            return None
        frame = self._frame_at(depth)
        if frame is None:
            return None
        return resolve_frame(frame, frame.f_lineno)


class TracebackResolver:
    """Resolves levels of an exception traceback.

    Depth 0 is the frame that raised; the last depth is the outermost frame
    the exception propagated through.
    """

    def __init__(self, tb: TracebackType | None) -> None:
        entries: list[tuple[FrameType, int | None]] = []
        while tb is not None:
            entries.append((tb.tb_frame, tb.tb_lineno))
            tb = tb.tb_next
        entries.reverse()
        self._entries = entries

    def __len__(self) -> int:
        return len(self._entries)

    def resolve(self, depth: int) -> ResolvedFrame | None:
        if depth < 0 or depth >= len(self._entries):
            return None
        frame, line_number = self._entries[depth]
        return resolve_frame(frame, line_number)
