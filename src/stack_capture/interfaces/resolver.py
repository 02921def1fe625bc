"""Abstract interface for stack introspection."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class ResolvedFrame:
    """Raw location of one stack level, before classification."""

    absolute_path: str
    line_number: int  # 1-indexed
    symbol: str  # Slash-qualified, e.g. "app/web/views.Handler.get"


class FrameResolver(Protocol):
    """Abstract interface for walking a call stack.

    Depth 0 is the innermost level the resolver exposes; larger depths move
    outward towards the oldest caller. Implementations exist for the live
    interpreter stack and for exception tracebacks, and tests substitute
    fakes with fixed frames.
    """

    def resolve(self, depth: int) -> ResolvedFrame | None:
        """
        Resolve one stack level.

        Args:
            depth: Number of levels outward from the innermost level

        Returns:
            The resolved frame, or None if the level does not exist or its
            file, line or symbol cannot be determined
        """
        ...
