"""Protocol definitions for pluggable collaborators."""

from .resolver import FrameResolver, ResolvedFrame

__all__ = ["FrameResolver", "ResolvedFrame"]
