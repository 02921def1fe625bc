"""Data models for captured stack traces."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Frame:
    """A single level of a captured call stack."""

    filename: str  # Relative to a source root when one matches
    absolute_path: str
    function: str
    module: str
    line_number: int
    context_line: str = ""
    pre_context: tuple[str, ...] = ()
    post_context: tuple[str, ...] = ()
    in_app: bool = False

    @property
    def qualified_name(self) -> str:
        """Module-qualified function name, e.g. 'app.views.index'."""
        return f"{self.module}.{self.function}"

    @property
    def has_context(self) -> bool:
        """Check if source context was attached to this frame."""
        return bool(self.context_line or self.pre_context or self.post_context)


@dataclass(frozen=True)
class Stacktrace:
    """An ordered, immutable sequence of frames.

    Frames are ordered oldest caller first; the last frame is the most
    recent call (the error site).
    """

    frames: tuple[Frame, ...]

    def __len__(self) -> int:
        return len(self.frames)

    @property
    def innermost_frame(self) -> Frame:
        """The most recent call (last frame)."""
        if not self.frames:
            raise ValueError("Stacktrace has no frames")
        return self.frames[-1]

    @property
    def in_app_frames(self) -> tuple[Frame, ...]:
        """Frames that belong to application code."""
        return tuple(frame for frame in self.frames if frame.in_app)

    def culprit(self) -> str:
        """
        Qualified name of the innermost in-app frame.

        Frames without a module or function are never the culprit.

        Returns:
            '<module>.<function>', or an empty string if no frame is in-app
        """
        for frame in reversed(self.frames):
            if frame.in_app and frame.module and frame.function:
                return frame.qualified_name
        return ""
