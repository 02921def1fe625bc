"""Stack trace collection with source context.

This module implements the StackCollector class that turns a call stack
into an immutable Stacktrace. It handles:
- Walking the stack from a skip depth up to a bounded number of frames
- Splitting raw symbols into module and function names
- Attaching source context from a SourceLineCache
- Marking frames as application code or library code
- Optional secret redaction of the attached context

Capture never raises: unreadable sources give frames without context, an
unresolvable level ends the walk, and a walk that resolves nothing returns
None.
"""

from __future__ import annotations

import sys
from collections.abc import Iterable
from threading import Lock

import structlog

from stack_capture.config.schema import CollectorConfig
from stack_capture.core.classifier import classify_name, is_in_app, module_from_package, trim_path
from stack_capture.core.line_cache import SourceLineCache
from stack_capture.core.resolver import CallStackResolver, TracebackResolver
from stack_capture.interfaces.resolver import FrameResolver, ResolvedFrame
from stack_capture.models.stacktrace import Frame, Stacktrace
from stack_capture.utils.logging import configure_logging_from_config
from stack_capture.utils.metrics import Timer, get_metrics
from stack_capture.utils.security import RedactionError, SecretRedactor

log = structlog.get_logger()

Context = tuple[str, tuple[str, ...], tuple[str, ...]]

_NO_CONTEXT: Context = ("", (), ())


class StackCollector:
    """Builds stack traces with source context.

    One collector owns one SourceLineCache; share the collector (or the
    cache) to share cached source between captures.

    Example:
        collector = StackCollector()
        trace = collector.capture(app_packages=["myapp"])
        if trace is not None:
            print(trace.culprit())
    """

    def __init__(
        self,
        config: CollectorConfig | None = None,
        cache: SourceLineCache | None = None,
        redactor: SecretRedactor | None = None,
    ) -> None:
        """Initialize the StackCollector.

        Args:
            config: Collector configuration (defaults apply if omitted)
            cache: Source line cache to use (a new one is created if omitted)
            redactor: Secret redactor for context lines; built from the
                redaction config when omitted and redaction is enabled

        Raises:
            RedactionError: If a configured custom redaction pattern is invalid
        """
        self._config = config if config is not None else CollectorConfig()
        # An empty cache is falsy, so test against None to keep a shared one
        self._cache = (
            cache if cache is not None else SourceLineCache.from_config(self._config.source_cache)
        )

        if redactor is None and self._config.redaction.enabled:
            redactor = SecretRedactor(
                placeholder=self._config.redaction.placeholder,
                custom_patterns=self._config.redaction.custom_patterns,
            )
        self._redactor = redactor

    @property
    def cache(self) -> SourceLineCache:
        """The source line cache used by this collector."""
        return self._cache

    @property
    def config(self) -> CollectorConfig:
        """The configuration this collector was built with."""
        return self._config

    def capture(
        self,
        skip: int = 0,
        context_lines: int | None = None,
        app_packages: Iterable[str] | None = None,
        resolver: FrameResolver | None = None,
    ) -> Stacktrace | None:
        """Capture the stack of the calling code.

        With the default resolver, depth 0 is the function that called
        capture(), so the last frame of the result is that call site.

        Args:
            skip: Number of innermost levels to leave out
            context_lines: Source lines on each side of every call site;
                0 disables context, a negative value keeps only the call line.
                Defaults to the configured value.
            app_packages: Packages that count as application code.
                Defaults to the configured packages.
            resolver: Stack introspection to walk instead of the live stack

        Returns:
            Stacktrace ordered oldest caller first, or None if no frame resolved
        """
        if resolver is None:
            resolver = CallStackResolver(sys._getframe(1))

        return self._collect(resolver, max(skip, 0), context_lines, app_packages)

    def capture_exception(
        self,
        exc: BaseException,
        context_lines: int | None = None,
        app_packages: Iterable[str] | None = None,
    ) -> Stacktrace | None:
        """Capture the stack an exception propagated through.

        Args:
            exc: A raised exception
            context_lines: As for capture()
            app_packages: As for capture()

        Returns:
            Stacktrace ending at the frame that raised, or None if the
            exception carries no traceback
        """
        if exc.__traceback__ is None:
            get_metrics().traces_empty.inc()
            log.debug("exception_not_raised", exception_type=type(exc).__name__)
            return None

        return self._collect(TracebackResolver(exc.__traceback__), 0, context_lines, app_packages)

    def _collect(
        self,
        resolver: FrameResolver,
        skip: int,
        context_lines: int | None,
        app_packages: Iterable[str] | None,
    ) -> Stacktrace | None:
        capture_config = self._config.capture
        if context_lines is None:
            context_lines = capture_config.context_lines
        packages = tuple(capture_config.app_packages if app_packages is None else app_packages)

        metrics = get_metrics()
        frames: list[Frame] = []

        with Timer(metrics.capture_duration):
            depth = skip
            while len(frames) < capture_config.max_frames:
                resolved = resolver.resolve(depth)
                if resolved is None:
                    break
                frames.append(self._build_frame(resolved, context_lines, packages))
                depth += 1
            else:
                if resolver.resolve(depth) is not None:
                    log.debug(
                        "stack_walk_truncated",
                        skip=skip,
                        max_frames=capture_config.max_frames,
                    )

        if not frames:
            metrics.traces_empty.inc()
            log.debug("stacktrace_empty", skip=skip)
            return None

        # Collected innermost first; reports want the oldest caller first
        frames.reverse()
        trace = Stacktrace(frames=tuple(frames))

        metrics.traces_captured.inc()
        metrics.frames_collected.inc(len(frames))
        log.debug(
            "stacktrace_captured",
            frames_count=len(frames),
            in_app_count=len(trace.in_app_frames),
            culprit=trace.culprit(),
        )

        return trace

    def _build_frame(
        self,
        resolved: ResolvedFrame,
        context_lines: int,
        app_packages: tuple[str, ...],
    ) -> Frame:
        package, function = classify_name(resolved.symbol)
        module = module_from_package(package)
        markers = self._config.capture.excluded_markers
        # App packages may be given dotted or slash-qualified
        in_app = is_in_app(module, app_packages, markers) or is_in_app(
            package, app_packages, markers
        )
        context_line, pre_context, post_context = self._source_context(
            resolved.absolute_path, resolved.line_number, context_lines
        )

        return Frame(
            filename=trim_path(resolved.absolute_path, self._config.capture.source_roots),
            absolute_path=resolved.absolute_path,
            function=function,
            module=module,
            line_number=resolved.line_number,
            context_line=context_line,
            pre_context=pre_context,
            post_context=post_context,
            in_app=in_app,
        )

    def _source_context(self, path: str, line_number: int, context_lines: int) -> Context:
        """Get (context_line, pre_context, post_context) for a call site."""
        if context_lines == 0:
            return _NO_CONTEXT

        lines, index = self._cache.load(path, line_number, max(context_lines, 0))
        if not lines:
            return _NO_CONTEXT

        if context_lines < 0:
            context: Context = (lines[index], (), ())
        else:
            context = (lines[index], lines[:index], lines[index + 1 :])

        return self._redact(path, context)

    def _redact(self, path: str, context: Context) -> Context:
        if self._redactor is None:
            return context

        context_line, pre_context, post_context = context
        try:
            redacted: Context = (
                self._redactor.redact(context_line),
                self._redactor.redact_lines(pre_context),
                self._redactor.redact_lines(post_context),
            )
        except RedactionError as e:
            # Unredacted source must not leave the process
            log.warning("context_redaction_failed", path=path, error=str(e))
            return _NO_CONTEXT

        changed = sum(
            before != after
            for before, after in zip(
                (context_line, *pre_context, *post_context),
                (redacted[0], *redacted[1], *redacted[2]),
                strict=True,
            )
        )
        if changed:
            get_metrics().secrets_redacted.inc(changed)

        return redacted


_default_collector: StackCollector | None = None
_default_lock = Lock()


def get_default_collector() -> StackCollector:
    """Get the process-wide collector used by new_stacktrace()."""
    global _default_collector
    if _default_collector is None:
        with _default_lock:
            if _default_collector is None:
                _default_collector = StackCollector()
    return _default_collector


def configure(config: CollectorConfig | None = None) -> StackCollector:
    """Apply a configuration process-wide.

    Installs the logging pipeline from the ``logging`` section and replaces
    the collector used by new_stacktrace(). Call once at startup, typically
    with the result of load_config().

    Args:
        config: Configuration to apply (defaults plus environment if omitted)

    Returns:
        The new process-wide collector
    """
    global _default_collector
    if config is None:
        config = CollectorConfig()

    configure_logging_from_config(config.logging)
    collector = StackCollector(config)

    with _default_lock:
        _default_collector = collector

    log.debug(
        "collector_configured",
        context_lines=config.capture.context_lines,
        app_packages=config.capture.app_packages,
        redaction=config.redaction.enabled,
    )
    return collector


def new_stacktrace(
    skip: int = 0,
    context_lines: int | None = None,
    app_packages: Iterable[str] | None = None,
) -> Stacktrace | None:
    """Capture the caller's stack with the process-wide collector.

    Args:
        skip: Number of innermost levels to leave out (0 keeps the caller)
        context_lines: Source lines on each side of every call site
        app_packages: Packages that count as application code

    Returns:
        Stacktrace ordered oldest caller first, or None if no frame resolved
    """
    return get_default_collector().capture(
        skip=skip,
        context_lines=context_lines,
        app_packages=app_packages,
        resolver=CallStackResolver(sys._getframe(1)),
    )
