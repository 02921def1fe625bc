"""Frame classification: symbol splitting, in-app policy and path trimming.

Symbols follow a slash-qualified convention: package path components are
separated by '/', and the last path element holds '<package>.<function>'.
Python frames are encoded into this shape by the resolvers, e.g. the method
``Handler.get`` in module ``app.web.views`` becomes
``app/web/views.Handler.get``.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence

DEFAULT_EXCLUDED_MARKERS: tuple[str, ...] = (
    "vendor",
    "_vendor",
    "third_party",
    "site-packages",
    "dist-packages",
)


def encode_symbol(module: str, qualname: str) -> str:
    """Build a raw symbol from a Python module name and qualified name.

    Args:
        module: Dotted module name (e.g. "app.web.views")
        qualname: Qualified function name (e.g. "Handler.get")

    Returns:
        Slash-qualified symbol (e.g. "app/web/views.Handler.get")
    """
    return f"{module.replace('.', '/')}.{qualname}"


def classify_name(raw_symbol: str) -> tuple[str, str]:
    """Split a raw symbol into its package and function.

    Everything before the first '.' of the last path element is the final
    package segment; everything after it is the function, dots included.

    Args:
        raw_symbol: Symbol such as "github.com/org/pkg.Type.Method"

    Returns:
        Tuple of (package, function), e.g. ("github.com/org/pkg", "Type.Method").
        Both are empty if the last path element has no '.'.
    """
    last_slash = raw_symbol.rfind("/")
    prefix = raw_symbol[: last_slash + 1]
    last_element = raw_symbol[last_slash + 1 :]

    head, dot, function = last_element.partition(".")
    if not dot:
        return "", ""

    return prefix + head, function


def module_from_package(package: str) -> str:
    """Turn a slash-qualified package into a dotted module name."""
    return package.replace("/", ".")


def _has_excluded_segment(module: str, excluded_markers: Iterable[str]) -> bool:
    segments = module.replace("/", ".").split(".")
    return any(marker in segments for marker in excluded_markers)


def is_in_app(
    module: str,
    app_packages: Iterable[str],
    excluded_markers: Iterable[str] = DEFAULT_EXCLUDED_MARKERS,
) -> bool:
    """Decide whether a frame's module is application code.

    The module must be one of the application packages or live below one,
    and must not sit under a vendoring marker such as ``_vendor``.

    Args:
        module: Module of the frame
        app_packages: Package names that make up the application
        excluded_markers: Path segments that mark vendored or third-party code

    Returns:
        True if the frame is in-app
    """
    if not module:
        return False

    markers = tuple(excluded_markers)
    for package in app_packages:
        if not package:
            continue
        if module == package or module.startswith((f"{package}.", f"{package}/")):
            return not _has_excluded_segment(module, markers)

    return False


def trim_path(path: str, source_roots: Sequence[str | os.PathLike[str]]) -> str:
    """Make a path relative to the source root that shortens it most.

    Args:
        path: Absolute path of a source file
        source_roots: Directories that source files are imported from

    Returns:
        The shortest root-relative path, or the path unchanged if no root contains it
    """
    trimmed = path
    for root in source_roots:
        root_str = os.fspath(root).rstrip(os.sep)
        if not root_str:
            continue
        prefix = root_str + os.sep
        if path.startswith(prefix):
            candidate = path[len(prefix) :]
            if candidate and len(candidate) < len(trimmed):
                trimmed = candidate
    return trimmed
