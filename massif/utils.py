"""Utility helpers for path, extension and size handling."""

from __future__ import annotations

import os
from pathlib import Path

from .errors import InvalidArgumentError

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")


def normalize_path(path: Path | str) -> str:
    """Return *path* as an absolute, normalized string.

    Symbolic links are not resolved so that real and virtual file systems
    agree on the same spelling of a path.
    """
    expanded = os.path.expanduser(os.fspath(path))
    return os.path.normpath(os.path.abspath(expanded))


def paths_equal(left: str, right: str) -> bool:
    """Compare two normalized paths case-insensitively."""
    return left.casefold() == right.casefold()


def normalize_extension(value: str | None) -> str | None:
    """Return *value* with a leading dot, or None when it is blank."""

    if value is None:
        return None
    token = value.strip()
    if not token or token == ".":
        return None
    if not token.startswith("."):
        token = f".{token}"
    return token


def split_extension(name: str) -> str:
    """Return the last extension of *name* including its leading dot."""
    _, ext = os.path.splitext(name)
    return ext


def ensure_positive(value: int, name: str) -> int:
    """Validate that *value* is a positive integer."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidArgumentError(f"{name} must be a positive integer")
    return value


def format_size(size_bytes: int) -> str:
    """Return a human readable representation of *size_bytes*."""
    value = float(size_bytes)
    unit = _SIZE_UNITS[0]
    for unit in _SIZE_UNITS:
        if value < 1024 or unit == _SIZE_UNITS[-1]:
            break
        value /= 1024
    if unit == "B":
        return f"{size_bytes} B"
    return f"{value:.1f} {unit}"


def format_path(path: str, base: str | None = None) -> str:
    """Return a user friendly representation of *path* relative to *base* when possible."""
    if base:
        try:
            relative = Path(path).relative_to(base)
            return f"./{relative.as_posix()}"
        except ValueError:
            return path
    return path
