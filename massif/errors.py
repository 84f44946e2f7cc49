"""Exception types raised by Massif."""

from __future__ import annotations


class MassifError(Exception):
    """Base class for every error Massif raises on purpose."""


class InvalidArgumentError(MassifError, ValueError):
    """Raised when caller input is invalid (empty path, non-positive count)."""


class NotFoundError(MassifError, FileNotFoundError):
    """Raised when a directory does not exist."""


class AccessDeniedError(MassifError, PermissionError):
    """Raised when a directory cannot be enumerated."""


class NotScannedError(MassifError, RuntimeError):
    """Raised when results are queried before a scan completed."""


class StorageReadError(MassifError, OSError):
    """Raised when the cache store cannot be read."""


class StorageWriteError(MassifError, OSError):
    """Raised when the cache store cannot be written."""


class ScanCancelledError(MassifError, RuntimeError):
    """Raised when a scan is cancelled between directory visits."""
