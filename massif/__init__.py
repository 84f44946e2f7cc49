"""Massif package initialization."""

from __future__ import annotations

from .api import create_analyzer, top_largest_files
from .cache import CacheStore, InMemoryCacheStore, JsonFileCacheStore
from .errors import (
    AccessDeniedError,
    InvalidArgumentError,
    MassifError,
    NotFoundError,
    NotScannedError,
    ScanCancelledError,
    StorageReadError,
    StorageWriteError,
)
from .filesystem import RealFileSystemProvider, VirtualFileSystemProvider
from .models import CacheData, CacheMetadata, FileEntry
from .scanner import DirectoryScanner, ScannerSettings, ScanStats
from .services.analyzer_service import AnalyzerService

__all__ = [
    "__version__",
    "AccessDeniedError",
    "AnalyzerService",
    "CacheData",
    "CacheMetadata",
    "CacheStore",
    "DirectoryScanner",
    "FileEntry",
    "InMemoryCacheStore",
    "InvalidArgumentError",
    "JsonFileCacheStore",
    "MassifError",
    "NotFoundError",
    "NotScannedError",
    "RealFileSystemProvider",
    "ScanCancelledError",
    "ScanStats",
    "ScannerSettings",
    "StorageReadError",
    "StorageWriteError",
    "VirtualFileSystemProvider",
    "create_analyzer",
    "get_version",
    "top_largest_files",
]

__version__ = "0.1.0"


def get_version() -> str:
    """Return the current package version."""
    return __version__
