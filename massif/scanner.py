"""Depth-bounded directory walk producing file metadata.

The walk uses an explicit stack of ``(directory, depth)`` pairs, so deeply
nested trees cannot exhaust the interpreter's recursion limit. Failures on a
single file or on a descendant directory are logged and skipped; only a
failure on the root directory is raised to the caller.
"""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from threading import Event
from typing import List

from .errors import AccessDeniedError, MassifError, NotFoundError, ScanCancelledError
from .filesystem import DirectoryHandle, FileHandle, FileSystemProvider, RealFileSystemProvider
from .logger import Logger, get_logger
from .models import FileEntry
from .utils import normalize_path

try:
    import resource
except ImportError:  # pragma: no cover - not available on Windows
    resource = None

DEFAULT_MAX_DEPTH = 5000
DEFAULT_PATH_LENGTH_WARNING = 600
DEFAULT_PATH_LENGTH_CRITICAL = 800
DEFAULT_MEMORY_MODERATE_MB = 200.0
DEFAULT_MEMORY_HIGH_MB = 400.0
DEFAULT_MEMORY_CEILING_MB = 500.0
FILE_COUNT_NOTICE = 200_000
FILE_COUNT_WARNING = 500_000
FILE_COUNT_CRITICAL = 1_000_000
PROGRESS_LOG_INTERVAL = 10_000

_BYTES_PER_MB = 1024 * 1024
_ENTRY_ERRORS = (OSError, ValueError, OverflowError)


class MemoryTier(str, Enum):
    NORMAL = "normal"
    MODERATE = "moderate"
    HIGH = "high"


class PathLengthTier(str, Enum):
    NORMAL = "normal"
    MODERATE = "moderate"
    LONG = "long"


@dataclass(frozen=True, slots=True)
class ScannerSettings:
    max_depth: int = DEFAULT_MAX_DEPTH
    path_length_warning: int = DEFAULT_PATH_LENGTH_WARNING
    path_length_critical: int = DEFAULT_PATH_LENGTH_CRITICAL
    memory_moderate_mb: float = DEFAULT_MEMORY_MODERATE_MB
    memory_high_mb: float = DEFAULT_MEMORY_HIGH_MB
    memory_ceiling_mb: float = DEFAULT_MEMORY_CEILING_MB
    progress_interval: int = PROGRESS_LOG_INTERVAL


@dataclass(slots=True)
class ScanStats:
    """Running aggregates collected while a tree is walked."""

    root: str
    file_count: int = 0
    directory_count: int = 0
    max_depth_reached: int = 0
    depth_limit_hits: int = 0
    skipped_files: int = 0
    skipped_directories: int = 0
    max_path_length: int = 0
    total_path_length: int = 0
    paths_over_warning: int = 0
    paths_over_critical: int = 0
    memory_before_bytes: int = 0
    memory_after_bytes: int = 0
    duration_seconds: float = 0.0
    memory_tier: MemoryTier = MemoryTier.NORMAL
    path_length_tier: PathLengthTier = PathLengthTier.NORMAL

    @property
    def average_path_length(self) -> float:
        if not self.file_count:
            return 0.0
        return self.total_path_length / self.file_count

    @property
    def memory_delta_mb(self) -> float:
        return max(self.memory_after_bytes - self.memory_before_bytes, 0) / _BYTES_PER_MB

    @property
    def memory_total_mb(self) -> float:
        return self.memory_after_bytes / _BYTES_PER_MB

    def track_path(self, path: str, settings: ScannerSettings) -> None:
        length = len(path)
        self.file_count += 1
        self.total_path_length += length
        if length > self.max_path_length:
            self.max_path_length = length
        if length > settings.path_length_critical:
            self.paths_over_critical += 1
        elif length > settings.path_length_warning:
            self.paths_over_warning += 1


@dataclass(frozen=True, slots=True)
class ScanResult:
    root: str
    started_at: datetime
    entries: tuple[FileEntry, ...]
    stats: ScanStats


def sample_memory_bytes() -> int:
    """Return the peak resident set size of this process in bytes (0 if unknown)."""

    if resource is None:
        return 0
    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # Linux reports kilobytes, macOS reports bytes.
    if sys.platform == "darwin":
        return int(peak)
    return int(peak) * 1024


def to_file_entry(handle: FileHandle) -> FileEntry:
    return FileEntry(
        full_path=handle.full_path,
        file_name=handle.name,
        extension=handle.extension,
        directory_path=handle.directory_path,
        size_bytes=int(handle.size_bytes),
        created_utc=handle.created_utc,
        last_modified_utc=handle.last_modified_utc,
        is_read_only=bool(handle.is_read_only),
    )


class DirectoryScanner:
    def __init__(
        self,
        file_system: FileSystemProvider | None = None,
        *,
        settings: ScannerSettings | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.file_system = file_system if file_system is not None else RealFileSystemProvider()
        self.settings = settings or ScannerSettings()
        self.log = logger if logger is not None else get_logger("massif.scanner")

    def scan(self, root: str, *, cancel_event: Event | None = None) -> ScanResult:
        """Walk *root* and return every readable file beneath it.

        Raises ``NotFoundError`` or ``AccessDeniedError`` when the root itself
        cannot be read, and ``ScanCancelledError`` when *cancel_event* is set
        between directory visits.
        """

        normalized = normalize_path(root)
        started_at = datetime.now(timezone.utc)
        started = time.perf_counter()
        stats = ScanStats(root=normalized, memory_before_bytes=sample_memory_bytes())
        self.log.debug("Starting directory scan", path=normalized)

        root_handle = self.file_system.get_directory(normalized)
        entries = self._walk(root_handle, stats, cancel_event)

        stats.duration_seconds = time.perf_counter() - started
        stats.memory_after_bytes = sample_memory_bytes()
        self.log.debug(
            "Directory scan completed",
            path=normalized,
            file_count=stats.file_count,
            directories=stats.directory_count,
            duration_seconds=round(stats.duration_seconds, 2),
            max_depth=stats.max_depth_reached,
        )
        self._report_path_lengths(stats)
        self._report_file_count(stats)
        self._report_memory(stats)
        return ScanResult(
            root=normalized,
            started_at=started_at,
            entries=tuple(entries),
            stats=stats,
        )

    def _walk(
        self,
        root: DirectoryHandle,
        stats: ScanStats,
        cancel_event: Event | None,
    ) -> List[FileEntry]:
        entries: List[FileEntry] = []
        settings = self.settings
        stack: list[tuple[DirectoryHandle, int]] = [(root, 0)]

        while stack:
            if cancel_event is not None and cancel_event.is_set():
                self.log.warning("Directory scan cancelled", path=stats.root, file_count=len(entries))
                raise ScanCancelledError(f"Scan of {stats.root} was cancelled")

            directory, depth = stack.pop()
            if depth > stats.max_depth_reached:
                stats.max_depth_reached = depth
            if depth > settings.max_depth:
                stats.depth_limit_hits += 1
                self.log.warning(
                    "Maximum directory depth exceeded; subdirectories will not be scanned",
                    max_depth=settings.max_depth,
                    path=directory.full_path,
                )
                continue

            try:
                files = directory.list_files()
            except OSError as exc:
                if depth == 0:
                    raise self._root_error(directory.full_path, exc) from exc
                stats.skipped_directories += 1
                self.log.warning(
                    "Cannot read directory; skipping branch",
                    path=directory.full_path,
                    error=str(exc),
                )
                continue
            stats.directory_count += 1

            for handle in files:
                try:
                    entry = to_file_entry(handle)
                except _ENTRY_ERRORS as exc:
                    stats.skipped_files += 1
                    self.log.warning(
                        "Cannot read file metadata; skipping file",
                        path=handle.full_path,
                        error=str(exc),
                    )
                    continue
                entries.append(entry)
                stats.track_path(entry.full_path, settings)
                if stats.file_count % settings.progress_interval == 0:
                    self.log.debug("Scan progress", file_count=stats.file_count)

            try:
                subdirectories = directory.list_subdirectories()
            except OSError as exc:
                if depth == 0:
                    raise self._root_error(directory.full_path, exc) from exc
                stats.skipped_directories += 1
                self.log.warning(
                    "Cannot list subdirectories; skipping branch",
                    path=directory.full_path,
                    error=str(exc),
                )
                continue

            # Reversed so the first subdirectory is visited first.
            for subdirectory in reversed(subdirectories):
                stack.append((subdirectory, depth + 1))

        return entries

    def _root_error(self, path: str, exc: OSError) -> MassifError:
        self.log.error("Cannot read root directory", path=path, error=str(exc))
        if isinstance(exc, MassifError):
            return exc
        if isinstance(exc, (FileNotFoundError, NotADirectoryError)):
            return NotFoundError(f"Directory not found: {path}")
        return AccessDeniedError(f"Access denied to directory: {path}")

    def _report_path_lengths(self, stats: ScanStats) -> None:
        settings = self.settings
        average = stats.average_path_length
        if stats.paths_over_warning or stats.paths_over_critical:
            stats.path_length_tier = PathLengthTier.LONG
            self.log.warning(
                "Long paths detected; memory footprint may be higher than typical",
                max_path_length=stats.max_path_length,
                average_path_length=round(average),
                over_warning=stats.paths_over_warning,
                over_critical=stats.paths_over_critical,
                warning_threshold=settings.path_length_warning,
                critical_threshold=settings.path_length_critical,
            )
        elif average > settings.path_length_warning:
            stats.path_length_tier = PathLengthTier.MODERATE
            self.log.debug(
                "Moderate path lengths detected",
                max_path_length=stats.max_path_length,
                average_path_length=round(average),
            )
        else:
            self.log.debug(
                "Path length metrics",
                max_path_length=stats.max_path_length,
                average_path_length=round(average),
            )

    def _report_file_count(self, stats: ScanStats) -> None:
        count = stats.file_count
        if count >= FILE_COUNT_CRITICAL:
            self.log.warning(
                "Very large file system scanned; memory use is approaching the ceiling",
                file_count=count,
                memory_ceiling_mb=self.settings.memory_ceiling_mb,
            )
        elif count >= FILE_COUNT_WARNING:
            self.log.warning(
                "Large file system scanned; keep the cache to avoid repeated scans",
                file_count=count,
            )
        elif count >= FILE_COUNT_NOTICE:
            self.log.debug("Scanned a large number of files", file_count=count)

    def _report_memory(self, stats: ScanStats) -> None:
        settings = self.settings
        used = stats.memory_delta_mb
        total = stats.memory_total_mb
        if used > settings.memory_high_mb:
            stats.memory_tier = MemoryTier.HIGH
            self.log.warning(
                "High memory usage during scan",
                used_mb=round(used, 1),
                total_mb=round(total, 1),
                ceiling_mb=settings.memory_ceiling_mb,
            )
        elif used > settings.memory_moderate_mb:
            stats.memory_tier = MemoryTier.MODERATE
            self.log.debug("Moderate memory usage during scan", used_mb=round(used, 1), total_mb=round(total, 1))
        else:
            self.log.debug("Memory usage during scan", used_mb=round(used, 1), total_mb=round(total, 1))
