"""Scan-once, query-many analysis of the largest files under a directory."""

from __future__ import annotations

import heapq
from pathlib import Path
from threading import Event

from ..cache import CacheStore
from ..errors import InvalidArgumentError, NotFoundError, NotScannedError, StorageReadError
from ..filesystem import FileSystemProvider, RealFileSystemProvider
from ..logger import Logger, get_logger
from ..models import (
    CACHE_VERSION,
    UNSCANNED,
    CacheData,
    CacheMetadata,
    FileEntry,
    Scanned,
    ScanState,
)
from ..scanner import DirectoryScanner, ScannerSettings, ScanStats
from ..utils import ensure_positive, normalize_extension, normalize_path, paths_equal

DEFAULT_TOP_COUNT = 10


class AnalyzerService:
    """Loads a matching cache or scans a directory, then answers size queries.

    The service is either unscanned or scanned. Queries made while unscanned
    raise ``NotScannedError``. Instances are not thread-safe; callers must
    serialize ``scan_directory`` and queries on one instance.
    """

    def __init__(
        self,
        cache_store: CacheStore,
        file_system: FileSystemProvider | None = None,
        *,
        settings: ScannerSettings | None = None,
        logger: Logger | None = None,
    ) -> None:
        if cache_store is None:
            raise InvalidArgumentError("cache_store is required")
        self.cache_store = cache_store
        self.file_system = file_system if file_system is not None else RealFileSystemProvider()
        self.log = logger if logger is not None else get_logger("massif.analyzer")
        self.scanner = DirectoryScanner(self.file_system, settings=settings, logger=self.log)
        self._state: ScanState = UNSCANNED
        self.last_scan_stats: ScanStats | None = None
        self.loaded_from_cache = False

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def max_directory_depth(self) -> int:
        """Deepest directory level reached by the last fresh scan."""
        if self.last_scan_stats is None:
            return 0
        return self.last_scan_stats.max_depth_reached

    def scan_directory(self, path: Path | str, *, cancel_event: Event | None = None) -> None:
        """Populate results for *path*, reusing the persisted cache when it matches."""

        if path is None or not str(path).strip():
            self.log.error("scan_directory called with an empty path")
            raise InvalidArgumentError("Directory path cannot be null or empty.")

        normalized = normalize_path(path)
        if not self.file_system.directory_exists(normalized):
            self.log.error("Directory not found", path=normalized)
            raise NotFoundError(f"Directory not found: {normalized}")
        self.file_system.validate_directory_access(normalized)
        self.log.debug("scan_directory initiated", path=normalized)

        cached = self._load_matching_cache(normalized)
        if cached is not None:
            self._state = Scanned(metadata=cached.metadata, entries=cached.files)
            self.last_scan_stats = None
            self.loaded_from_cache = True
            return

        self._scan_and_persist(normalized, cancel_event)

    def _load_matching_cache(self, normalized: str) -> CacheData | None:
        try:
            cached = self.cache_store.load()
        except StorageReadError as exc:
            self.log.warning("Failed to load cache; performing a fresh scan", error=str(exc))
            return None
        if cached is None:
            return None

        metadata = cached.metadata
        if not paths_equal(normalized, metadata.scanned_directory_path):
            self.log.warning(
                "Existing cache is for a different directory; scanning the new directory",
                cached_path=metadata.scanned_directory_path,
                path=normalized,
            )
            return None
        if metadata.cache_version != CACHE_VERSION:
            self.log.warning(
                "Cache version mismatch; performing a fresh scan",
                cached_version=metadata.cache_version,
                expected_version=CACHE_VERSION,
            )
            return None

        self.log.debug(
            "Loaded cache from disk",
            file_count=len(cached.files),
            path=metadata.scanned_directory_path,
            age_seconds=round(metadata.age_seconds(), 1),
        )
        return cached

    def _scan_and_persist(self, normalized: str, cancel_event: Event | None) -> None:
        result = self.scanner.scan(normalized, cancel_event=cancel_event)
        data = CacheData.create(normalized, result.entries, scanned_at=result.started_at)
        self.cache_store.save(data)
        self.log.debug("Cache saved", path=normalized, file_count=data.metadata.file_count)
        self._state = Scanned(metadata=data.metadata, entries=data.files)
        self.last_scan_stats = result.stats
        self.loaded_from_cache = False

    def _require_scanned(self, operation: str) -> Scanned:
        state = self._state
        if not isinstance(state, Scanned):
            self.log.error("Query made before scan_directory", operation=operation)
            raise NotScannedError("scan_directory must be called before querying results.")
        return state

    def get_top_largest_files(
        self,
        count: int = DEFAULT_TOP_COUNT,
        extension: str | None = None,
    ) -> list[FileEntry]:
        """Return up to *count* entries, largest first.

        *extension* is matched case-insensitively and exactly, so ``.log``
        never matches ``a.log.bak``. Entries of equal size keep their
        discovery order.
        """

        state = self._require_scanned("get_top_largest_files")
        ensure_positive(count, "count")

        candidates = state.entries
        normalized_ext = normalize_extension(extension)
        if normalized_ext is not None:
            wanted = normalized_ext.casefold()
            candidates = tuple(
                entry for entry in candidates if entry.extension.casefold() == wanted
            )

        results = heapq.nlargest(count, candidates, key=lambda entry: entry.size_bytes)
        self.log.debug(
            "Query results",
            count=len(results),
            extension=normalized_ext or "none",
        )
        return results

    def get_scanned_file_count(self) -> int:
        return len(self._require_scanned("get_scanned_file_count").entries)

    def get_scanned_directory_path(self) -> str:
        return self._require_scanned("get_scanned_directory_path").metadata.scanned_directory_path

    def get_cache_metadata(self) -> CacheMetadata | None:
        state = self._state
        if isinstance(state, Scanned):
            return state.metadata
        return None

    def is_scan_complete(self) -> bool:
        return isinstance(self._state, Scanned)

    def clear_cache(self) -> None:
        """Forget the in-memory results; the persisted cache is left alone."""
        self._state = UNSCANNED
        self.last_scan_stats = None
        self.loaded_from_cache = False
        self.log.debug("In-memory cache cleared")

    def clear_cache_from_disk(self) -> None:
        self.clear_cache()
        try:
            self.cache_store.delete()
        except OSError as exc:
            self.log.error("Failed to clear cache from disk", error=str(exc))
            raise
        self.log.debug("Cache cleared from disk")
