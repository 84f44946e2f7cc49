"""Public Python API for Massif."""

from __future__ import annotations

from pathlib import Path

from .cache import CacheStore, JsonFileCacheStore
from .config import Config, load_config, resolve_cache_dir
from .filesystem import FileSystemProvider
from .logger import Logger
from .models import FileEntry
from .services.analyzer_service import DEFAULT_TOP_COUNT, AnalyzerService


def create_analyzer(
    *,
    cache_dir: Path | str | None = None,
    cache_store: CacheStore | None = None,
    file_system: FileSystemProvider | None = None,
    config: Config | None = None,
    logger: Logger | None = None,
) -> AnalyzerService:
    """Build an analyzer wired with the configured cache location and limits.

    *cache_store* wins over *cache_dir*; without either the JSON cache lives
    in the configured (or default temp) cache directory.
    """

    settings_source = config if config is not None else load_config()
    if cache_store is None:
        directory = Path(cache_dir) if cache_dir is not None else resolve_cache_dir(settings_source)
        cache_store = JsonFileCacheStore(directory, logger=logger)
    return AnalyzerService(
        cache_store,
        file_system,
        settings=settings_source.scanner_settings(),
        logger=logger,
    )


def top_largest_files(
    path: Path | str,
    *,
    count: int = DEFAULT_TOP_COUNT,
    extension: str | None = None,
    cache_dir: Path | str | None = None,
) -> list[FileEntry]:
    """Scan *path* (or reuse its cache) and return its largest files."""

    analyzer = create_analyzer(cache_dir=cache_dir)
    analyzer.scan_directory(path)
    return analyzer.get_top_largest_files(count, extension)
