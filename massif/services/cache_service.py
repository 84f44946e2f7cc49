"""Shared helpers for inspecting the persisted scan cache."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..cache import JsonFileCacheStore
from ..models import CacheMetadata


@dataclass(slots=True)
class CacheSummary:
    cache_file: Path
    exists: bool
    size_bytes: int = 0
    metadata: CacheMetadata | None = None


def describe_cache(store: JsonFileCacheStore) -> CacheSummary:
    """Return where the cache lives and, when readable, its provenance.

    A corrupted cache file is removed by the store and reported as absent.
    """

    cache_file = store.cache_file
    if not store.exists():
        return CacheSummary(cache_file=cache_file, exists=False)
    data = store.load()
    if data is None:
        return CacheSummary(cache_file=cache_file, exists=False)
    try:
        size = cache_file.stat().st_size
    except FileNotFoundError:
        size = 0
    return CacheSummary(
        cache_file=cache_file,
        exists=True,
        size_bytes=size,
        metadata=data.metadata,
    )


def clear_cache_file(store: JsonFileCacheStore) -> bool:
    """Delete the cache file; return False when there was nothing to delete."""

    existed = store.exists()
    store.delete()
    return existed
