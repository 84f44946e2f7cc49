"""Persistent storage for the most recent scan result."""

from __future__ import annotations

import json
import os
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import Protocol

from .errors import StorageReadError, StorageWriteError
from .logger import Logger, get_logger
from .models import CacheData

CACHE_FILENAME = "cache.json"


class CacheStore(Protocol):
    """Holds exactly one :class:`CacheData` record at a time."""

    def load(self) -> CacheData | None:
        """Return the stored record, or None when there is none (or it was corrupt)."""
        raise NotImplementedError

    def save(self, data: CacheData) -> None:
        """Replace the stored record; raise ``StorageWriteError`` on I/O failure."""
        raise NotImplementedError

    def delete(self) -> None:
        """Remove the stored record; do nothing when there is none."""
        raise NotImplementedError


class JsonFileCacheStore:
    """Stores the cache as one human-readable JSON document."""

    def __init__(self, cache_dir: Path | str, *, logger: Logger | None = None) -> None:
        self.cache_dir = Path(cache_dir).expanduser()
        self.log = logger if logger is not None else get_logger("massif.cache")

    @property
    def cache_file(self) -> Path:
        return self.cache_dir / CACHE_FILENAME

    def exists(self) -> bool:
        return self.cache_file.is_file()

    def load(self) -> CacheData | None:
        cache_file = self.cache_file
        if not cache_file.is_file():
            self.log.debug("Cache file not found", path=str(cache_file))
            return None
        try:
            raw = cache_file.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            self.log.error("Failed to read cache file", path=str(cache_file), error=str(exc))
            raise StorageReadError(f"Unable to read cache file {cache_file}: {exc}") from exc

        try:
            data = CacheData.from_dict(json.loads(raw.decode("utf-8")))
        except (ValueError, RecursionError) as exc:
            # ValueError covers JSONDecodeError and UnicodeDecodeError; deeply
            # nested documents exhaust the decoder with RecursionError.
            self.log.error(
                "Cache file is corrupted; deleting it",
                path=str(cache_file),
                error=str(exc),
            )
            self._remove_corrupt(cache_file)
            return None

        self.log.debug(
            "Loaded cache",
            path=str(cache_file),
            file_count=len(data.files),
            scanned_path=data.metadata.scanned_directory_path,
        )
        return data

    def _remove_corrupt(self, cache_file: Path) -> None:
        try:
            cache_file.unlink(missing_ok=True)
        except OSError as exc:
            self.log.error("Failed to delete corrupted cache file", path=str(cache_file), error=str(exc))

    def save(self, data: CacheData) -> None:
        cache_file = self.cache_file
        payload = json.dumps(data.to_dict(), ensure_ascii=False, indent=2)
        tmp_path: str | None = None
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=".cache-", suffix=".tmp", dir=str(self.cache_dir)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_path, cache_file)
            tmp_path = None
        except OSError as exc:
            self.log.error("Failed to save cache", path=str(cache_file), error=str(exc))
            raise StorageWriteError(f"Unable to write cache file {cache_file}: {exc}") from exc
        finally:
            if tmp_path is not None:
                with suppress(OSError):
                    os.unlink(tmp_path)
        self.log.debug("Saved cache", path=str(cache_file), file_count=len(data.files))

    def delete(self) -> None:
        cache_file = self.cache_file
        try:
            cache_file.unlink()
        except FileNotFoundError:
            self.log.debug("Cache file does not exist; nothing to delete", path=str(cache_file))
            return
        except OSError as exc:
            self.log.error("Failed to delete cache file", path=str(cache_file), error=str(exc))
            raise StorageWriteError(f"Unable to delete cache file {cache_file}: {exc}") from exc
        self.log.debug("Cache file deleted", path=str(cache_file))


class InMemoryCacheStore:
    """Cache store that keeps the record in process memory."""

    def __init__(self, data: CacheData | None = None) -> None:
        self.data = data
        self.save_count = 0

    def load(self) -> CacheData | None:
        return self.data

    def save(self, data: CacheData) -> None:
        self.data = data
        self.save_count += 1

    def delete(self) -> None:
        self.data = None
