"""Data records produced by a scan and persisted in the cache."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

CACHE_VERSION = 1


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _parse_timestamp(raw: object) -> datetime:
    if not isinstance(raw, str) or not raw:
        raise ValueError(f"Invalid timestamp: {raw!r}")
    text = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _require(raw: Mapping[str, Any], key: str, kind: type | tuple[type, ...]) -> Any:
    value = raw[key]
    if isinstance(value, bool) and kind is int:
        raise ValueError(f"Field {key!r} must be {kind.__name__}")
    if not isinstance(value, kind):
        raise ValueError(f"Field {key!r} has unexpected type {type(value).__name__}")
    return value


@dataclass(frozen=True, slots=True)
class FileEntry:
    full_path: str
    file_name: str
    extension: str
    directory_path: str
    size_bytes: int
    created_utc: datetime
    last_modified_utc: datetime
    is_read_only: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "fullPath": self.full_path,
            "fileName": self.file_name,
            "extension": self.extension,
            "directoryName": self.directory_path,
            "sizeBytes": self.size_bytes,
            "createdUtc": _format_timestamp(self.created_utc),
            "lastModifiedUtc": _format_timestamp(self.last_modified_utc),
            "isReadOnly": self.is_read_only,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "FileEntry":
        size = _require(raw, "sizeBytes", int)
        if size < 0:
            raise ValueError("Field 'sizeBytes' must not be negative")
        return cls(
            full_path=_require(raw, "fullPath", str),
            file_name=_require(raw, "fileName", str),
            extension=_require(raw, "extension", str),
            directory_path=_require(raw, "directoryName", str),
            size_bytes=size,
            created_utc=_parse_timestamp(raw["createdUtc"]),
            last_modified_utc=_parse_timestamp(raw["lastModifiedUtc"]),
            is_read_only=bool(raw.get("isReadOnly", False)),
        )


@dataclass(frozen=True, slots=True)
class CacheMetadata:
    """Provenance of a cached file list: which directory, and when."""

    scanned_directory_path: str
    scan_datetime_utc: datetime
    file_count: int
    cache_version: int = CACHE_VERSION

    def to_dict(self) -> dict[str, object]:
        return {
            "scannedDirectoryPath": self.scanned_directory_path,
            "scanDateTimeUtc": _format_timestamp(self.scan_datetime_utc),
            "fileCount": self.file_count,
            "cacheVersionNumber": self.cache_version,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "CacheMetadata":
        return cls(
            scanned_directory_path=_require(raw, "scannedDirectoryPath", str),
            scan_datetime_utc=_parse_timestamp(raw["scanDateTimeUtc"]),
            file_count=_require(raw, "fileCount", int),
            cache_version=_require(raw, "cacheVersionNumber", int),
        )

    def age_seconds(self, now: datetime | None = None) -> float:
        current = now or datetime.now(timezone.utc)
        return (current - self.scan_datetime_utc).total_seconds()


@dataclass(frozen=True, slots=True)
class CacheData:
    """Unit of persistence: one metadata record plus its ordered file list."""

    metadata: CacheMetadata
    files: tuple[FileEntry, ...] = ()

    @classmethod
    def create(
        cls,
        directory: str,
        files: Sequence[FileEntry],
        *,
        scanned_at: datetime | None = None,
    ) -> "CacheData":
        entries = tuple(files)
        metadata = CacheMetadata(
            scanned_directory_path=directory,
            scan_datetime_utc=scanned_at or datetime.now(timezone.utc),
            file_count=len(entries),
        )
        return cls(metadata=metadata, files=entries)

    def to_dict(self) -> dict[str, object]:
        return {
            "metadata": self.metadata.to_dict(),
            "files": [entry.to_dict() for entry in self.files],
        }

    @classmethod
    def from_dict(cls, raw: object) -> "CacheData":
        """Build cache data from a decoded JSON document.

        Raises ValueError when the document does not have the expected shape.
        """
        if not isinstance(raw, Mapping):
            raise ValueError("Cache document must be a JSON object")
        try:
            metadata_raw = raw["metadata"]
            files_raw = raw["files"]
            if not isinstance(metadata_raw, Mapping) or not isinstance(files_raw, list):
                raise ValueError("Cache document has an unexpected layout")
            metadata = CacheMetadata.from_dict(metadata_raw)
            files = tuple(FileEntry.from_dict(item) for item in files_raw)
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Cache document is missing data: {exc}") from exc
        if metadata.file_count != len(files):
            raise ValueError(
                f"Cache document lists {len(files)} files but metadata records {metadata.file_count}"
            )
        return cls(metadata=metadata, files=files)


@dataclass(frozen=True, slots=True)
class Unscanned:
    """Analyzer state before any scan completed."""


@dataclass(frozen=True, slots=True)
class Scanned:
    """Analyzer state holding the result set queries run against."""

    metadata: CacheMetadata
    entries: tuple[FileEntry, ...] = field(default_factory=tuple)


ScanState = Unscanned | Scanned

UNSCANNED = Unscanned()
