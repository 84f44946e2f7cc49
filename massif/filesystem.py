"""File system access behind a small provider interface.

``RealFileSystemProvider`` talks to the operating system through
``os.scandir``. ``VirtualFileSystemProvider`` keeps an in-memory tree so
scans can be exercised deterministically, including permission failures.
Both normalize paths with :func:`massif.utils.normalize_path`.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Protocol, Sequence, Set

from .errors import AccessDeniedError, NotFoundError
from .utils import normalize_path, split_extension


class FileHandle(Protocol):
    """Metadata view of one file; attribute access may raise ``OSError``."""

    @property
    def full_path(self) -> str: ...

    @property
    def name(self) -> str: ...

    @property
    def extension(self) -> str: ...

    @property
    def directory_path(self) -> str: ...

    @property
    def size_bytes(self) -> int: ...

    @property
    def created_utc(self) -> datetime: ...

    @property
    def last_modified_utc(self) -> datetime: ...

    @property
    def is_read_only(self) -> bool: ...


class DirectoryHandle(Protocol):
    @property
    def full_path(self) -> str: ...

    def list_files(self) -> Sequence[FileHandle]:
        """Return the files directly inside this directory."""
        raise NotImplementedError

    def list_subdirectories(self) -> Sequence["DirectoryHandle"]:
        """Return the directories directly inside this directory."""
        raise NotImplementedError


class FileSystemProvider(Protocol):
    def directory_exists(self, path: str) -> bool:
        raise NotImplementedError

    def get_directory(self, path: str) -> DirectoryHandle:
        """Return a handle for *path*; raise ``NotFoundError`` if it is not a directory."""
        raise NotImplementedError

    def validate_directory_access(self, path: str) -> None:
        """Raise ``AccessDeniedError`` if the contents of *path* cannot be listed."""
        raise NotImplementedError


def _utc_from_timestamp(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


class RealFileHandle:
    """File handle backed by an ``os.DirEntry``; stats lazily on first access."""

    __slots__ = ("_entry", "_directory", "_stat")

    def __init__(self, entry: os.DirEntry, directory: str) -> None:
        self._entry = entry
        self._directory = directory
        self._stat: os.stat_result | None = None

    def _stat_result(self) -> os.stat_result:
        if self._stat is None:
            self._stat = self._entry.stat()
        return self._stat

    @property
    def full_path(self) -> str:
        return self._entry.path

    @property
    def name(self) -> str:
        return self._entry.name

    @property
    def extension(self) -> str:
        return split_extension(self._entry.name)

    @property
    def directory_path(self) -> str:
        return self._directory

    @property
    def size_bytes(self) -> int:
        return self._stat_result().st_size

    @property
    def created_utc(self) -> datetime:
        result = self._stat_result()
        created = getattr(result, "st_birthtime", None)
        if created is None:
            created = result.st_ctime
        return _utc_from_timestamp(created)

    @property
    def last_modified_utc(self) -> datetime:
        return _utc_from_timestamp(self._stat_result().st_mtime)

    @property
    def is_read_only(self) -> bool:
        return not bool(self._stat_result().st_mode & stat.S_IWUSR)


class RealDirectoryHandle:
    __slots__ = ("_path", "_listing")

    def __init__(self, path: str) -> None:
        self._path = path
        self._listing: list[os.DirEntry] | None = None

    @property
    def full_path(self) -> str:
        return self._path

    def _entries(self) -> list[os.DirEntry]:
        if self._listing is None:
            with os.scandir(self._path) as iterator:
                self._listing = sorted(iterator, key=lambda entry: entry.name)
        return self._listing

    def list_files(self) -> list[RealFileHandle]:
        files: list[RealFileHandle] = []
        for entry in self._entries():
            try:
                if entry.is_dir():
                    continue
            except OSError:
                # Let the scanner report the failure when it reads metadata.
                pass
            files.append(RealFileHandle(entry, self._path))
        return files

    def list_subdirectories(self) -> list["RealDirectoryHandle"]:
        directories: list[RealDirectoryHandle] = []
        for entry in self._entries():
            try:
                is_dir = entry.is_dir()
            except OSError:
                continue
            if is_dir:
                directories.append(RealDirectoryHandle(entry.path))
        return directories


class RealFileSystemProvider:
    """Provider backed by the operating system."""

    def directory_exists(self, path: str) -> bool:
        return os.path.isdir(normalize_path(path))

    def get_directory(self, path: str) -> RealDirectoryHandle:
        normalized = normalize_path(path)
        if not os.path.isdir(normalized):
            raise NotFoundError(f"Directory not found: {normalized}")
        return RealDirectoryHandle(normalized)

    def validate_directory_access(self, path: str) -> None:
        normalized = normalize_path(path)
        try:
            with os.scandir(normalized) as iterator:
                next(iterator, None)
        except FileNotFoundError as exc:
            raise NotFoundError(f"Directory not found: {normalized}") from exc
        except PermissionError as exc:
            raise AccessDeniedError(f"Access denied to directory: {normalized}") from exc


@dataclass(slots=True)
class VirtualFile:
    full_path: str
    name: str
    directory_path: str
    size: int
    created_utc: datetime
    last_modified_utc: datetime
    is_read_only: bool = False
    error: OSError | None = None

    @property
    def extension(self) -> str:
        return split_extension(self.name)

    @property
    def size_bytes(self) -> int:
        # Simulated metadata failures surface when the scanner reads the size.
        if self.error is not None:
            raise self.error
        return self.size


@dataclass(slots=True, eq=False)
class VirtualDirectory:
    full_path: str
    provider: "VirtualFileSystemProvider" = field(repr=False)
    files: List[VirtualFile] = field(default_factory=list, repr=False)
    subdirectories: List["VirtualDirectory"] = field(default_factory=list, repr=False)

    def list_files(self) -> list[VirtualFile]:
        self.provider._check_access(self.full_path)
        return list(self.files)

    def list_subdirectories(self) -> list["VirtualDirectory"]:
        self.provider._check_access(self.full_path)
        return list(self.subdirectories)


class VirtualFileSystemProvider:
    """In-memory directory tree for deterministic tests.

    Directories are keyed by normalized path. Tests can mark directories as
    inaccessible, or make a single file fail when its metadata is read.
    """

    def __init__(self, root: str = "/virtual") -> None:
        self.root = normalize_path(root)
        self._directories: Dict[str, VirtualDirectory] = {}
        self._inaccessible: Set[str] = set()
        self._ensure_directory(self.root)

    def _ensure_directory(self, normalized: str) -> VirtualDirectory:
        directory = self._directories.get(normalized)
        if directory is None:
            directory = VirtualDirectory(full_path=normalized, provider=self)
            self._directories[normalized] = directory
            parent_path = os.path.dirname(normalized)
            if parent_path != normalized and parent_path in self._directories:
                self._directories[parent_path].subdirectories.append(directory)
        return directory

    def _check_access(self, normalized: str) -> None:
        if normalized in self._inaccessible:
            raise PermissionError(f"Access denied to directory: {normalized}")

    def add_directory(self, path: str) -> str:
        """Create *path* and any missing parents; return its normalized form."""
        normalized = normalize_path(path)
        missing: list[str] = []
        current = normalized
        while current not in self._directories:
            missing.append(current)
            parent = os.path.dirname(current)
            if parent == current:
                break
            current = parent
        for item in reversed(missing):
            self._ensure_directory(item)
        return normalized

    def add_subdirectory(self, parent: str, name: str) -> str:
        return self.add_directory(os.path.join(normalize_path(parent), name))

    def add_file(
        self,
        directory: str,
        name: str,
        size_bytes: int,
        *,
        created_utc: datetime | None = None,
        last_modified_utc: datetime | None = None,
        is_read_only: bool = False,
        error: OSError | None = None,
    ) -> str:
        normalized = self.add_directory(directory)
        now = datetime.now(timezone.utc)
        full_path = os.path.join(normalized, name)
        self._directories[normalized].files.append(
            VirtualFile(
                full_path=full_path,
                name=name,
                directory_path=normalized,
                size=size_bytes,
                created_utc=created_utc or now,
                last_modified_utc=last_modified_utc or now,
                is_read_only=is_read_only,
                error=error,
            )
        )
        return full_path

    def make_inaccessible(self, path: str) -> None:
        self._inaccessible.add(normalize_path(path))

    def directory_exists(self, path: str) -> bool:
        return normalize_path(path) in self._directories

    def get_directory(self, path: str) -> VirtualDirectory:
        normalized = normalize_path(path)
        directory = self._directories.get(normalized)
        if directory is None:
            raise NotFoundError(f"Directory not found: {normalized}")
        return directory

    def validate_directory_access(self, path: str) -> None:
        normalized = normalize_path(path)
        if normalized in self._inaccessible:
            raise AccessDeniedError(f"Access denied to directory: {normalized}")
