from __future__ import annotations

import os
from datetime import datetime, timezone

import pytest

from massif.errors import AccessDeniedError, NotFoundError
from massif.filesystem import RealFileSystemProvider, VirtualFileSystemProvider


def test_real_provider_lists_files_and_subdirectories(tmp_path):
    (tmp_path / "b.txt").write_bytes(b"12345")
    (tmp_path / "a.log").write_bytes(b"1")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "inner.bin").write_bytes(b"xx")

    provider = RealFileSystemProvider()
    assert provider.directory_exists(str(tmp_path))
    handle = provider.get_directory(str(tmp_path))

    files = handle.list_files()
    assert [f.name for f in files] == ["a.log", "b.txt"]
    b_file = files[1]
    assert b_file.full_path == os.path.join(str(tmp_path), "b.txt")
    assert b_file.extension == ".txt"
    assert b_file.directory_path == str(tmp_path)
    assert b_file.size_bytes == 5
    assert b_file.last_modified_utc.tzinfo == timezone.utc
    assert b_file.created_utc > datetime(1970, 1, 2, tzinfo=timezone.utc)
    assert b_file.is_read_only is False

    subdirectories = handle.list_subdirectories()
    assert [d.full_path for d in subdirectories] == [os.path.join(str(tmp_path), "sub")]
    assert [f.name for f in subdirectories[0].list_files()] == ["inner.bin"]


def test_real_provider_reports_read_only(tmp_path):
    target = tmp_path / "locked.txt"
    target.write_text("x", encoding="utf-8")
    os.chmod(target, 0o444)
    try:
        files = RealFileSystemProvider().get_directory(str(tmp_path)).list_files()
        assert files[0].is_read_only is True
    finally:
        os.chmod(target, 0o644)


def test_real_provider_missing_directory(tmp_path):
    provider = RealFileSystemProvider()
    missing = tmp_path / "missing"
    assert provider.directory_exists(str(missing)) is False
    with pytest.raises(NotFoundError):
        provider.get_directory(str(missing))
    with pytest.raises(NotFoundError):
        provider.validate_directory_access(str(missing))


def test_real_provider_file_is_not_a_directory(tmp_path):
    file_path = tmp_path / "file.txt"
    file_path.write_text("x", encoding="utf-8")
    provider = RealFileSystemProvider()
    assert provider.directory_exists(str(file_path)) is False
    with pytest.raises(NotFoundError):
        provider.get_directory(str(file_path))


def test_real_provider_validate_access_denied(tmp_path, monkeypatch):
    def deny(_path):
        raise PermissionError("denied")

    monkeypatch.setattr("massif.filesystem.os.scandir", deny)
    with pytest.raises(AccessDeniedError):
        RealFileSystemProvider().validate_directory_access(str(tmp_path))


def test_virtual_provider_normalizes_like_real_provider(tmp_path):
    fs = VirtualFileSystemProvider(str(tmp_path))
    created = fs.add_directory(os.path.join(str(tmp_path), "a", "..", "b"))
    assert created == os.path.join(str(tmp_path), "b")
    assert fs.directory_exists(os.path.join(str(tmp_path), "b", "."))
    assert not fs.directory_exists(os.path.join(str(tmp_path), "a"))


def test_virtual_provider_builds_tree():
    fs = VirtualFileSystemProvider("/virtual")
    sub = fs.add_subdirectory("/virtual", "logs")
    fs.add_file("/virtual", "root.txt", 10)
    fs.add_file(sub, "app.log", 20, is_read_only=True)

    root = fs.get_directory("/virtual")
    assert [f.name for f in root.list_files()] == ["root.txt"]
    assert [d.full_path for d in root.list_subdirectories()] == [sub]
    log_file = fs.get_directory(sub).list_files()[0]
    assert log_file.full_path == os.path.join(sub, "app.log")
    assert log_file.extension == ".log"
    assert log_file.size_bytes == 20
    assert log_file.is_read_only is True


def test_virtual_provider_creates_missing_parents():
    fs = VirtualFileSystemProvider("/virtual")
    deep = fs.add_directory("/virtual/a/b/c")
    assert fs.directory_exists("/virtual/a")
    assert fs.directory_exists("/virtual/a/b")
    root_children = fs.get_directory("/virtual").list_subdirectories()
    assert [d.full_path for d in root_children] == [os.path.normpath("/virtual/a")]
    assert fs.get_directory(deep).full_path == deep


def test_virtual_provider_inaccessible_directory():
    fs = VirtualFileSystemProvider("/virtual")
    secret = fs.add_subdirectory("/virtual", "secret")
    fs.make_inaccessible(secret)

    with pytest.raises(AccessDeniedError):
        fs.validate_directory_access(secret)
    with pytest.raises(PermissionError):
        fs.get_directory(secret).list_files()
    fs.validate_directory_access("/virtual")


def test_virtual_provider_missing_directory():
    fs = VirtualFileSystemProvider("/virtual")
    with pytest.raises(NotFoundError):
        fs.get_directory("/virtual/nope")


def test_virtual_file_error_surfaces_on_size():
    fs = VirtualFileSystemProvider("/virtual")
    fs.add_file("/virtual", "broken.bin", 5, error=PermissionError("nope"))
    handle = fs.get_directory("/virtual").list_files()[0]
    assert handle.name == "broken.bin"
    with pytest.raises(PermissionError):
        _ = handle.size_bytes
