from __future__ import annotations

import os
import threading

import pytest

import massif.scanner as scanner_module
from massif.errors import AccessDeniedError, NotFoundError, ScanCancelledError
from massif.filesystem import VirtualFileSystemProvider
from massif.scanner import (
    DirectoryScanner,
    MemoryTier,
    PathLengthTier,
    ScannerSettings,
    ScanStats,
)

ROOT = "/virtual"


def _scanner(fs, logger, **settings) -> DirectoryScanner:
    return DirectoryScanner(fs, settings=ScannerSettings(**settings), logger=logger)


def test_scan_collects_files_depth_first(recording_logger):
    fs = VirtualFileSystemProvider(ROOT)
    fs.add_file(ROOT, "root.txt", 1)
    a = fs.add_subdirectory(ROOT, "a")
    fs.add_file(a, "a1.txt", 2)
    a_inner = fs.add_subdirectory(a, "inner")
    fs.add_file(a_inner, "deep.txt", 3)
    b = fs.add_subdirectory(ROOT, "b")
    fs.add_file(b, "b1.txt", 4)

    result = _scanner(fs, recording_logger).scan(ROOT)

    assert [e.file_name for e in result.entries] == ["root.txt", "a1.txt", "deep.txt", "b1.txt"]
    assert result.root == os.path.normpath(ROOT)
    assert result.stats.file_count == 4
    assert result.stats.directory_count == 4
    assert result.stats.max_depth_reached == 2
    deep = result.entries[2]
    assert deep.directory_path == a_inner
    assert deep.extension == ".txt"
    assert deep.size_bytes == 3


def test_missing_root_raises_not_found(recording_logger):
    fs = VirtualFileSystemProvider(ROOT)
    with pytest.raises(NotFoundError):
        _scanner(fs, recording_logger).scan("/virtual/missing")


def test_inaccessible_root_aborts_scan(recording_logger):
    fs = VirtualFileSystemProvider(ROOT)
    fs.make_inaccessible(ROOT)
    with pytest.raises(AccessDeniedError):
        _scanner(fs, recording_logger).scan(ROOT)
    assert recording_logger.find("error", "root directory")


def test_inaccessible_branch_is_skipped(recording_logger):
    fs = VirtualFileSystemProvider(ROOT)
    secret = fs.add_subdirectory(ROOT, "secret")
    fs.add_file(secret, "hidden.txt", 100)
    fs.add_file(fs.add_subdirectory(secret, "nested"), "deeper.txt", 100)
    public = fs.add_subdirectory(ROOT, "public")
    fs.add_file(public, "open.txt", 5)
    fs.make_inaccessible(secret)

    result = _scanner(fs, recording_logger).scan(ROOT)

    assert [e.file_name for e in result.entries] == ["open.txt"]
    assert result.stats.skipped_directories == 1
    warnings = recording_logger.find("warning", "cannot read directory")
    assert warnings and warnings[0]["path"] == secret


def test_unreadable_file_is_skipped(recording_logger):
    fs = VirtualFileSystemProvider(ROOT)
    fs.add_file(ROOT, "first.txt", 1)
    fs.add_file(ROOT, "locked.txt", 2, error=PermissionError("denied"))
    fs.add_file(ROOT, "last.txt", 3)

    result = _scanner(fs, recording_logger).scan(ROOT)

    assert [e.file_name for e in result.entries] == ["first.txt", "last.txt"]
    assert result.stats.skipped_files == 1
    assert recording_logger.find("warning", "file metadata")


def test_depth_guard_handles_very_deep_trees(recording_logger):
    fs = VirtualFileSystemProvider(ROOT)
    fs.add_file(ROOT, "top.txt", 1)
    current = ROOT
    for _ in range(6000):
        current = fs.add_subdirectory(current, "d")
    fs.add_file(current, "bottom.txt", 1)

    result = _scanner(fs, recording_logger).scan(ROOT)

    assert [e.file_name for e in result.entries] == ["top.txt"]
    assert result.stats.depth_limit_hits == 1
    assert result.stats.max_depth_reached == 5001
    warnings = recording_logger.find("warning", "maximum directory depth")
    assert len(warnings) == 1
    assert warnings[0]["max_depth"] == 5000


def test_depth_guard_keeps_files_above_the_cutoff(recording_logger):
    fs = VirtualFileSystemProvider(ROOT)
    level1 = fs.add_subdirectory(ROOT, "l1")
    level2 = fs.add_subdirectory(level1, "l2")
    level3 = fs.add_subdirectory(level2, "l3")
    fs.add_file(level1, "one.txt", 1)
    fs.add_file(level2, "two.txt", 2)
    fs.add_file(level3, "three.txt", 3)

    result = _scanner(fs, recording_logger, max_depth=2).scan(ROOT)

    assert [e.file_name for e in result.entries] == ["one.txt", "two.txt"]
    assert result.stats.depth_limit_hits == 1


def test_path_length_buckets_are_exclusive(recording_logger):
    fs = VirtualFileSystemProvider(ROOT)
    fs.add_file(ROOT, "short.txt", 1)
    prefix_len = len(os.path.join(os.path.normpath(ROOT), ""))
    fs.add_file(ROOT, "m" * (700 - prefix_len), 1)
    fs.add_file(ROOT, "l" * (900 - prefix_len), 1)

    result = _scanner(fs, recording_logger).scan(ROOT)
    stats = result.stats

    assert stats.max_path_length == 900
    assert stats.paths_over_warning == 1
    assert stats.paths_over_critical == 1
    assert stats.path_length_tier is PathLengthTier.LONG
    warnings = recording_logger.find("warning", "long paths")
    assert warnings and warnings[0]["over_critical"] == 1


def test_short_paths_log_only_debug_metrics(recording_logger):
    fs = VirtualFileSystemProvider(ROOT)
    fs.add_file(ROOT, "a.txt", 1)
    result = _scanner(fs, recording_logger).scan(ROOT)
    assert result.stats.path_length_tier is PathLengthTier.NORMAL
    assert recording_logger.find("debug", "path length metrics")
    assert not recording_logger.events("warning")


def test_file_count_thresholds(recording_logger, monkeypatch):
    monkeypatch.setattr(scanner_module, "FILE_COUNT_NOTICE", 2)
    monkeypatch.setattr(scanner_module, "FILE_COUNT_WARNING", 3)
    monkeypatch.setattr(scanner_module, "FILE_COUNT_CRITICAL", 4)
    fs = VirtualFileSystemProvider(ROOT)
    for idx in range(3):
        fs.add_file(ROOT, f"f{idx}.txt", 1)

    _scanner(fs, recording_logger).scan(ROOT)
    assert recording_logger.find("warning", "large file system scanned")

    fs.add_file(ROOT, "f3.txt", 1)
    recording_logger.records.clear()
    _scanner(fs, recording_logger).scan(ROOT)
    assert recording_logger.find("warning", "very large file system")


def test_memory_tiers(recording_logger, monkeypatch):
    samples = iter([0, 450 * 1024 * 1024])
    monkeypatch.setattr(scanner_module, "sample_memory_bytes", lambda: next(samples))
    fs = VirtualFileSystemProvider(ROOT)
    fs.add_file(ROOT, "a.txt", 1)

    result = _scanner(fs, recording_logger).scan(ROOT)

    assert result.stats.memory_delta_mb == pytest.approx(450.0)
    assert result.stats.memory_tier is MemoryTier.HIGH
    warnings = recording_logger.find("warning", "high memory usage")
    assert warnings and warnings[0]["ceiling_mb"] == 500.0

    samples = iter([0, 250 * 1024 * 1024])
    monkeypatch.setattr(scanner_module, "sample_memory_bytes", lambda: next(samples))
    result = _scanner(fs, recording_logger).scan(ROOT)
    assert result.stats.memory_tier is MemoryTier.MODERATE


def test_progress_is_logged(recording_logger):
    fs = VirtualFileSystemProvider(ROOT)
    for idx in range(4):
        fs.add_file(ROOT, f"f{idx}.txt", 1)
    _scanner(fs, recording_logger, progress_interval=2).scan(ROOT)
    progress = recording_logger.find("debug", "scan progress")
    assert [item["file_count"] for item in progress] == [2, 4]


def test_cancel_event_stops_scan(recording_logger):
    fs = VirtualFileSystemProvider(ROOT)
    fs.add_file(ROOT, "a.txt", 1)
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(ScanCancelledError):
        _scanner(fs, recording_logger).scan(ROOT, cancel_event=cancel)


def test_scan_stats_average():
    stats = ScanStats(root="/r")
    assert stats.average_path_length == 0.0
    settings = ScannerSettings()
    stats.track_path("/r/ab", settings)
    stats.track_path("/r/abcd", settings)
    assert stats.average_path_length == pytest.approx(6.0)
    assert stats.max_path_length == 7


def test_real_file_system_scan(tmp_path, recording_logger):
    (tmp_path / "a.bin").write_bytes(b"a" * 10)
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "b.bin").write_bytes(b"b" * 20)

    result = DirectoryScanner(logger=recording_logger).scan(str(tmp_path))

    assert sorted(e.size_bytes for e in result.entries) == [10, 20]
    assert result.stats.memory_after_bytes >= 0
