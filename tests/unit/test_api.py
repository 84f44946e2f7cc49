from __future__ import annotations

from massif import api as api_module
from massif.cache import InMemoryCacheStore, JsonFileCacheStore
from massif.config import Config
from massif.filesystem import VirtualFileSystemProvider


def _fs() -> VirtualFileSystemProvider:
    fs = VirtualFileSystemProvider("/virtual")
    fs.add_file("/virtual/data", "a.log", 30)
    fs.add_file("/virtual/data", "b.txt", 20)
    return fs


def test_create_analyzer_uses_config_settings(tmp_path, monkeypatch, recording_logger):
    cfg = Config(cache_dir=str(tmp_path / "cfg-cache"), max_depth=3, path_length_warning=50)
    monkeypatch.setattr(api_module, "load_config", lambda: cfg)
    monkeypatch.delenv("MASSIF_CACHE_DIR", raising=False)

    analyzer = api_module.create_analyzer(file_system=_fs(), logger=recording_logger)

    assert isinstance(analyzer.cache_store, JsonFileCacheStore)
    assert analyzer.cache_store.cache_dir == tmp_path / "cfg-cache"
    assert analyzer.scanner.settings.max_depth == 3
    assert analyzer.scanner.settings.path_length_warning == 50


def test_create_analyzer_prefers_explicit_store(recording_logger):
    store = InMemoryCacheStore()
    analyzer = api_module.create_analyzer(
        cache_store=store,
        file_system=_fs(),
        config=Config(),
        logger=recording_logger,
    )
    analyzer.scan_directory("/virtual/data")
    assert store.save_count == 1
    assert [e.file_name for e in analyzer.get_top_largest_files(1)] == ["a.log"]


def test_top_largest_files_on_real_directory(tmp_path, monkeypatch):
    monkeypatch.setattr(api_module, "load_config", lambda: Config())
    data = tmp_path / "data"
    data.mkdir()
    (data / "one.log").write_bytes(b"x" * 100)
    (data / "two.log").write_bytes(b"x" * 300)
    (data / "three.txt").write_bytes(b"x" * 200)

    results = api_module.top_largest_files(
        data, count=5, extension="log", cache_dir=tmp_path / "cache"
    )

    assert [e.file_name for e in results] == ["two.log", "one.log"]
    assert (tmp_path / "cache" / "cache.json").exists()
