"""Global configuration management for Massif."""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from .logger import ENV_LOG_LEVEL
from .scanner import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MEMORY_CEILING_MB,
    DEFAULT_MEMORY_HIGH_MB,
    DEFAULT_MEMORY_MODERATE_MB,
    DEFAULT_PATH_LENGTH_CRITICAL,
    DEFAULT_PATH_LENGTH_WARNING,
    ScannerSettings,
)

DEFAULT_CONFIG_DIR = Path(os.path.expanduser("~")) / ".massif"
CONFIG_DIR = DEFAULT_CONFIG_DIR
CONFIG_FILE = CONFIG_DIR / "config.json"
DEFAULT_CACHE_DIR = Path(tempfile.gettempdir()) / "massif"
DEFAULT_LOG_LEVEL = "WARNING"
SUPPORTED_LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR")
ENV_CACHE_DIR = "MASSIF_CACHE_DIR"


@dataclass
class Config:
    cache_dir: str | None = None
    max_depth: int = DEFAULT_MAX_DEPTH
    path_length_warning: int = DEFAULT_PATH_LENGTH_WARNING
    path_length_critical: int = DEFAULT_PATH_LENGTH_CRITICAL
    memory_moderate_mb: float = DEFAULT_MEMORY_MODERATE_MB
    memory_high_mb: float = DEFAULT_MEMORY_HIGH_MB
    memory_ceiling_mb: float = DEFAULT_MEMORY_CEILING_MB
    log_level: str = DEFAULT_LOG_LEVEL

    def scanner_settings(self) -> ScannerSettings:
        return ScannerSettings(
            max_depth=self.max_depth,
            path_length_warning=self.path_length_warning,
            path_length_critical=self.path_length_critical,
            memory_moderate_mb=self.memory_moderate_mb,
            memory_high_mb=self.memory_high_mb,
            memory_ceiling_mb=self.memory_ceiling_mb,
        )


def set_config_dir(path: Path | str | None) -> None:
    global CONFIG_DIR, CONFIG_FILE
    if path is None:
        CONFIG_DIR = DEFAULT_CONFIG_DIR
    else:
        dir_path = Path(path).expanduser().resolve()
        if dir_path.exists() and not dir_path.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {dir_path}")
        CONFIG_DIR = dir_path
    CONFIG_FILE = CONFIG_DIR / "config.json"


def _coerce_positive_int(value: object, default: int) -> int:
    try:
        parsed = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _coerce_positive_float(value: object, default: float) -> float:
    try:
        parsed = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _coerce_log_level(value: object) -> str:
    if not isinstance(value, str):
        return DEFAULT_LOG_LEVEL
    normalized = value.strip().upper()
    if normalized not in SUPPORTED_LOG_LEVELS:
        return DEFAULT_LOG_LEVEL
    return normalized


def load_config() -> Config:
    config_file = CONFIG_FILE
    if not config_file.exists():
        return Config()
    try:
        raw = json.loads(config_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Config file is not valid JSON: {config_file}") from exc
    if not isinstance(raw, dict):
        raise ValueError(f"Config file must contain a JSON object: {config_file}")
    return Config(
        cache_dir=str(raw.get("cache_dir") or "").strip() or None,
        max_depth=_coerce_positive_int(raw.get("max_depth"), DEFAULT_MAX_DEPTH),
        path_length_warning=_coerce_positive_int(
            raw.get("path_length_warning"), DEFAULT_PATH_LENGTH_WARNING
        ),
        path_length_critical=_coerce_positive_int(
            raw.get("path_length_critical"), DEFAULT_PATH_LENGTH_CRITICAL
        ),
        memory_moderate_mb=_coerce_positive_float(
            raw.get("memory_moderate_mb"), DEFAULT_MEMORY_MODERATE_MB
        ),
        memory_high_mb=_coerce_positive_float(
            raw.get("memory_high_mb"), DEFAULT_MEMORY_HIGH_MB
        ),
        memory_ceiling_mb=_coerce_positive_float(
            raw.get("memory_ceiling_mb"), DEFAULT_MEMORY_CEILING_MB
        ),
        log_level=_coerce_log_level(raw.get("log_level")),
    )


def save_config(config: Config) -> None:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    data: Dict[str, Any] = {}
    if config.cache_dir:
        data["cache_dir"] = config.cache_dir
    data["max_depth"] = config.max_depth
    data["path_length_warning"] = config.path_length_warning
    data["path_length_critical"] = config.path_length_critical
    data["memory_moderate_mb"] = config.memory_moderate_mb
    data["memory_high_mb"] = config.memory_high_mb
    data["memory_ceiling_mb"] = config.memory_ceiling_mb
    data["log_level"] = config.log_level
    config_file = CONFIG_FILE
    config_file.write_text(
        json.dumps(data, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


def resolve_cache_dir(config: Config | None = None) -> Path:
    """Return the cache directory: environment, then config, then temp default."""

    env_value = os.environ.get(ENV_CACHE_DIR, "").strip()
    if env_value:
        return Path(env_value).expanduser()
    if config is not None and config.cache_dir:
        return Path(config.cache_dir).expanduser()
    return DEFAULT_CACHE_DIR


def resolve_log_level(config: Config | None = None) -> str:
    env_value = os.environ.get(ENV_LOG_LEVEL, "").strip()
    if env_value:
        return _coerce_log_level(env_value)
    if config is not None:
        return config.log_level
    return DEFAULT_LOG_LEVEL


def set_cache_dir(value: str | None) -> None:
    config = load_config()
    config.cache_dir = value
    save_config(config)


def set_max_depth(value: int) -> None:
    if value <= 0:
        raise ValueError("max_depth must be greater than 0")
    config = load_config()
    config.max_depth = value
    save_config(config)


def set_log_level(value: str) -> None:
    normalized = value.strip().upper()
    if normalized not in SUPPORTED_LOG_LEVELS:
        allowed = ", ".join(SUPPORTED_LOG_LEVELS)
        raise ValueError(f"Unsupported log level {value!r}; choose one of: {allowed}")
    config = load_config()
    config.log_level = normalized
    save_config(config)
