"""Centralized user-facing text for the Massif CLI."""

from __future__ import annotations

class Styles:
    ERROR = "red"
    WARNING = "yellow"
    SUCCESS = "green"
    INFO = "dim"
    TITLE = "bold cyan"
    TABLE_HEADER = "bold magenta"


class Messages:
    APP_HELP = "Massif: find the largest files under a directory, scanning once and querying many times."
    HELP_VERSION = "Show version and exit."
    HELP_VERBOSE = "Enable debug logging on stderr."
    HELP_CONFIG_DIR = "Read and write configuration in this directory instead of ~/.massif."
    HELP_SCAN_PATH = "Root directory to scan (or to load from cache)."
    HELP_TOP_COUNT = "Number of files to display."
    HELP_TOP_EXTENSION = "Only include files with this extension (e.g. .log)."
    HELP_TOP_FORMAT = "Output format: rich table or tab separated porcelain lines."
    HELP_CACHE_SHOW = "Show the provenance of the stored cache."
    HELP_CACHE_CLEAR = "Delete the stored cache from disk."
    HELP_SHOW_CONFIG = "Show current configuration."
    HELP_SET_CACHE_DIR = "Store the cache in this directory."
    HELP_CLEAR_CACHE_DIR = "Reset the cache directory to the default temp location."
    HELP_SET_MAX_DEPTH = "Set the maximum directory depth to descend into."
    HELP_SET_LOG_LEVEL = "Set the default log level (DEBUG, INFO, WARNING, ERROR)."

    INFO_SCAN_RUNNING = "Scanning {path}..."
    INFO_SCAN_FROM_CACHE = "Loaded {count} files for {path} from cache (scanned {when})."
    INFO_SCAN_FRESH = "Scanned {count} files under {path} in {seconds:.2f}s."
    INFO_SCAN_SKIPPED = "Skipped {files} unreadable files and {dirs} unreadable directories."
    WARNING_DEPTH_LIMIT = "Stopped descending at depth {depth} in {count} place(s)."
    INFO_NO_FILES = "No files found in the selected directory."
    INFO_NO_RESULTS = "No matching files found."
    INFO_CACHE_NONE = "No cache stored at {path}."
    INFO_CACHE_SUMMARY = (
        "Cache file: {path}\n"
        "Scanned directory: {directory}\n"
        "Scanned at (UTC): {when}\n"
        "Files: {count}\n"
        "Cache size: {size}"
    )
    INFO_CACHE_CLEARED = "Removed cache file {path}."
    INFO_CACHE_CLEAR_NONE = "No cache file found at {path}."
    INFO_CACHE_DIR_SET = "Cache directory set to {value}."
    INFO_CACHE_DIR_CLEARED = "Cache directory reset to default."
    INFO_MAX_DEPTH_SET = "Maximum depth set to {value}."
    INFO_LOG_LEVEL_SET = "Log level set to {value}."
    INFO_CONFIG_SUMMARY = (
        "Cache directory: {cache_dir}\n"
        "Max depth: {max_depth}\n"
        "Path length thresholds: {path_warning}/{path_critical}\n"
        "Memory thresholds (MB): moderate {memory_moderate}, high {memory_high}, ceiling {memory_ceiling}\n"
        "Log level: {log_level}"
    )
    INFO_CONFIG_HINT = "Use --show or one of the --set options; see --help."
    ERROR_CONFIG_CONFLICT = "--set-cache-dir and --clear-cache-dir cannot be combined."
    ERROR_CACHE_NO_ACTION = "Use --show or --clear; see --help."

    TABLE_TITLE = "Largest files under {path}"
    TABLE_HEADER_INDEX = "#"
    TABLE_HEADER_SIZE = "Size"
    TABLE_HEADER_MODIFIED = "Modified (UTC)"
    TABLE_HEADER_PATH = "File path"
