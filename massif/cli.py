"""Command line interface for Massif."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Sequence

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__, config as config_module
from .api import create_analyzer
from .cache import JsonFileCacheStore
from .config import load_config, resolve_cache_dir, resolve_log_level
from .errors import MassifError
from .logger import setup_logging
from .models import FileEntry
from .services.analyzer_service import DEFAULT_TOP_COUNT, AnalyzerService
from .services.cache_service import clear_cache_file, describe_cache
from .text import Messages, Styles
from .utils import format_path, format_size

console = Console()

app = typer.Typer(
    help=Messages.APP_HELP,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


class TopOutputFormat(str, Enum):
    rich = "rich"
    porcelain = "porcelain"


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"Massif v{__version__}")
        raise typer.Exit()


def _styled(text: str, style: str) -> str:
    # Messages carry user paths, which must not be parsed as markup.
    return f"[{style}]{escape(text)}[/{style}]"


def _fail(message: str) -> None:
    console.print(_styled(message, Styles.ERROR))
    raise typer.Exit(code=1)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help=Messages.HELP_VERSION,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help=Messages.HELP_VERBOSE),
    config_dir: Path | None = typer.Option(
        None, "--config-dir", help=Messages.HELP_CONFIG_DIR
    ),
) -> None:
    """Global Typer callback for shared options."""
    if config_dir is not None:
        try:
            config_module.set_config_dir(config_dir)
        except NotADirectoryError as exc:
            _fail(str(exc))
    try:
        config = load_config()
    except ValueError:
        config = None
    setup_logging("DEBUG" if verbose else resolve_log_level(config))


def _build_analyzer() -> AnalyzerService:
    try:
        config = load_config()
    except ValueError as exc:
        _fail(str(exc))
    return create_analyzer(config=config)


def _run_scan(analyzer: AnalyzerService, path: Path) -> None:
    try:
        analyzer.scan_directory(path)
    except MassifError as exc:
        _fail(str(exc))


@app.command()
def scan(
    path: Path = typer.Argument(Path.cwd(), help=Messages.HELP_SCAN_PATH),
) -> None:
    """Scan a directory (or reuse its cache) and print a summary."""
    analyzer = _build_analyzer()
    console.print(_styled(Messages.INFO_SCAN_RUNNING.format(path=path), Styles.INFO))
    _run_scan(analyzer, path)

    metadata = analyzer.get_cache_metadata()
    directory = analyzer.get_scanned_directory_path()
    count = analyzer.get_scanned_file_count()
    if analyzer.loaded_from_cache and metadata is not None:
        when = metadata.scan_datetime_utc.strftime("%Y-%m-%d %H:%M:%S")
        console.print(
            _styled(
                Messages.INFO_SCAN_FROM_CACHE.format(count=count, path=directory, when=when),
                Styles.SUCCESS,
            )
        )
        return

    stats = analyzer.last_scan_stats
    seconds = stats.duration_seconds if stats is not None else 0.0
    console.print(
        _styled(
            Messages.INFO_SCAN_FRESH.format(count=count, path=directory, seconds=seconds),
            Styles.SUCCESS,
        )
    )
    if stats is None:
        return
    if stats.skipped_files or stats.skipped_directories:
        console.print(
            _styled(
                Messages.INFO_SCAN_SKIPPED.format(
                    files=stats.skipped_files, dirs=stats.skipped_directories
                ),
                Styles.WARNING,
            )
        )
    if stats.depth_limit_hits:
        console.print(
            _styled(
                Messages.WARNING_DEPTH_LIMIT.format(
                    depth=analyzer.scanner.settings.max_depth,
                    count=stats.depth_limit_hits,
                ),
                Styles.WARNING,
            )
        )


@app.command()
def top(
    path: Path = typer.Argument(Path.cwd(), help=Messages.HELP_SCAN_PATH),
    count: int = typer.Option(
        DEFAULT_TOP_COUNT, "--count", "-n", min=1, help=Messages.HELP_TOP_COUNT
    ),
    extension: str | None = typer.Option(
        None, "--ext", "-e", help=Messages.HELP_TOP_EXTENSION
    ),
    output_format: TopOutputFormat = typer.Option(
        TopOutputFormat.rich, "--format", help=Messages.HELP_TOP_FORMAT
    ),
) -> None:
    """List the largest files under a directory."""
    analyzer = _build_analyzer()
    _run_scan(analyzer, path)
    try:
        results = analyzer.get_top_largest_files(count, extension)
    except MassifError as exc:
        _fail(str(exc))

    base = analyzer.get_scanned_directory_path()
    if not results:
        message = (
            Messages.INFO_NO_FILES
            if analyzer.get_scanned_file_count() == 0
            else Messages.INFO_NO_RESULTS
        )
        if output_format == TopOutputFormat.rich:
            console.print(_styled(message, Styles.WARNING))
        else:
            typer.echo(message, err=True)
        raise typer.Exit(code=0)

    if output_format == TopOutputFormat.porcelain:
        _render_results_porcelain(results)
        return
    _render_results(results, base)


def _render_results(results: Sequence[FileEntry], base: str) -> None:
    table = Table(
        title=escape(Messages.TABLE_TITLE.format(path=base)),
        show_header=True,
        header_style=Styles.TABLE_HEADER,
    )
    table.add_column(Messages.TABLE_HEADER_INDEX, justify="right")
    table.add_column(Messages.TABLE_HEADER_SIZE, justify="right")
    table.add_column(Messages.TABLE_HEADER_MODIFIED)
    table.add_column(Messages.TABLE_HEADER_PATH, overflow="fold")
    for idx, entry in enumerate(results, start=1):
        table.add_row(
            str(idx),
            format_size(entry.size_bytes),
            entry.last_modified_utc.strftime("%Y-%m-%d %H:%M"),
            escape(format_path(entry.full_path, base)),
        )
    console.print(table)


def _escape_porcelain_field(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace("\t", "\\t")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


def _render_results_porcelain(results: Sequence[FileEntry]) -> None:
    for idx, entry in enumerate(results, start=1):
        fields = (
            str(idx),
            str(entry.size_bytes),
            _escape_porcelain_field(entry.full_path),
        )
        typer.echo("\t".join(fields))


@app.command()
def cache(
    show: bool = typer.Option(False, "--show", help=Messages.HELP_CACHE_SHOW),
    clear: bool = typer.Option(False, "--clear", help=Messages.HELP_CACHE_CLEAR),
) -> None:
    """Inspect or delete the stored scan cache."""
    try:
        config = load_config()
    except ValueError as exc:
        _fail(str(exc))
    store = JsonFileCacheStore(resolve_cache_dir(config))

    if not show and not clear:
        _fail(Messages.ERROR_CACHE_NO_ACTION)

    if show:
        try:
            summary = describe_cache(store)
        except MassifError as exc:
            _fail(str(exc))
        if not summary.exists or summary.metadata is None:
            console.print(
                _styled(Messages.INFO_CACHE_NONE.format(path=summary.cache_file), Styles.WARNING)
            )
        else:
            text = Messages.INFO_CACHE_SUMMARY.format(
                path=summary.cache_file,
                directory=summary.metadata.scanned_directory_path,
                when=summary.metadata.scan_datetime_utc.strftime("%Y-%m-%d %H:%M:%S"),
                count=summary.metadata.file_count,
                size=format_size(summary.size_bytes),
            )
            console.print(escape(text))

    if clear:
        try:
            removed = clear_cache_file(store)
        except MassifError as exc:
            _fail(str(exc))
        message = Messages.INFO_CACHE_CLEARED if removed else Messages.INFO_CACHE_CLEAR_NONE
        console.print(
            _styled(
                message.format(path=store.cache_file),
                Styles.SUCCESS if removed else Styles.WARNING,
            )
        )


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help=Messages.HELP_SHOW_CONFIG),
    set_cache_dir: str | None = typer.Option(
        None, "--set-cache-dir", help=Messages.HELP_SET_CACHE_DIR
    ),
    clear_cache_dir: bool = typer.Option(
        False, "--clear-cache-dir", help=Messages.HELP_CLEAR_CACHE_DIR
    ),
    set_max_depth: int | None = typer.Option(
        None, "--set-max-depth", min=1, help=Messages.HELP_SET_MAX_DEPTH
    ),
    set_log_level: str | None = typer.Option(
        None, "--set-log-level", help=Messages.HELP_SET_LOG_LEVEL
    ),
) -> None:
    """Manage persisted configuration."""
    if set_cache_dir is not None and clear_cache_dir:
        raise typer.BadParameter(Messages.ERROR_CONFIG_CONFLICT)

    changed = False
    try:
        if set_cache_dir is not None:
            config_module.set_cache_dir(set_cache_dir)
            console.print(
                _styled(Messages.INFO_CACHE_DIR_SET.format(value=set_cache_dir), Styles.SUCCESS)
            )
            changed = True
        if clear_cache_dir:
            config_module.set_cache_dir(None)
            console.print(_styled(Messages.INFO_CACHE_DIR_CLEARED, Styles.SUCCESS))
            changed = True
        if set_max_depth is not None:
            config_module.set_max_depth(set_max_depth)
            console.print(
                _styled(Messages.INFO_MAX_DEPTH_SET.format(value=set_max_depth), Styles.SUCCESS)
            )
            changed = True
        if set_log_level is not None:
            config_module.set_log_level(set_log_level)
            console.print(
                _styled(
                    Messages.INFO_LOG_LEVEL_SET.format(value=set_log_level.strip().upper()),
                    Styles.SUCCESS,
                )
            )
            changed = True
    except ValueError as exc:
        _fail(str(exc))

    if show:
        try:
            cfg = load_config()
        except ValueError as exc:
            _fail(str(exc))
        text = Messages.INFO_CONFIG_SUMMARY.format(
            cache_dir=resolve_cache_dir(cfg),
            max_depth=cfg.max_depth,
            path_warning=cfg.path_length_warning,
            path_critical=cfg.path_length_critical,
            memory_moderate=cfg.memory_moderate_mb,
            memory_high=cfg.memory_high_mb,
            memory_ceiling=cfg.memory_ceiling_mb,
            log_level=cfg.log_level,
        )
        console.print(escape(text))
        return
    if not changed:
        console.print(_styled(Messages.INFO_CONFIG_HINT, Styles.INFO))


def run(argv: list[str] | None = None) -> None:
    """Entry point wrapper allowing optional argument override."""
    if argv is None:
        app()
    else:
        app(args=list(argv))
