# SPDX-License-Identifier: Apache-2.0
"""Staged JSON check command."""

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

import typer

logger = logging.getLogger(__name__)

_DATE_FORMAT = "%Y/%m/%d %H:%M:%S"


def _configure_logging(fmt: str, verbose: bool = False) -> None:
    """Send the package's log records to stderr with UTC timestamps."""
    formatter = logging.Formatter(fmt, datefmt=_DATE_FORMAT)
    formatter.converter = time.gmtime

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    package_logger = logging.getLogger("jsonguard")
    for existing in list(package_logger.handlers):
        package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def _export_metrics(metrics_file: Optional[str]) -> None:
    if not metrics_file:
        return
    from jsonguard.metrics import export_textfile

    try:
        export_textfile(metrics_file)
    except OSError as e:
        logger.warning("Could not write metrics to %s: %s", metrics_file, e)


def _check_impl(
    paths: Optional[List[str]] = None,
    config: Optional[Path] = None,
    workers: Optional[int] = None,
    against: Optional[str] = None,
    window_size: Optional[int] = None,
    repo: Optional[Path] = None,
    metrics_file: Optional[Path] = None,
    verbose: bool = False,
) -> None:
    """Implementation of the check functionality."""
    from jsonguard.config import ConfigVersionError, discover_config
    from jsonguard.config.settings import DEFAULT_LOG_FORMAT
    from jsonguard.coordinator import CheckCoordinator
    from jsonguard.errors import FatalCheckError
    from jsonguard.sources import StagedPathSource, repository_root, resolve_against
    from jsonguard.validator import FileValidator

    _configure_logging(DEFAULT_LOG_FORMAT, verbose)

    start_dir = repo if repo is not None else Path.cwd()
    try:
        root = start_dir if paths else repository_root(start_dir)
    except FatalCheckError as e:
        logger.error("%s", e)
        raise typer.Exit(1)

    try:
        cfg = discover_config(root, config).merge_overrides(
            workers=workers,
            against=against,
            window_size=window_size,
            metrics_file=str(metrics_file) if metrics_file is not None else None,
        )
    except (ConfigVersionError, FileNotFoundError, ValueError) as e:
        typer.echo(f"❌ Configuration error: {e}", err=True)
        raise typer.Exit(2)

    if cfg.log_format != DEFAULT_LOG_FORMAT:
        _configure_logging(cfg.log_format, verbose)

    validator = FileValidator(
        root=repo if paths else root,
        window_size=cfg.window_size,
        leading_lines=cfg.leading_lines,
        trailing_lines=cfg.trailing_lines,
    )
    coordinator = CheckCoordinator(validator, workers=cfg.workers)

    try:
        if paths:
            exit_code = coordinator.run(paths)
        else:
            tree = resolve_against(cfg.against, root)
            with StagedPathSource(tree, cfg.diff_filter, cwd=root) as source:
                exit_code = coordinator.run(source)
    except FatalCheckError as e:
        logger.error("%s", e, exc_info=verbose)
        _export_metrics(cfg.metrics_file)
        raise typer.Exit(1)

    _export_metrics(cfg.metrics_file)
    raise typer.Exit(exit_code)


def check(
    paths: Optional[List[str]] = typer.Argument(
        None, help="Files to check instead of the staged set (non-.json paths are ignored)"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="YAML configuration file (default: .jsonguard.yaml)"
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", help="Maximum concurrent validations (default: unbounded)"
    ),
    against: Optional[str] = typer.Option(
        None, "--against", help="Tree-ish to compare the index with (default: HEAD)"
    ),
    window_size: Optional[int] = typer.Option(
        None, "--window-size", help="Bytes read around a parse error for context"
    ),
    repo: Optional[Path] = typer.Option(
        None, "--repo", help="Repository to check (default: current directory)"
    ),
    metrics_file: Optional[Path] = typer.Option(
        None, "--metrics-file", help="Write Prometheus textfile metrics after the run"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Validate that staged (or given) JSON files are well-formed.

    Examples:
        jsonguard check                      # Check files staged for commit
        jsonguard check config/*.json        # Check specific files
        jsonguard check --workers 8          # Cap concurrent validations
    """
    _check_impl(
        paths=paths,
        config=config,
        workers=workers,
        against=against,
        window_size=window_size,
        repo=repo,
        metrics_file=metrics_file,
        verbose=verbose,
    )


def default(ctx: typer.Context):
    """Validate staged JSON files before they are committed."""
    if ctx.invoked_subcommand is None:
        _check_impl()
