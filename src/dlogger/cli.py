from __future__ import annotations

import logging
import os
from pathlib import Path

import typer
from pydantic import ValidationError

from dlogger.common.config import AppCfg, load_config
from dlogger.common.log import setup_logging
from dlogger.handle import LogDirectoryError, LogHandle

app = typer.Typer(help="dlogger: dated log files with age-based cleanup")

DEFAULT_CONFIG = Path("configs/dlogger.example.yaml")


def _load(config: Path, directory: Path | None, days: int | None = None) -> AppCfg:
    try:
        return load_config(config, overrides={"directory": directory, "days_keep": days})
    except ValidationError as e:
        typer.echo(f"invalid config: {e}", err=True)
        raise typer.Exit(code=2)


def _open(cfg: AppCfg) -> LogHandle:
    try:
        return LogHandle.from_config(cfg.logger)
    except LogDirectoryError as e:
        typer.echo(f"cannot use log directory: {e}", err=True)
        raise typer.Exit(code=2)


@app.command()
def write(
    text: str = typer.Argument(..., help="Text of the record."),
    config: Path = typer.Option(DEFAULT_CONFIG, "--config", "-c"),
    directory: Path | None = typer.Option(None, "--dir", "-d"),
) -> None:
    cfg = _load(config, directory)
    setup_logging(cfg.logging, name="dlogger-write")
    handle = _open(cfg)
    if not handle.append_line(text):
        typer.echo(f"write failed: {handle.current_file()}", err=True)
        raise typer.Exit(code=1)


@app.command()
def clean(
    config: Path = typer.Option(DEFAULT_CONFIG, "--config", "-c"),
    directory: Path | None = typer.Option(None, "--dir", "-d"),
    days: int | None = typer.Option(None, "--days", help="Override days_keep from the config."),
    pattern: str | None = typer.Option(None, "--pattern", "-p", help="Regex matched against file names."),
    dry_run: bool = typer.Option(False, "--dry-run", help="List stale files without deleting."),
) -> None:
    cfg = _load(config, directory, days)
    setup_logging(cfg.logging, name="dlogger-clean")
    log = logging.getLogger("dlogger.cli")
    handle = _open(cfg)

    if handle.days_keep is None:
        log.info("days_keep not set, cleanup disabled for %s", handle.directory)
    stats = handle.sweeper.sweep(pattern, dry_run=dry_run)
    if dry_run:
        for p in stats.removed:
            print(f"would delete {p.name}")
    print(f"clean: deleted={stats.deleted} failed={stats.failed} examined={stats.examined}")


@app.command()
def doctor(
    config: Path = typer.Option(DEFAULT_CONFIG, "--config", "-c"),
    directory: Path | None = typer.Option(None, "--dir", "-d"),
) -> None:
    cfg = _load(config, directory)
    d = cfg.logger.directory
    print("dlogger doctor")
    print(f"  directory:          {d}")
    print(f"  exists:             {d.is_dir()}")
    print(f"  writable:           {'yes' if d.is_dir() and os.access(d, os.W_OK) else 'no'}")
    print(f"  days_keep:          {cfg.logger.days_keep if cfg.logger.days_keep is not None else 'disabled'}")
    try:
        handle = LogHandle(cfg.logger)
        print(f"  today's file:       {handle.current_file().name}")
    except ValueError as e:
        print(f"  today's file:       invalid format ({e})")


if __name__ == "__main__":
    app()
