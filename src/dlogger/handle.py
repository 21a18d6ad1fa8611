from __future__ import annotations

import errno
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Callable

from dlogger.common.config import LoggerCfg
from dlogger.retention import RetentionSweeper

log = logging.getLogger("dlogger.handle")

Clock = Callable[[], datetime]


def _one_line(text: str) -> str:
    return text.replace("\r\n", " ").replace("\r", " ").replace("\n", " ")


class LogDirectoryError(OSError):
    """The log directory is missing, not a directory, or not usable."""


class LogHandle:
    """
    Appends timestamped lines to a dated file and cleans old files.

    Example:
        handle = LogHandle.create("/var/log/app", "Log%d%m%y.log", "%Y-%m-%d %H:%M:%S ", 7)
        if not handle.append_line("started"):
            ...
        handle.clean()
    """

    def __init__(self, cfg: LoggerCfg, clock: Clock = datetime.now) -> None:
        self.cfg = cfg
        self._clock = clock
        self.sweeper = RetentionSweeper(cfg.directory, cfg.days_keep, on_error=self._cleaner_error)

    @classmethod
    def create(
        cls,
        directory: str | Path,
        file_name_format: str = "Log%d%m%y.log",
        line_date_format: str = "%Y-%m-%d %H:%M:%S ",
        days_keep: int | None = None,
        *,
        create_missing: bool = False,
        clock: Clock = datetime.now,
    ) -> "LogHandle":
        cfg = LoggerCfg(
            directory=Path(directory),
            file_name_format=file_name_format,
            line_date_format=line_date_format,
            days_keep=days_keep,
            create_missing=create_missing,
        )
        return cls.from_config(cfg, clock=clock)

    @classmethod
    def from_config(cls, cfg: LoggerCfg, clock: Clock = datetime.now) -> "LogHandle":
        directory = cfg.directory
        if not directory.exists():
            if not cfg.create_missing:
                raise LogDirectoryError(errno.ENOENT, "log directory does not exist", str(directory))
            try:
                directory.mkdir()
            except OSError as e:
                raise LogDirectoryError(
                    e.errno, f"could not create log directory: {e.strerror}", str(directory)
                ) from e
            log.info("created log directory %s", directory)

        if not directory.is_dir():
            raise LogDirectoryError(errno.ENOTDIR, "log path is not a directory", str(directory))
        if not os.access(directory, os.R_OK | os.W_OK | os.X_OK):
            raise LogDirectoryError(errno.EACCES, "log directory is not readable and writable", str(directory))

        handle = cls(cfg, clock=clock)
        try:
            probe = handle.current_file()
        except ValueError as e:
            raise LogDirectoryError(errno.EINVAL, f"invalid file name format: {e}", cfg.file_name_format) from e
        try:
            with probe.open("a", encoding="utf-8") as f:
                f.write("\n")
        except OSError as e:
            raise LogDirectoryError(e.errno, f"could not write log file: {e.strerror}", str(probe)) from e
        return handle

    @property
    def directory(self) -> Path:
        return self.cfg.directory

    @property
    def days_keep(self) -> int | None:
        return self.cfg.days_keep

    def current_file(self, now: datetime | None = None) -> Path:
        now = now or self._clock()
        return self.cfg.directory / now.strftime(self.cfg.file_name_format)

    def append_line(self, text: str) -> bool:
        """
        Write one record to today's file. Returns False on any I/O failure.

        Line breaks inside text are replaced with spaces so one call is one line.
        """
        now = self._clock()
        try:
            stamp = now.strftime(self.cfg.line_date_format)
            path = self.current_file(now)
            with path.open("a", encoding="utf-8") as f:
                f.write(f"{stamp}{_one_line(text)}\n")
                f.flush()
                os.fsync(f.fileno())
        except (OSError, ValueError) as e:
            log.debug("append to %s failed: %s", self.cfg.directory, e)
            return False

        log.debug("%s", text)
        return True

    def _cleaner_error(self, message: str) -> None:
        self.append_line(f"Error = Log cleaner, {message}")

    def clean(self, name_pattern: str | None = None) -> None:
        """
        Delete files older than days_keep from the log directory.

        name_pattern is a regex searched in the bare file name. Nothing
        happens when days_keep is None. Per-file failures are logged and skipped.
        """
        self.sweeper.sweep(name_pattern, now=self._clock())
