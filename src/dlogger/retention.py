from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator

log = logging.getLogger("dlogger.retention")

ErrorSink = Callable[[str], object]


@dataclass(frozen=True)
class CandidateFile:
    path: Path
    name: str
    modified: datetime


@dataclass(frozen=True)
class RetentionPolicy:
    threshold_days: int
    name_filter: re.Pattern[str] | None = None

    @classmethod
    def build(cls, threshold_days: int, name_pattern: str | None = None) -> "RetentionPolicy":
        if threshold_days < 0:
            raise ValueError(f"threshold_days must be >= 0, got {threshold_days}")
        # "" means no filter
        name_filter = re.compile(name_pattern) if name_pattern else None
        return cls(threshold_days=threshold_days, name_filter=name_filter)

    def accepts_name(self, name: str) -> bool:
        return self.name_filter is None or self.name_filter.search(name) is not None

    def is_stale(self, age_days: int) -> bool:
        return age_days > self.threshold_days


@dataclass
class SweepStats:
    examined: int = 0
    deleted: int = 0
    failed: int = 0
    skipped: int = 0
    removed: list[Path] = field(default_factory=list)


def age_in_days(modified: datetime, now: datetime) -> int:
    """Whole calendar days between the modification date and now (local dates)."""
    return (now.date() - modified.date()).days


class RetentionSweeper:
    """
    Deletes stale files directly inside one directory.

    Age comes from the file's modification time, not from a date in its name.
    A file is stale when its age in calendar days is strictly greater than
    days_keep. Failures on one file are reported and the sweep moves on.
    days_keep=None turns every sweep into a no-op.
    """

    def __init__(
        self,
        directory: Path,
        days_keep: int | None,
        on_error: ErrorSink | None = None,
    ) -> None:
        self.directory = Path(directory)
        self.days_keep = days_keep
        self._on_error = on_error

    @property
    def enabled(self) -> bool:
        return self.days_keep is not None

    def _report(self, message: str) -> None:
        log.warning("log cleaner: %s", message)
        if self._on_error is not None:
            self._on_error(message)

    @staticmethod
    def _report_quiet(message: str) -> None:
        log.warning("log cleaner: %s", message)

    def _stale(
        self,
        policy: RetentionPolicy,
        now: datetime,
        stats: SweepStats,
        report: ErrorSink,
    ) -> Iterator[CandidateFile]:
        try:
            entries = sorted(self.directory.iterdir())
        except OSError as e:
            report(f"could not read directory: {e}")
            return

        for entry in entries:
            if not policy.accepts_name(entry.name):
                stats.skipped += 1
                continue
            try:
                if not entry.is_file():
                    stats.skipped += 1
                    continue
                mtime = entry.stat().st_mtime
            except OSError as e:
                stats.failed += 1
                report(f"could not read metadata from file {entry.name} | {e}")
                continue
            try:
                modified = datetime.fromtimestamp(mtime)
            except (OSError, ValueError, OverflowError) as e:
                stats.failed += 1
                report(f"could not read modified time from file {entry.name} | {e}")
                continue

            stats.examined += 1
            if policy.is_stale(age_in_days(modified, now)):
                yield CandidateFile(path=entry, name=entry.name, modified=modified)

    def plan(self, name_pattern: str | None = None, *, now: datetime | None = None) -> list[CandidateFile]:
        """Files a sweep would delete now. Nothing is deleted and on_error is not called."""
        if self.days_keep is None:
            return []
        policy = RetentionPolicy.build(self.days_keep, name_pattern)
        return list(self._stale(policy, now or datetime.now(), SweepStats(), self._report_quiet))

    def sweep(
        self,
        name_pattern: str | None = None,
        *,
        now: datetime | None = None,
        dry_run: bool = False,
    ) -> SweepStats:
        stats = SweepStats()
        if self.days_keep is None:
            log.debug("cleanup disabled for %s", self.directory)
            return stats

        policy = RetentionPolicy.build(self.days_keep, name_pattern)
        # one reference time for the whole sweep
        now = now or datetime.now()

        report = self._report_quiet if dry_run else self._report
        for cand in self._stale(policy, now, stats, report):
            if dry_run:
                stats.removed.append(cand.path)
                log.info("would delete %s (modified %s)", cand.path, cand.modified)
                continue
            try:
                cand.path.unlink()
            except OSError as e:
                stats.failed += 1
                self._report(f"could not delete file {cand.name} | {e}")
                continue
            stats.deleted += 1
            stats.removed.append(cand.path)
            log.info("deleted %s (modified %s)", cand.path, cand.modified)

        log.debug(
            "sweep %s: examined=%d deleted=%d failed=%d skipped=%d",
            self.directory, stats.examined, stats.deleted, stats.failed, stats.skipped,
        )
        return stats
