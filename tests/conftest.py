from __future__ import annotations

import logging
import os
from datetime import datetime, time, timedelta
from pathlib import Path

import pytest

NOW = datetime(2024, 1, 11, 9, 30, 0)


def make_file(directory: Path, name: str, age_days: int, now: datetime = NOW) -> Path:
    """Create a file whose mtime is noon, age_days calendar days before now."""
    p = directory / name
    p.write_text("x\n", encoding="utf-8")
    modified = datetime.combine(now.date() - timedelta(days=age_days), time(12, 0))
    ts = modified.timestamp()
    os.utime(p, (ts, ts))
    return p


@pytest.fixture(autouse=True)
def restore_root_handlers():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)


@pytest.fixture
def fixed_clock():
    return lambda: NOW
