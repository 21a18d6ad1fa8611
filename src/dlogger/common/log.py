from __future__ import annotations

import logging
import os
from pathlib import Path

from .config import LoggingCfg

_FORMAT = logging.Formatter(
    fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)


def setup_logging(cfg: LoggingCfg, name: str) -> logging.Logger:
    root = logging.getLogger()
    root.setLevel(getattr(logging, cfg.level))

    if not any(type(h) is logging.StreamHandler for h in root.handlers):
        sh = logging.StreamHandler()
        sh.setFormatter(_FORMAT)
        root.addHandler(sh)

    if cfg.file is not None:
        log_path = Path(cfg.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        has_file = any(
            isinstance(h, logging.FileHandler)
            and h.baseFilename == os.path.abspath(log_path)
            for h in root.handlers
        )
        if not has_file:
            fh = logging.FileHandler(log_path, encoding="utf-8")
            fh.setFormatter(_FORMAT)
            root.addHandler(fh)

    return logging.getLogger(name)
