from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt


class LoggerCfg(BaseModel):
    """
    Settings for one dated log directory.

    days_keep=None disables cleanup for the lifetime of the handle.
    days_keep=0 is a real threshold: anything not modified today is stale.
    """
    model_config = ConfigDict(frozen=True)

    directory: Path
    file_name_format: str = "Log%d%m%y.log"
    # separator between timestamp and text is part of the format
    line_date_format: str = "%Y-%m-%d %H:%M:%S "
    days_keep: NonNegativeInt | None = None
    create_missing: bool = False


class LoggingCfg(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    file: Path | None = None


class AppCfg(BaseModel):
    logger: LoggerCfg
    logging: LoggingCfg = Field(default_factory=LoggingCfg)


def load_config(path: Path, overrides: dict[str, Any] | None = None) -> AppCfg:
    data: dict[str, Any] = {}
    if path.exists():
        data = yaml.safe_load(path.read_text()) or {}
    if overrides:
        logger_data = dict(data.get("logger") or {})
        logger_data.update({k: v for k, v in overrides.items() if v is not None})
        data["logger"] = logger_data
    return AppCfg.model_validate(data)
