"""
Configuration models for GTD Bot (args/gtd.yaml).

Every section tolerates unknown keys so older or newer config files still
load. A config that fails validation falls back to defaults with a warning.

Usage:
    from gtdbot.config import load_config

    config = load_config()
    print(config.storage.resolved_data_dir())
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from gtdbot import CONFIG_PATH, PROJECT_ROOT
from gtdbot.logging_config import get_logger

logger = get_logger(__name__)


def _resolve(path: str) -> Path:
    p = Path(path).expanduser()
    return p if p.is_absolute() else PROJECT_ROOT / p


class StorageConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    data_dir: str = Field(default="data")
    log_dir: str = Field(default="logs")

    def resolved_data_dir(self) -> Path:
        return _resolve(self.data_dir)

    def resolved_log_dir(self) -> Path:
        return _resolve(self.log_dir)


class ViewsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    completed_limit: int = Field(default=10, ge=1)
    activity_limit: int = Field(default=10, ge=1)


class StatsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    window_days: int = Field(default=7, ge=1)


class RemindersConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    enabled: bool = Field(default=True)
    interval_hours: float = Field(default=24.0, gt=0)


class GTDConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    storage: StorageConfig = Field(default_factory=StorageConfig)
    views: ViewsConfig = Field(default_factory=ViewsConfig)
    stats: StatsConfig = Field(default_factory=StatsConfig)
    reminders: RemindersConfig = Field(default_factory=RemindersConfig)


def load_config(path: Optional[Path] = None) -> GTDConfig:
    yaml_path = Path(path) if path is not None else CONFIG_PATH

    try:
        if yaml_path.exists():
            with open(yaml_path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            raw = {}

        return GTDConfig.model_validate(raw)
    except Exception as e:
        logger.warning(f"Config validation failed for {yaml_path}: {e}, using defaults")
        return GTDConfig()


__all__ = [
    "GTDConfig",
    "RemindersConfig",
    "StatsConfig",
    "StorageConfig",
    "ViewsConfig",
    "load_config",
]
