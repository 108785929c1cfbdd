from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

APP_DIR_NAME = "timesifter"
DATA_DIR_ENV = "TIMESIFTER_DATA_DIR"


@dataclass(slots=True)
class LoggingConfig:
    """Logging configuration from config.yml."""

    level: str = "INFO"
    max_mb: int = 10
    backup_count: int = 5


@dataclass(slots=True)
class ViewConfig:
    """Table font settings from config.yml."""

    font_size: int = 10
    min_font_size: int = 6
    max_font_size: int = 32

    def clamp(self, size: int) -> int:
        return max(self.min_font_size, min(size, self.max_font_size))


@dataclass(slots=True)
class AppConfig:
    """Top-level configuration resolved from disk."""

    base_dir: Path
    data_dir: Path
    logs_dir: Path
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    view: ViewConfig = field(default_factory=ViewConfig)

    def to_json(self) -> str:
        """Serialize the resolved locations into a JSON string for diagnostics."""
        data = {
            "data_dir": str(self.data_dir),
            "logs_dir": str(self.logs_dir),
            "log_level": self.logging.level,
        }
        return json.dumps(data, indent=2, sort_keys=True)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        content = yaml.safe_load(handle) or {}
        if not isinstance(content, dict):
            raise ValueError(f"Config file {path} must contain a mapping at the top level.")
        return content


def default_data_dir() -> Path:
    """Per-user application data directory holding sidecar tag files."""
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override)
    xdg_data = os.environ.get("XDG_DATA_HOME")
    base = Path(xdg_data) if xdg_data else Path.home() / ".local" / "share"
    return base / APP_DIR_NAME


def load_app_config(base_dir: Path, data_dir: Optional[Path] = None) -> AppConfig:
    """Load application configuration from disk, providing sensible defaults."""

    config_yaml = base_dir / "config" / "config.yml"
    config_overrides = _load_yaml(config_yaml)

    if data_dir is None:
        configured = config_overrides.get("data_dir")
        data_dir = Path(configured).expanduser() if configured else default_data_dir()

    logs_cfg = config_overrides.get("logs_dir")
    logs_dir = Path(logs_cfg).expanduser() if logs_cfg else data_dir / "logs"

    logging_cfg = config_overrides.get("logging", {})
    logging_config = LoggingConfig(
        level=logging_cfg.get("level", "INFO"),
        max_mb=logging_cfg.get("max_mb", 10),
        backup_count=logging_cfg.get("backup_count", 5),
    )

    view_cfg = config_overrides.get("view", {})
    view_config = ViewConfig(
        font_size=view_cfg.get("font_size", 10),
        min_font_size=view_cfg.get("min_font_size", 6),
        max_font_size=view_cfg.get("max_font_size", 32),
    )
    view_config.font_size = view_config.clamp(view_config.font_size)

    return AppConfig(
        base_dir=base_dir,
        data_dir=data_dir,
        logs_dir=logs_dir,
        logging=logging_config,
        view=view_config,
    )
