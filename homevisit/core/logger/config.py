"""
Logger configuration. Build explicitly or from env.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class LoggerConfig:
    level: str = "INFO"
    log_dir: Optional[str] = None
    """Directory for the rotating JSON file; None means console only."""
    log_file_basename: str = "homevisit"
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 5
    root_name: str = "homevisit"
    """Handlers live on this logger; every homevisit.* module logger inherits them."""
    console: bool = True
    file_rotating: bool = True

    def __post_init__(self) -> None:
        if self.level.upper() not in _LEVELS:
            raise ValueError(f"level must be one of {_LEVELS}, got {self.level!r}")
        if self.max_bytes < 1 or self.backup_count < 0:
            raise ValueError("max_bytes must be >= 1 and backup_count >= 0")

    @classmethod
    def from_env(cls) -> LoggerConfig:
        """
        Env:
            LOG_LEVEL, LOG_DIR, LOG_FILE_BASENAME, LOG_MAX_BYTES,
            LOG_BACKUP_COUNT, LOG_ROOT_NAME, LOG_CONSOLE, LOG_FILE_ROTATING
        """
        env = os.environ.get
        return cls(
            level=env("LOG_LEVEL", "INFO").upper(),
            log_dir=env("LOG_DIR") or None,
            log_file_basename=env("LOG_FILE_BASENAME", "homevisit"),
            max_bytes=int(env("LOG_MAX_BYTES", str(5 * 1024 * 1024))),
            backup_count=int(env("LOG_BACKUP_COUNT", "5")),
            root_name=env("LOG_ROOT_NAME", "homevisit"),
            console=_flag("LOG_CONSOLE", True),
            file_rotating=_flag("LOG_FILE_ROTATING", True),
        )
