"""
Logger setup: console and rotating JSON file handlers on the project root logger.
"""
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from homevisit.core.logger.config import LoggerConfig
from homevisit.core.logger.formatters import JsonFormatter, PlainConsoleFormatter


def _handlers(config: LoggerConfig, level: int) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if config.console:
        console = logging.StreamHandler()
        console.setFormatter(PlainConsoleFormatter())
        handlers.append(console)
    if config.file_rotating and config.log_dir and config.log_dir.strip():
        log_dir = Path(config.log_dir)
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logging.getLogger(__name__).warning("No file logging, cannot create %s: %s", log_dir, exc)
        else:
            file_handler = RotatingFileHandler(
                log_dir / f"{config.log_file_basename}.log",
                maxBytes=config.max_bytes,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(JsonFormatter())
            handlers.append(file_handler)
    for handler in handlers:
        handler.setLevel(level)
    return handlers


def configure(config: Optional[LoggerConfig] = None) -> logging.Logger:
    """
    Attach handlers to the project root logger (LoggerConfig.from_env() when
    config is None). Calling it again replaces the handlers.
    """
    config = config or LoggerConfig.from_env()
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger(config.root_name or "homevisit")
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    root.setLevel(level)
    for handler in _handlers(config, level):
        root.addHandler(handler)
    root.propagate = False
    return root

