"""
Formatters: JSON lines for the rotating file, one readable line for the console.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

CONTEXT_KEYS = ("tenant_id", "service_id", "staff_id", "date")
"""Record attributes (set via ``extra=``) copied into the JSON output."""


class JsonFormatter(logging.Formatter):
    """One JSON object per line; booking context keys become top-level fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}:{record.lineno}",
        }
        entry.update(
            (key, getattr(record, key)) for key in CONTEXT_KEYS if getattr(record, key, None) is not None
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


class PlainConsoleFormatter(logging.Formatter):
    """``time | LEVEL | logger | message [tenant=.. date=..]``."""

    default_fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = "%Y-%m-%d %H:%M:%S") -> None:
        super().__init__(fmt=fmt or self.default_fmt, datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = " ".join(
            f"{key.replace('_id', '')}={getattr(record, key)}"
            for key in CONTEXT_KEYS
            if getattr(record, key, None) is not None
        )
        return f"{line} [{context}]" if context else line
