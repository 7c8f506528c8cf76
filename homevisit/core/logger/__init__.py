"""
Project logger: rotating file (JSON) + console.

Usage:
    import logging
    from homevisit.core.logger import configure, LoggerConfig

    # Configure once at startup (from_env() if no config given)
    configure(LoggerConfig(level="DEBUG", log_dir="/var/log/homevisit"))

    logger = logging.getLogger(__name__)
    logger.info("Slots computed", extra={"tenant_id": tid, "date": "2024-06-10"})

Booking context keys passed via ``extra`` (tenant_id, service_id, staff_id,
date) are lifted into the JSON file output.
"""
from homevisit.core.logger.config import LoggerConfig
from homevisit.core.logger.formatters import CONTEXT_KEYS, JsonFormatter, PlainConsoleFormatter
from homevisit.core.logger.setup import configure

__all__ = [
    "LoggerConfig",
    "CONTEXT_KEYS",
    "JsonFormatter",
    "PlainConsoleFormatter",
    "configure",
]
