"""
homevisit.config.postgres – PostgreSQL connection and pool settings.

Env vars: DATABASE_URL, DB_POOL_SIZE, DB_MAX_OVERFLOW, DB_POOL_TIMEOUT, DB_POOL_RECYCLE,
DB_ECHO, DB_APPLICATION_NAME.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any, Dict

_SCHEMES = ("postgresql://", "postgres://", "postgresql+asyncpg://")
_TRUE = ("1", "true", "yes")

# field -> (env var, default as the env would spell it)
_ENV: Dict[str, tuple] = {
    "url": ("DATABASE_URL", "postgresql://localhost/homevisit"),
    "pool_size": ("DB_POOL_SIZE", "10"),
    "max_overflow": ("DB_MAX_OVERFLOW", "20"),
    "pool_timeout": ("DB_POOL_TIMEOUT", "30"),
    "pool_recycle": ("DB_POOL_RECYCLE", "1800"),
    "echo": ("DB_ECHO", ""),
    "application_name": ("DB_APPLICATION_NAME", "homevisit-api"),
}


@dataclass(frozen=True)
class PostgresConfig:
    """
    Validated on construction. One pool serves every request; the availability
    fan-out takes a connection per read, so pool_size + max_overflow is the
    real ceiling on concurrent staff checks against the database.
    """

    url: str
    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    pool_recycle: int = 1800
    echo: bool = False
    application_name: str = "homevisit-api"

    def __post_init__(self) -> None:
        url = (self.url or "").strip()
        if not url.startswith(_SCHEMES):
            raise ValueError(f"DATABASE_URL must start with one of {', '.join(_SCHEMES)}")
        object.__setattr__(self, "url", url)
        for name, minimum in (("pool_size", 1), ("max_overflow", 0), ("pool_timeout", 1), ("pool_recycle", 1)):
            value = getattr(self, name)
            if not isinstance(value, int) or value < minimum:
                raise ValueError(f"{name} must be an integer >= {minimum}, got {value!r}")
        if not isinstance(self.echo, bool):
            raise ValueError("echo must be a boolean")
        if not str(self.application_name).strip():
            raise ValueError("application_name must be non-empty")

    @classmethod
    def from_env(cls, **overrides: Any) -> PostgresConfig:
        """Keyword overrides win over env; env wins over defaults."""
        values: Dict[str, Any] = {}
        for f in fields(cls):
            env_name, default = _ENV[f.name]
            raw = overrides.get(f.name)
            if raw is None:
                raw = os.environ.get(env_name, default)
            if f.name == "echo":
                values[f.name] = raw if isinstance(raw, bool) else str(raw).strip().lower() in _TRUE
            elif f.name in ("url", "application_name"):
                values[f.name] = str(raw)
            else:
                values[f.name] = int(raw)
        return cls(**values)


def load_postgres_config(**overrides: Any) -> PostgresConfig:
    """Load and validate PostgreSQL config from env. Raises ValueError on bad values."""
    return PostgresConfig.from_env(**overrides)
