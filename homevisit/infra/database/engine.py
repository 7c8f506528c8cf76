"""
homevisit.infra.database.engine – async engine and session factory for the gateway.

Nothing is cached at module level: the API lifespan builds one engine, keeps
the session factory on app.state and disposes the engine on shutdown. The
factory is what SqlConstraintGateway receives; it opens one short session
per read so concurrent staff checks never share an AsyncSession.
"""
from __future__ import annotations

import logging
import re
from typing import Tuple
from urllib.parse import urlparse, urlunparse

import asyncpg
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

# importing the package registers every table on Base.metadata
import homevisit.infra.database.models  # noqa: F401
from homevisit.config import PostgresConfig
from homevisit.infra.database.models.base import Base

logger = logging.getLogger(__name__)

_SAFE_DBNAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_ASYNC_SCHEME = "postgresql+asyncpg"


def async_url(url: str) -> str:
    """Rewrite any postgres URL scheme to the asyncpg driver."""
    scheme, sep, rest = url.partition("://")
    if not sep:
        raise ValueError(f"Not a database URL: {url!r}")
    if scheme in ("postgres", "postgresql"):
        return f"{_ASYNC_SCHEME}://{rest}"
    return url


def split_admin_url(url: str) -> Tuple[str, str]:
    """(target database name, plain URL of the server's "postgres" database)."""
    parsed = urlparse(url.replace(f"{_ASYNC_SCHEME}://", "postgresql://", 1))
    dbname = parsed.path.lstrip("/") or "postgres"
    return dbname, urlunparse(parsed._replace(path="/postgres"))


async def ensure_database_exists(config: PostgresConfig) -> bool:
    """CREATE DATABASE when missing. Returns True only when it was created.

    Unreachable servers are left to the engine to report on first query.
    """
    dbname, admin_url = split_admin_url(config.url)
    if dbname == "postgres":
        return False
    if not _SAFE_DBNAME.match(dbname):
        logger.warning("Not creating database with unsafe name %r", dbname)
        return False
    try:
        conn = await asyncpg.connect(admin_url)
    except (OSError, asyncpg.PostgresError) as exc:
        logger.debug("Postgres admin connection failed (%s), skipping create", exc)
        return False
    try:
        exists = await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", dbname)
        if exists:
            return False
        await conn.execute(f'CREATE DATABASE "{dbname}"')
        logger.info("Created database %s", dbname)
        return True
    finally:
        await conn.close()


def build_engine(config: PostgresConfig, *, use_null_pool: bool = False) -> AsyncEngine:
    """Engine with the configured pool, or NullPool for tests and scripts."""
    kwargs: dict = {
        "echo": config.echo,
        "connect_args": {
            "server_settings": {"application_name": config.application_name, "jit": "off"},
        },
    }
    if use_null_pool:
        kwargs["poolclass"] = NullPool
    else:
        kwargs.update(
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
            pool_recycle=config.pool_recycle,
            pool_pre_ping=True,
        )
    engine = create_async_engine(async_url(config.url), **kwargs)
    logger.info(
        "AsyncEngine ready (%s)",
        "NullPool" if use_null_pool else f"pool_size={config.pool_size} max_overflow={config.max_overflow}",
    )
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # reads only; expire_on_commit off so rows stay usable after the session closes
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


async def init_db(engine: AsyncEngine, *, drop_all: bool = False) -> None:
    """create_all for local runs and tests. Production schemas come from migrations."""
    async with engine.begin() as conn:
        if drop_all:
            logger.warning("Dropping every table before create_all")
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))


async def close_engine(engine: AsyncEngine) -> None:
    await engine.dispose()
    logger.info("AsyncEngine disposed")
