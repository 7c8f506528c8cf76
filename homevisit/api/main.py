"""Home-visit availability FastAPI application: entry point.

Start with:
    uvicorn homevisit.api.main:app --reload --host 0.0.0.0 --port 8000

Database settings come from DATABASE_URL / DB_* (see homevisit.config.postgres),
slot and staff-matching tunables from homevisit.config.availability.
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from homevisit.config import load_availability_config, load_postgres_config
from homevisit.core.exceptions import ProjectError
from homevisit.core.logger import configure
from homevisit.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── Startup ──────────────────────────────────────────────────
    configure()

    pg_config = load_postgres_config()
    await ensure_database_exists(pg_config)
    engine = build_engine(pg_config)
    session_factory = build_session_factory(engine)
    await init_db(engine)

    app.state.session_factory = session_factory
    app.state.availability_config = load_availability_config()
    logger.info("API: database ready, availability config loaded")

    yield

    # ── Shutdown ─────────────────────────────────────────────────
    await close_engine(engine)
    logger.info("API: engine disposed")


app = FastAPI(
    title="Home Visit Availability API",
    version="1.0.0",
    description="Home-visit slot availability and staff matching for multi-tenant booking.",
    lifespan=lifespan,
)

# Rate limiter: limit is configurable via AVAILABILITY_RATE_LIMIT env var (default 60/minute)
from homevisit.api.routers import availability  # noqa: E402

app.state.limiter = availability.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

_allowed_origins = os.environ.get(
    "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ProjectError)
async def project_error_handler(request: Request, exc: ProjectError):
    if exc.http_status >= 500:
        logger.error("API: %s %s failed: %s", request.method, request.url.path, exc.to_dict())
    else:
        logger.info("API: %s %s -> %d %s", request.method, request.url.path, exc.http_status, exc.code)
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


# ── Routers ───────────────────────────────────────────────────────
app.include_router(availability.router, prefix="/api/v1")


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
