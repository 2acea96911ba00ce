"""Fundfeed API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map FundfeedError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - The database manager is created in the lifespan, stored on app.state,
      and disposed on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py so tests can mount them on
      a bare app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fundfeed.api.error_handlers import register_error_handlers
from fundfeed.api.routes import (
    assets, follows, health, intro_requests, rounds, users,
)
from fundfeed.config import get_settings
from fundfeed.infrastructure.database import DatabaseSessionManager
from fundfeed.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    app.state.db_manager = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("Fundfeed API started")
    yield
    logger.info("Fundfeed API shutting down")
    await app.state.db_manager.dispose()


app = FastAPI(
    title="Fundfeed API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes — /rounds/trending and /rounds/mine before /rounds/{round_id}
app.include_router(health.router)
app.include_router(rounds.router)
app.include_router(follows.router)
app.include_router(intro_requests.router)
app.include_router(users.router)
app.include_router(assets.router)

register_error_handlers(app)
