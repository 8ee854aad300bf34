"""
FastAPI application factory + lifespan.

Shell around the dashboard widget engine:
- REST API for the widget catalog, data sources and dashboards.
- Logging configured from settings at import time.
- CORS configured for the browser front-end.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dashboard_engine.api.v1 import api_router
from dashboard_engine.core.config import settings
from dashboard_engine.core.database import db_manager

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"
_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging() -> None:
    """Root logger from ``LOG_LEVEL`` plus an optional ``LOG_FILE``."""
    handlers = [logging.StreamHandler()]
    if settings.LOG_FILE:
        handlers.append(logging.FileHandler(settings.LOG_FILE, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=_LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: nothing to warm up (catalog and registry load on first use).
    Shutdown: close DB connections.
    """
    logger.info(f"[Main] Starting {settings.APP_NAME} ({settings.APP_ENV})")

    yield

    logger.info("[Main] Shutting down")
    await db_manager.close()


def create_fastapi_app() -> FastAPI:
    """Application factory for FastAPI."""
    app = FastAPI(
        title="Dashboard Widget Engine API",
        description="Widget catalog, data sources and dashboard composition",
        version=APP_VERSION,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    @app.get("/")
    async def root():
        return {
            "app": settings.APP_NAME,
            "version": APP_VERSION,
            "status": "running",
            "docs": "/api/docs" if settings.DEBUG else "disabled",
        }

    return app


configure_logging()

# Module-level instance for ``uvicorn dashboard_engine.main:app``
app = create_fastapi_app()
