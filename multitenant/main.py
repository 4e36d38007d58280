# Copyright (c) 2026 Multitenant Contributors. All Rights Reserved.

"""
Application Entry Point.

FastAPI app with lifespan, trace middleware and tenancy error handlers.
Routers that read tenant-scoped models depend on
``multitenant.api.deps.get_tenant_scope``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from multitenant.api.errors import register_error_handlers
from multitenant.api.middleware import TraceMiddleware
from multitenant.core.config import settings
from multitenant.core.logging import setup_logging
from multitenant.storage.database import close_db, init_db

logger = logging.getLogger("multitenant.main")

__version__ = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup/shutdown of database resources."""
    setup_logging(settings.LOG_LEVEL)
    await init_db()
    logger.info("[multitenant] ready (default tenant columns=%s)", settings.DEFAULT_TENANT_COLUMNS)
    yield
    await close_db()
    logger.info("[multitenant] shutdown complete")


def create_app() -> FastAPI:
    app = FastAPI(
        title="multitenant",
        description="Automatic tenant row scoping for SQLAlchemy models",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(TraceMiddleware)
    register_error_handlers(app)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
