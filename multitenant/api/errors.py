# Copyright (c) 2026 Multitenant Contributors. All Rights Reserved.

"""
API Error Handling — Unified error structure for tenancy errors.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from multitenant.core.errors import TenancyError

logger = logging.getLogger("multitenant.api")


async def tenancy_error_handler(request: Request, exc: TenancyError) -> JSONResponse:
    """Global exception handler for TenancyError and its subclasses."""
    trace_id = getattr(request.state, "trace_id", None) or str(uuid.uuid4())
    if exc.status_code >= 500:
        logger.error("[api] %s: %s", exc.code, exc.message, extra={"trace_id": trace_id})
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "code": exc.code,
            "message": exc.message,
            "trace_id": trace_id,
            "details": exc.details,
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TenancyError, tenancy_error_handler)
