# Copyright (c) 2026 Multitenant Contributors. All Rights Reserved.

"""
API Middleware — Trace ID propagation and per-request access log.
"""

from __future__ import annotations

import uuid
import time
import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from multitenant.api.deps import tenant_from_headers
from multitenant.core import config

logger = logging.getLogger("multitenant.api")


class TraceMiddleware(BaseHTTPMiddleware):
    """
    Generates or propagates X-Trace-Id for every request and logs one
    access line carrying the tenant named by the configured header.
    """

    async def dispatch(self, request: Request, call_next):
        trace_id = request.headers.get("X-Trace-Id", str(uuid.uuid4()))
        request.state.trace_id = trace_id
        tenant_id = tenant_from_headers(request)

        start = time.time()
        response: Response = await call_next(request)
        elapsed = (time.time() - start) * 1000

        response.headers["X-Trace-Id"] = trace_id
        tenants = {config.settings.default_tenant_column: tenant_id} if tenant_id else {}
        logger.info(
            "[api] %s %s → %d (%.0fms) %s=%s",
            request.method, request.url.path, response.status_code, elapsed,
            config.settings.TENANT_HEADER, tenant_id or "-",
            extra={"trace_id": trace_id, "tenants": tenants},
        )
        return response
