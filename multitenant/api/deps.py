# Copyright (c) 2026 Multitenant Contributors. All Rights Reserved.

"""
API Dependencies — FastAPI dependency injection.

Every request gets its own TenantContext; nothing is cached between
requests, so one request's tenant can never leak into the next.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request

from multitenant.core import config
from multitenant.core.tenant import TenantContext
from multitenant.scope.tenant_scope import TenantScope


def tenant_from_headers(request: Request) -> Optional[str]:
    """
    Tenant id sent with the request, if any.

    Headers:
      - settings.TENANT_HEADER: active tenant id (preferred)
      - Authorization:          "Bearer <tenant>" fallback
    """
    tenant_id = request.headers.get(config.settings.TENANT_HEADER)
    if tenant_id:
        return tenant_id

    authorization = request.headers.get("Authorization")
    if authorization:
        parts = authorization.split(" ")
        if len(parts) == 2:
            return parts[1]
    return None


async def get_tenant_context(request: Request) -> TenantContext:
    """
    Build a fresh TenantContext from request headers.

    The id is registered under the first default tenant column.
    """
    tenant_id = tenant_from_headers(request)
    if not tenant_id:
        raise HTTPException(status_code=401, detail="Missing tenant identification")

    ctx = TenantContext()
    ctx.add_tenant(config.settings.default_tenant_column, tenant_id)
    return ctx


async def get_tenant_scope(
    context: TenantContext = Depends(get_tenant_context),
) -> TenantScope:
    return TenantScope(context)
