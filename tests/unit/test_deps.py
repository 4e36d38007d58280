# Copyright (c) 2026 Multitenant Contributors. All Rights Reserved.

"""Unit tests for API dependencies (tenant context per request)."""

import pytest
from fastapi import HTTPException
from starlette.requests import Request

from multitenant.api.deps import get_tenant_context, get_tenant_scope, tenant_from_headers
from multitenant.core import config
from multitenant.core.config import TenancySettings
from multitenant.scope.tenant_scope import TenantScope


def make_request(**headers: str) -> Request:
    raw = [(k.replace("_", "-").lower().encode(), v.encode()) for k, v in headers.items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


class TestTenantFromHeaders:
    def test_configured_header(self):
        assert tenant_from_headers(make_request(X_Tenant_Id="acme")) == "acme"

    def test_bearer_fallback(self):
        assert tenant_from_headers(make_request(Authorization="Bearer acme")) == "acme"

    def test_header_takes_priority_over_bearer(self):
        request = make_request(X_Tenant_Id="acme", Authorization="Bearer other")
        assert tenant_from_headers(request) == "acme"

    def test_malformed_authorization_ignored(self):
        assert tenant_from_headers(make_request(Authorization="acme")) is None

    def test_nothing_sent(self):
        assert tenant_from_headers(make_request()) is None

    def test_custom_header_name(self, monkeypatch):
        monkeypatch.setattr(
            config, "settings", TenancySettings(_env_file=None, TENANT_HEADER="X-Org"),
        )
        assert tenant_from_headers(make_request(X_Org="globex")) == "globex"
        assert tenant_from_headers(make_request(X_Tenant_Id="acme")) is None


class TestGetTenantContext:
    @pytest.mark.asyncio
    async def test_tenant_from_header(self):
        ctx = await get_tenant_context(make_request(X_Tenant_Id="acme"))
        assert ctx.tenants == {"tenant_id": "acme"}

    @pytest.mark.asyncio
    async def test_tenant_from_bearer(self):
        ctx = await get_tenant_context(make_request(Authorization="Bearer acme"))
        assert ctx.get_tenant_id("tenant_id") == "acme"

    @pytest.mark.asyncio
    async def test_missing_tenant_is_401(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_tenant_context(make_request())
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_uses_first_default_column(self, monkeypatch):
        monkeypatch.setattr(
            config, "settings",
            TenancySettings(_env_file=None, DEFAULT_TENANT_COLUMNS=["company_id", "region_id"]),
        )
        ctx = await get_tenant_context(make_request(X_Tenant_Id="7"))
        assert ctx.tenants == {"company_id": "7"}

    @pytest.mark.asyncio
    async def test_fresh_context_per_call(self):
        first = await get_tenant_context(make_request(X_Tenant_Id="a"))
        second = await get_tenant_context(make_request(X_Tenant_Id="b"))
        assert first is not second
        assert first.tenants == {"tenant_id": "a"}
        assert second.tenants == {"tenant_id": "b"}


class TestGetTenantScope:
    @pytest.mark.asyncio
    async def test_wraps_context(self):
        ctx = await get_tenant_context(make_request(X_Tenant_Id="acme"))
        scope = await get_tenant_scope(ctx)
        assert isinstance(scope, TenantScope)
        assert scope.context is ctx
