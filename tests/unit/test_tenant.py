# Copyright (c) 2026 Multitenant Contributors. All Rights Reserved.
"""Unit tests for TenantContext."""

import uuid

import pytest

from multitenant.core.errors import TenantColumnUnknownError
from multitenant.core.tenant import TenantContext


class TestTenantContext:
    def test_create_empty(self):
        ctx = TenantContext()
        assert ctx.tenants == {}
        assert ctx.enabled is True
        assert len(ctx) == 0

    def test_create_with_tenants(self):
        ctx = TenantContext({"company_id": 7, "region_id": "eu"})
        assert ctx.tenants == {"company_id": 7, "region_id": "eu"}

    def test_add_tenant_last_write_wins(self):
        ctx = TenantContext()
        ctx.add_tenant("company_id", 7)
        ctx.add_tenant("company_id", 8)
        assert ctx.get_tenant_id("company_id") == 8
        assert len(ctx) == 1

    def test_add_tenant_reenables(self):
        ctx = TenantContext()
        ctx.disable()
        ctx.add_tenant("company_id", 7)
        assert ctx.enabled is True

    def test_remove_tenant(self):
        ctx = TenantContext({"company_id": 7})
        assert ctx.remove_tenant("company_id") is True
        assert ctx.has_tenant("company_id") is False
        assert ctx.remove_tenant("company_id") is False

    def test_has_tenant(self, tenant_context):
        assert tenant_context.has_tenant("company_id")
        assert not tenant_context.has_tenant("region_id")

    def test_tenants_is_a_copy(self, tenant_context):
        tenant_context.tenants["company_id"] = 99
        assert tenant_context.get_tenant_id("company_id") == 7

    def test_disable_keeps_tenants(self, tenant_context):
        tenant_context.disable()
        assert tenant_context.enabled is False
        assert tenant_context.get_tenant_id("company_id") == 7
        tenant_context.enable()
        assert tenant_context.enabled is True

    def test_reset(self, tenant_context):
        tenant_context.disable()
        tenant_context.reset()
        assert tenant_context.tenants == {}
        assert tenant_context.enabled is True

    def test_none_tenant_is_not_set(self):
        ctx = TenantContext({"company_id": None})
        assert ctx.has_tenant("company_id") is False
        assert ctx.tenants == {"company_id": None}
        with pytest.raises(TenantColumnUnknownError, match="company_id"):
            ctx.get_tenant_id("company_id")

    def test_remove_none_tenant(self):
        ctx = TenantContext({"company_id": None})
        assert ctx.remove_tenant("company_id") is True
        assert ctx.tenants == {}

    def test_falsy_tenant_is_set(self):
        ctx = TenantContext({"company_id": 0})
        assert ctx.has_tenant("company_id") is True
        assert ctx.get_tenant_id("company_id") == 0

    def test_snapshot_serializes_uuid(self):
        tid = uuid.uuid4()
        ctx = TenantContext({"org_id": tid})
        assert ctx.snapshot() == {"org_id": str(tid)}

    def test_repr(self, tenant_context):
        assert "company_id" in repr(tenant_context)
        assert "enabled" in repr(tenant_context)


class TestGetTenantId:
    def test_missing_column_raises(self, empty_context):
        with pytest.raises(TenantColumnUnknownError, match="company_id"):
            empty_context.get_tenant_id("company_id")

    def test_error_carries_diagnostics(self):
        class Widget:
            pass

        ctx = TenantContext({"region_id": "eu"})
        with pytest.raises(TenantColumnUnknownError) as exc_info:
            ctx.get_tenant_id("company_id", Widget())
        err = exc_info.value
        assert err.model_name == "Widget"
        assert err.column == "company_id"
        assert err.tenants == {"region_id": "eu"}
        assert "Widget" in err.message
        assert '{"region_id": "eu"}' in err.message
        assert err.code == "TENANT_COLUMN_UNKNOWN"

    def test_model_class_name(self, empty_context):
        class Invoice:
            pass

        with pytest.raises(TenantColumnUnknownError, match="Invoice"):
            empty_context.get_tenant_id("company_id", Invoice)

    def test_unknown_model(self, empty_context):
        with pytest.raises(TenantColumnUnknownError, match="<unknown>"):
            empty_context.get_tenant_id("company_id")

    def test_disabled_still_raises(self, tenant_context):
        tenant_context.disable()
        with pytest.raises(TenantColumnUnknownError):
            tenant_context.get_tenant_id("region_id")
