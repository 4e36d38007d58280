# Copyright (c) 2026 Multitenant Contributors. All Rights Reserved.

"""
Shared test fixtures for all multitenant tests.
"""

import pytest

from multitenant.core.tenant import TenantContext
from multitenant.scope.tenant_scope import TenantScope


@pytest.fixture
def tenant_context() -> TenantContext:
    """Provide a context with company 7 active."""
    return TenantContext({"company_id": 7})


@pytest.fixture
def empty_context() -> TenantContext:
    return TenantContext()


@pytest.fixture
def tenant_scope(tenant_context) -> TenantScope:
    return TenantScope(tenant_context)
