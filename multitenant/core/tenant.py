# Copyright (c) 2026 Multitenant Contributors. All Rights Reserved.

"""
Tenant Context — Request-scoped tenant registry.

Maps tenant column name -> active tenant id. One instance per request;
nothing here is shared between requests.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from multitenant.core.errors import TenantColumnUnknownError, dump_tenants


class TenantContext:
    """Mutable tenant registry with an enable/disable switch."""

    def __init__(self, tenants: Optional[Dict[str, Any]] = None) -> None:
        self._tenants: Dict[str, Any] = {}
        self.enabled = True
        for column, tenant_id in (tenants or {}).items():
            self.add_tenant(column, tenant_id)

    @property
    def tenants(self) -> Dict[str, Any]:
        """Copy of the current column -> id map."""
        return dict(self._tenants)

    def add_tenant(self, column: str, tenant_id: Any) -> None:
        """Register (or replace) the tenant id for a column and re-enable scoping."""
        self.enable()
        self._tenants[column] = tenant_id

    def remove_tenant(self, column: str) -> bool:
        if column in self._tenants:
            del self._tenants[column]
            return True
        return False

    def has_tenant(self, column: str) -> bool:
        """True when ``column`` is registered with a non-None id."""
        return self._tenants.get(column) is not None

    def get_tenant_id(self, column: str, model: Any = None) -> Any:
        """
        Return the active tenant id for ``column``.

        Raises TenantColumnUnknownError if the column is not registered.
        ``model`` (class or instance) is only used to name the caller.
        """
        if not self.has_tenant(column):
            raise TenantColumnUnknownError(_model_name(model), column, self._tenants)
        return self._tenants[column]

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def reset(self) -> None:
        """Forget all tenants and re-enable. For integrators reusing one instance."""
        self._tenants.clear()
        self.enabled = True

    def snapshot(self) -> Dict[str, Any]:
        """JSON-safe view of the tenant map, for logs and error payloads."""
        return json.loads(dump_tenants(self._tenants))

    def __len__(self) -> int:
        return len(self._tenants)

    def __repr__(self) -> str:
        state = "enabled" if self.enabled else "disabled"
        return f"TenantContext(tenants={self._tenants!r}, {state})"


def _model_name(model: Any) -> str:
    if model is None:
        return "<unknown>"
    if isinstance(model, type):
        return model.__name__
    return type(model).__name__
