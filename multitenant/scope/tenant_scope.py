# Copyright (c) 2026 Multitenant Contributors. All Rights Reserved.

"""
Tenant Scope — Query-lifecycle hook for tenant-scoped models.

Invoked at three points:
  - apply():    a query for a scoped model is being built
  - creating(): a scoped instance is about to be inserted
  - remove():   a caller asked to run the query without the scope

All state lives in the TenantContext handed to the constructor.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from multitenant.core.tenant import TenantContext
from multitenant.orm.model import is_tenant_scoped
from multitenant.orm.query import WHERE_BASIC, QueryBuilder, Where

logger = logging.getLogger("multitenant.scope")


class TenantScope:
    """Adds, strips and stamps tenant constraints for one request."""

    def __init__(self, context: TenantContext) -> None:
        self.context = context

    # ── State ───────────────────────────────────────────────────

    @property
    def enabled(self) -> bool:
        return self.context.enabled

    def enable(self) -> None:
        self.context.enable()

    def disable(self) -> None:
        self.context.disable()

    def get_tenants(self) -> Dict[str, Any]:
        return self.context.tenants

    def get_tenant_id(self, column: str, model: Any = None) -> Any:
        return self.context.get_tenant_id(column, model)

    def get_model_tenants(self, model: Any) -> Dict[str, Any]:
        """
        Tenant column -> id pairs that actually constrain ``model``.

        Declared columns the context does not know are skipped, which
        allows partial scoping when only some tenant dimensions are set.
        """
        tenants: Dict[str, Any] = {}
        for column in model.get_tenant_columns():
            if self.context.has_tenant(column):
                tenants[column] = self.context.get_tenant_id(column, model)
        return tenants

    # ── Hooks ───────────────────────────────────────────────────

    def apply(self, builder: QueryBuilder, model: Any) -> None:
        """Add one ``table.column = id`` predicate per applicable tenant."""
        if not self.enabled:
            return

        for column, tenant_id in self.get_model_tenants(model).items():
            builder.where(
                model.get_qualified_tenant_column(column), "=", tenant_id, scoped=True,
            )

        logger.debug(
            "[scope] applied to %s (wheres=%d bindings=%d)",
            builder.table, len(builder.wheres), len(builder.bindings),
            extra={"tenants": self.context.snapshot(), "model": _name(model)},
        )

    def creating(self, instance: Any) -> None:
        """Stamp tenant ids onto a new instance before its INSERT is built."""
        if not is_tenant_scoped(instance) or not instance.has_tenant_scope():
            return

        for column, tenant_id in self.get_model_tenants(instance).items():
            setattr(instance, column, tenant_id)

    def remove(self, builder: QueryBuilder, model: Any) -> None:
        """
        Strip the predicates apply() added, keeping bindings aligned.

        For each tenant pair only the first matching predicate goes; a
        pair with no match is skipped.
        """
        for column, tenant_id in self.get_model_tenants(model).items():
            qualified = model.get_qualified_tenant_column(column)
            binding_key = 0

            for index, where in enumerate(builder.wheres):
                if self.is_tenant_constraint(where, qualified, tenant_id):
                    builder.remove_where(index)
                    builder.remove_binding(binding_key)
                    break
                if where.consumes_binding:
                    binding_key += 1

        logger.debug(
            "[scope] removed from %s (wheres=%d bindings=%d)",
            builder.table, len(builder.wheres), len(builder.bindings),
            extra={"tenants": self.context.snapshot(), "model": _name(model)},
        )

    @staticmethod
    def is_tenant_constraint(where: Where, column: str, tenant_id: Any) -> bool:
        return (
            where.kind == WHERE_BASIC
            and where.operator == "="
            and where.column == column
            and where.value == tenant_id
        )

    def __repr__(self) -> str:
        return f"TenantScope({self.context!r})"


def _name(model: Any) -> str:
    return model.__name__ if isinstance(model, type) else type(model).__name__
