# Copyright (c) 2026 Multitenant Contributors. All Rights Reserved.

"""
Repository Layer — Tenant-scoped CRUD for any mapped model.

Each repository takes an AsyncSession, a model class and the request's
TenantScope. Queries built through ``query()`` carry the tenant scope;
``all_tenants()`` is the escape hatch for cross-tenant reads.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, List, Optional, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from multitenant.core.errors import ModelNotFoundError, ModelNotFoundForTenantError
from multitenant.orm.model import is_tenant_scoped
from multitenant.orm.query import QueryBuilder, qualify
from multitenant.scope.tenant_scope import TenantScope
from multitenant.storage.database import bind_tenant_scope

logger = logging.getLogger("multitenant.storage")

ModelT = TypeVar("ModelT")

TENANT_SCOPE = "tenant"


class TenantRepository(Generic[ModelT]):
    def __init__(self, db: AsyncSession, model: type[ModelT], scope: TenantScope):
        self.db = db
        self.model = model
        self.scope = scope
        bind_tenant_scope(db, scope)

    @property
    def scoped(self) -> bool:
        return is_tenant_scoped(self.model)

    # ── Query construction ──────────────────────────────────────

    def query(self) -> QueryBuilder:
        """New query with the tenant scope applied (for scoped models)."""
        builder = QueryBuilder.for_model(self.model)
        if self.scoped:
            builder.with_scope(TENANT_SCOPE, self.scope)
        return builder

    def all_tenants(self) -> QueryBuilder:
        """New query that never sees the tenant scope."""
        return QueryBuilder.for_model(self.model)

    query_unscoped = all_tenants

    # ── Execution ───────────────────────────────────────────────

    async def get(self, builder: Optional[QueryBuilder] = None) -> List[ModelT]:
        builder = builder if builder is not None else self.query()
        result = await self.db.execute(builder.to_select())
        return list(result.scalars().all())

    async def first(self, builder: Optional[QueryBuilder] = None) -> Optional[ModelT]:
        builder = builder if builder is not None else self.query()
        result = await self.db.execute(builder.limit(1).to_select())
        return result.scalars().first()

    async def find(self, pk: Any) -> Optional[ModelT]:
        """Scoped primary-key lookup."""
        return await self.first(self.query().where(self._pk_column(), pk))

    async def find_or_fail(self, pk: Any) -> ModelT:
        """
        Scoped primary-key lookup that raises when nothing matches.

        ModelNotFoundForTenantError when tenant constraints were in play,
        plain ModelNotFoundError otherwise.
        """
        builder = self.query()
        obj = await self.first(builder.where(self._pk_column(), pk))
        if obj is not None:
            return obj

        tenants = (
            self.scope.get_model_tenants(self.model)
            if self.scoped and self.scope.enabled else {}
        )
        not_found = ModelNotFoundError(self.model.__name__, [pk])
        if not tenants:
            raise not_found

        exists = await self.first(self.all_tenants().where(self._pk_column(), pk))
        reason = (
            ModelNotFoundForTenantError.TENANT_MISMATCH
            if exists is not None else ModelNotFoundForTenantError.ABSENT
        )
        logger.info(
            "[repo] %s %r not found for tenants (%s)", self.model.__name__, pk, reason,
            extra={"tenants": self.scope.context.snapshot(), "model": self.model.__name__},
        )
        raise ModelNotFoundForTenantError(
            self.model.__name__, [pk], tenants, reason=reason,
        ) from not_found

    # ── Writes ──────────────────────────────────────────────────

    async def create(self, **fields: Any) -> ModelT:
        """Insert a new row; tenant columns are stamped at flush time."""
        obj = self.model(**fields)
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def create_unscoped(self, **fields: Any) -> ModelT:
        """Insert a new row exactly as given, without tenant stamping."""
        obj = self.model(**fields)
        if self.scoped:
            obj.detach_tenant_scope()
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def delete(self, obj: ModelT) -> None:
        await self.db.delete(obj)
        await self.db.flush()

    def _pk_column(self) -> str:
        pk = list(self.model.__table__.primary_key.columns)[0]
        return qualify(self.model.__table__.name, pk.name)
