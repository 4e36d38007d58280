# Copyright (c) 2026 Multitenant Contributors. All Rights Reserved.

"""
Tenant-Scoped Models — Capability mixin for declarative models.

A model takes part in tenant scoping only by subclassing TenantScoped:

    class Widget(TenantScoped, Base):
        __tablename__ = "widgets"
        __tenant_columns__ = ["company_id"]

Without ``__tenant_columns__`` the model uses DEFAULT_TENANT_COLUMNS.
"""

from __future__ import annotations

from typing import Any, ClassVar, List, Optional, Sequence, Union

from multitenant.core import config
from multitenant.core.errors import InvalidTenantColumnsError
from multitenant.orm.query import qualify


class TenantScoped:
    """Mixin marking a mapped class as tenant-scoped."""

    __tenant_columns__: ClassVar[Optional[Union[str, Sequence[str]]]] = None

    @classmethod
    def get_tenant_columns(cls) -> List[str]:
        """
        Declared tenant columns, in order.

        Raises InvalidTenantColumnsError if any of them is not a column
        of the model's own table.
        """
        declared = cls.__tenant_columns__
        if declared is None:
            columns = list(config.settings.DEFAULT_TENANT_COLUMNS)
        elif isinstance(declared, str):
            columns = [declared]
        else:
            columns = list(declared)

        table = cls.__table__
        known = {c.name for c in table.columns}
        missing = [c for c in columns if c not in known]
        if missing:
            raise InvalidTenantColumnsError(cls.__name__, table.name, missing)
        return columns

    @classmethod
    def get_table(cls) -> str:
        return cls.__table__.name

    @classmethod
    def get_qualified_tenant_column(cls, column: str) -> str:
        return qualify(cls.get_table(), column)

    # ── Per-instance scope detach ───────────────────────────────

    def detach_tenant_scope(self) -> "TenantScoped":
        """Create this instance without tenant stamping."""
        self._tenant_scope_detached = True
        return self

    def attach_tenant_scope(self) -> "TenantScoped":
        self._tenant_scope_detached = False
        return self

    def has_tenant_scope(self) -> bool:
        # Loaded rows bypass __init__, hence the getattr default.
        return not getattr(self, "_tenant_scope_detached", False)


def is_tenant_scoped(model: Any) -> bool:
    """True for TenantScoped classes and their instances."""
    cls = model if isinstance(model, type) else type(model)
    return issubclass(cls, TenantScoped)
