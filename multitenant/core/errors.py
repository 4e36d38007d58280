# Copyright (c) 2026 Multitenant Contributors. All Rights Reserved.

"""
Tenancy Errors — Unified error structure.

Every error carries a stable ``code``, a human-readable ``message`` and a
``details`` dict so the API layer can render it without knowing the type.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional, Sequence


def dump_tenants(tenants: Mapping[str, Any]) -> str:
    """Serialize a tenant map for error messages (UUIDs become strings)."""
    return json.dumps(dict(tenants), default=str)


class TenancyError(Exception):
    """Base tenancy error with structured payload."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class TenantColumnUnknownError(TenancyError):
    """A tenant id was requested for a column that is not registered."""

    def __init__(self, model_name: str, column: str, tenants: Mapping[str, Any]):
        self.model_name = model_name
        self.column = column
        self.tenants = dict(tenants)
        super().__init__(
            code="TENANT_COLUMN_UNKNOWN",
            message=(
                f'{model_name}: tenant column "{column}" NOT found in '
                f'tenants scope "{dump_tenants(self.tenants)}"'
            ),
            details={
                "model": model_name,
                "column": column,
                "tenants": json.loads(dump_tenants(self.tenants)),
            },
        )


class InvalidTenantColumnsError(TenancyError):
    """A model declares tenant columns its table does not have."""

    def __init__(self, model_name: str, table: str, missing: Sequence[str]):
        self.model_name = model_name
        self.table = table
        self.missing = list(missing)
        super().__init__(
            code="INVALID_TENANT_COLUMNS",
            message=(
                f"{model_name}: tenant columns {self.missing} "
                f"are not columns of table '{table}'"
            ),
            details={"model": model_name, "table": table, "missing": self.missing},
        )


class ModelNotFoundError(TenancyError):
    """No row matched a primary-key lookup."""

    def __init__(
        self,
        model_name: str,
        ids: Sequence[Any],
        message: Optional[str] = None,
        code: str = "MODEL_NOT_FOUND",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.model_name = model_name
        self.ids = list(ids)
        base_details = {"model": model_name, "ids": [str(i) for i in self.ids]}
        base_details.update(details or {})
        super().__init__(
            code=code,
            message=message or f"No query results for model [{model_name}] {self.ids}",
            status_code=404,
            details=base_details,
        )


class ModelNotFoundForTenantError(ModelNotFoundError):
    """
    A scoped lookup found nothing for the active tenants.

    ``reason`` is for server-side logs only and stays out of ``details``:
      - "tenant_mismatch": the row exists, but under another tenant
      - "absent":          the row does not exist at all
    """

    TENANT_MISMATCH = "tenant_mismatch"
    ABSENT = "absent"

    def __init__(
        self,
        model_name: str,
        ids: Sequence[Any],
        tenants: Mapping[str, Any],
        reason: str = ABSENT,
    ):
        self.tenants = dict(tenants)
        self.reason = reason
        super().__init__(
            model_name,
            ids,
            message=(
                f"No query results for model [{model_name}] {list(ids)} "
                f"for tenants {dump_tenants(self.tenants)}"
            ),
            code="MODEL_NOT_FOUND_FOR_TENANT",
            details={"tenants": json.loads(dump_tenants(self.tenants))},
        )

    @property
    def is_tenant_mismatch(self) -> bool:
        return self.reason == self.TENANT_MISMATCH
